"""Attribute options and compiled attribute schemas."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator

from modelmeta.metadata import MixedType, TypeMetadata
from modelmeta.schema.fragment import SchemaFragment
from modelmeta.schema.resolver import TypeDescriptorResolver

__all__ = ["AttributeOptions", "AttributeSchema"]

_METADATA_TYPES = get_args(TypeMetadata)


class AttributeOptions(BaseModel):
    """
    Validated options bag of one attribute declaration.

    Unknown options are kept (``extra="allow"``) so attribute variants can
    read their own settings from :attr:`AttributeSchema.parameters`.
    """

    model_config = ConfigDict(extra="allow", frozen=True)

    type: Any = Field(default_factory=MixedType, description="Declared type metadata")
    is_required: bool = Field(False, description="Value must be present when stored")
    is_read_only: bool = Field(False, description="Value is fixed after initialisation")
    relation_column: str | None = Field(None, description="Column on the related model")
    is_relation_owner: bool = Field(False, description="This side owns the relation")
    cascade: bool = Field(True, description="Propagate persistence to related models")

    @field_validator("type")
    @classmethod
    def check_type(cls, value: Any) -> Any:
        if not isinstance(value, _METADATA_TYPES):
            raise ValueError(f"expected type metadata, got {type(value).__name__}")
        return value


@dataclass(frozen=True, eq=False)
class AttributeSchema:
    """
    Compiled, storage-ready description of one attribute.

    Attributes
    ----------
    model : type
        Class the attribute was declared on
    name : str
        Attribute name
    required : bool
        Whether the stored value may be null
    read_only : bool
        Whether the value is fixed after initialisation
    compiled : SchemaFragment
        Compiled type
    parameters : Mapping[str, Any]
        Raw (merged) options the schema was built from
    """

    model: type
    name: str
    required: bool
    read_only: bool
    compiled: SchemaFragment
    parameters: Mapping[str, Any]

    @classmethod
    def build(
        cls,
        model_type: type,
        name: str,
        parameters: Mapping[str, Any],
        resolver: TypeDescriptorResolver | None = None,
    ) -> AttributeSchema:
        """
        Validate ``parameters`` and compile the declared type.

        Raises
        ------
        CompilationError
            If the declared type cannot be compiled
        pydantic.ValidationError
            If the options bag is malformed
        """
        options = AttributeOptions.model_validate(dict(parameters))
        if resolver is None:
            resolver = TypeDescriptorResolver()
        return cls(
            model=model_type,
            name=name,
            required=options.is_required,
            read_only=options.is_read_only,
            compiled=resolver.compile(model_type, name, options.type),
            parameters=MappingProxyType(dict(parameters)),
        )

    @property
    def options(self) -> AttributeOptions:
        return AttributeOptions.model_validate(dict(self.parameters))

    @property
    def ref(self) -> str | None:
        return self.compiled.ref
