"""Aggregated schema of one model class."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from sqlalchemy import Column, ForeignKey, MetaData, String, Table

from modelmeta.constants import FragmentKind
from modelmeta.schema.attribute_schema import AttributeSchema

if TYPE_CHECKING:
    from modelmeta.registry import SchemaRegistry

__all__ = ["ModelSchema"]


@dataclass(frozen=True, eq=False)
class ModelSchema:
    """
    Storage-ready description of all attributes of one model.

    Attributes
    ----------
    model : type
        The model class the schema was built for
    class_name : str
        Public name of the model
    collection_name : str
        Storage collection (table) identifier
    attribute_schemas : Mapping[str, AttributeSchema]
        Attribute name to schema, in declaration order
    """

    model: type
    class_name: str
    collection_name: str
    attribute_schemas: Mapping[str, AttributeSchema]

    def __post_init__(self) -> None:
        object.__setattr__(self, "attribute_schemas", MappingProxyType(dict(self.attribute_schemas)))

    @classmethod
    def from_registry(
        cls,
        registry: SchemaRegistry,
        model_type: type,
        class_name: str,
        collection_name: str,
    ) -> ModelSchema:
        """Collect the attribute schemas visible on ``model_type``."""
        schemas = registry.get_attribute_schemas(model_type)
        return cls(
            model=model_type,
            class_name=class_name,
            collection_name=collection_name,
            attribute_schemas={schema.name: schema for schema in schemas},
        )

    @property
    def attribute_names(self) -> list[str]:
        return list(self.attribute_schemas)

    def to_table(
        self,
        metadata: MetaData,
        registry: SchemaRegistry | None = None,
        id_field: str = "id",
        reference_key_length: int = 36,
    ) -> Table:
        """
        Build a SQLAlchemy table for this model.

        Parameters
        ----------
        metadata : MetaData
            Metadata collection receiving the table
        registry : SchemaRegistry, optional
            Used to resolve referenced models to their collection, which
            turns reference columns into foreign keys
        id_field : str, optional
            Primary key column name, by default "id"
        reference_key_length : int, optional
            Length of key columns, by default 36 (uuid strings)

        Returns
        -------
        Table
            Table named after :attr:`collection_name`

        Examples
        --------
        >>> from sqlalchemy import MetaData, create_engine
        >>> table = schema.to_table(MetaData())  # doctest: +SKIP
        >>> table.metadata.create_all(create_engine("sqlite://"))  # doctest: +SKIP
        """
        columns = [Column(id_field, String(reference_key_length), primary_key=True)]
        for name, attribute_schema in self.attribute_schemas.items():
            if name == id_field:
                continue
            fragment = attribute_schema.compiled
            args = [fragment.column_type(reference_key_length)]
            if fragment.kind is FragmentKind.REFERENCE and registry is not None:
                target = registry.get_model_schema(name=fragment.ref)
                if target is not None:
                    args.append(ForeignKey(f"{target.collection_name}.{id_field}"))
            columns.append(Column(name, *args, nullable=not attribute_schema.required))
        return Table(self.collection_name, metadata, *columns)
