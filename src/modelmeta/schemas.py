"""Pydantic schemas for CLI/API boundaries.

These schemas are used ONLY at external boundaries (JSON export of compiled
model schemas). Internal code works with the frozen dataclasses in
:mod:`modelmeta.schema` directly.

Examples
--------
>>> response = ModelSchemaResponse.from_schema(registry.get_model_schema(name="Example"))
>>> print(response.model_dump_json(indent=2))  # doctest: +SKIP
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from modelmeta.schema import AttributeSchema, ModelSchema, SchemaFragment

__all__ = [
    "AttributeSchemaResponse",
    "ModelSchemaResponse",
    "SchemaFragmentResponse",
]


class SchemaFragmentResponse(BaseModel):
    """Export form of a compiled schema fragment."""

    kind: str = Field(..., description="Fragment shape (scalar, reference, array, ...)")
    type: str = Field(..., description="Storage type name")
    ref: str | None = Field(None, description="Referenced model for references")
    enum: list[Any] | None = Field(None, description="Allowed values for enums")
    item: SchemaFragmentResponse | None = Field(None, description="Element of arrays")
    members: dict[str, SchemaFragmentResponse] | None = Field(
        None,
        description="Nested sub-schema",
    )

    @classmethod
    def from_fragment(cls, fragment: SchemaFragment) -> SchemaFragmentResponse:
        return cls.model_validate(fragment.to_dict())


class AttributeSchemaResponse(BaseModel):
    """Export form of one attribute schema."""

    name: str
    required: bool
    read_only: bool
    declared_on: str = Field(..., description="Class the attribute was declared on")
    compiled: SchemaFragmentResponse

    @classmethod
    def from_schema(cls, schema: AttributeSchema) -> AttributeSchemaResponse:
        return cls(
            name=schema.name,
            required=schema.required,
            read_only=schema.read_only,
            declared_on=schema.model.__name__,
            compiled=SchemaFragmentResponse.from_fragment(schema.compiled),
        )


class ModelSchemaResponse(BaseModel):
    """Export form of a model schema."""

    class_name: str
    collection_name: str
    attributes: list[AttributeSchemaResponse] = Field(default_factory=list)

    @classmethod
    def from_schema(cls, schema: ModelSchema) -> ModelSchemaResponse:
        return cls(
            class_name=schema.class_name,
            collection_name=schema.collection_name,
            attributes=[
                AttributeSchemaResponse.from_schema(attribute_schema)
                for attribute_schema in schema.attribute_schemas.values()
            ],
        )


SchemaFragmentResponse.model_rebuild()
