"""Schema compilation: fragments, attribute schemas and model schemas."""

from __future__ import annotations

__all__ = [
    "AttributeOptions",
    "AttributeSchema",
    "ModelSchema",
    "SchemaFragment",
    "TypeDescriptorResolver",
]

from .attribute_schema import AttributeOptions, AttributeSchema
from .fragment import SchemaFragment
from .model_schema import ModelSchema
from .resolver import TypeDescriptorResolver
