"""Declarative attribute metadata compiled into storage schemas and tracked model instances."""

from __future__ import annotations

__all__ = [
    # Declaration
    "Attr",
    "BaseModel",
    "declare_attribute",
    "declare_attributes",
    "model",
    "observe",
    "type_metadata_from_annotation",
    # Runtime
    "Attribute",
    "AttributeChange",
    "ModelClassFactory",
    "RawView",
    "UNSET",
    "attribute_type",
    "get_default_factory",
    # Schemas
    "AttributeSchema",
    "ModelSchema",
    "SchemaFragment",
    "SchemaRegistry",
    "TypeDescriptorResolver",
    "get_default_registry",
    # Config and errors
    "CompilationError",
    "ModelMetaError",
    "ModelMetaSettings",
    "RejectedAssignment",
    "configure_logging",
]

from loguru import logger

from .attribute import UNSET, Attribute, AttributeChange
from .config import ModelMetaSettings, configure_logging
from .exceptions import CompilationError, ModelMetaError, RejectedAssignment
from .extraction import (
    Attr,
    declare_attribute,
    declare_attributes,
    type_metadata_from_annotation,
)
from .factory import ModelClassFactory, attribute_type, get_default_factory, model
from .model import BaseModel, RawView, observe
from .registry import SchemaRegistry, get_default_registry
from .schema import AttributeSchema, ModelSchema, SchemaFragment, TypeDescriptorResolver

# Silent unless the application opts in with configure_logging()
logger.disable("modelmeta")
