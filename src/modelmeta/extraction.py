"""Extraction of type metadata and attribute options from class annotations.

Attributes are declared with an :class:`Attr` marker inside ``Annotated``::

    class Example(BaseModel):
        name: Annotated[str, Attr(required=True)] = "test"
        tags: Annotated[list[str], Attr()] = []

Only the annotations defined on the class itself are scanned; inherited
declarations are already registered on the parent class.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import inspect
import types
from enum import Enum
from typing import (
    Annotated,
    Any,
    ForwardRef,
    Literal,
    Union,
    get_args,
    get_origin,
    get_type_hints,
    is_typeddict,
)

from loguru import logger

from modelmeta.metadata import (
    ArrayType,
    InterfaceType,
    MixedType,
    ModelReference,
    NumberLiteral,
    Primitive,
    StringLiteral,
    TypeMetadata,
    UnionType,
    UnresolvedType,
)
from modelmeta.model import BaseModel
from modelmeta.registry import SchemaRegistry, get_default_registry
from modelmeta.schema import AttributeSchema, TypeDescriptorResolver

__all__ = [
    "Attr",
    "declare_attribute",
    "declare_attributes",
    "resolve_annotations",
    "type_metadata_from_annotation",
]

_SEQUENCE_ORIGINS = (
    list,
    tuple,
    set,
    frozenset,
    collections.abc.Sequence,
    collections.abc.MutableSequence,
    collections.abc.Set,
    collections.abc.MutableSet,
    collections.abc.Iterable,
)


class Attr:
    """
    Marker declaring a schema-governed attribute.

    Parameters
    ----------
    required : bool, optional
        Shorthand for the ``is_required`` option
    read_only : bool, optional
        Shorthand for the ``is_read_only`` option
    **options
        Any further option, stored on the attribute schema
    """

    def __init__(self, *, required: bool | None = None, read_only: bool | None = None, **options: Any) -> None:
        if required is not None:
            options["is_required"] = required
        if read_only is not None:
            options["is_read_only"] = read_only
        self.options = options

    def __repr__(self) -> str:
        return f"Attr({', '.join(f'{key}={value!r}' for key, value in self.options.items())})"


class _MissingName:
    """Placeholder for a name an annotation refers to but nothing defines."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return self.name

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        raise TypeError(f"{self.name} is not defined")

    def __or__(self, other: Any) -> Any:
        return Union[self, other]

    def __ror__(self, other: Any) -> Any:
        return Union[other, self]


def resolve_annotations(cls: type, registry: SchemaRegistry) -> dict[str, Any]:
    """
    Evaluate the annotations of ``cls`` with ``typing.get_type_hints``.

    Names missing from the defining modules are looked up among the
    registered model names, then replaced by a placeholder that
    :func:`type_metadata_from_annotation` reports as unresolved.
    """
    localns: dict[str, Any] = {}
    while True:
        try:
            return get_type_hints(cls, localns=localns, include_extras=True)
        except NameError as e:
            if e.name is None or e.name in localns:
                raise
            schema = registry.get_model_schema(name=e.name)
            localns[e.name] = schema.model if schema is not None else _MissingName(e.name)


def _literal(value: Any) -> TypeMetadata:
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, str):
        return StringLiteral(value)
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return NumberLiteral(value)
    return Primitive(type(value).__name__)


def _is_model_class(annotation: type, registry: SchemaRegistry) -> bool:
    return issubclass(annotation, BaseModel) or registry.get_model_schema(annotation) is not None


def _model_identifier(annotation: type, registry: SchemaRegistry) -> str:
    schema = registry.get_model_schema(annotation)
    if schema is not None:
        return schema.class_name
    return getattr(annotation, "class_name", None) or annotation.__name__


def type_metadata_from_annotation(
    annotation: Any,
    registry: SchemaRegistry | None = None,
    _seen: frozenset[type] = frozenset(),
) -> TypeMetadata:
    """
    Describe a Python annotation as a type metadata tree.

    Parameters
    ----------
    annotation : Any
        Evaluated annotation (strings are treated as forward references)
    registry : SchemaRegistry, optional
        Used to resolve model classes and forward references to model names

    Returns
    -------
    TypeMetadata
        :class:`UnresolvedType` for names that cannot be resolved

    Examples
    --------
    >>> type_metadata_from_annotation(list[int])
    ArrayType(sub_type=Primitive(identifier='int'), identifier='Array')
    """
    if registry is None:
        registry = get_default_registry()

    def recurse(item: Any) -> TypeMetadata:
        return type_metadata_from_annotation(item, registry, _seen)

    if isinstance(annotation, (str, ForwardRef)):
        name = annotation if isinstance(annotation, str) else annotation.__forward_arg__
        schema = registry.get_model_schema(name=name)
        if schema is not None:
            return ModelReference(schema.class_name)
        return UnresolvedType(name)
    if isinstance(annotation, _MissingName):
        return UnresolvedType(annotation.name)
    if annotation is Any or annotation is object:
        return MixedType()

    origin = get_origin(annotation)
    args = get_args(annotation)
    if origin is Annotated:
        return recurse(args[0])
    if origin is Literal:
        return UnionType(tuple(_literal(value) for value in args))
    if origin is Union or origin is types.UnionType:
        members = [arg for arg in args if arg is not type(None)]
        if len(members) == 1:
            return recurse(members[0])
        sub_types: list[TypeMetadata] = []
        for member in members:
            node = recurse(member)
            if isinstance(node, UnionType) and node.is_literal_union:
                sub_types.extend(node.sub_types)
            else:
                sub_types.append(node)
        return UnionType(tuple(sub_types))
    if origin in _SEQUENCE_ORIGINS:
        if origin is tuple and not (len(args) == 2 and args[1] is Ellipsis):
            item = args[0] if len(set(args)) == 1 else Any
        else:
            item = args[0] if args else Any
        return ArrayType(recurse(item))
    if origin is not None:
        return recurse(origin)

    if annotation in (list, tuple, set, frozenset):
        return ArrayType(MixedType())
    if not isinstance(annotation, type):
        return MixedType()
    if _is_model_class(annotation, registry):
        return ModelReference(_model_identifier(annotation, registry))
    if issubclass(annotation, Enum):
        return UnionType(tuple(_literal(member) for member in annotation))
    if is_typeddict(annotation) or dataclasses.is_dataclass(annotation):
        if annotation in _seen:
            return MixedType()
        seen = _seen | {annotation}
        hints = get_type_hints(annotation)
        return InterfaceType(
            members={
                name: type_metadata_from_annotation(hint, registry, seen)
                for name, hint in hints.items()
            },
            identifier=annotation.__name__,
        )
    return Primitive(annotation.__name__)


def _attr_marker(annotation: Any) -> Attr | None:
    if get_origin(annotation) is not Annotated:
        return None
    for item in annotation.__metadata__:
        if isinstance(item, Attr):
            return item
    return None


def declare_attribute(
    model_type: type,
    name: str,
    type_metadata: TypeMetadata,
    registry: SchemaRegistry | None = None,
    resolver: TypeDescriptorResolver | None = None,
    **options: Any,
) -> AttributeSchema:
    """
    Compile and register one attribute of ``model_type``.

    Options inherited from declarations of the same attribute on parent
    classes are merged under the new ones.
    """
    if registry is None:
        registry = get_default_registry()
    schema = _build_schema(model_type, name, type_metadata, registry, resolver, options)
    registry.set_attribute_schema(model_type, name, schema)
    return schema


def _build_schema(
    model_type: type,
    name: str,
    type_metadata: TypeMetadata,
    registry: SchemaRegistry,
    resolver: TypeDescriptorResolver | None,
    options: dict[str, Any],
) -> AttributeSchema:
    params = registry.construct_attribute_schema_params(
        name,
        {**options, "type": type_metadata},
        model_type=model_type,
    )
    return AttributeSchema.build(model_type, name, params, resolver=resolver)


def declare_attributes(
    cls: type,
    registry: SchemaRegistry | None = None,
    resolver: TypeDescriptorResolver | None = None,
) -> list[AttributeSchema]:
    """
    Register every ``Attr``-annotated attribute defined on ``cls``.

    All attributes are compiled before any is registered, so a
    :class:`~modelmeta.exceptions.CompilationError` leaves the registry
    untouched.
    """
    if registry is None:
        registry = get_default_registry()
    hints = resolve_annotations(cls, registry)
    schemas = []
    for name in inspect.get_annotations(cls):
        annotation = hints[name]
        marker = _attr_marker(annotation)
        if marker is None:
            continue
        type_metadata = type_metadata_from_annotation(annotation, registry)
        schemas.append(_build_schema(cls, name, type_metadata, registry, resolver, dict(marker.options)))
    for schema in schemas:
        registry.set_attribute_schema(cls, schema.name, schema)
    logger.debug("Declared {} attributes on {}", len(schemas), cls.__name__)
    return schemas
