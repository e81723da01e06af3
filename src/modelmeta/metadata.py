"""Type metadata tree describing the declared type of an attribute.

A closed set of frozen dataclasses. Trees are produced by the extraction
step (see :mod:`modelmeta.extraction`) or built by hand, and are compiled
into storage schema fragments by
:class:`~modelmeta.schema.resolver.TypeDescriptorResolver`.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Union

__all__ = [
    "ArrayType",
    "InterfaceType",
    "MixedType",
    "ModelReference",
    "NumberLiteral",
    "Primitive",
    "StringLiteral",
    "TypeMetadata",
    "UnionType",
    "UnresolvedType",
    "is_literal",
]


@dataclass(frozen=True)
class Primitive:
    """Named scalar type, e.g. ``"String"`` or ``"int"``."""

    identifier: str

    def depth(self) -> int:
        return 1


@dataclass(frozen=True)
class NumberLiteral:
    """Numeric literal member of a literal union."""

    value: int | float

    @property
    def identifier(self) -> str:
        return "Number"

    def depth(self) -> int:
        return 1


@dataclass(frozen=True)
class StringLiteral:
    """String literal member of a literal union."""

    value: str

    @property
    def identifier(self) -> str:
        return "String"

    def depth(self) -> int:
        return 1


@dataclass(frozen=True)
class ModelReference:
    """Reference to another model, identified by its class name."""

    identifier: str

    def depth(self) -> int:
        return 1


@dataclass(frozen=True)
class ArrayType:
    """Homogeneous sequence of ``sub_type``."""

    sub_type: TypeMetadata
    identifier: str = "Array"

    def depth(self) -> int:
        return 1 + self.sub_type.depth()


@dataclass(frozen=True)
class UnionType:
    """Union of ``sub_types``; only literal-only unions compile to enums."""

    sub_types: tuple[TypeMetadata, ...] = ()
    identifier: str = "Union"

    def __post_init__(self) -> None:
        object.__setattr__(self, "sub_types", tuple(self.sub_types))

    @property
    def is_literal_union(self) -> bool:
        return all(is_literal(sub_type) for sub_type in self.sub_types)

    def depth(self) -> int:
        # Unions compile to a single leaf fragment, whatever their members
        return 1


@dataclass(frozen=True)
class InterfaceType:
    """Structural type with named members (TypedDict, dataclass, ...)."""

    members: Mapping[str, TypeMetadata] = field(default_factory=dict)
    identifier: str = "Object"

    def __post_init__(self) -> None:
        object.__setattr__(self, "members", MappingProxyType(dict(self.members)))

    def __hash__(self) -> int:
        return hash((self.identifier, tuple(sorted(self.members.items(), key=lambda item: item[0]))))

    def depth(self) -> int:
        return 1 + max((member.depth() for member in self.members.values()), default=0)


@dataclass(frozen=True)
class MixedType:
    """Untyped value, stored opaquely."""

    identifier: str = "Mixed"

    def depth(self) -> int:
        return 1


@dataclass(frozen=True)
class UnresolvedType:
    """A type the extraction step could not resolve; never compilable."""

    identifier: str = "Unresolved"

    def depth(self) -> int:
        return 1


TypeMetadata = Union[
    Primitive,
    NumberLiteral,
    StringLiteral,
    ModelReference,
    ArrayType,
    UnionType,
    InterfaceType,
    MixedType,
    UnresolvedType,
]


def is_literal(node: TypeMetadata) -> bool:
    """Return whether ``node`` is a numeric or string literal."""
    return isinstance(node, (NumberLiteral, StringLiteral))
