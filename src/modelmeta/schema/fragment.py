"""Compiled, storage-ready schema fragments."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum as PyEnum
from types import MappingProxyType
from typing import Any

from sqlalchemy import JSON, Enum, Float, Integer, String
from sqlalchemy.types import TypeEngine

from modelmeta.constants import MIXED_TYPE, FragmentKind

__all__ = ["SchemaFragment"]


def _same_literal(value: Any, allowed: Any) -> bool:
    return isinstance(value, bool) == isinstance(allowed, bool) and value == allowed


@dataclass(frozen=True)
class SchemaFragment:
    """
    Schema definition for one attribute (or one nested member of it).

    Attributes
    ----------
    kind : FragmentKind
        Shape of the fragment
    type : type[TypeEngine]
        SQLAlchemy type class describing the stored value
    ref : str | None
        Referenced model name for ``REFERENCE`` fragments
    enum : tuple | None
        Allowed values for ``ENUM`` fragments
    item : SchemaFragment | None
        Element fragment for ``ARRAY`` fragments
    members : Mapping[str, SchemaFragment] | None
        Nested sub-schema for ``SUBSCHEMA`` fragments
    """

    kind: FragmentKind
    type: type[TypeEngine]
    ref: str | None = None
    enum: tuple[Any, ...] | None = None
    item: SchemaFragment | None = None
    members: Mapping[str, SchemaFragment] | None = None

    def __post_init__(self) -> None:
        if self.enum is not None:
            object.__setattr__(self, "enum", tuple(self.enum))
        if self.members is not None:
            object.__setattr__(self, "members", MappingProxyType(dict(self.members)))

    def __hash__(self) -> int:
        members = tuple(self.members.items()) if self.members is not None else None
        return hash((self.kind, self.type, self.ref, self.enum, self.item, members))

    @classmethod
    def mixed(cls) -> SchemaFragment:
        return cls(kind=FragmentKind.MIXED, type=MIXED_TYPE)

    def depth(self) -> int:
        """Nesting depth of the fragment tree (leaves count as 1)."""
        if self.kind is FragmentKind.ARRAY and self.item is not None:
            return 1 + self.item.depth()
        if self.kind is FragmentKind.SUBSCHEMA and self.members:
            return 1 + max(member.depth() for member in self.members.values())
        return 1

    def allows(self, value: Any) -> bool:
        """
        Return whether ``value`` satisfies the enumeration, if any.

        Enum members are compared by their value. Booleans only match boolean
        members, so ``True`` is not taken for ``1``.
        """
        if self.kind is not FragmentKind.ENUM or not self.enum:
            return True
        if isinstance(value, PyEnum):
            value = value.value
        return any(_same_literal(value, allowed) for allowed in self.enum)

    def column_type(self, reference_key_length: int = 36) -> TypeEngine:
        """
        SQLAlchemy column type a relational adapter should use.

        Arrays, sub-schemas and opaque values are stored as JSON. String
        enumerations become non-native ``Enum`` columns so the allowed
        values are enforced with a CHECK constraint.
        """
        if self.kind is FragmentKind.REFERENCE:
            return String(reference_key_length)
        if self.kind is FragmentKind.ENUM:
            if self.type is String and self.enum:
                return Enum(*self.enum, native_enum=False, create_constraint=True)
            if self.type is Float:
                if all(isinstance(value, int) for value in self.enum or ()):
                    return Integer()
                return Float()
            return JSON()
        if self.kind in (FragmentKind.ARRAY, FragmentKind.SUBSCHEMA, FragmentKind.MIXED):
            return JSON()
        return self.type()

    def to_dict(self) -> dict[str, Any]:
        """Render the fragment as a JSON friendly tree."""
        data: dict[str, Any] = {"kind": self.kind.value, "type": self.type.__name__}
        if self.ref is not None:
            data["ref"] = self.ref
        if self.enum is not None:
            data["enum"] = list(self.enum)
        if self.item is not None:
            data["item"] = self.item.to_dict()
        if self.members is not None:
            data["members"] = {name: member.to_dict() for name, member in self.members.items()}
        return data
