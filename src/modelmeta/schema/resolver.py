"""Compilation of type metadata trees into schema fragments."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from loguru import logger
from sqlalchemy import Float, String
from sqlalchemy.types import TypeEngine

from modelmeta.constants import (
    MIXED_TYPE,
    PRIMITIVE_TYPES,
    REFERENCE_KEY_TYPE,
    FragmentKind,
)
from modelmeta.exceptions import CompilationError
from modelmeta.metadata import (
    ArrayType,
    InterfaceType,
    MixedType,
    ModelReference,
    NumberLiteral,
    StringLiteral,
    TypeMetadata,
    UnionType,
    UnresolvedType,
)
from modelmeta.schema.fragment import SchemaFragment

__all__ = ["TypeDescriptorResolver"]


def _model_name(model_type: Any) -> str:
    return getattr(model_type, "__name__", str(model_type))


class TypeDescriptorResolver:
    """
    Compile :mod:`~modelmeta.metadata` trees into :class:`SchemaFragment` trees.

    Compilation is pure: the result only depends on the arguments and the
    primitive-name table.

    Parameters
    ----------
    primitive_types : Mapping[str, type[TypeEngine]], optional
        Identifier to storage type table used by the fallback lookup,
        by default :data:`~modelmeta.constants.PRIMITIVE_TYPES`

    Examples
    --------
    >>> from modelmeta.metadata import ArrayType, Primitive
    >>> resolver = TypeDescriptorResolver()
    >>> fragment = resolver.compile(object, "tags", ArrayType(Primitive("str")))
    >>> fragment.kind.value, fragment.item.type.__name__
    ('array', 'String')
    """

    def __init__(self, primitive_types: Mapping[str, type[TypeEngine]] | None = None) -> None:
        self.primitive_types = PRIMITIVE_TYPES if primitive_types is None else primitive_types

    def compile(self, model_type: Any, attribute_name: str, node: TypeMetadata) -> SchemaFragment:
        """
        Compile one metadata node.

        Raises
        ------
        CompilationError
            If the tree contains an :class:`UnresolvedType`
        """
        if isinstance(node, UnresolvedType):
            raise CompilationError(
                _model_name(model_type),
                attribute_name,
                f"Unresolved type {node.identifier!r} detected",
            )
        if isinstance(node, ModelReference):
            return SchemaFragment(
                kind=FragmentKind.REFERENCE,
                type=REFERENCE_KEY_TYPE,
                ref=node.identifier,
            )
        if isinstance(node, ArrayType):
            return SchemaFragment(
                kind=FragmentKind.ARRAY,
                type=MIXED_TYPE,
                item=self.compile(model_type, attribute_name, node.sub_type),
            )
        if isinstance(node, MixedType):
            return SchemaFragment.mixed()
        if isinstance(node, UnionType) and node.is_literal_union:
            return self._compile_enum(model_type, attribute_name, node)
        if isinstance(node, InterfaceType):
            members = {
                name: self.compile(model_type, attribute_name, node.members[name])
                for name in sorted(node.members)
            }
            return SchemaFragment(kind=FragmentKind.SUBSCHEMA, type=MIXED_TYPE, members=members)

        # Non-literal unions land here too and resolve by their identifier
        storage_type = self.primitive_types.get(node.identifier)
        if storage_type is None:
            return SchemaFragment.mixed()
        return SchemaFragment(kind=FragmentKind.SCALAR, type=storage_type)

    def _compile_enum(self, model_type: Any, attribute_name: str, node: UnionType) -> SchemaFragment:
        enum_type: type[TypeEngine] = MIXED_TYPE
        if node.sub_types:
            if all(isinstance(sub_type, NumberLiteral) for sub_type in node.sub_types):
                enum_type = Float
            elif all(isinstance(sub_type, StringLiteral) for sub_type in node.sub_types):
                enum_type = String
        else:
            logger.warning(
                "Empty literal union for {}[{}], compiling to an unrestricted enum",
                _model_name(model_type),
                attribute_name,
            )
        return SchemaFragment(
            kind=FragmentKind.ENUM,
            type=enum_type,
            enum=tuple(sub_type.value for sub_type in node.sub_types),
        )
