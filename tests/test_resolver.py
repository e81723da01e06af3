"""Tests for compiling type metadata into schema fragments."""

from __future__ import annotations

import pytest
from sqlalchemy import JSON, DateTime, Float, Integer, LargeBinary, String

from modelmeta.constants import FragmentKind
from modelmeta.exceptions import CompilationError
from modelmeta.metadata import (
    ArrayType,
    InterfaceType,
    MixedType,
    ModelReference,
    NumberLiteral,
    Primitive,
    StringLiteral,
    UnionType,
    UnresolvedType,
)
from modelmeta.schema import TypeDescriptorResolver


class Example:
    """Stand-in model class."""


@pytest.fixture
def resolver():
    return TypeDescriptorResolver()


class TestPrimitives:
    """Test the named-primitive lookup."""

    @pytest.mark.parametrize(
        ("identifier", "expected"),
        [
            ("String", String),
            ("str", String),
            ("Number", Float),
            ("int", Integer),
            ("datetime", DateTime),
            ("bytes", LargeBinary),
        ],
    )
    def test_known_identifier(self, resolver, identifier, expected) -> None:
        """Test known identifiers map to their storage type."""
        fragment = resolver.compile(Example, "value", Primitive(identifier))
        assert fragment.kind is FragmentKind.SCALAR
        assert fragment.type is expected

    def test_unknown_identifier_degrades_to_mixed(self, resolver) -> None:
        """Test unknown identifiers compile to the opaque type instead of failing."""
        fragment = resolver.compile(Example, "value", Primitive("Frobnicator"))
        assert fragment.kind is FragmentKind.MIXED
        assert fragment.type is JSON

    def test_mixed(self, resolver) -> None:
        """Test Mixed compiles to the opaque type."""
        fragment = resolver.compile(Example, "value", MixedType())
        assert fragment.kind is FragmentKind.MIXED

    def test_custom_primitive_table(self) -> None:
        """Test a resolver with its own primitive table."""
        resolver = TypeDescriptorResolver({"Money": Integer})
        assert resolver.compile(Example, "price", Primitive("Money")).type is Integer
        assert resolver.compile(Example, "name", Primitive("String")).kind is FragmentKind.MIXED


class TestReferencesAndArrays:
    """Test relation and array fragments."""

    def test_model_reference(self, resolver) -> None:
        """Test references point at the model instead of inlining it."""
        fragment = resolver.compile(Example, "author", ModelReference("Author"))
        assert fragment.kind is FragmentKind.REFERENCE
        assert fragment.ref == "Author"
        assert fragment.members is None

    def test_array_of_primitives(self, resolver) -> None:
        """Test arrays wrap the compiled element."""
        fragment = resolver.compile(Example, "tags", ArrayType(Primitive("str")))
        assert fragment.kind is FragmentKind.ARRAY
        assert fragment.item.type is String

    def test_nested_arrays(self, resolver) -> None:
        """Test arrays of arrays of references."""
        node = ArrayType(ArrayType(ModelReference("Author")))
        fragment = resolver.compile(Example, "grid", node)
        assert fragment.item.kind is FragmentKind.ARRAY
        assert fragment.item.item.ref == "Author"


class TestLiteralUnions:
    """Test enumerations compiled from literal unions."""

    def test_numeric_literals(self, resolver) -> None:
        """Test numeric literal unions give a numeric enumeration."""
        node = UnionType((NumberLiteral(1), NumberLiteral(2), NumberLiteral(3)))
        fragment = resolver.compile(Example, "level", node)
        assert fragment.kind is FragmentKind.ENUM
        assert fragment.type is Float
        assert set(fragment.enum) == {1, 2, 3}

    def test_string_literals(self, resolver) -> None:
        """Test string literal unions give a string enumeration."""
        node = UnionType((StringLiteral("a"), StringLiteral("b")))
        fragment = resolver.compile(Example, "status", node)
        assert fragment.type is String
        assert set(fragment.enum) == {"a", "b"}

    def test_mixed_literals(self, resolver) -> None:
        """Test mixed literal unions give an opaque enumeration."""
        node = UnionType((NumberLiteral(1), StringLiteral("a")))
        fragment = resolver.compile(Example, "value", node)
        assert fragment.kind is FragmentKind.ENUM
        assert fragment.type is JSON
        assert set(fragment.enum) == {1, "a"}

    def test_empty_union_is_logged(self, resolver, log_messages) -> None:
        """Test the degenerate empty union compiles and warns."""
        fragment = resolver.compile(Example, "nothing", UnionType(()))
        assert fragment.kind is FragmentKind.ENUM
        assert fragment.type is JSON
        assert fragment.enum == ()
        assert fragment.allows("anything")
        assert any(
            message.startswith("WARNING|Empty literal union for Example[nothing]")
            for message in log_messages
        )

    def test_non_literal_union_falls_back(self, resolver) -> None:
        """Test unions with non-literal members use the primitive lookup."""
        node = UnionType((Primitive("str"), Primitive("int")))
        fragment = resolver.compile(Example, "value", node)
        assert fragment.kind is FragmentKind.MIXED


class TestInterfaces:
    """Test nested sub-schemas."""

    def test_members_are_compiled(self, resolver) -> None:
        """Test every member keeps its name and compiled type."""
        node = InterfaceType(
            {"street": Primitive("str"), "number": Primitive("int"), "tags": ArrayType(Primitive("str"))}
        )
        fragment = resolver.compile(Example, "address", node)
        assert fragment.kind is FragmentKind.SUBSCHEMA
        assert list(fragment.members) == ["number", "street", "tags"]
        assert fragment.members["street"].type is String
        assert fragment.members["tags"].item.type is String

    def test_unresolved_member_fails(self, resolver) -> None:
        """Test unresolved types are fatal wherever they are nested."""
        node = InterfaceType({"owner": ArrayType(UnresolvedType("Ghost"))})
        with pytest.raises(CompilationError) as exc_info:
            resolver.compile(Example, "address", node)
        assert exc_info.value.model == "Example"
        assert exc_info.value.attribute == "address"
        assert "Example[address]" in str(exc_info.value)


class TestStructuralFidelity:
    """Test fragment depth follows metadata depth."""

    @pytest.mark.parametrize(
        "node",
        [
            Primitive("str"),
            ModelReference("Author"),
            ArrayType(ArrayType(ArrayType(Primitive("int")))),
            UnionType((StringLiteral("a"),)),
            InterfaceType({"a": ArrayType(Primitive("str")), "b": InterfaceType({"c": MixedType()})}),
            InterfaceType({}),
        ],
    )
    def test_depth_matches(self, resolver, node) -> None:
        """Test compiled depth equals metadata depth."""
        assert resolver.compile(Example, "value", node).depth() == node.depth()

    def test_compile_is_pure(self, resolver) -> None:
        """Test compiling twice gives equal fragments."""
        node = InterfaceType({"a": UnionType((NumberLiteral(1), NumberLiteral(2)))})
        assert resolver.compile(Example, "x", node) == resolver.compile(Example, "x", node)
