"""Tests for model schemas and the tables generated from them."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated, Literal

import pytest
from sqlalchemy import JSON, Enum, Float, Integer, MetaData, String, create_engine, inspect

from modelmeta import Attr, BaseModel


@dataclass
class Dimensions:
    width: float
    height: float


@pytest.fixture
def models(factory):
    @factory.model(class_name="Author", collection_name="authors")
    class Author(BaseModel):
        name: Annotated[str, Attr(required=True)] = ""

    @factory.model(class_name="Book", collection_name="books")
    class Book(BaseModel):
        title: Annotated[str, Attr(required=True)] = ""
        author: Annotated[Author, Attr()] = None
        pages: Annotated[int, Attr()] = 0
        rating: Annotated[Literal[1, 2, 3], Attr()] = 1
        format: Annotated[Literal["paper", "ebook"], Attr()] = "paper"
        keywords: Annotated[list[str], Attr()] = []
        size: Annotated[Dimensions, Attr()] = None

    return Author, Book


class TestModelSchema:
    """Test schema aggregation."""

    def test_attribute_schemas(self, models, registry) -> None:
        """Test the schema lists attributes in declaration order."""
        _, book = models
        schema = registry.get_model_schema(book)
        assert schema.class_name == "Book"
        assert schema.collection_name == "books"
        assert schema.attribute_names == [
            "title",
            "author",
            "pages",
            "rating",
            "format",
            "keywords",
            "size",
        ]
        assert schema.attribute_schemas["author"].ref == "Author"

    def test_schema_is_read_only(self, models, registry) -> None:
        """Test the attribute mapping cannot be modified."""
        schema = registry.get_model_schema(name="Book")
        with pytest.raises(TypeError):
            schema.attribute_schemas["extra"] = None


class TestToTable:
    """Test SQLAlchemy table generation."""

    @pytest.fixture
    def metadata(self, models, registry):
        metadata = MetaData()
        for schema in registry.model_schemas:
            schema.to_table(metadata, registry)
        return metadata

    def test_columns(self, metadata) -> None:
        """Test column types and nullability follow the compiled schema."""
        table = metadata.tables["books"]
        assert [column.name for column in table.primary_key] == ["id"]
        assert not table.c.title.nullable
        assert table.c.pages.nullable
        assert isinstance(table.c.title.type, String)
        assert isinstance(table.c.pages.type, Integer)
        assert isinstance(table.c.rating.type, Integer)
        assert isinstance(table.c.format.type, Enum)
        assert set(table.c.format.type.enums) == {"paper", "ebook"}
        assert isinstance(table.c.keywords.type, JSON)
        assert isinstance(table.c.size.type, JSON)

    def test_reference_is_foreign_key(self, metadata) -> None:
        """Test references to known models become foreign keys."""
        table = metadata.tables["books"]
        (foreign_key,) = table.c.author.foreign_keys
        assert foreign_key.target_fullname == "authors.id"
        assert table.c.author.type.length == 36

    def test_reference_without_registry(self, models, registry) -> None:
        """Test references stay plain key columns without a registry."""
        table = registry.get_model_schema(name="Book").to_table(MetaData())
        assert not table.c.author.foreign_keys

    def test_create_all(self, metadata) -> None:
        """Test the generated tables can be created."""
        engine = create_engine("sqlite://")
        metadata.create_all(engine)
        inspector = inspect(engine)
        assert set(inspector.get_table_names()) == {"authors", "books"}
        foreign_keys = inspector.get_foreign_keys("books")
        assert foreign_keys[0]["referred_table"] == "authors"

    def test_custom_key(self, models, registry) -> None:
        """Test the primary key name and key length are configurable."""
        metadata = MetaData()
        for schema in registry.model_schemas:
            schema.to_table(metadata, registry, id_field="pk", reference_key_length=64)
        table = metadata.tables["books"]
        assert [column.name for column in table.primary_key] == ["pk"]
        assert table.c.pk.type.length == 64
        (foreign_key,) = table.c.author.foreign_keys
        assert foreign_key.target_fullname == "authors.pk"


class TestColumnTypes:
    """Test storage types of non-integral enumerations."""

    def test_float_enum(self, factory, registry) -> None:
        """Test fractional numeric enumerations use a float column."""

        @factory.model
        class Setting(BaseModel):
            ratio: Annotated[Literal[0.5, 1.5], Attr()] = 0.5

        table = registry.get_model_schema(name="Setting").to_table(MetaData())
        assert isinstance(table.c.ratio.type, Float)
