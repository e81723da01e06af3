"""Tests for Pydantic schemas (options, settings and export boundaries)."""

from __future__ import annotations

import json
from typing import Annotated, Literal

import pytest
from loguru import logger
from pydantic import ValidationError

from modelmeta import Attr, BaseModel, ModelMetaSettings, configure_logging, declare_attribute
from modelmeta.metadata import ArrayType, InterfaceType, Primitive
from modelmeta.schema import AttributeOptions, AttributeSchema
from modelmeta.schemas import AttributeSchemaResponse, ModelSchemaResponse, SchemaFragmentResponse


class Owner:
    """Stand-in model class."""


class TestAttributeOptions:
    """Test attribute option validation."""

    def test_defaults(self) -> None:
        """Test the documented option defaults."""
        options = AttributeOptions()
        assert options.is_required is False
        assert options.is_read_only is False
        assert options.cascade is True
        assert options.relation_column is None
        assert options.type.identifier == "Mixed"

    def test_extra_options_kept(self) -> None:
        """Test unknown options survive validation."""
        schema = AttributeSchema.build(Owner, "name", {"type": Primitive("str"), "label": "Name"})
        assert schema.options.label == "Name"
        assert schema.parameters["label"] == "Name"

    def test_invalid_type(self) -> None:
        """Test the type option must be type metadata."""
        with pytest.raises(ValidationError) as exc_info:
            AttributeSchema.build(Owner, "name", {"type": str})
        assert "type" in str(exc_info.value)

    def test_invalid_flag(self) -> None:
        """Test boolean options are validated."""
        with pytest.raises(ValidationError):
            AttributeSchema.build(Owner, "name", {"is_required": "maybe"})


class TestSettings:
    """Test ModelMetaSettings."""

    def test_defaults(self) -> None:
        """Test default identifier fields."""
        settings = ModelMetaSettings()
        assert settings.id_field == "id"
        assert settings.temporary_id_field == "dummy_id"
        assert settings.reference_key_length == 36
        assert settings.log_level == "WARNING"

    def test_from_env(self, monkeypatch) -> None:
        """Test settings are read from prefixed environment variables."""
        monkeypatch.setenv("MODELMETA_ID_FIELD", "pk")
        monkeypatch.setenv("MODELMETA_REFERENCE_KEY_LENGTH", "64")
        settings = ModelMetaSettings.from_env()
        assert settings.id_field == "pk"
        assert settings.reference_key_length == 64
        assert settings.temporary_id_field == "dummy_id"

    def test_invalid_level(self, monkeypatch) -> None:
        """Test unknown log levels are rejected."""
        monkeypatch.setenv("MODELMETA_LOG_LEVEL", "LOUD")
        with pytest.raises(ValidationError) as exc_info:
            ModelMetaSettings.from_env()
        assert "log_level" in str(exc_info.value)

    def test_invalid_key_length(self) -> None:
        """Test key columns need a positive length."""
        with pytest.raises(ValidationError):
            ModelMetaSettings(reference_key_length=0)

    def test_frozen(self) -> None:
        """Test settings cannot be modified."""
        settings = ModelMetaSettings()
        with pytest.raises(ValidationError):
            settings.id_field = "pk"


class TestConfigureLogging:
    """Test opting in to library log output."""

    def test_debug_output(self, registry, capsys) -> None:
        """Test registry activity is logged once enabled."""
        handler_id = configure_logging("DEBUG")
        try:
            declare_attribute(Owner, "name", Primitive("str"), registry=registry)
        finally:
            logger.remove(handler_id)
            logger.disable("modelmeta")
        assert "Registered attribute schema Owner[name]" in capsys.readouterr().err

    def test_silent_by_default(self, registry, capsys) -> None:
        """Test nothing is logged without configuration."""
        declare_attribute(Owner, "name", Primitive("str"), registry=registry)
        assert capsys.readouterr().err == ""


class TestExportSchemas:
    """Test the JSON export of compiled schemas."""

    def test_fragment(self) -> None:
        """Test nested fragments are exported recursively."""
        schema = AttributeSchema.build(
            Owner,
            "address",
            {"type": InterfaceType({"lines": ArrayType(Primitive("str")), "zip": Primitive("int")})},
        )
        response = SchemaFragmentResponse.from_fragment(schema.compiled)
        assert response.kind == "subschema"
        assert response.members["lines"].kind == "array"
        assert response.members["lines"].item.type == "String"
        assert response.members["zip"].type == "Integer"

    def test_attribute(self) -> None:
        """Test attribute flags and declaring class are exported."""
        schema = AttributeSchema.build(
            Owner,
            "name",
            {"type": Primitive("str"), "is_required": True, "is_read_only": True},
        )
        response = AttributeSchemaResponse.from_schema(schema)
        assert response.required
        assert response.read_only
        assert response.declared_on == "Owner"

    def test_model(self, factory, registry) -> None:
        """Test a whole model exports to JSON."""

        @factory.model(class_name="Ticket", collection_name="tickets")
        class Ticket(BaseModel):
            title: Annotated[str, Attr(required=True)] = ""
            state: Annotated[Literal["open", "closed"], Attr()] = "open"

        response = ModelSchemaResponse.from_schema(registry.get_model_schema(Ticket))
        data = json.loads(response.model_dump_json())
        assert data["class_name"] == "Ticket"
        assert data["collection_name"] == "tickets"
        assert [attribute["name"] for attribute in data["attributes"]] == ["title", "state"]
        assert data["attributes"][1]["compiled"]["enum"] == ["open", "closed"]
        assert data["attributes"][1]["compiled"]["ref"] is None
