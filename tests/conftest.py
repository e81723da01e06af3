"""pytest configuration for modelmeta tests."""

from __future__ import annotations

import pytest
from loguru import logger

from modelmeta import ModelClassFactory, SchemaRegistry


@pytest.fixture
def registry():
    """Fresh registry, independent of the process-wide one."""
    return SchemaRegistry()


@pytest.fixture
def factory(registry):
    """Model factory bound to the test registry."""
    return ModelClassFactory(registry)


@pytest.fixture
def log_messages():
    """Capture modelmeta log output as ``LEVEL|message`` strings."""
    messages: list[str] = []
    logger.enable("modelmeta")
    handler_id = logger.add(messages.append, level="DEBUG", format="{level}|{message}")
    yield messages
    logger.remove(handler_id)
    logger.disable("modelmeta")
