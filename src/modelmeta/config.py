"""Runtime settings and logging setup."""

from __future__ import annotations

import os
import sys

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

__all__ = ["ModelMetaSettings", "configure_logging"]

_ENV_PREFIX = "MODELMETA_"


class ModelMetaSettings(BaseModel):
    """
    Settings shared by the schema compiler and the model factory.

    Examples
    --------
    >>> settings = ModelMetaSettings(id_field="pk")
    >>> settings.temporary_id_field
    'dummy_id'
    """

    model_config = ConfigDict(frozen=True)

    id_field: str = Field(
        "id",
        min_length=1,
        description="Attribute carrying the identifier of a persisted record",
    )
    temporary_id_field: str = Field(
        "dummy_id",
        min_length=1,
        description="Field receiving a generated id for records not yet persisted",
    )
    reference_key_length: int = Field(
        36,
        gt=0,
        description="Length of relation key columns in generated tables",
    )
    log_level: str = Field(
        "WARNING",
        pattern="^(TRACE|DEBUG|INFO|SUCCESS|WARNING|ERROR|CRITICAL)$",
        description="Level used by configure_logging",
    )

    @classmethod
    def from_env(cls) -> ModelMetaSettings:
        """Build settings from ``MODELMETA_*`` environment variables."""
        values = {}
        for name in cls.model_fields:
            raw = os.getenv(f"{_ENV_PREFIX}{name.upper()}")
            if raw is not None:
                values[name] = raw
        return cls.model_validate(values)


def configure_logging(level: str | None = None) -> int:
    """
    Enable modelmeta log output on stderr.

    The library is silent by default. Returns the loguru handler id so
    callers can remove the sink again.
    """
    if level is None:
        level = ModelMetaSettings.from_env().log_level
    logger.enable("modelmeta")
    return logger.add(
        sys.stderr,
        level=level,
        filter="modelmeta",
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name} - {message}",
    )
