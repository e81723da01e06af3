"""Utility functions for modelmeta."""

from __future__ import annotations

__all__ = [
    "collection_name_for",
    "snake_case",
    "utc_now",
]

from .naming import collection_name_for, snake_case
from .time import utc_now
