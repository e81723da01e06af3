"""Naming helpers for models and collections."""

from __future__ import annotations

import re

__all__ = ["collection_name_for", "snake_case"]

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def snake_case(name: str) -> str:
    """
    Convert a CamelCase class name to snake_case.

    Examples
    --------
    >>> snake_case("YetAnotherExample")
    'yet_another_example'
    >>> snake_case("HTTPRoute")
    'http_route'
    """
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def collection_name_for(class_name: str) -> str:
    """
    Derive the default storage collection name of a model.

    Examples
    --------
    >>> collection_name_for("Example")
    'examples'
    >>> collection_name_for("Address")
    'addresses'
    >>> collection_name_for("Category")
    'categories'
    """
    base = snake_case(class_name)
    if re.search(r"[^aeiou]y$", base):
        return f"{base[:-1]}ies"
    if base.endswith(("s", "x", "z", "ch", "sh")):
        return f"{base}es"
    return f"{base}s"
