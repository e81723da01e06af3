"""Exception types raised by modelmeta.

Absence of data (unknown schema, unregistered instance) is never an
exception; lookups return ``None`` instead.
"""

from __future__ import annotations

__all__ = ["CompilationError", "ModelMetaError", "RejectedAssignment"]


class ModelMetaError(Exception):
    """Base class for modelmeta errors."""


class CompilationError(ModelMetaError):
    """
    An attribute type could not be compiled into a schema fragment.

    Fatal at declaration time: schema generation for the model stops.

    Parameters
    ----------
    model : str
        Name of the model class being compiled
    attribute : str
        Name of the offending attribute
    reason : str
        Human readable cause
    """

    def __init__(self, model: str, attribute: str, reason: str) -> None:
        self.model = model
        self.attribute = attribute
        self.reason = reason
        super().__init__(f"{reason} in {model}[{attribute}]")


class RejectedAssignment(AttributeError):
    """Raised by plain ``instance.attr = value`` when the attribute refuses the value."""

    def __init__(self, model: str, attribute: str, value: object) -> None:
        self.model = model
        self.attribute = attribute
        self.value = value
        super().__init__(f"{model}.{attribute} rejected value {value!r}")
