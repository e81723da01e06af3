"""Runtime attribute objects bound to one model instance."""

from __future__ import annotations

import weakref
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from adaptix import Retort
from loguru import logger

from modelmeta.constants import ChangeKind
from modelmeta.utils import utc_now

if TYPE_CHECKING:
    from modelmeta.schema import AttributeSchema

__all__ = ["UNSET", "Attribute", "AttributeChange"]

_retort = Retort()


class _Unset:
    """Marker for an attribute that has not received a value yet."""

    _instance: _Unset | None = None

    def __new__(cls) -> _Unset:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()


@dataclass(frozen=True)
class AttributeChange:
    """One entry of an attribute change log."""

    kind: ChangeKind
    value: Any
    previous: Any = None
    timestamp: datetime = field(default_factory=utc_now)


class Attribute:
    """
    Generic attribute behaviour, one object per (instance, attribute name).

    Holds the current value and the change log. Subclasses registered on a
    :class:`~modelmeta.factory.ModelClassFactory` for a given attribute name
    replace this class for that name.

    Parameters
    ----------
    owner : object
        Model instance the attribute belongs to; only weakly referenced
    name : str
        Attribute name
    schema : AttributeSchema
        Compiled schema of the attribute
    """

    def __init__(self, owner: object, name: str, schema: AttributeSchema) -> None:
        self._owner = weakref.ref(owner)
        self.name = name
        self.schema = schema
        self.value: Any = UNSET
        self.changes: list[AttributeChange] = []

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, value={self.value!r})"

    @property
    def owner(self) -> object | None:
        """The owning instance, or None once it has been collected."""
        return self._owner()

    @property
    def is_initialized(self) -> bool:
        return self.value is not UNSET

    @property
    def is_dirty(self) -> bool:
        return bool(self.changes)

    def get(self) -> Any:
        return None if self.value is UNSET else self.value

    def accepts(self, value: Any) -> bool:
        """Return whether :meth:`set` would take ``value``."""
        if self.schema.read_only and self.is_initialized:
            return False
        if value is None:
            return not (self.schema.required and self.is_initialized)
        return self.schema.compiled.allows(value)

    def set(self, value: Any) -> bool:
        """
        Assign ``value``.

        Returns
        -------
        bool
            False if the value was rejected; the current value is kept
        """
        if not self.accepts(value):
            logger.debug("Rejected value {!r} for attribute {}", value, self.name)
            return False
        previous = self.value
        if previous is not UNSET and previous == value:
            return True
        self.value = value
        if previous is UNSET:
            change = AttributeChange(ChangeKind.INIT, value)
        else:
            change = AttributeChange(ChangeKind.UPDATE, value, previous)
        self.changes.append(change)
        self.notify(change)
        return True

    def notify(self, change: AttributeChange) -> None:
        """Call the observer methods the owner registered for this attribute."""
        owner = self.owner
        if owner is None:
            return
        observers = getattr(type(owner), "__attribute_observers__", {})
        for method_name, kinds in observers.get(self.name, ()):
            if not kinds or change.kind in kinds:
                getattr(owner, method_name)(change.value)

    def remove_changes(self) -> None:
        self.changes.clear()

    def dump_changes(self) -> list[dict[str, Any]]:
        """Change log as plain data, for persistence adapters."""
        return _retort.dump(self.changes, list[AttributeChange])
