"""Model base class and the per-attribute accessors installed on wrapped classes."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from modelmeta.constants import ChangeKind
from modelmeta.exceptions import RejectedAssignment
from modelmeta.registry import SchemaRegistry, get_default_registry

if TYPE_CHECKING:
    from modelmeta.attribute import Attribute, AttributeChange
    from modelmeta.schema import ModelSchema

__all__ = ["AttributeAccessor", "BaseModel", "RawView", "collect_observers", "observe"]


def registry_of(instance: object) -> SchemaRegistry:
    registry = getattr(type(instance), "__model_registry__", None)
    return registry if registry is not None else get_default_registry()


class AttributeAccessor:
    """
    Data descriptor routing one declared attribute through its Attribute object.

    Until the instance has materialised its attributes (that is, while the
    base constructor runs) reads and writes go to the raw instance state.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"AttributeAccessor({self.name!r})"

    def __get__(self, instance: object | None, owner: type | None = None) -> Any:
        if instance is None:
            return self
        attribute = registry_of(instance).get_attribute(instance, self.name)
        if attribute is None:
            return getattr(RawView(instance), self.name)
        return attribute.get()

    def __set__(self, instance: object, value: Any) -> None:
        attribute = registry_of(instance).get_attribute(instance, self.name)
        if attribute is None:
            vars(instance)[self.name] = value
        elif not attribute.set(value):
            raise RejectedAssignment(type(instance).__name__, self.name, value)

    def __delete__(self, instance: object) -> None:
        vars(instance).pop(self.name, None)


class RawView:
    """
    Un-intercepted view of a model instance.

    Reads skip :class:`AttributeAccessor` descriptors and see the raw instance
    state and plain class attributes; writes go straight to the instance dict.
    """

    __slots__ = ("_instance",)

    def __init__(self, instance: object) -> None:
        object.__setattr__(self, "_instance", instance)

    def __getattr__(self, name: str) -> Any:
        instance = object.__getattribute__(self, "_instance")
        data = vars(instance)
        if name in data:
            return data[name]
        owner = type(instance)
        for klass in owner.__mro__:
            if name not in klass.__dict__:
                continue
            value = klass.__dict__[name]
            if isinstance(value, AttributeAccessor):
                continue
            if hasattr(value, "__get__"):
                return value.__get__(instance, owner)
            return value
        raise AttributeError(f"{owner.__name__!r} has no raw attribute {name!r}")

    def __setattr__(self, name: str, value: Any) -> None:
        vars(object.__getattribute__(self, "_instance"))[name] = value

    def __delattr__(self, name: str) -> None:
        vars(object.__getattribute__(self, "_instance")).pop(name, None)

    def __contains__(self, name: str) -> bool:
        try:
            getattr(self, name)
        except AttributeError:
            return False
        return True


def observe(attribute_name: str, *kinds: ChangeKind | str) -> Callable:
    """
    Mark a model method as observer of ``attribute_name``.

    The method is called with the new value after every accepted change,
    or only after changes of the given kinds.

    Examples
    --------
    >>> class Example(BaseModel):
    ...     @observe("tags", "update")
    ...     def on_tags(self, value):
    ...         print(value)
    """
    wanted = tuple(ChangeKind(kind) for kind in kinds)

    def decorator(func: Callable) -> Callable:
        func.__observes__ = (*getattr(func, "__observes__", ()), (attribute_name, wanted))
        return func

    return decorator


def collect_observers(cls: type) -> dict[str, list[tuple[str, tuple[ChangeKind, ...]]]]:
    """Map attribute names to the observer methods found on ``cls``."""
    observers: dict[str, list[tuple[str, tuple[ChangeKind, ...]]]] = {}
    for method_name in dir(cls):
        func = getattr(cls, method_name, None)
        for attribute_name, kinds in getattr(func, "__observes__", ()):
            observers.setdefault(attribute_name, []).append((method_name, kinds))
    return observers


class BaseModel:
    """
    Base class for declarative models.

    Provides attribute bookkeeping for instances of classes produced by
    :class:`~modelmeta.factory.ModelClassFactory`. Iteration, ``keys()``
    and item access only expose the schema-declared attributes.
    """

    class_name: ClassVar[str]
    collection_name: ClassVar[str]
    __model_registry__: ClassVar[SchemaRegistry | None] = None

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        # Constructor properties are applied by the wrapped class
        super().__init__()

    @property
    def unproxied(self) -> RawView:
        return RawView(self)

    def get_schema(self) -> ModelSchema | None:
        return registry_of(self).get_model_schema(type(self))

    def get_attribute(self, name: str) -> Attribute | None:
        return registry_of(self).get_attribute(self, name)

    def get_attributes(self) -> list[Attribute]:
        return registry_of(self).get_attributes(self)

    def set_attribute(self, name: str, value: Any) -> bool:
        """
        Assign a declared attribute without raising.

        Returns
        -------
        bool
            False if ``name`` is not a materialised attribute or the
            attribute rejected the value
        """
        attribute = self.get_attribute(name)
        if attribute is None:
            return False
        return attribute.set(value)

    def assign(self, values: Mapping[str, Any]) -> dict[str, bool]:
        """Assign many values; declared attributes report acceptance per name."""
        results = {}
        for name, value in values.items():
            if self.get_attribute(name) is not None:
                results[name] = self.set_attribute(name, value)
            else:
                setattr(self, name, value)
                results[name] = True
        return results

    def pre_property_mixin(self, properties: dict[str, Any]) -> dict[str, Any]:
        """Hook to adjust merged constructor properties before assignment."""
        return properties

    def get_changes(self) -> dict[str, list[AttributeChange]]:
        return {
            attribute.name: list(attribute.changes)
            for attribute in self.get_attributes()
            if attribute.changes
        }

    def remove_changes(self) -> None:
        for attribute in self.get_attributes():
            attribute.remove_changes()

    @property
    def is_dirty(self) -> bool:
        return any(attribute.is_dirty for attribute in self.get_attributes())

    def keys(self) -> list[str]:
        schema = self.get_schema()
        return schema.attribute_names if schema is not None else []

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __getitem__(self, name: str) -> Any:
        if name not in self.keys():
            raise KeyError(name)
        return getattr(self, name)

    def to_dict(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in self.keys()}
