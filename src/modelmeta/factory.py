"""Model class factory: wraps declared classes into attribute-tracked models.

Wrapping synthesises a subclass with one :class:`~modelmeta.model.AttributeAccessor`
per declared attribute. Instances of the wrapped class materialise one
:class:`~modelmeta.attribute.Attribute` per attribute on construction, merge
the constructor properties over the declared defaults and track every
later change.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Mapping
from functools import lru_cache
from typing import Any, TypeVar
from uuid import uuid4

from loguru import logger

from modelmeta.attribute import Attribute
from modelmeta.config import ModelMetaSettings
from modelmeta.exceptions import CompilationError
from modelmeta.extraction import declare_attributes
from modelmeta.model import AttributeAccessor, BaseModel, collect_observers
from modelmeta.registry import SchemaRegistry, get_default_registry
from modelmeta.schema import ModelSchema, TypeDescriptorResolver
from modelmeta.utils import collection_name_for

__all__ = ["ModelClassFactory", "attribute_type", "get_default_factory", "model"]

T = TypeVar("T", bound=type)

_MARKER = "__model_class__"


def _constructor_properties(args: tuple[Any, ...], kwargs: dict[str, Any]) -> dict[str, Any]:
    if len(args) == 1 and isinstance(args[0], Mapping):
        return {**args[0], **kwargs}
    return dict(kwargs)


class ModelClassFactory:
    """
    Produce wrapped model classes bound to one registry.

    Parameters
    ----------
    registry : SchemaRegistry, optional
        Registry receiving schemas and attributes, by default the
        process-wide one
    settings : ModelMetaSettings, optional
        Field names used for identifiers
    reactivity : Callable[[object], Any], optional
        Called with every new instance before its attributes are created,
        e.g. to hook it into an external observer framework
    resolver : TypeDescriptorResolver, optional
        Compiler used for attribute declarations

    Examples
    --------
    >>> from typing import Annotated
    >>> from modelmeta import Attr, BaseModel, SchemaRegistry
    >>> factory = ModelClassFactory(SchemaRegistry())
    >>> @factory.model(class_name="Example", collection_name="examples")
    ... class Example(BaseModel):
    ...     name: Annotated[str, Attr()] = "test"
    >>> Example(name="other").to_dict()
    {'name': 'other'}
    """

    def __init__(
        self,
        registry: SchemaRegistry | None = None,
        settings: ModelMetaSettings | None = None,
        reactivity: Callable[[object], Any] | None = None,
        resolver: TypeDescriptorResolver | None = None,
    ) -> None:
        self.registry = registry if registry is not None else get_default_registry()
        self.settings = settings if settings is not None else ModelMetaSettings()
        self.reactivity = reactivity
        self.resolver = resolver if resolver is not None else TypeDescriptorResolver()
        self.attribute_types: dict[str, type[Attribute]] = {}

    def attribute_type(self, name: str) -> Callable[[type[Attribute]], type[Attribute]]:
        """Register an :class:`Attribute` subclass used for every attribute called ``name``."""

        def decorator(cls: type[Attribute]) -> type[Attribute]:
            self.attribute_types[name] = cls
            return cls

        return decorator

    def model(
        self,
        cls: T | None = None,
        *,
        class_name: str | None = None,
        collection_name: str | None = None,
    ) -> Any:
        """Class decorator: declare the annotated attributes of the class, then wrap it."""

        def decorator(target: T) -> T:
            declare_attributes(target, registry=self.registry, resolver=self.resolver)
            return self.wrap(target, class_name=class_name, collection_name=collection_name)

        if cls is not None:
            return decorator(cls)
        return decorator

    def wrap(
        self,
        base: T,
        class_name: str | None = None,
        collection_name: str | None = None,
    ) -> T:
        """
        Return a subclass of ``base`` whose instances are attribute-tracked models.

        Wrapping a class this factory (or another) produced wraps its
        original base instead, so the result never stacks two wrappers.

        Parameters
        ----------
        base : type
            Class carrying the attribute declarations
        class_name : str, optional
            Public name of the model, by default the name of ``base``
        collection_name : str, optional
            Storage collection, by default derived from ``class_name``
        """
        if _MARKER in vars(base):
            logger.debug("Unwrapping {} before wrapping it again", base.__name__)
            class_name = class_name or base.class_name
            collection_name = collection_name or base.collection_name
            base = base.__model_base__
        class_name = class_name or base.__name__
        collection_name = collection_name or collection_name_for(class_name)

        names = [schema.name for schema in self.registry.get_attribute_schemas(base)]
        namespace: dict[str, Any] = {name: AttributeAccessor(name) for name in names}
        namespace.update(
            {
                _MARKER: True,
                "__model_base__": base,
                "__model_factory__": self,
                "__model_registry__": self.registry,
                "__module__": base.__module__,
                "__qualname__": class_name,
                "__doc__": base.__doc__,
                "class_name": class_name,
                "collection_name": collection_name,
            }
        )
        bases = (base,) if issubclass(base, BaseModel) else (base, BaseModel)
        wrapped = type(class_name, bases, namespace)
        wrapped.__init__ = self._make_init(wrapped)
        wrapped.__attribute_observers__ = collect_observers(wrapped)

        schema = ModelSchema.from_registry(self.registry, wrapped, class_name, collection_name)
        self.registry.set_model_schema(wrapped, class_name, schema)
        self.registry.set_model_schema(base, class_name, schema)
        logger.debug("Wrapped {} as model {} ({})", base.__name__, class_name, collection_name)
        return wrapped

    def _make_init(self, wrapped: type) -> Callable[..., None]:
        factory = self

        def __init__(instance: Any, *args: Any, **kwargs: Any) -> None:
            super(wrapped, instance).__init__(*args, **kwargs)
            # Only the most derived wrapper materialises
            outermost = next(klass for klass in type(instance).__mro__ if _MARKER in vars(klass))
            if outermost is wrapped:
                factory.materialize(instance, _constructor_properties(args, kwargs))

        __init__.__qualname__ = f"{wrapped.__qualname__}.__init__"
        return __init__

    def materialize(self, instance: Any, properties: dict[str, Any]) -> None:
        """
        Create the attributes of a freshly constructed instance and apply properties.

        Raises
        ------
        CompilationError
            If no compiled schema is registered for the instance's class
        """
        model_name = type(instance).__name__
        schema = self.registry.get_model_schema(type(instance))
        if schema is None:
            raise CompilationError(model_name, "*", "No model schema registered")

        if self.reactivity is not None:
            self.reactivity(instance)

        attributes = {}
        for name, attribute_schema in schema.attribute_schemas.items():
            if attribute_schema.compiled is None:
                raise CompilationError(model_name, name, "Missing compiled type")
            attribute_cls = self.attribute_types.get(name, Attribute)
            attributes[name] = attribute_cls(instance, name, attribute_schema)
        for name, attribute in attributes.items():
            self.registry.set_attribute(instance, name, attribute)

        merged = self.merge_properties(instance, schema, properties)
        rejected = [name for name, accepted in instance.assign(merged).items() if not accepted]
        if rejected:
            logger.warning("{} rejected initial values for {}", model_name, ", ".join(rejected))

        # Initial values of an existing record are not edits
        if properties.get(self.settings.id_field):
            instance.remove_changes()

    def merge_properties(
        self,
        instance: Any,
        schema: ModelSchema,
        properties: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Merge constructor ``properties`` over the raw defaults of ``instance``.

        Every declared attribute receives a default, None when the instance
        carries no raw value, so the following assignment initialises all of
        them. Raw values are removed from the instance so that assignment
        registers as an initial change.
        """
        raw = instance.unproxied
        defaults: dict[str, Any] = {}
        for name in schema.attribute_schemas:
            try:
                value = getattr(raw, name)
            except AttributeError:
                defaults[name] = None
                continue
            if name not in vars(instance) and isinstance(value, (list, dict, set)):
                # Class-level container defaults must not be shared
                value = copy.deepcopy(value)
            defaults[name] = value
            delattr(raw, name)

        if not properties.get(self.settings.id_field):
            defaults[self.settings.temporary_id_field] = str(uuid4())
        defaults.update(properties)
        return instance.pre_property_mixin(defaults)


@lru_cache(maxsize=None)
def get_default_factory() -> ModelClassFactory:
    """Return the factory bound to the process-wide registry."""
    return ModelClassFactory()


def model(cls: T | None = None, *, class_name: str | None = None, collection_name: str | None = None) -> Any:
    """Declare and wrap a model with the default factory."""
    return get_default_factory().model(cls, class_name=class_name, collection_name=collection_name)


def attribute_type(name: str) -> Callable[[type[Attribute]], type[Attribute]]:
    """Register an attribute variant on the default factory."""
    return get_default_factory().attribute_type(name)
