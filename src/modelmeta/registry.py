"""Schema registry: the metadata store for models and their attributes.

Holds three independent stores:

- attribute option sets accumulated by attribute name, plus the definitive
  attribute schema per declaring class
- model schemas by name and by class
- per-instance attribute objects, weakly associated with the instance

Registries are plain objects and can be created freely (one per test, one
per worker). :func:`get_default_registry` hands out the process-wide one.
"""

from __future__ import annotations

import weakref
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from loguru import logger

if TYPE_CHECKING:
    from modelmeta.attribute import Attribute
    from modelmeta.schema import AttributeSchema, ModelSchema

__all__ = ["SchemaRegistry", "get_default_registry"]


def _mro(model_type: Any) -> tuple[type, ...]:
    return getattr(model_type, "__mro__", ())


class SchemaRegistry:
    """
    Store for attribute schemas, model schemas and attribute instances.

    Examples
    --------
    >>> registry = SchemaRegistry()
    >>> registry.get_model_schema(name="Unknown") is None
    True
    """

    def __init__(self) -> None:
        self._accumulated: dict[str, list[AttributeSchema]] = {}
        self._attribute_schemas: dict[type, dict[str, AttributeSchema]] = {}
        self._model_schemas: dict[str, ModelSchema] = {}
        self._model_schemas_by_type: dict[type, ModelSchema] = {}
        # id(instance) -> (weak ref to instance, attribute name -> attribute)
        self._attributes: dict[int, tuple[weakref.ref, dict[str, Attribute]]] = {}

    # ------------------------------------------------------------------
    # Attribute schemas
    # ------------------------------------------------------------------

    def set_attribute_schema(self, model_type: type, name: str, schema: AttributeSchema) -> None:
        """Accumulate ``schema`` under ``name`` and make it definitive for ``model_type``."""
        self._accumulated.setdefault(name, []).append(schema)
        self._attribute_schemas.setdefault(model_type, {})[name] = schema
        logger.debug("Registered attribute schema {}[{}]", model_type.__name__, name)

    def get_attribute_schema(self, model_type: type, name: str) -> AttributeSchema | None:
        """Return the schema of ``name`` visible on ``model_type`` (MRO aware)."""
        for klass in _mro(model_type):
            schema = self._attribute_schemas.get(klass, {}).get(name)
            if schema is not None:
                return schema
        return None

    def get_attribute_schemas(self, model_type: type) -> list[AttributeSchema]:
        """
        Return one schema per attribute name visible on ``model_type``.

        Declarations on more derived classes replace inherited ones while
        keeping the position of the first declaration.
        """
        schemas: dict[str, AttributeSchema] = {}
        for klass in reversed(_mro(model_type)):
            schemas.update(self._attribute_schemas.get(klass, {}))
        return list(schemas.values())

    def construct_attribute_schema_params(
        self,
        name: str,
        params: dict[str, Any],
        model_type: type | None = None,
    ) -> dict[str, Any]:
        """
        Merge accumulated option sets of ``name`` with ``params``.

        Parameters
        ----------
        name : str
            Attribute name
        params : dict[str, Any]
            New options; they always win over accumulated ones
        model_type : type, optional
            Restrict the accumulated sets to those declared on classes in
            the MRO of ``model_type``. Without it every declaration of
            ``name`` contributes, in accumulation order.

        Returns
        -------
        dict[str, Any]
            Merged options
        """
        allowed = set(_mro(model_type)) if model_type is not None else None
        merged: dict[str, Any] = {}
        for schema in self._accumulated.get(name, []):
            if allowed is None or schema.model in allowed:
                merged.update(schema.parameters)
        merged.update(params)
        return merged

    # ------------------------------------------------------------------
    # Model schemas
    # ------------------------------------------------------------------

    def set_model_schema(self, model_type: type, name: str, schema: ModelSchema) -> None:
        self._model_schemas[name] = schema
        self._model_schemas_by_type[model_type] = schema
        logger.debug("Registered model schema {} ({} attributes)", name, len(schema.attribute_schemas))

    def get_model_schema(
        self,
        model_type: type | None = None,
        name: str | None = None,
    ) -> ModelSchema | None:
        """Look a model schema up by name first, then by class (MRO aware)."""
        if name is not None and name in self._model_schemas:
            return self._model_schemas[name]
        for klass in _mro(model_type):
            schema = self._model_schemas_by_type.get(klass)
            if schema is not None:
                return schema
        return None

    @property
    def model_schemas(self) -> list[ModelSchema]:
        return list(self._model_schemas.values())

    # ------------------------------------------------------------------
    # Attribute instances
    # ------------------------------------------------------------------

    def _entry(self, instance: object) -> dict[str, Attribute] | None:
        entry = self._attributes.get(id(instance))
        if entry is None or entry[0]() is not instance:
            return None
        return entry[1]

    def set_attribute(self, instance: object, name: str, attribute: Attribute) -> None:
        """
        Associate ``attribute`` with ``instance``.

        The association does not keep ``instance`` alive; it is dropped
        when the instance is garbage collected.
        """
        attributes = self._entry(instance)
        if attributes is None:
            key = id(instance)
            attributes = {}
            self._attributes[key] = (weakref.ref(instance), attributes)
            weakref.finalize(instance, self._release, key)
        attributes[name] = attribute

    def get_attribute(self, instance: object, name: str) -> Attribute | None:
        attributes = self._entry(instance)
        if attributes is None:
            return None
        return attributes.get(name)

    def get_attributes(self, instance: object) -> list[Attribute]:
        attributes = self._entry(instance)
        if attributes is None:
            return []
        return list(attributes.values())

    def has_attributes(self, instance: object) -> bool:
        return self._entry(instance) is not None

    def discard(self, instance: object) -> None:
        """Drop every attribute associated with ``instance``."""
        if self._entry(instance) is not None:
            del self._attributes[id(instance)]

    def _release(self, key: int) -> None:
        entry = self._attributes.get(key)
        # The slot may already hold a newer instance that reused the id
        if entry is not None and entry[0]() is None:
            del self._attributes[key]

    @property
    def instance_count(self) -> int:
        """Number of live instances holding attributes."""
        return len(self._attributes)


@lru_cache(maxsize=None)
def get_default_registry() -> SchemaRegistry:
    """Return the process-wide registry, creating it on first use."""
    return SchemaRegistry()
