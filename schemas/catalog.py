"""
Process-wide schema catalog.

The registry is derived from ``database.models`` once, lazily, under a lock,
and is read-only afterwards. Lookups go by schema name
(``get_schema("UserWhereUniqueInput")``) or by entity and variant
(``schema_for("User", SchemaVariant.WHERE_UNIQUE)``).
"""

import itertools
import logging
import threading
import time
from enum import Enum as PyEnum
from types import ModuleType
from typing import Any, Iterable, Optional

from core.config import settings
from core.errors import UnknownSchemaError
from database.models import ENTITY_MODELS
from schemas import generated
from schemas.entities import define_entity_shapes
from schemas.filters import define_sort_order_input
from schemas.introspection import describe_models
from schemas.mutations import define_mutation_inputs
from schemas.queries import define_query_inputs
from schemas.registry import SchemaRegistry, namespace_module

logger = logging.getLogger(__name__)


class SchemaVariant(str, PyEnum):
    """Per-entity schema kinds; values are name templates."""

    BASE = "{entity}"
    PARTIAL = "{entity}Partial"
    OPTIONAL_DEFAULTS = "{entity}OptionalDefaults"
    WITH_RELATIONS = "{entity}WithRelations"
    OPTIONAL_DEFAULTS_WITH_RELATIONS = "{entity}OptionalDefaultsWithRelations"
    PARTIAL_WITH_RELATIONS = "{entity}PartialWithRelations"
    OPTIONAL_DEFAULTS_WITH_PARTIAL_RELATIONS = "{entity}OptionalDefaultsWithPartialRelations"
    WITH_PARTIAL_RELATIONS = "{entity}WithPartialRelations"

    WHERE = "{entity}WhereInput"
    WHERE_UNIQUE = "{entity}WhereUniqueInput"
    SCALAR_WHERE = "{entity}ScalarWhereInput"
    SCALAR_WHERE_WITH_AGGREGATES = "{entity}ScalarWhereWithAggregatesInput"
    ORDER_BY = "{entity}OrderByWithRelationInput"
    ORDER_BY_WITH_AGGREGATION = "{entity}OrderByWithAggregationInput"
    SCALAR_FIELD_ENUM = "{entity}ScalarFieldEnum"
    SELECT = "{entity}Select"
    INCLUDE = "{entity}Include"
    ARGS = "{entity}Args"

    CREATE = "{entity}CreateInput"
    UNCHECKED_CREATE = "{entity}UncheckedCreateInput"
    UPDATE = "{entity}UpdateInput"
    UNCHECKED_UPDATE = "{entity}UncheckedUpdateInput"
    CREATE_MANY = "{entity}CreateManyInput"
    UPDATE_MANY_MUTATION = "{entity}UpdateManyMutationInput"
    UNCHECKED_UPDATE_MANY = "{entity}UncheckedUpdateManyInput"

    FIND_UNIQUE_ARGS = "{entity}FindUniqueArgs"
    FIND_FIRST_ARGS = "{entity}FindFirstArgs"
    FIND_MANY_ARGS = "{entity}FindManyArgs"
    CREATE_ARGS = "{entity}CreateArgs"
    CREATE_MANY_ARGS = "{entity}CreateManyArgs"
    UPDATE_ARGS = "{entity}UpdateArgs"
    UPDATE_MANY_ARGS = "{entity}UpdateManyArgs"
    UPSERT_ARGS = "{entity}UpsertArgs"
    DELETE_ARGS = "{entity}DeleteArgs"
    DELETE_MANY_ARGS = "{entity}DeleteManyArgs"
    AGGREGATE_ARGS = "{entity}AggregateArgs"
    GROUP_BY_ARGS = "{entity}GroupByArgs"
    COUNT_ARGS = "{entity}CountArgs"

    def schema_name(self, entity: str) -> str:
        return self.value.format(entity=entity)


_registry: Optional[SchemaRegistry] = None
_lock = threading.Lock()
_scratch_ids = itertools.count(1)


def build_registry(
    models: Iterable[type] = ENTITY_MODELS,
    warmup: Iterable[str] = (),
    namespace: Optional[ModuleType] = None,
) -> SchemaRegistry:
    """
    Derive every schema from the mapped ``models``.

    Models are published into ``namespace``. Without one, a fresh module is
    created so the build cannot rebind the forward references of the
    process-wide registry in ``schemas.generated``.
    """
    started = time.perf_counter()
    entities = describe_models(models)

    if namespace is None:
        namespace = namespace_module(f"{generated.__name__}_{next(_scratch_ids)}")
    registry = SchemaRegistry(namespace)
    registry.entities = entities
    define_sort_order_input(registry)
    for entity in entities.values():
        define_entity_shapes(registry, entity)
        define_query_inputs(registry, entity)
        define_mutation_inputs(registry, entity, entities)
    registry.wire(warmup)

    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.info(f"Built schema registry in {elapsed_ms:.0f}ms")
    return registry


def get_registry() -> SchemaRegistry:
    """The process-wide registry, built on first call."""
    global _registry
    if _registry is None:
        with _lock:
            if _registry is None:
                _registry = build_registry(warmup=settings.schema_warmup, namespace=generated)
    return _registry


def get_schema(name: str) -> Any:
    """
    Look up a schema by name.

    Raises:
        UnknownSchemaError: if no schema has that name.
    """
    return get_registry().get(name)


def schema_for(entity: str, variant: SchemaVariant) -> Any:
    """Look up one variant of an entity's schemas."""
    registry = get_registry()
    if entity not in registry.entities:
        raise UnknownSchemaError(f"Unknown entity: {entity}")
    return registry.get(SchemaVariant(variant).schema_name(entity))
