"""
Query input schemas per entity: filters, unique lookups, ordering,
projection and the argument envelopes of every read/write operation.
"""

from typing import Any, List, Literal, Optional, Union

from pydantic import NonNegativeInt, model_validator
from pydantic_core import PydanticCustomError

from core.errors import WHERE_UNIQUE_ERROR
from schemas.filters import (
    LOGICAL_KEYS,
    SortOrder,
    define_sort_order_input,
    scalar_where_value,
)
from schemas.introspection import EntityDescriptor, ScalarKind, UniqueKey
from schemas.primitives import base_type
from schemas.registry import FieldMap, SchemaRegistry, python_name


def one_or_many(annotation: Any) -> Any:
    return Union[annotation, List[annotation]]


def compound_input_name(entity: EntityDescriptor, key: UniqueKey) -> str:
    parts = "".join(name[:1].upper() + name[1:] for name in key.fields)
    return f"{entity.name}{parts}CompoundUniqueInput"


# ==================== Where inputs ===================== #

def _logical(registry: SchemaRegistry, name: str) -> FieldMap:
    self_ref = registry.ref(name)
    return {key: (one_or_many(self_ref), False) for key in LOGICAL_KEYS}


def _relation_filters(registry: SchemaRegistry, entity: EntityDescriptor) -> FieldMap:
    fields: FieldMap = {}
    for relation in entity.relations:
        target = relation.target
        if relation.to_many:
            fields[relation.name] = (registry.ref(f"{target}ListRelationFilter"), False)
        elif relation.required:
            annotation = Union[
                registry.ref(f"{target}RelationFilter"), registry.ref(f"{target}WhereInput")
            ]
            fields[relation.name] = (annotation, False)
        else:
            annotation = Union[
                registry.ref(f"{target}NullableRelationFilter"),
                registry.ref(f"{target}WhereInput"),
            ]
            fields[relation.name] = (Optional[annotation], False)
    return fields


def _unique_selector(entity: EntityDescriptor, selectors: tuple[str, ...]):
    """After-validator requiring at least one unique key to be present."""
    attributes = tuple(python_name(name) for name in selectors)
    listed = ", ".join(selectors)

    def require_unique_selector(self):
        if any(getattr(self, attribute) is not None for attribute in attributes):
            return self
        raise PydanticCustomError(
            WHERE_UNIQUE_ERROR,
            "{entity} lookup requires at least one of: {selectors}",
            {"entity": entity.name, "selectors": listed},
        )

    return model_validator(mode="after")(require_unique_selector)


def define_where_inputs(registry: SchemaRegistry, entity: EntityDescriptor) -> None:
    name = entity.name

    def where_fields() -> FieldMap:
        fields = _logical(registry, f"{name}WhereInput")
        for field in entity.fields:
            fields[field.name] = (scalar_where_value(registry, field), False)
        fields.update(_relation_filters(registry, entity))
        return fields

    def scalar_where_fields() -> FieldMap:
        fields = _logical(registry, f"{name}ScalarWhereInput")
        for field in entity.fields:
            fields[field.name] = (scalar_where_value(registry, field), False)
        return fields

    def aggregated_where_fields() -> FieldMap:
        fields = _logical(registry, f"{name}ScalarWhereWithAggregatesInput")
        for field in entity.fields:
            fields[field.name] = (scalar_where_value(registry, field, aggregated=True), False)
        return fields

    registry.define(f"{name}WhereInput", where_fields, doc=f"Filter over {name} rows.")
    registry.define(f"{name}ScalarWhereInput", scalar_where_fields)
    registry.define(f"{name}ScalarWhereWithAggregatesInput", aggregated_where_fields)

    where = registry.ref(f"{name}WhereInput")
    registry.define(
        f"{name}RelationFilter",
        lambda: {"is": (where, False), "isNot": (where, False)},
    )
    registry.define(
        f"{name}NullableRelationFilter",
        lambda: {"is": (Optional[where], False), "isNot": (Optional[where], False)},
    )
    registry.define(
        f"{name}ListRelationFilter",
        lambda: {"every": (where, False), "some": (where, False), "none": (where, False)},
    )

    define_where_unique_input(registry, entity)


def define_where_unique_input(registry: SchemaRegistry, entity: EntityDescriptor) -> None:
    """
    ``<E>WhereUniqueInput``: the where input in which unique columns take a
    plain value and compound keys take an object of their columns. Valid only
    when at least one unique selector is present.
    """
    name = entity.name
    single = set(entity.single_unique_fields)

    for key in entity.compound_keys:
        registry.define(
            compound_input_name(entity, key),
            lambda key=key: {
                column: (base_type(entity.field(column)), True) for column in key.fields
            },
        )

    def fields() -> FieldMap:
        shape: FieldMap = {}
        for field in entity.fields:
            if field.name in single:
                plain = base_type(field)
                shape[field.name] = (Optional[plain] if field.nullable else plain, False)
        for key in entity.compound_keys:
            shape[key.name] = (registry.ref(compound_input_name(entity, key)), False)
        shape.update(_logical(registry, f"{name}WhereInput"))
        for field in entity.fields:
            if field.name not in single:
                shape[field.name] = (scalar_where_value(registry, field), False)
        shape.update(_relation_filters(registry, entity))
        return shape

    selectors = entity.single_unique_fields + tuple(key.name for key in entity.compound_keys)
    registry.define(
        f"{name}WhereUniqueInput",
        fields,
        validators={"require_unique_selector": _unique_selector(entity, selectors)},
        doc=f"Selects exactly one {name} by a unique key.",
    )


# ==================== Ordering ===================== #

def _order_value(registry: SchemaRegistry, nullable: bool) -> Any:
    if nullable:
        return Union[SortOrder, registry.ref(define_sort_order_input(registry))]
    return SortOrder


def _orderable(entity: EntityDescriptor):
    return [field for field in entity.fields if field.kind is not ScalarKind.JSON]


def define_order_by_inputs(registry: SchemaRegistry, entity: EntityDescriptor) -> None:
    name = entity.name

    def with_relation() -> FieldMap:
        fields: FieldMap = {
            field.name: (_order_value(registry, field.nullable), False)
            for field in _orderable(entity)
        }
        for relation in entity.relations:
            if relation.to_many:
                target = f"{relation.target}OrderByRelationAggregateInput"
            else:
                target = f"{relation.target}OrderByWithRelationInput"
            fields[relation.name] = (registry.ref(target), False)
        return fields

    registry.define(f"{name}OrderByWithRelationInput", with_relation)
    registry.define(
        f"{name}OrderByRelationAggregateInput", lambda: {"_count": (SortOrder, False)}
    )

    aggregates = {
        "Count": entity.fields,
        "Max": _orderable(entity),
        "Min": _orderable(entity),
    }
    if entity.numeric_fields:
        aggregates["Avg"] = entity.numeric_fields
        aggregates["Sum"] = entity.numeric_fields
    for label, columns in aggregates.items():
        registry.define(
            f"{name}{label}OrderByAggregateInput",
            lambda columns=columns: {field.name: (SortOrder, False) for field in columns},
        )

    def with_aggregation() -> FieldMap:
        fields: FieldMap = {
            field.name: (_order_value(registry, field.nullable), False)
            for field in _orderable(entity)
        }
        for label in aggregates:
            fields[f"_{label.lower()}"] = (
                registry.ref(f"{name}{label}OrderByAggregateInput"),
                False,
            )
        return fields

    registry.define(f"{name}OrderByWithAggregationInput", with_aggregation)


def define_scalar_field_enum(registry: SchemaRegistry, entity: EntityDescriptor) -> None:
    registry.define_alias(
        f"{entity.name}ScalarFieldEnum", Literal[entity.scalar_names]
    )


# ==================== Projection ===================== #

def define_projection(registry: SchemaRegistry, entity: EntityDescriptor) -> None:
    name = entity.name
    counted = entity.to_many_relations

    def relation_fields() -> FieldMap:
        fields: FieldMap = {}
        for relation in entity.relations:
            if relation.to_many:
                nested = registry.ref(f"{relation.target}FindManyArgs")
            else:
                nested = registry.ref(f"{relation.target}Args")
            fields[relation.name] = (Union[bool, nested], False)
        if counted:
            fields["_count"] = (Union[bool, registry.ref(f"{name}CountOutputTypeArgs")], False)
        return fields

    def select_fields() -> FieldMap:
        fields: FieldMap = {field.name: (bool, False) for field in entity.fields}
        fields.update(relation_fields())
        return fields

    registry.define(f"{name}Select", select_fields)
    registry.define(f"{name}Include", relation_fields)

    select = registry.ref(f"{name}Select")
    include = registry.ref(f"{name}Include")
    registry.define(
        f"{name}Args",
        lambda: {"select": (Optional[select], False), "include": (Optional[include], False)},
    )

    if counted:
        registry.define(
            f"{name}CountOutputTypeSelect",
            lambda: {relation.name: (bool, False) for relation in counted},
        )
        registry.define(
            f"{name}CountOutputTypeArgs",
            lambda: {"select": (registry.ref(f"{name}CountOutputTypeSelect"), False)},
        )

    aggregates = {
        "Count": [field.name for field in entity.fields] + ["_all"],
        "Min": [field.name for field in _orderable(entity)],
        "Max": [field.name for field in _orderable(entity)],
    }
    if entity.numeric_fields:
        aggregates["Avg"] = [field.name for field in entity.numeric_fields]
        aggregates["Sum"] = [field.name for field in entity.numeric_fields]
    for label, columns in aggregates.items():
        registry.define(
            f"{name}{label}AggregateInput",
            lambda columns=columns: {column: (bool, False) for column in columns},
        )


# ==================== Operation arguments ===================== #

def define_operation_args(registry: SchemaRegistry, entity: EntityDescriptor) -> None:
    """Argument envelopes of every operation on ``entity``."""
    name = entity.name
    ref = registry.ref

    def projection() -> FieldMap:
        return {
            "select": (Optional[ref(f"{name}Select")], False),
            "include": (Optional[ref(f"{name}Include")], False),
        }

    def listing(order_by: str) -> FieldMap:
        return {
            "where": (ref(f"{name}WhereInput"), False),
            "orderBy": (one_or_many(ref(order_by)), False),
            "cursor": (ref(f"{name}WhereUniqueInput"), False),
            "take": (int, False),
            "skip": (NonNegativeInt, False),
        }

    def aggregations() -> FieldMap:
        fields: FieldMap = {
            "_count": (Union[bool, ref(f"{name}CountAggregateInput")], False),
            "_min": (ref(f"{name}MinAggregateInput"), False),
            "_max": (ref(f"{name}MaxAggregateInput"), False),
        }
        if entity.numeric_fields:
            fields["_avg"] = (ref(f"{name}AvgAggregateInput"), False)
            fields["_sum"] = (ref(f"{name}SumAggregateInput"), False)
        return fields

    create_data = lambda: Union[ref(f"{name}CreateInput"), ref(f"{name}UncheckedCreateInput")]
    update_data = lambda: Union[ref(f"{name}UpdateInput"), ref(f"{name}UncheckedUpdateInput")]
    distinct = lambda: one_or_many(ref(f"{name}ScalarFieldEnum"))

    operations = {
        "FindUniqueArgs": lambda: {
            **projection(),
            "where": (ref(f"{name}WhereUniqueInput"), True),
        },
        "FindFirstArgs": lambda: {
            **projection(),
            **listing(f"{name}OrderByWithRelationInput"),
            "distinct": (distinct(), False),
        },
        "FindManyArgs": lambda: {
            **projection(),
            **listing(f"{name}OrderByWithRelationInput"),
            "distinct": (distinct(), False),
        },
        "CreateArgs": lambda: {**projection(), "data": (create_data(), True)},
        "CreateManyArgs": lambda: {
            "data": (one_or_many(ref(f"{name}CreateManyInput")), True),
            "skipDuplicates": (bool, False),
        },
        "UpdateArgs": lambda: {
            **projection(),
            "data": (update_data(), True),
            "where": (ref(f"{name}WhereUniqueInput"), True),
        },
        "UpdateManyArgs": lambda: {
            "data": (
                Union[
                    ref(f"{name}UpdateManyMutationInput"),
                    ref(f"{name}UncheckedUpdateManyInput"),
                ],
                True,
            ),
            "where": (ref(f"{name}WhereInput"), False),
        },
        "UpsertArgs": lambda: {
            **projection(),
            "where": (ref(f"{name}WhereUniqueInput"), True),
            "create": (create_data(), True),
            "update": (update_data(), True),
        },
        "DeleteArgs": lambda: {
            **projection(),
            "where": (ref(f"{name}WhereUniqueInput"), True),
        },
        "DeleteManyArgs": lambda: {"where": (ref(f"{name}WhereInput"), False)},
        "AggregateArgs": lambda: {
            **listing(f"{name}OrderByWithRelationInput"),
            **aggregations(),
        },
        "GroupByArgs": lambda: {
            "where": (ref(f"{name}WhereInput"), False),
            "orderBy": (one_or_many(ref(f"{name}OrderByWithAggregationInput")), False),
            "by": (distinct(), True),
            "having": (ref(f"{name}ScalarWhereWithAggregatesInput"), False),
            "take": (int, False),
            "skip": (NonNegativeInt, False),
            **aggregations(),
        },
        "CountArgs": lambda: {
            **listing(f"{name}OrderByWithRelationInput"),
            "select": (Union[bool, ref(f"{name}CountAggregateInput")], False),
        },
    }
    for suffix, fields in operations.items():
        registry.define(f"{name}{suffix}", fields)


def define_query_inputs(registry: SchemaRegistry, entity: EntityDescriptor) -> None:
    define_where_inputs(registry, entity)
    define_order_by_inputs(registry, entity)
    define_scalar_field_enum(registry, entity)
    define_projection(registry, entity)
    define_operation_args(registry, entity)
