"""
Scalar filter algebra.

Every scalar type gets a family of filter schemas generated from one
operator table: plain, ``Nullable``, ``Nested`` (the target of ``not``)
and ``WithAggregates`` (group-by ``having``). Names follow the shape, e.g.
``NestedIntNullableWithAggregatesFilter``.

Also holds the ordering enums and the pure helpers that interpret
``AND``/``OR``/``NOT`` on an already validated filter.
"""

from enum import Enum as PyEnum
from typing import Any, List, Optional, Union

from schemas.introspection import FieldDescriptor, ScalarKind
from schemas.json_value import InputJsonValue, JsonFilterValue
from schemas.primitives import base_type
from schemas.registry import FieldMap, SchemaRegistry


class QueryMode(str, PyEnum):
    DEFAULT = "default"
    INSENSITIVE = "insensitive"


class SortOrder(str, PyEnum):
    ASC = "asc"
    DESC = "desc"


class NullsOrder(str, PyEnum):
    FIRST = "first"
    LAST = "last"


LOGICAL_KEYS = ("AND", "OR", "NOT")

_STRING_OPERATORS = ("contains", "startsWith", "endsWith")
_JSON_STRING_OPERATORS = ("string_contains", "string_starts_with", "string_ends_with")
_JSON_ARRAY_OPERATORS = ("array_contains", "array_starts_with", "array_ends_with")
_RANGE_OPERATORS = ("lt", "lte", "gt", "gte")


def filter_name(
    label: str, nullable: bool = False, nested: bool = False, aggregated: bool = False
) -> str:
    return "".join((
        "Nested" if nested else "",
        label,
        "Nullable" if nullable else "",
        "WithAggregates" if aggregated else "",
        "Filter",
    ))


def define_sort_order_input(registry: SchemaRegistry) -> str:
    """``{sort, nulls}`` ordering for nullable columns."""
    registry.define(
        "SortOrderInput",
        lambda: {"sort": (SortOrder, True), "nulls": (NullsOrder, False)},
    )
    return "SortOrderInput"


# ==================== Scalar filters ===================== #

def _scalar_operators(
    registry: SchemaRegistry,
    field: FieldDescriptor,
    nullable: bool,
    nested: bool,
    aggregated: bool,
) -> FieldMap:
    value = base_type(field)
    maybe_value = Optional[value] if nullable else value
    kind = field.kind

    fields: FieldMap = {"equals": (maybe_value, False)}
    if kind is not ScalarKind.BOOLEAN:
        fields["in"] = (Optional[List[value]] if nullable else List[value], False)
        fields["notIn"] = (Optional[List[value]] if nullable else List[value], False)
    if kind in (ScalarKind.STRING, ScalarKind.INT, ScalarKind.FLOAT, ScalarKind.DATETIME):
        for operator in _RANGE_OPERATORS:
            fields[operator] = (value, False)
    if kind is ScalarKind.STRING:
        for operator in _STRING_OPERATORS:
            fields[operator] = (value, False)
        if not nested:
            fields["mode"] = (QueryMode, False)

    target = ensure_scalar_filter(
        registry, field, nullable=nullable, nested=True, aggregated=aggregated
    )
    negation = Union[value, registry.ref(target)]
    fields["not"] = (Optional[negation] if nullable else negation, False)
    return fields


def _json_operators() -> FieldMap:
    fields: FieldMap = {
        "equals": (JsonFilterValue, False),
        "path": (List[str], False),
    }
    for operator in _JSON_STRING_OPERATORS:
        fields[operator] = (str, False)
    for operator in _JSON_ARRAY_OPERATORS:
        fields[operator] = (Optional[InputJsonValue], False)
    for operator in _RANGE_OPERATORS:
        fields[operator] = (InputJsonValue, False)
    fields["not"] = (JsonFilterValue, False)
    return fields


def _aggregate_operators(
    registry: SchemaRegistry, field: FieldDescriptor, nullable: bool
) -> FieldMap:
    count_name = _ensure_count_filter(registry, nullable)
    extreme_name = ensure_scalar_filter(registry, field, nullable=nullable, nested=True)
    fields: FieldMap = {
        "_count": (registry.ref(count_name), False),
        "_min": (registry.ref(extreme_name), False),
        "_max": (registry.ref(extreme_name), False),
    }
    if field.numeric:
        average = FieldDescriptor(name="_avg", kind=ScalarKind.FLOAT, nullable=nullable)
        fields["_avg"] = (
            registry.ref(ensure_scalar_filter(registry, average, nullable=nullable, nested=True)),
            False,
        )
        fields["_sum"] = (registry.ref(extreme_name), False)
    return fields


def _ensure_count_filter(registry: SchemaRegistry, nullable: bool) -> str:
    counter = FieldDescriptor(name="_count", kind=ScalarKind.INT, nullable=False)
    # Counts are never null, but nullable columns use the nullable shape
    return ensure_scalar_filter(registry, counter, nullable=nullable, nested=True)


def ensure_scalar_filter(
    registry: SchemaRegistry,
    field: FieldDescriptor,
    nullable: Optional[bool] = None,
    nested: bool = False,
    aggregated: bool = False,
) -> str:
    """
    Define (once) the filter schema for a scalar column and every filter it
    refers to. Returns the schema name.
    """
    if nullable is None:
        nullable = field.nullable
    name = filter_name(field.type_label, nullable, nested, aggregated)
    if name in registry:
        return name

    def fields() -> FieldMap:
        if field.kind is ScalarKind.JSON:
            operators = _json_operators()
        else:
            operators = _scalar_operators(registry, field, nullable, nested, aggregated)
        if aggregated:
            operators.update(_aggregate_operators(registry, field, nullable))
        return operators

    registry.define(name, fields, doc=f"Filter on a {field.type_label} column.")
    return name


def scalar_where_value(registry: SchemaRegistry, field: FieldDescriptor, aggregated: bool = False) -> Any:
    """
    Annotation of a scalar column inside a where input: its filter, or the
    bare value as ``equals`` shorthand (JSON columns take the filter only).
    """
    filter_ref = registry.ref(ensure_scalar_filter(registry, field, aggregated=aggregated))
    if field.kind is ScalarKind.JSON:
        annotation = filter_ref
    else:
        annotation = Union[filter_ref, base_type(field)]
    return Optional[annotation] if field.nullable else annotation


# ==================== Composition helpers ===================== #

def _as_list(value: Any) -> list:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def flatten_logical(where: Optional[dict]) -> dict:
    """
    Normalize a validated where input (wire form).

    ``AND: []`` and ``AND: [f]`` dissolve, single-element ``OR`` collapses
    onto its only member, and nested ``AND`` lists are inlined. The result
    selects exactly the same rows as the input.
    """
    if not where:
        return {}

    flat: dict = {}
    conjuncts: list = []
    for key, value in where.items():
        if key == "AND":
            for item in _as_list(value):
                item = flatten_logical(item)
                if item:
                    conjuncts.append(item)
        elif key == "OR":
            branches = [flatten_logical(item) for item in _as_list(value)]
            if len(branches) == 1:
                conjuncts.append(branches[0])
            else:
                flat["OR"] = branches
        elif key == "NOT":
            negated = [flatten_logical(item) for item in _as_list(value)]
            negated = [item for item in negated if item]
            if negated:
                flat["NOT"] = negated
        else:
            flat[key] = value

    for item in conjuncts:
        for key, value in item.items():
            if key in flat and flat[key] != value:
                flat.setdefault("AND", []).append({key: value})
            else:
                flat[key] = value
    return flat


def is_empty_filter(where: Optional[dict]) -> bool:
    """True when the filter places no constraint on the rows it selects."""
    return not flatten_logical(where)
