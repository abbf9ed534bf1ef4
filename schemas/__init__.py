"""
Runtime validators and query-input schemas derived from database.models.

Usage:
    from schemas import validate, get_schema

    result = validate("UserWhereUniqueInput", {"email": "jane@acme.io"})
    if not result:
        return result.messages()
"""

from schemas.catalog import SchemaVariant, build_registry, get_registry, get_schema, schema_for
from schemas.filters import NullsOrder, QueryMode, SortOrder, flatten_logical, is_empty_filter
from schemas.json_value import (
    AnyNull,
    DbNull,
    InputJsonValue,
    JsonNull,
    JsonNullValueFilter,
    JsonNullValueInput,
    JsonValue,
    NullableJsonNullValueInput,
    NullableJsonValue,
    NullMarker,
    SupportsJson,
)
from schemas.mutations import foreign_key_assignments
from schemas.operations import Decrement, Divide, FieldOp, Increment, Multiply, Set, as_operation
from schemas.validation import validate, validate_or_raise

__all__ = [
    "SchemaVariant",
    "build_registry",
    "get_registry",
    "get_schema",
    "schema_for",
    "NullsOrder",
    "QueryMode",
    "SortOrder",
    "flatten_logical",
    "is_empty_filter",
    "AnyNull",
    "DbNull",
    "InputJsonValue",
    "JsonNull",
    "JsonNullValueFilter",
    "JsonNullValueInput",
    "JsonValue",
    "NullableJsonNullValueInput",
    "NullableJsonValue",
    "NullMarker",
    "SupportsJson",
    "foreign_key_assignments",
    "Decrement",
    "Divide",
    "FieldOp",
    "Increment",
    "Multiply",
    "Set",
    "as_operation",
    "validate",
    "validate_or_raise",
]
