"""
Recursive JSON value schemas and the null sentinels of JSON columns.

A JSON column distinguishes two kinds of null: the column itself being SQL
NULL (``DbNull``) and the column holding the JSON literal ``null``
(``JsonNull``). Filters may also match either (``AnyNull``). Clients send
the sentinel names as strings; validation turns them into ``NullMarker``
members so they can never be confused with a stored string.
"""

from enum import Enum as PyEnum
from typing import Any, Dict, List, Literal, Optional, Protocol, Union, runtime_checkable

from pydantic import AfterValidator, Field, InstanceOf, TypeAdapter
from pydantic_core import PydanticCustomError
from typing_extensions import Annotated, TypeAliasType


class NullMarker(PyEnum):
    """Typed stand-ins for the two nulls of a JSON column."""

    DB_NULL = "DbNull"
    JSON_NULL = "JsonNull"
    ANY_NULL = "AnyNull"

    def __repr__(self) -> str:
        return self.value


DbNull = NullMarker.DB_NULL
JsonNull = NullMarker.JSON_NULL
AnyNull = NullMarker.ANY_NULL


@runtime_checkable
class SupportsJson(Protocol):
    """Any object that can render itself as JSON. Accepted as-is on writes."""

    def to_json(self) -> Any:
        ...


# The alias body is a string so the self-reference is resolved lazily,
# against this module, each time a schema containing it is compiled.
JsonValue = TypeAliasType(
    "JsonValue",
    "Union[str, int, float, bool, None, Dict[str, JsonValue], List[JsonValue]]",
)

InputJsonValue = TypeAliasType(
    "InputJsonValue",
    "Union[str, int, float, bool, InstanceOf[SupportsJson], "
    "Dict[str, Optional[InputJsonValue]], List[Optional[InputJsonValue]]]",
)


def _nullable_json(value: Any) -> Any:
    if value is None or value == DbNull.value:
        return DbNull
    if value == JsonNull.value:
        return JsonNull
    return value


NullableJsonValue = Annotated[
    Union[InstanceOf[NullMarker], JsonValue], AfterValidator(_nullable_json)
]


def _sentinel(mapping: Dict[str, NullMarker]) -> Any:
    """Annotation accepting the given sentinel names (or their markers)."""
    allowed = set(mapping.values())
    expected = " or ".join(repr(name) for name in mapping)

    def convert(value: Any) -> NullMarker:
        if isinstance(value, NullMarker):
            if value not in allowed:
                raise PydanticCustomError(
                    "literal_error", "Input should be {expected}", {"expected": expected}
                )
            return value
        return mapping[value]

    return Annotated[
        Union[InstanceOf[NullMarker], Literal[tuple(mapping)]],
        AfterValidator(convert),
    ]


NullableJsonNullValueInput = _sentinel({"DbNull": DbNull, "JsonNull": JsonNull})
JsonNullValueInput = _sentinel({"JsonNull": JsonNull})
# "DbNull" collapses onto JsonNull in filters; stored filters depend on it
JsonNullValueFilter = _sentinel({
    "DbNull": JsonNull,
    "JsonNull": JsonNull,
    "AnyNull": AnyNull,
})


def json_write_value(nullable: bool) -> Any:
    """Annotation of a JSON column in create/update inputs."""
    sentinel = NullableJsonNullValueInput if nullable else JsonNullValueInput
    return Annotated[Union[sentinel, InputJsonValue], Field(union_mode="left_to_right")]


# Sentinel first: "JsonNull" is also a valid JSON string
JsonFilterValue = Annotated[
    Union[JsonNullValueFilter, InputJsonValue], Field(union_mode="left_to_right")
]


# Alias names pydantic may use as union labels in error locations
JSON_SCHEMA_NAMES = frozenset({"JsonValue", "InputJsonValue"})

json_value_adapter = TypeAdapter(JsonValue)
nullable_json_value_adapter = TypeAdapter(NullableJsonValue)
input_json_value_adapter = TypeAdapter(InputJsonValue)


def is_null_marker(value: Any) -> bool:
    return isinstance(value, NullMarker)
