"""
Atomic field update operations.

Update inputs accept either a bare value (shorthand for ``set``) or an
envelope such as ``{"increment": 1}``. Envelopes carry exactly one
operation and convert to one of the FieldOp variants below, which know how
to apply themselves to a current value.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union

from pydantic import AfterValidator, model_validator
from pydantic_core import PydanticCustomError
from typing_extensions import Annotated

from core.errors import FIELD_OPERATION_ERROR, ZERO_DIVISOR_ERROR
from schemas.introspection import FieldDescriptor
from schemas.primitives import value_type
from schemas.registry import FieldMap, InputModel, SchemaRegistry


NUMERIC_OPERATIONS = ("increment", "decrement", "multiply", "divide")


# ==================== Operation variants ===================== #

@dataclass(frozen=True)
class Set:
    value: Any

    def apply(self, current: Any) -> Any:
        return self.value


@dataclass(frozen=True)
class Increment:
    value: Union[int, float]

    def apply(self, current: Union[int, float]) -> Union[int, float]:
        return current + self.value


@dataclass(frozen=True)
class Decrement:
    value: Union[int, float]

    def apply(self, current: Union[int, float]) -> Union[int, float]:
        return current - self.value


@dataclass(frozen=True)
class Multiply:
    value: Union[int, float]

    def apply(self, current: Union[int, float]) -> Union[int, float]:
        return current * self.value


@dataclass(frozen=True)
class Divide:
    value: Union[int, float]

    def __post_init__(self):
        if self.value == 0:
            raise ValueError("Cannot divide by zero")

    def apply(self, current: Union[int, float]) -> Union[int, float]:
        if isinstance(current, int) and isinstance(self.value, int):
            # Integer columns stay integral, truncating toward zero
            quotient = abs(current) // abs(self.value)
            return quotient if (current < 0) == (self.value < 0) else -quotient
        return current / self.value


FieldOp = Union[Set, Increment, Decrement, Multiply, Divide]

_VARIANTS = {
    "set": Set,
    "increment": Increment,
    "decrement": Decrement,
    "multiply": Multiply,
    "divide": Divide,
}


# ==================== Envelope schemas ===================== #

class FieldUpdateOperations(InputModel):
    """Base of every ``<Type>FieldUpdateOperationsInput``."""

    @model_validator(mode="after")
    def exactly_one_operation(self):
        chosen = sorted(self.model_fields_set)
        if len(chosen) != 1:
            raise PydanticCustomError(
                FIELD_OPERATION_ERROR,
                "Exactly one update operation must be given, got {count}",
                {"count": len(chosen)},
            )
        return self

    def to_operation(self) -> FieldOp:
        (operation,) = self.model_fields_set
        return _VARIANTS[operation](getattr(self, operation))


def _non_zero(value):
    if value == 0:
        raise PydanticCustomError(ZERO_DIVISOR_ERROR, "Cannot divide by zero")
    return value


def as_operation(value: Any) -> FieldOp:
    """Convert a validated update value (bare or envelope) to a FieldOp."""
    if isinstance(value, FieldUpdateOperations):
        return value.to_operation()
    return Set(value)


def operations_name(field: FieldDescriptor) -> str:
    prefix = "Nullable" if field.nullable else ""
    return f"{prefix}{field.type_label}FieldUpdateOperationsInput"


def ensure_update_operations(registry: SchemaRegistry, field: FieldDescriptor) -> str:
    """Define (once) the update envelope for a column's type and nullability."""
    name = operations_name(field)
    # Shared by every column of the type, so `set` carries no column rules
    untyped = FieldDescriptor(
        name=field.name, kind=field.kind, nullable=field.nullable, enum=field.enum
    )

    def fields() -> FieldMap:
        value = value_type(untyped)
        operations: FieldMap = {
            "set": (Optional[value] if field.nullable else value, False)
        }
        if field.numeric:
            for operation in NUMERIC_OPERATIONS:
                operations[operation] = (value, False)
            operations["divide"] = (Annotated[value, AfterValidator(_non_zero)], False)
        return operations

    registry.define(name, fields, base=FieldUpdateOperations)
    return name

