"""
Primitive validators.

Turns one field descriptor into a pydantic annotation: the base scalar type
plus the column's rules (length, pattern, format, sign) as validators that
raise PydanticCustomError with the column's message.
"""

import re
from datetime import date, datetime, time
from typing import Any, Callable, Optional

from pydantic import AfterValidator, BeforeValidator, ValidationError, WrapValidator
from pydantic_core import PydanticCustomError
from typing_extensions import Annotated

from core.utils.validators import validate_email, validate_url, validate_uuid
from database.rules import StringFormat
from schemas.introspection import FieldDescriptor, FieldRules, ScalarKind
from schemas.json_value import JsonValue


def _to_datetime(value: Any) -> Any:
    # A bare date means midnight of that day
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    return value


# DateTime accepts datetimes, ISO strings, timestamps and plain dates
DateTimeValue = Annotated[datetime, BeforeValidator(_to_datetime)]

_BASE_TYPES = {
    ScalarKind.STRING: str,
    ScalarKind.INT: int,
    ScalarKind.FLOAT: float,
    ScalarKind.BOOLEAN: bool,
    ScalarKind.DATETIME: DateTimeValue,
}

_FORMAT_CHECKS = {
    StringFormat.UUID.value: ("invalid_uuid", validate_uuid, "Invalid uuid"),
    StringFormat.EMAIL.value: ("invalid_email", validate_email, "Invalid email"),
    StringFormat.URL.value: ("invalid_url", validate_url, "Invalid url"),
}


# ==================== Rule validators ===================== #

def min_length(limit: int, message: Optional[str] = None) -> AfterValidator:
    def check(value: str) -> str:
        if len(value) < limit:
            raise PydanticCustomError(
                "string_too_short",
                message or "String must contain at least {min_length} character(s)",
                {"min_length": limit},
            )
        return value

    return AfterValidator(check)


def max_length(limit: int, message: Optional[str] = None) -> AfterValidator:
    def check(value: str) -> str:
        if len(value) > limit:
            raise PydanticCustomError(
                "string_too_long",
                message or "String must contain at most {max_length} character(s)",
                {"max_length": limit},
            )
        return value

    return AfterValidator(check)


def matches(pattern: str, message: Optional[str] = None) -> AfterValidator:
    compiled = re.compile(pattern)

    def check(value: str) -> str:
        if not compiled.search(value):
            raise PydanticCustomError(
                "string_pattern_mismatch",
                message or "String should match pattern '{pattern}'",
                {"pattern": pattern},
            )
        return value

    return AfterValidator(check)


def string_format(name: str, message: Optional[str] = None) -> AfterValidator:
    """Check a well-known format; the value itself is never rewritten."""
    error_type, validator, fallback = _FORMAT_CHECKS[name]

    def check(value: str) -> str:
        is_valid, _ = validator(value)
        if not is_valid:
            raise PydanticCustomError(error_type, message or fallback)
        return value

    return AfterValidator(check)


def positive(message: Optional[str] = None) -> AfterValidator:
    def check(value):
        if not value > 0:
            raise PydanticCustomError(
                "not_positive", message or "Number must be greater than 0"
            )
        return value

    return AfterValidator(check)


def coercion_message(kind: ScalarKind, message: str) -> WrapValidator:
    """Replace the coercion error of a scalar with a custom message."""
    error_type = f"{kind.value.lower()}_type"

    def wrap(value: Any, handler: Callable[[Any], Any]) -> Any:
        try:
            return handler(value)
        except ValidationError as exc:
            raise PydanticCustomError(error_type, message) from exc

    return WrapValidator(wrap)


def rule_validators(kind: ScalarKind, rules: FieldRules) -> list:
    """Validators enforcing ``rules`` on a non-null value of ``kind``."""
    validators: list = []
    if rules.empty:
        return validators
    if rules.type_message:
        validators.append(coercion_message(kind, rules.type_message))
    if kind is ScalarKind.STRING:
        if rules.min_length is not None:
            validators.append(min_length(rules.min_length, rules.message))
        if rules.max_length is not None:
            validators.append(max_length(rules.max_length, rules.message))
        if rules.pattern:
            validators.append(matches(rules.pattern, rules.message))
        if rules.format:
            validators.append(string_format(rules.format, rules.message))
    if kind in (ScalarKind.INT, ScalarKind.FLOAT) and rules.positive:
        validators.append(positive(rules.message))
    return validators


# ==================== Annotations ===================== #

def base_type(field: FieldDescriptor) -> Any:
    """The unconstrained type of a non-null value (filters use this)."""
    if field.kind is ScalarKind.ENUM:
        return field.enum
    if field.kind is ScalarKind.JSON:
        return JsonValue
    return _BASE_TYPES[field.kind]


def value_type(field: FieldDescriptor) -> Any:
    """The type of a non-null value with the column's rules applied."""
    annotation = base_type(field)
    validators = rule_validators(field.kind, field.rules)
    if not validators:
        return annotation
    return Annotated[(annotation, *validators)]
