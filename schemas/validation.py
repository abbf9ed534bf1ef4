"""
Validation entry points.

``validate`` is a pure function from raw input to a ValidationResult; it
never raises for bad input. ``validate_or_raise`` is the exception-based
variant for callers that prefer it.
"""

import logging
from typing import Any, Union

from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from core.config import settings
from core.errors import SchemaValidationError, ValidationResult, issues_from_pydantic
from core.logging import mask_sensitive_data
from schemas import generated
from schemas.catalog import get_registry
from schemas.json_value import JSON_SCHEMA_NAMES

logger = logging.getLogger(__name__)


SchemaRef = Union[str, type, TypeAdapter, Any]


def _resolve(schema: SchemaRef) -> tuple[str, Any, frozenset]:
    """Return (display name, model class or TypeAdapter, union labels)."""
    if isinstance(schema, str):
        registry = get_registry()
        target = registry.get(schema)
        if not (isinstance(target, type) and issubclass(target, BaseModel)):
            target = registry.adapter(schema)
        return schema, target, registry.name_set() | JSON_SCHEMA_NAMES
    if isinstance(schema, type) and issubclass(schema, BaseModel):
        labels = JSON_SCHEMA_NAMES
        if schema.__module__ == generated.__name__:
            labels = get_registry().name_set() | JSON_SCHEMA_NAMES
        return schema.__name__, schema, labels
    if isinstance(schema, TypeAdapter):
        return "TypeAdapter", schema, JSON_SCHEMA_NAMES
    return getattr(schema, "__name__", repr(schema)), TypeAdapter(schema), JSON_SCHEMA_NAMES


def validate(schema: SchemaRef, data: Any) -> ValidationResult:
    """
    Validate ``data`` against a schema (name, model class, TypeAdapter or
    annotation).

    Returns:
        ValidationResult with the validated value and its normalized wire
        form (aliases, only the keys that were set or synthesized), or with
        every issue found.
    """
    name, target, labels = _resolve(schema)
    try:
        if isinstance(target, TypeAdapter):
            value = target.validate_python(data)
            normalized = value
        else:
            value = target.model_validate(data)
            normalized = value.model_dump(by_alias=True, exclude_unset=True)
    except PydanticValidationError as e:
        issues = issues_from_pydantic(e, labels)
        if settings.log_validation_failures:
            logger.info(
                f"Validation failed for {name}: {len(issues)} issue(s)",
                extra={
                    "schema": name,
                    "issue_count": len(issues),
                    "issues": mask_sensitive_data([issue.to_dict() for issue in issues]),
                    "input": mask_sensitive_data(data),
                },
            )
        return ValidationResult(schema=name, issues=issues)

    logger.debug(f"Validated {name}", extra={"schema": name})
    return ValidationResult(schema=name, value=value, data=normalized)


def validate_or_raise(schema: SchemaRef, data: Any) -> Any:
    """
    Validate and return the validated value.

    Raises:
        SchemaValidationError: carrying every issue, if ``data`` is invalid.
    """
    result = validate(schema, data)
    if not result.ok:
        raise SchemaValidationError(result)
    return result.value
