"""
Error taxonomy for schema validation with security-compliant sanitization.

Validation failures are data, not control flow: validators collect every
issue into a ValidationResult. Only programmer errors (a schema graph that
cannot be assembled) raise at construction time.
"""

import re
from dataclasses import dataclass, field
from enum import Enum as PyEnum
from typing import Any, Collection, Iterable, Optional

from pydantic import ValidationError as PydanticValidationError

from core.logging import is_sensitive_field


# Patterns for sensitive data that should never leave this layer
SENSITIVE_PATTERNS = [
    re.compile(r'password["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'token["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'api[_-]?key["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'secret["\s:=]+[^"\s,}]+', re.IGNORECASE),
    re.compile(r'\b\d{3}-\d{2}-\d{4}\b'),  # SSN
]

# Custom pydantic error types raised by this package
WHERE_UNIQUE_ERROR = "where_unique"
FIELD_OPERATION_ERROR = "field_operation"
ZERO_DIVISOR_ERROR = "zero_divisor"


class IssueKind(str, PyEnum):
    """Classification of a single validation issue."""

    TYPE_MISMATCH = "type_mismatch"  # not coercible to the declared primitive
    CONSTRAINT_VIOLATION = "constraint_violation"  # right type, failed a rule
    SHAPE_VIOLATION = "shape_violation"  # missing/unknown key, no union match
    UNIQUENESS_VIOLATION = "uniqueness_violation"  # no unique key selected


SHAPE_ERROR_TYPES = frozenset({
    "missing",
    "extra_forbidden",
    "model_type",
    "model_attributes_type",
    "dict_type",
    "list_type",
    "tuple_type",
    "union_tag_invalid",
    "union_tag_not_found",
    "too_short",
    "too_long",
    "recursion_loop",
    FIELD_OPERATION_ERROR,
})

CONSTRAINT_ERROR_TYPES = frozenset({
    "string_too_short",
    "string_too_long",
    "string_pattern_mismatch",
    "greater_than",
    "greater_than_equal",
    "less_than",
    "less_than_equal",
    "enum",
    "literal_error",
    "value_error",
    "assertion_error",
    "invalid_email",
    "invalid_uuid",
    "invalid_url",
    "not_positive",
    ZERO_DIVISOR_ERROR,
})

# Labels pydantic inserts into error locations for union branches
_BRANCH_LABELS = frozenset({
    "str", "int", "float", "bool", "none", "datetime", "date", "list", "dict",
})


class SchemaDefinitionError(Exception):
    """Raised when the schema graph itself is malformed."""
    pass


class UnknownSchemaError(SchemaDefinitionError, KeyError):
    """Raised when a schema name is not registered."""
    pass


def sanitize_error_message(message: str) -> str:
    """
    Remove sensitive information from error messages.

    Args:
        message: Original error message

    Returns:
        Sanitized error message
    """
    sanitized = message
    for pattern in SENSITIVE_PATTERNS:
        sanitized = pattern.sub('[REDACTED]', sanitized)
    return sanitized


def classify_error_type(error_type: str) -> IssueKind:
    """Map a pydantic error type onto the issue taxonomy."""
    if error_type == WHERE_UNIQUE_ERROR:
        return IssueKind.UNIQUENESS_VIOLATION
    if error_type in SHAPE_ERROR_TYPES:
        return IssueKind.SHAPE_VIOLATION
    if error_type in CONSTRAINT_ERROR_TYPES:
        return IssueKind.CONSTRAINT_VIOLATION
    if error_type.endswith("_type") or "_parsing" in error_type:
        return IssueKind.TYPE_MISMATCH
    if error_type in ("int_from_float", "is_instance_of", "finite_number", "none_required"):
        return IssueKind.TYPE_MISMATCH
    return IssueKind.CONSTRAINT_VIOLATION


def _is_branch_label(part: Any, schema_names: Collection[str]) -> bool:
    if not isinstance(part, str):
        return False
    return "[" in part or part in _BRANCH_LABELS or part in schema_names


def format_location(loc: Iterable[Any], schema_names: Collection[str] = ()) -> str:
    """
    Render an error location as a dotted path.

    Union branch labels are dropped: pydantic's own tags (``str``,
    ``function-after[...]``) and the names of models or aliases in
    ``schema_names``. Every other part is a key of the input and is kept.
    """
    return ".".join(str(part) for part in loc if not _is_branch_label(part, schema_names))


@dataclass(frozen=True)
class ValidationIssue:
    """A single problem found while validating input."""

    path: str
    message: str
    kind: IssueKind
    type: str
    loc: tuple = ()
    input: Any = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize for an API response or a log line."""
        data = {
            "field": self.path,
            "message": self.message,
            "kind": self.kind.value,
            "type": self.type,
        }
        if self.input is not None:
            data["input"] = self.input
        return data


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of validating one input against one schema.

    On success ``value`` holds the validated object and ``data`` its
    normalized plain form. On failure ``issues`` lists every violation.
    """

    schema: str
    value: Any = None
    data: Any = None
    issues: tuple[ValidationIssue, ...] = field(default_factory=tuple)

    @property
    def ok(self) -> bool:
        return not self.issues

    def __bool__(self) -> bool:
        return self.ok

    def issues_at(self, path: str) -> list[ValidationIssue]:
        """Issues recorded for one field path."""
        return [issue for issue in self.issues if issue.path == path]

    def messages(self) -> dict[str, list[str]]:
        """Per-field messages, suitable for form display."""
        grouped: dict[str, list[str]] = {}
        for issue in self.issues:
            grouped.setdefault(issue.path, []).append(issue.message)
        return grouped


class SchemaValidationError(ValueError):
    """Raised by validate_or_raise when input does not satisfy a schema."""

    def __init__(self, result: ValidationResult):
        self.result = result
        self.issues = result.issues
        summary = "; ".join(
            f"{issue.path or '<root>'}: {issue.message}" for issue in result.issues[:5]
        )
        super().__init__(f"{result.schema} validation failed: {summary}")


def _safe_input(issue_path: str, value: Any) -> Optional[Any]:
    # Only echo simple, non-sensitive values
    if not isinstance(value, (str, int, float, bool)):
        return None
    if any(is_sensitive_field(part) for part in issue_path.split(".")):
        return None
    if isinstance(value, str) and any(p.search(value) for p in SENSITIVE_PATTERNS):
        return None
    return value


def issues_from_pydantic(
    exc: PydanticValidationError, schema_names: Collection[str] = ()
) -> tuple[ValidationIssue, ...]:
    """
    Convert a pydantic ValidationError into classified issues.

    Args:
        exc: The pydantic exception
        schema_names: Model and alias names that may appear as union labels

    Returns:
        De-duplicated issues in the order pydantic reported them
    """
    issues = []
    seen = set()
    for error in exc.errors(include_url=False):
        loc = tuple(error.get("loc", ()))
        path = format_location(loc, schema_names)
        error_type = error["type"]
        message = sanitize_error_message(error["msg"])
        key = (path, error_type, message)
        if key in seen:
            continue
        seen.add(key)
        issues.append(
            ValidationIssue(
                path=path,
                message=message,
                kind=classify_error_type(error_type),
                type=error_type,
                loc=loc,
                input=_safe_input(path, error.get("input")),
            )
        )
    return tuple(issues)
