"""
Field-level validation rules attached to columns.

Rules live in the column ``info`` mapping under the ``"validation"`` key,
next to any other column metadata. The schema layer reads them when it
derives validators from the mappers; the database never sees them.
"""

from enum import Enum as PyEnum
from typing import Any, Dict, Optional


VALIDATION_INFO_KEY = "validation"


class StringFormat(str, PyEnum):
    """Well-known string formats."""

    UUID = "uuid"
    EMAIL = "email"
    URL = "url"


def field_rules(
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
    pattern: Optional[str] = None,
    format: Optional[StringFormat] = None,
    positive: bool = False,
    message: Optional[str] = None,
    type_message: Optional[str] = None,
    **kwargs,
) -> Dict[str, Any]:
    """
    Mark a column with validation rules.

    - min_length / max_length: string length bounds.
    - pattern: regular expression the full value must match.
    - format: one of StringFormat.
    - positive: numbers must be strictly greater than zero.
    - message: human-readable message reported for any rule violation.
    - type_message: message reported when the value cannot be coerced.

    Usage:
        phone: Mapped[str] = mapped_column(
            String(20),
            unique=True,
            info=field_rules(pattern=PHONE_PATTERN, message="Phone number is invalid"),
        )
    """
    return {
        VALIDATION_INFO_KEY: {
            "min_length": min_length,
            "max_length": max_length,
            "pattern": pattern,
            "format": format.value if format else None,
            "positive": positive,
            "message": message,
            "type_message": type_message,
        },
        **kwargs,
    }


def uuid_key() -> Dict[str, Any]:
    """Rules for surrogate primary keys."""
    return field_rules(format=StringFormat.UUID)
