"""Validation utilities for common data types."""

import re
import uuid
from typing import Optional
from email_validator import validate_email as _validate_email, EmailNotValidError


PHONE_PATTERN = r'^\+?[1-9]\d{9,14}$'

_URL_PATTERN = re.compile(
    r'^[a-z][a-z0-9+.-]*://'  # scheme
    r'(?:[^\s:@/]+(?::[^\s@/]*)?@)?'  # optional userinfo
    r'(?:(?:[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?\.)*[A-Z0-9](?:[A-Z0-9-]{0,61}[A-Z0-9])?|'  # host
    r'\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}|'  # ...or ipv4
    r'\[[0-9a-f:.]+\])'  # ...or ipv6
    r'(?::\d+)?'  # optional port
    r'(?:[/?#]\S*)?$', re.IGNORECASE
)


def validate_email(email: str) -> tuple[bool, Optional[str]]:
    """
    Validate email address format.

    Args:
        email: Email address to validate

    Returns:
        Tuple of (is_valid, normalized_email or error_message)
    """
    try:
        validation = _validate_email(email, check_deliverability=False)
        return True, validation.normalized
    except EmailNotValidError as e:
        return False, str(e)


def validate_url(url: str) -> tuple[bool, Optional[str]]:
    """
    Validate URL format.

    Args:
        url: URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url:
        return False, "URL is required"

    if not _URL_PATTERN.match(url):
        return False, "Invalid URL format"

    return True, None


def validate_uuid(value: str) -> tuple[bool, Optional[str]]:
    """
    Validate that a string is a canonical hyphenated UUID.

    Args:
        value: Candidate UUID string

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        parsed = uuid.UUID(value)
    except (ValueError, AttributeError, TypeError):
        return False, "Invalid uuid"

    if str(parsed) != value.lower():
        return False, "Invalid uuid"

    return True, None
