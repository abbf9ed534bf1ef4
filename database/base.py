"""Declarative base and column default generators shared by all models."""

import uuid
from datetime import datetime, timezone

from sqlalchemy.orm import DeclarativeBase


# Base class for declarative models
class Base(DeclarativeBase):
    pass


def new_uuid() -> str:
    """Surrogate key generator."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    """Timestamp generator for createdAt/updatedAt columns."""
    return datetime.now(timezone.utc)
