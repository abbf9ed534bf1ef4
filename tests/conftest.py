"""Shared fixtures and utilities for tests."""

import logging
import os
import uuid
from datetime import datetime, timezone

import pytest


# Settings are read at import time, so the environment is prepared before
# any project module is imported.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("JSON_LOGS", "false")
os.environ.setdefault("LOG_VALIDATION_FAILURES", "true")


@pytest.fixture(scope="session")
def registry():
    """The process-wide schema registry."""
    from schemas import get_registry

    return get_registry()


@pytest.fixture(scope="session")
def entities(registry):
    """Entity descriptors keyed by name."""
    return registry.entities


@pytest.fixture
def new_id():
    """Factory of fresh uuid strings."""
    return lambda: str(uuid.uuid4())


@pytest.fixture
def user_payload():
    """A complete, valid User row."""
    now = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    return {
        "id": "3f2b8c1e-9a4d-4c7e-8b1f-2d6e5a7c9b0d",
        "name": "Jane Doe",
        "email": "jane.doe@acme.io",
        "phone": "+14155550123",
        "password": "s3cretpw",
        "role": "ADMIN",
        "emailVerified": True,
        "phoneVerified": False,
        "clientId": None,
        "createdAt": now,
        "updatedAt": now,
    }


@pytest.fixture
def candidate_create_payload():
    """Minimal valid candidate create (checked) input."""
    return {
        "name": "Ada Lovelace",
        "email": "ada@acme.io",
        "phone": "+441234567890",
        "age": 30,
        "resumeId": "7d3c1a2b-5e6f-4a8b-9c0d-1e2f3a4b5c6d",
    }


@pytest.fixture
def restore_root_logger():
    """Put the root logger back the way the test runner configured it."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
