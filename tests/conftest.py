"""Shared test fixtures."""

from __future__ import annotations

import pytest

from healthserver.engine import Check
from healthserver.errors import CheckError


def _ok() -> None:
    return None


def _fail() -> None:
    raise CheckError("test-error")


@pytest.fixture
def passing() -> Check:
    """Check named A that always passes."""
    return Check(name="A", func=_ok)


@pytest.fixture
def failing() -> Check:
    """Check named B that always fails with 'test-error'."""
    return Check(name="B", func=_fail)
