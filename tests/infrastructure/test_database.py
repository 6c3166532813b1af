"""Database Session Manager: tests for error mapping and health checks.

Tests cover:
    - SQLAlchemy errors inside a session surface as StoreFailureError
    - DocbindError passes through unchanged
    - health_check reports connectivity
"""

import pytest
from sqlalchemy import text

from docbind.core.errors import NotFoundError, StoreFailureError


async def test_sqlalchemy_error_maps_to_store_failure(db):
    with pytest.raises(StoreFailureError):
        async with db.session() as session:
            await session.execute(text("SELECT * FROM no_such_table"))


async def test_docbind_error_passes_through(db):
    with pytest.raises(NotFoundError):
        async with db.session():
            raise NotFoundError("Book", "abc")


async def test_health_check(db):
    assert await db.health_check() is True
