"""Infrastructure test fixtures: a fresh in-memory SQLite session manager per test."""

import pytest

from docbind.infrastructure.database import DatabaseSessionManager


@pytest.fixture
async def db():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    await manager.create_all()
    yield manager
    await manager.dispose()
