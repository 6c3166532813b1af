"""API test fixtures: the example app on an in-memory database, via httpx.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - db_manager singleton restored after each test
"""

import pytest
from httpx import ASGITransport, AsyncClient

import docbind.infrastructure.database as db_module
from docbind.config import Settings
from docbind.infrastructure.database import DatabaseSessionManager
from docbind.main import create_app


@pytest.fixture
async def test_db():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    await manager.create_all()
    yield manager
    await manager.dispose()


@pytest.fixture
async def client(test_db):
    """App client; ASGITransport skips lifespan, so tables come from test_db."""
    original_manager = db_module.db_manager
    app = create_app(Settings(log_format="text"), db=test_db)

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    db_module.db_manager = original_manager
