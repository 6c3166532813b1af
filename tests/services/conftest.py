"""Service test fixtures: in-memory SQLite document store + books Resource.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - The books store validates against BookSchema like the example app
"""

import pytest

from docbind.infrastructure.database import DatabaseSessionManager
from docbind.infrastructure.sql_store import SqlDocumentStore
from docbind.schemas.book import BookSchema
from docbind.services.resource import Resource


@pytest.fixture
async def db():
    manager = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    await manager.create_all()
    yield manager
    await manager.dispose()


@pytest.fixture
def store(db):
    return SqlDocumentStore(db, "books", model_name="Book", schema=BookSchema)


@pytest.fixture
def books(store):
    return Resource(store)
