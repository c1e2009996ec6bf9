"""
This file contains shared fixtures for the test suite.

Unit tests never talk to a server: ``aiomysql.connect`` is patched to return a
``FakeConnection`` that records every statement and replays scripted results.
"""

import os
from typing import Any, List, Optional
from unittest.mock import AsyncMock, patch

import pytest
import pytest_asyncio

# Set env vars before any application modules are imported
os.environ.setdefault("PYTHONIOENCODING", "utf-8")


class FakeCursor:
    """Minimal stand-in for ``aiomysql.Cursor`` / ``DictCursor``."""

    def __init__(self, conn: "FakeConnection", cursor_class: Optional[type]) -> None:
        self._conn = conn
        self.cursor_class = cursor_class
        self._rows: List[Any] = []
        self.lastrowid: Optional[int] = None

    async def __aenter__(self) -> "FakeCursor":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False

    async def execute(self, query: str, args: Any = None) -> int:
        self._conn.executed.append((query, args))
        if self._conn.errors:
            raise self._conn.errors.pop(0)
        self._rows = self._conn.results.pop(0) if self._conn.results else []
        self.lastrowid = self._conn.lastrowid
        return len(self._rows)

    async def fetchall(self) -> List[Any]:
        return list(self._rows)


class FakeConnection:
    """Records statements; ``results`` and ``errors`` are consumed in order."""

    def __init__(self) -> None:
        self.executed: List[tuple] = []
        self.results: List[List[dict]] = []
        self.errors: List[Exception] = []
        self.lastrowid: Optional[int] = 0
        self.closed = False
        self.cursor_classes: List[Optional[type]] = []

    def cursor(self, cursor_class: Optional[type] = None) -> FakeCursor:
        self.cursor_classes.append(cursor_class)
        return FakeCursor(self, cursor_class)

    async def ensure_closed(self) -> None:
        self.closed = True

    def close(self) -> None:
        self.closed = True

    @property
    def queries(self) -> List[str]:
        return [query for query, _ in self.executed]


@pytest.fixture
def fake_conn() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def mock_connect(fake_conn):
    """Patch ``aiomysql.connect`` to hand out ``fake_conn``."""
    with patch("sqlwrap.db.connection.aiomysql.connect", new=AsyncMock(return_value=fake_conn)) as connect:
        yield connect


@pytest.fixture
def db_settings():
    from sqlwrap.config import DatabaseSettings

    return DatabaseSettings(
        host="db.test",
        port=3307,
        user="tester",
        password="secret",
        name="inventory",
        timezone=None,
    )


@pytest_asyncio.fixture
async def database(mock_connect, db_settings):
    """An open ``Database`` backed by ``fake_conn``."""
    from sqlwrap.db.connection import Database

    db = Database(db_settings)
    await db.open()
    yield db
    await db.close()


@pytest.fixture
def wrapper(database):
    return database.wrapper()


@pytest.fixture(autouse=True)
def reset_shared_connection():
    """
    Reset the shared connection between tests to ensure isolation.
    """
    import sqlwrap.db.connection as db_conn

    setattr(db_conn, "_shared", None)
    yield
    setattr(db_conn, "_shared", None)
