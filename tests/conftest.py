"""
Pytest configuration for the visit counter.

Provides fixtures for:
- An in-memory SQLite stand-in for the remote store
- Settings with test secrets
- A FastAPI TestClient wired to the stand-in
"""

from __future__ import annotations

import asyncio
import sqlite3
from typing import Any, AsyncIterator, Generator, Tuple

import pytest
from fastapi.testclient import TestClient

from visit_counter.config import Settings, get_settings
from visit_counter.domain.models import ResultSet
from visit_counter.infrastructure.db_factory import DatabaseConnection
from visit_counter.web.app import create_app, get_connection


class SqliteConnection(DatabaseConnection):
    """
    DatabaseConnection over stdlib sqlite3.

    Every call yields to the event loop first, so coroutines sharing the
    connection interleave between statements the way parallel requests do.
    """

    driver_errors = (sqlite3.Error,)

    def __init__(self, path: str = ":memory:", timeout_seconds: float = 5.0) -> None:
        super().__init__(timeout_seconds)
        self.conn = sqlite3.connect(path, isolation_level=None, check_same_thread=False)
        self.statements: list[str] = []
        self.closed = False

    async def _execute_batch(self, script: str) -> None:
        await asyncio.sleep(0)
        self.statements.append(script)
        self.conn.executescript(f"BEGIN;\n{script}\nCOMMIT;")

    async def _execute(self, sql: str, params: Tuple[Any, ...]) -> int:
        await asyncio.sleep(0)
        self.statements.append(sql)
        return self.conn.execute(sql, params).rowcount

    async def _query(self, sql: str, params: Tuple[Any, ...]) -> ResultSet:
        await asyncio.sleep(0)
        self.statements.append(sql)
        cur = self.conn.execute(sql, params)
        columns = [column[0] for column in cur.description or ()]
        return ResultSet.from_values(columns, cur.fetchall())

    async def _close(self) -> None:
        self.conn.close()
        self.closed = True

    def rows(self, sql: str) -> list[tuple]:
        """Synchronous peek for assertions."""
        return self.conn.execute(sql).fetchall()


class FailingSqliteConnection(SqliteConnection):
    """Raises a driver error for the first statement starting with `fail_on`."""

    def __init__(self, fail_on: str, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.fail_on = fail_on

    def _check(self, sql: str) -> None:
        if sql.lstrip().upper().startswith(self.fail_on):
            raise sqlite3.OperationalError(f"simulated failure on {self.fail_on}")

    async def _execute_batch(self, script: str) -> None:
        self._check(script)
        await super()._execute_batch(script)

    async def _execute(self, sql: str, params: Tuple[Any, ...]) -> int:
        self._check(sql)
        return await super()._execute(sql, params)

    async def _query(self, sql: str, params: Tuple[Any, ...]) -> ResultSet:
        self._check(sql)
        return await super()._query(sql, params)


@pytest.fixture
def db() -> Generator[SqliteConnection, None, None]:
    conn = SqliteConnection()
    try:
        yield conn
    finally:
        if not conn.closed:
            conn.conn.close()


@pytest.fixture
def test_settings() -> Settings:
    """
    Settings with test secrets; ignores any local .env file.
    """
    return Settings(
        _env_file=None,
        LIBSQL_CLIENT_URL="libsql://visits-test.turso.io",
        LIBSQL_CLIENT_TOKEN="test-token",
        WORKER_VERSION="1.2.3",
        LOG_LEVEL="DEBUG",
    )


def build_client(settings: Settings, conn: DatabaseConnection | None) -> TestClient:
    """
    TestClient whose requests see `settings`, and `conn` when given.

    With `conn=None` the real `get_connection` dependency runs.
    """
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings
    if conn is not None:

        async def _override_connection() -> AsyncIterator[DatabaseConnection]:
            yield conn

        app.dependency_overrides[get_connection] = _override_connection
    return TestClient(app)


@pytest.fixture
def client(test_settings: Settings, db: SqliteConnection) -> TestClient:
    return build_client(test_settings, db)


@pytest.fixture
def sqlite_factory() -> type[SqliteConnection]:
    return SqliteConnection


@pytest.fixture
def failing_db_factory() -> type[FailingSqliteConnection]:
    return FailingSqliteConnection


@pytest.fixture
def client_factory():
    return build_client
