"""
Database connection factory for the visit counter.

Defines the async connection contract the recorder and orchestrator talk to,
and two implementations chosen by the URL scheme of LIBSQL_CLIENT_URL:

- libSQL / Turso (`libsql://`, `https://`, `wss://`, `file:` ...) through
  libsql-client.
- PostgreSQL (`postgresql://`) through psycopg's async connection, with the
  token used as the password.

Every call, connecting included, is bounded by the configured timeout, and
driver failures are re-raised as PersistenceError carrying the driver's
message. Connections are opened per request; no pooling happens here.
"""

from __future__ import annotations

import abc
import asyncio
from typing import Any, Awaitable, Sequence, Tuple, Type, TypeVar
from urllib.parse import urlsplit

import aiohttp
import libsql_client
import psycopg
from psycopg import AsyncConnection
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from visit_counter.config import Settings, get_settings
from visit_counter.domain.models import ResultSet
from visit_counter.errors import ConfigurationError, PersistenceError
from visit_counter.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

LIBSQL_SCHEMES = frozenset({"libsql", "http", "https", "ws", "wss", "file"})
POSTGRES_SCHEMES = frozenset({"postgres", "postgresql"})


def split_statements(script: str) -> list[str]:
    """Split a `;`-separated script into individual statements."""
    return [statement.strip() for statement in script.split(";") if statement.strip()]


def qmark_to_pyformat(sql: str) -> str:
    """Rewrite `?` placeholders as psycopg's `%s`."""
    return sql.replace("%", "%%").replace("?", "%s")


class DatabaseConnection(abc.ABC):
    """
    Async connection contract used by the recorder and the orchestrator.

    Subclasses implement the `_execute_batch`, `_execute`, `_query` and
    `_close` hooks and list their driver exception types in `driver_errors`.
    """

    driver_errors: Tuple[Type[BaseException], ...] = ()

    def __init__(self, timeout_seconds: float = 10.0) -> None:
        self.timeout_seconds = timeout_seconds

    async def _guard(self, operation: str, awaitable: Awaitable[T]) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise PersistenceError(
                f"{operation} timed out after {self.timeout_seconds:g}s"
            ) from exc
        except PersistenceError:
            raise
        except self.driver_errors as exc:
            raise PersistenceError(str(exc) or type(exc).__name__) from exc

    async def execute_batch(self, script: str) -> None:
        """Run every statement of `script` atomically."""
        await self._guard("batch", self._execute_batch(script))

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run one parameterized statement; returns the affected row count."""
        return await self._guard("execute", self._execute(sql, tuple(params)))

    async def query(self, sql: str, params: Sequence[Any] = ()) -> ResultSet:
        """Run one parameterized query and return its rows."""
        return await self._guard("query", self._query(sql, tuple(params)))

    async def close(self) -> None:
        await self._guard("close", self._close())

    @abc.abstractmethod
    async def _execute_batch(self, script: str) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def _execute(self, sql: str, params: Tuple[Any, ...]) -> int:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    async def _query(self, sql: str, params: Tuple[Any, ...]) -> ResultSet:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    async def _close(self) -> None:  # pragma: no cover - interface only
        raise NotImplementedError


class LibsqlConnection(DatabaseConnection):
    """
    libSQL / Turso connection over libsql-client.

    `client.batch` runs its statements inside one transaction, which is what
    makes `execute_batch` atomic.
    """

    # aiohttp errors surface from the HTTP and WebSocket transports, e.g. a
    # rejected token fails the hrana handshake with a 401.
    driver_errors = (libsql_client.LibsqlError, aiohttp.ClientError, OSError)

    def __init__(self, client: Any, timeout_seconds: float = 10.0) -> None:
        super().__init__(timeout_seconds)
        self._client = client

    @classmethod
    def open(cls, url: str, token: str, timeout_seconds: float = 10.0) -> "LibsqlConnection":
        try:
            client = libsql_client.create_client(url, auth_token=token)
        except (libsql_client.LibsqlError, ValueError) as exc:
            raise ConfigurationError(f"invalid LIBSQL_CLIENT_URL: {exc}") from exc
        return cls(client, timeout_seconds)

    async def _execute_batch(self, script: str) -> None:
        await self._client.batch(split_statements(script))

    async def _execute(self, sql: str, params: Tuple[Any, ...]) -> int:
        result = await self._client.execute(sql, list(params))
        return result.rows_affected

    async def _query(self, sql: str, params: Tuple[Any, ...]) -> ResultSet:
        result = await self._client.execute(sql, list(params))
        width = len(result.columns)
        rows = (tuple(row[index] for index in range(width)) for row in result.rows)
        return ResultSet.from_values(result.columns, rows)

    async def _close(self) -> None:
        await self._client.close()


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type(psycopg.OperationalError),
    reraise=True,
)
async def _connect_postgres(url: str, token: str) -> AsyncConnection:
    """
    Open an autocommit psycopg connection, retrying transient failures.

    Retries up to 3 times with exponential backoff.
    """
    return await AsyncConnection.connect(url, password=token, autocommit=True)


class PostgresConnection(DatabaseConnection):
    """
    PostgreSQL connection over psycopg's async API.

    Statements use `?` placeholders like libSQL and are rewritten for psycopg.
    """

    driver_errors = (psycopg.Error, OSError)

    def __init__(self, conn: AsyncConnection, timeout_seconds: float = 10.0) -> None:
        super().__init__(timeout_seconds)
        self._conn = conn

    @classmethod
    async def open(
        cls, url: str, token: str, timeout_seconds: float = 10.0
    ) -> "PostgresConnection":
        try:
            conn = await asyncio.wait_for(_connect_postgres(url, token), timeout=timeout_seconds)
        except asyncio.TimeoutError as exc:
            raise PersistenceError(f"connect timed out after {timeout_seconds:g}s") from exc
        except (psycopg.Error, OSError) as exc:
            raise PersistenceError(str(exc)) from exc
        return cls(conn, timeout_seconds)

    async def _execute_batch(self, script: str) -> None:
        async with self._conn.transaction():
            await self._conn.execute(script)

    async def _execute(self, sql: str, params: Tuple[Any, ...]) -> int:
        cur = await self._conn.execute(qmark_to_pyformat(sql), params)
        return cur.rowcount

    async def _query(self, sql: str, params: Tuple[Any, ...]) -> ResultSet:
        cur = await self._conn.execute(qmark_to_pyformat(sql), params)
        columns = [column.name for column in cur.description or ()]
        rows = await cur.fetchall()
        return ResultSet.from_values(columns, rows)

    async def _close(self) -> None:
        await self._conn.close()


async def open_connection(settings: Settings | None = None) -> DatabaseConnection:
    """
    Open a connection to the configured store.

    Raises
    ------
    ConfigurationError
        If a secret is missing or the URL scheme is not supported. Raised
        before any network traffic.
    PersistenceError
        If the store cannot be reached.
    """
    settings = settings or get_settings()
    url, token = settings.database_credentials()
    scheme = urlsplit(url).scheme.lower()
    timeout = settings.db_timeout_seconds

    if scheme in LIBSQL_SCHEMES:
        log.debug("Opening libSQL connection", extra={"scheme": scheme})
        return LibsqlConnection.open(url, token, timeout)
    if scheme in POSTGRES_SCHEMES:
        log.debug("Opening PostgreSQL connection", extra={"scheme": scheme})
        return await PostgresConnection.open(url, token, timeout)
    raise ConfigurationError(f"unsupported database URL scheme: {scheme or url!r}")


__all__ = [
    "DatabaseConnection",
    "LibsqlConnection",
    "PostgresConnection",
    "open_connection",
    "split_statements",
    "qmark_to_pyformat",
]
