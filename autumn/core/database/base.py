"""
Autumn Moderation Bot - Database Base Module
============================================

Storage backends, transactions, and the base class every mixin builds on.

DESIGN:
    Queries are written once, with ``?`` placeholders, and run unchanged on
    both SQLite (aiosqlite) and PostgreSQL (asyncpg). The Postgres backend
    rewrites placeholders to ``$n`` before sending them.

    Rows always come back as plain dicts so mixins never depend on
    aiosqlite.Row or asyncpg.Record.

    SQLite has a single writer. One aiosqlite connection is shared and
    every statement goes through one asyncio lock, so a transaction
    (BEGIN IMMEDIATE ... COMMIT) never interleaves with another task's
    statements. Postgres uses a connection pool; per-guild ordering is
    enforced with ``pg_advisory_xact_lock`` inside the transaction.

    Every backend error is re-raised as StorageError with the original
    exception chained.
"""

import asyncio
import sqlite3
import time
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Dict, List, Optional, Sequence

import aiosqlite
import asyncpg

from autumn.core.logger import logger


# =============================================================================
# Constants
# =============================================================================

SQLITE_PRAGMAS = [
    "PRAGMA journal_mode=WAL",
    "PRAGMA synchronous=NORMAL",
    "PRAGMA cache_size=-64000",
    "PRAGMA temp_store=MEMORY",
    "PRAGMA foreign_keys=ON",
    "PRAGMA busy_timeout=5000",
]

BACKEND_ERRORS = (
    sqlite3.Error,
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    OSError,
)
"""Exceptions translated into StorageError at the backend boundary."""

Row = Dict[str, Any]


# =============================================================================
# Errors
# =============================================================================

class StorageError(Exception):
    """
    Raised when the persistent store fails.

    Covers connectivity problems, constraint violations, and serialization
    failures. The backend exception is available as ``__cause__``.
    """

    pass


@asynccontextmanager
async def _translate_errors(operation: str) -> AsyncIterator[None]:
    try:
        yield
    except StorageError:
        raise
    except BACKEND_ERRORS as e:
        raise StorageError(f"{operation} failed: {e}") from e


def _to_pg_placeholders(query: str) -> str:
    """
    Rewrite ``?`` placeholders to ``$1, $2, ...``.

    Question marks inside single-quoted string literals are left alone.
    """
    out = []
    index = 0
    in_literal = False
    for ch in query:
        if ch == "'":
            in_literal = not in_literal
            out.append(ch)
        elif ch == "?" and not in_literal:
            index += 1
            out.append(f"${index}")
        else:
            out.append(ch)
    return "".join(out)


def _rowcount_from_status(status: str) -> int:
    """asyncpg returns e.g. 'DELETE 3'; pull out the trailing count."""
    tail = status.rsplit(" ", 1)[-1] if status else ""
    return int(tail) if tail.isdigit() else 0


# =============================================================================
# Transactions
# =============================================================================

class Transaction:
    """
    Query interface bound to one open transaction.

    Obtained from ``DatabaseBackend.transaction()``; never constructed
    directly by callers.

    Attributes:
        for_update: Clause to append to a SELECT that must lock its rows.
    """

    for_update: str = ""

    async def execute(self, query: str, params: Sequence[Any] = ()) -> int:
        raise NotImplementedError

    async def fetchone(self, query: str, params: Sequence[Any] = ()) -> Optional[Row]:
        raise NotImplementedError

    async def fetchall(self, query: str, params: Sequence[Any] = ()) -> List[Row]:
        raise NotImplementedError

    async def fetchval(self, query: str, params: Sequence[Any] = ()) -> Any:
        row = await self.fetchone(query, params)
        if row is None:
            return None
        return next(iter(row.values()))

    async def advisory_lock(self, key: int) -> None:
        """Hold an exclusive lock on ``key`` until the transaction ends."""
        raise NotImplementedError


class SQLiteTransaction(Transaction):
    """Transaction on the shared aiosqlite connection."""

    def __init__(self, conn: aiosqlite.Connection):
        self._conn = conn

    async def execute(self, query: str, params: Sequence[Any] = ()) -> int:
        async with _translate_errors("execute"):
            cursor = await self._conn.execute(query, tuple(params))
            count = cursor.rowcount
            await cursor.close()
            return count

    async def fetchone(self, query: str, params: Sequence[Any] = ()) -> Optional[Row]:
        async with _translate_errors("fetchone"):
            async with self._conn.execute(query, tuple(params)) as cursor:
                row = await cursor.fetchone()
            return dict(row) if row is not None else None

    async def fetchall(self, query: str, params: Sequence[Any] = ()) -> List[Row]:
        async with _translate_errors("fetchall"):
            async with self._conn.execute(query, tuple(params)) as cursor:
                rows = await cursor.fetchall()
            return [dict(row) for row in rows]

    async def advisory_lock(self, key: int) -> None:
        # BEGIN IMMEDIATE already holds the database write lock.
        return None


class PostgresTransaction(Transaction):
    """Transaction on one pooled asyncpg connection."""

    for_update = " FOR UPDATE"

    def __init__(self, conn: asyncpg.Connection):
        self._conn = conn

    async def execute(self, query: str, params: Sequence[Any] = ()) -> int:
        async with _translate_errors("execute"):
            status = await self._conn.execute(_to_pg_placeholders(query), *params)
            return _rowcount_from_status(status)

    async def fetchone(self, query: str, params: Sequence[Any] = ()) -> Optional[Row]:
        async with _translate_errors("fetchone"):
            record = await self._conn.fetchrow(_to_pg_placeholders(query), *params)
            return dict(record) if record is not None else None

    async def fetchall(self, query: str, params: Sequence[Any] = ()) -> List[Row]:
        async with _translate_errors("fetchall"):
            records = await self._conn.fetch(_to_pg_placeholders(query), *params)
            return [dict(record) for record in records]

    async def advisory_lock(self, key: int) -> None:
        await self.execute("SELECT pg_advisory_xact_lock(?)", (key,))


# =============================================================================
# Backends
# =============================================================================

class DatabaseBackend:
    """
    Store contract used by every database mixin.

    Attributes:
        dialect: "sqlite" or "postgres".
        serial_pk: Column DDL for an auto-incrementing integer primary key.
    """

    dialect: str = ""
    serial_pk: str = ""

    async def connect(self) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        raise NotImplementedError

    def transaction(self):
        """Async context manager yielding a Transaction; commits on exit."""
        raise NotImplementedError

    async def execute(self, query: str, params: Sequence[Any] = ()) -> int:
        """Run a single statement in its own transaction, returning the row count."""
        async with self.transaction() as tx:
            return await tx.execute(query, params)

    async def fetchone(self, query: str, params: Sequence[Any] = ()) -> Optional[Row]:
        raise NotImplementedError

    async def fetchall(self, query: str, params: Sequence[Any] = ()) -> List[Row]:
        raise NotImplementedError

    async def fetchval(self, query: str, params: Sequence[Any] = ()) -> Any:
        row = await self.fetchone(query, params)
        if row is None:
            return None
        return next(iter(row.values()))

    async def add_column_if_missing(self, table: str, column: str, ddl: str) -> bool:
        """
        Add ``column`` to ``table`` unless it already exists.

        Returns:
            True if the column was added.
        """
        raise NotImplementedError


class SQLiteBackend(DatabaseBackend):
    """
    aiosqlite backend with one long-lived connection.

    DESIGN:
        The connection runs in autocommit mode and transactions are opened
        explicitly with BEGIN IMMEDIATE. ``_lock`` serialises every
        statement, which is what gives create_case its per-guild (in fact
        global) ordering on SQLite.
    """

    dialect = "sqlite"
    serial_pk = "INTEGER PRIMARY KEY AUTOINCREMENT"

    def __init__(self, path: Any):
        self.path = str(path)
        self._conn: Optional[aiosqlite.Connection] = None
        self._lock = asyncio.Lock()

    async def connect(self) -> None:
        if self._conn is not None:
            return
        async with _translate_errors("connect"):
            if self.path != ":memory:":
                Path(self.path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = await aiosqlite.connect(self.path, isolation_level=None)
            self._conn.row_factory = aiosqlite.Row
            for pragma in SQLITE_PRAGMAS:
                await self._conn.execute(pragma)

        logger.tree("SQLite Connected", [
            ("Path", self.path),
            ("WAL Mode", "Enabled"),
        ], emoji="🗄️")

    async def close(self) -> None:
        if self._conn is None:
            return
        async with self._lock:
            try:
                await self._conn.close()
            finally:
                self._conn = None
        logger.info("Database Connection Closed")

    def _connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise StorageError("SQLite connection is not open")
        return self._conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[SQLiteTransaction]:
        conn = self._connection()
        async with self._lock:
            try:
                async with _translate_errors("begin"):
                    await conn.execute("BEGIN IMMEDIATE")
                yield SQLiteTransaction(conn)
            except BaseException as e:
                # Also reached on task cancellation.
                await asyncio.shield(conn.rollback())
                logger.warning("Database Transaction Rolled Back", [
                    ("Error", str(e)[:100] or type(e).__name__),
                ])
                raise
            async with _translate_errors("commit"):
                await conn.commit()

    async def fetchone(self, query: str, params: Sequence[Any] = ()) -> Optional[Row]:
        conn = self._connection()
        async with self._lock:
            return await SQLiteTransaction(conn).fetchone(query, params)

    async def fetchall(self, query: str, params: Sequence[Any] = ()) -> List[Row]:
        conn = self._connection()
        async with self._lock:
            return await SQLiteTransaction(conn).fetchall(query, params)

    async def add_column_if_missing(self, table: str, column: str, ddl: str) -> bool:
        columns = await self.fetchall(f"PRAGMA table_info({table})")
        if any(col["name"] == column for col in columns):
            return False
        await self.execute(f"ALTER TABLE {table} ADD COLUMN {column} {ddl}")
        return True


class PostgresBackend(DatabaseBackend):
    """
    asyncpg backend over a connection pool.

    Transactions run at READ COMMITTED; create_case takes the per-guild
    advisory lock before reading MAX() so numbering stays gap-free.
    """

    dialect = "postgres"
    serial_pk = "BIGSERIAL PRIMARY KEY"

    def __init__(self, dsn: str, min_size: int = 1, max_size: int = 10):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self._pool: Optional[asyncpg.pool.Pool] = None

    async def connect(self) -> None:
        if self._pool is not None:
            return
        async with _translate_errors("connect"):
            self._pool = await asyncpg.create_pool(
                dsn=self.dsn,
                min_size=self.min_size,
                max_size=self.max_size,
            )

        logger.tree("PostgreSQL Connected", [
            ("Pool Size", f"{self.min_size}-{self.max_size}"),
        ], emoji="🗄️")

    async def close(self) -> None:
        if self._pool is None:
            return
        await self._pool.close()
        self._pool = None
        logger.info("Database Connection Closed")

    def _get_pool(self) -> asyncpg.pool.Pool:
        if self._pool is None:
            raise StorageError("PostgreSQL pool is not open")
        return self._pool

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[PostgresTransaction]:
        pool = self._get_pool()
        async with _translate_errors("transaction"):
            async with pool.acquire() as conn:
                # asyncpg rolls back on any exception leaving this block.
                async with conn.transaction():
                    yield PostgresTransaction(conn)

    async def fetchone(self, query: str, params: Sequence[Any] = ()) -> Optional[Row]:
        async with _translate_errors("fetchone"):
            record = await self._get_pool().fetchrow(_to_pg_placeholders(query), *params)
            return dict(record) if record is not None else None

    async def fetchall(self, query: str, params: Sequence[Any] = ()) -> List[Row]:
        async with _translate_errors("fetchall"):
            records = await self._get_pool().fetch(_to_pg_placeholders(query), *params)
            return [dict(record) for record in records]

    async def add_column_if_missing(self, table: str, column: str, ddl: str) -> bool:
        exists = await self.fetchval(
            """SELECT 1 FROM information_schema.columns
               WHERE table_name = ? AND column_name = ?""",
            (table, column),
        )
        if exists:
            return False
        await self.execute(f"ALTER TABLE {table} ADD COLUMN IF NOT EXISTS {column} {ddl}")
        return True


def backend_from_url(url: str) -> DatabaseBackend:
    """Pick a backend from a sqlite:/// path or postgres:// DSN."""
    if url.startswith(("postgres://", "postgresql://")):
        return PostgresBackend(url)
    if url.startswith("sqlite:///"):
        return SQLiteBackend(url.removeprefix("sqlite:///"))
    raise ValueError(f"Unsupported database URL: {url}")


# =============================================================================
# Base Database Class
# =============================================================================

class DatabaseBase:
    """
    Base every database mixin inherits from.

    Holds the backend and the config cache, and provides the clock. Tests
    replace ``now`` on an instance to control time.
    """

    backend: DatabaseBackend

    def now(self) -> int:
        """Current wall-clock time in unix seconds."""
        return int(time.time())


__all__ = [
    "StorageError",
    "Transaction",
    "SQLiteTransaction",
    "PostgresTransaction",
    "DatabaseBackend",
    "SQLiteBackend",
    "PostgresBackend",
    "backend_from_url",
    "DatabaseBase",
    "Row",
]
