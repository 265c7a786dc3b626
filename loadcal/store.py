"""
Store - the relational data store collaborator.

Every repository reads and writes through here. One short-lived SQLite
connection per operation (or per transaction); nothing is cached in process,
so every read recomputes from the database.

sqlite3 errors never leak past this module: they are wrapped with the name
of the operation that failed (not the SQL text).
"""

import logging
import sqlite3
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from loadcal import db as db_module
from loadcal.context import BACKGROUND, RequestContext
from loadcal.errors import ConflictError, QueryCancelledError, QueryTimeoutError, StoreError

logger = logging.getLogger(__name__)

# SQLite VM instructions between cancellation checks
_PROGRESS_STEPS = 1000


def _interrupted(ctx: RequestContext, operation: str) -> StoreError:
    """Caller disconnect wins over an expired deadline."""
    if ctx.cancelled:
        return QueryCancelledError(operation)
    return QueryTimeoutError(operation)


class Transaction:
    """Statements executed on one connection inside BEGIN IMMEDIATE ... COMMIT."""

    def __init__(self, conn: sqlite3.Connection):
        self._conn = conn

    def execute(self, sql: str, params: Sequence[Any] = ()) -> sqlite3.Cursor:
        return self._conn.execute(sql, params)

    def query(self, sql: str, params: Sequence[Any] = ()) -> list[dict]:
        return [dict(row) for row in self._conn.execute(sql, params).fetchall()]

    def query_one(self, sql: str, params: Sequence[Any] = ()) -> dict | None:
        row = self._conn.execute(sql, params).fetchone()
        return dict(row) if row else None


class Store:
    """
    SQLite-backed store.

    Usage:
        store = Store(path)
        store.converge()
        rows = store.query("SELECT ...", [a, b], ctx=ctx, operation="heatmap.loads")
        with store.transaction(operation="load.upsert") as tx:
            tx.execute(...)
    """

    def __init__(self, db_path: str | Path, busy_timeout: float = 5.0):
        self.db_path = Path(db_path)
        self.busy_timeout = busy_timeout

    # ==================== Connections ====================

    @contextmanager
    def _get_conn(self, ctx: RequestContext, operation: str) -> Iterator[sqlite3.Connection]:
        if ctx.done():
            raise _interrupted(ctx, operation)

        try:
            conn = db_module.connect(self.db_path, timeout=self.busy_timeout)
        except sqlite3.Error as e:
            logger.error("Store connect failed during %s: %s", operation, e)
            raise StoreError(operation, "connection failed") from e

        if ctx is not BACKGROUND:
            conn.set_progress_handler(lambda: 1 if ctx.done() else 0, _PROGRESS_STEPS)

        try:
            yield conn
        except sqlite3.IntegrityError as e:
            raise ConflictError(f"{operation}: constraint violated") from e
        except sqlite3.OperationalError as e:
            if ctx.done():
                error = _interrupted(ctx, operation)
                logger.info("Store operation %s interrupted (request %s): %s", operation, ctx.request_id, error.error_code)
                raise error from e
            logger.error("Store operation %s failed: %s", operation, e)
            raise StoreError(operation) from e
        except sqlite3.Error as e:
            logger.error("Store operation %s failed: %s", operation, e)
            raise StoreError(operation) from e
        finally:
            conn.close()

    # ==================== Reads / single writes ====================

    def query(
        self,
        sql: str,
        params: Sequence[Any] = (),
        *,
        ctx: RequestContext = BACKGROUND,
        operation: str = "query",
    ) -> list[dict]:
        """Execute a read. Returns list of dicts."""
        with self._get_conn(ctx, operation) as conn:
            rows = conn.execute(sql, params).fetchall()
            return [dict(row) for row in rows]

    def query_one(
        self,
        sql: str,
        params: Sequence[Any] = (),
        *,
        ctx: RequestContext = BACKGROUND,
        operation: str = "query",
    ) -> dict | None:
        with self._get_conn(ctx, operation) as conn:
            row = conn.execute(sql, params).fetchone()
            return dict(row) if row else None

    def execute(
        self,
        sql: str,
        params: Sequence[Any] = (),
        *,
        ctx: RequestContext = BACKGROUND,
        operation: str = "execute",
    ) -> int:
        """Execute a single autocommitted write. Returns rowcount."""
        with self._get_conn(ctx, operation) as conn:
            return conn.execute(sql, params).rowcount

    # ==================== Transactions ====================

    @contextmanager
    def transaction(
        self, *, ctx: RequestContext = BACKGROUND, operation: str = "transaction"
    ) -> Iterator[Transaction]:
        """
        All-or-nothing unit of work.

        BEGIN IMMEDIATE takes the write lock up front, so concurrent readers keep
        seeing the last committed state until COMMIT.
        """
        with self._get_conn(ctx, operation) as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield Transaction(conn)
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")

    # ==================== Schema ====================

    def converge(self) -> dict:
        """Create missing tables/indexes. Safe to call repeatedly."""
        logger.info("Store converging schema at %s", self.db_path)
        with self._get_conn(BACKGROUND, "schema.converge") as conn:
            return db_module.converge(conn)
