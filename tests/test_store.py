"""
Tests for the Store.

Tests cover:
- Cancellation and deadline expiry, before and during a statement
- Error wrapping (no SQL text in messages)
- Transaction rollback and constraint conflicts
- Idempotent schema convergence
"""

import threading

import pytest

from loadcal.context import RequestContext
from loadcal.errors import ConflictError, QueryCancelledError, QueryTimeoutError, StoreError

# Counts to a large number; runs long enough to be interrupted mid-statement
SLOW_SQL = (
    "WITH RECURSIVE c(x) AS (SELECT 1 UNION ALL SELECT x + 1 FROM c WHERE x < 50000000) "
    "SELECT COUNT(*) AS n FROM c"
)


def test_query_returns_dicts(store):
    rows = store.query("SELECT id, type FROM entities ORDER BY id", operation="test.list")
    assert rows[0] == {"id": "alice@example.com", "type": "person"}


def test_cancelled_context_rejected_before_connecting(store):
    ctx = RequestContext()
    ctx.cancel()
    with pytest.raises(QueryCancelledError):
        store.query("SELECT 1", ctx=ctx)


def test_deadline_aborts_running_statement(store):
    ctx = RequestContext.with_timeout(0.05)
    with pytest.raises(QueryTimeoutError) as exc_info:
        store.query(SLOW_SQL, ctx=ctx, operation="test.slow")
    assert exc_info.value.error_code == "timeout"


def test_expired_deadline_rejected_before_connecting(store):
    ctx = RequestContext(deadline=0.0)
    with pytest.raises(QueryTimeoutError):
        store.query("SELECT 1", ctx=ctx)


def test_disconnect_wins_over_expired_deadline(store):
    ctx = RequestContext(deadline=0.0)
    ctx.cancel()
    with pytest.raises(QueryCancelledError):
        store.query("SELECT 1", ctx=ctx)


def test_cancel_from_another_thread(store):
    ctx = RequestContext()
    threading.Timer(0.05, ctx.cancel).start()
    with pytest.raises(QueryCancelledError):
        store.query(SLOW_SQL, ctx=ctx)


def test_cancellation_is_a_store_error(store):
    ctx = RequestContext()
    ctx.cancel()
    with pytest.raises(StoreError):
        store.query_one("SELECT 1", ctx=ctx)


def test_sql_error_wrapped_without_sql_text(store):
    with pytest.raises(StoreError) as exc_info:
        store.query("SELECT nope FROM nowhere", operation="test.broken")
    message = str(exc_info.value)
    assert "test.broken" in message
    assert "nowhere" not in message
    assert exc_info.value.operation == "test.broken"


def test_duplicate_primary_key_is_conflict(store):
    with pytest.raises(ConflictError):
        store.execute(
            "INSERT INTO entities (id, title, type, default_capacity) VALUES (?, ?, ?, ?)",
            ["alice@example.com", "Again", "person", 5.0],
        )


def test_execute_returns_rowcount(store):
    assert store.execute("UPDATE entities SET default_capacity = 7 WHERE type = 'person'") == 3


def test_transaction_rolls_back_on_error(store):
    with pytest.raises(RuntimeError):
        with store.transaction(operation="test.tx") as tx:
            tx.execute("UPDATE entities SET default_capacity = 99 WHERE id = ?", ["carol@example.com"])
            raise RuntimeError("abort")
    row = store.query_one("SELECT default_capacity FROM entities WHERE id = ?", ["carol@example.com"])
    assert row["default_capacity"] == 4.0


def test_transaction_commits(store):
    with store.transaction() as tx:
        tx.execute("UPDATE entities SET default_capacity = 3 WHERE id = ?", ["carol@example.com"])
        assert tx.query_one("SELECT default_capacity FROM entities WHERE id = ?", ["carol@example.com"])[
            "default_capacity"
        ] == 3.0
    assert store.query_one("SELECT default_capacity FROM entities WHERE id = 'carol@example.com'")[
        "default_capacity"
    ] == 3.0


def test_converge_is_idempotent(store):
    result = store.converge()
    assert result["tables_created"] == []
    assert result["schema_version"] == result["previous_version"]
    assert store.query_one("SELECT COUNT(*) AS n FROM entities")["n"] == 4


def test_foreign_keys_enforced(store):
    with pytest.raises(ConflictError):
        store.execute("INSERT INTO group_members (group_id, person_email) VALUES ('eng', 'ghost@example.com')")
