"""
Centralized Database Access for the load calendar.

Single source of truth for:
- Connection factory (row factory, foreign keys, WAL)
- Schema convergence from loadcal.schema declarations
- Identifier validation for the few dynamic SQL fragments we build

ALL code must use this module for DB connections. No direct sqlite3.connect()
elsewhere.
"""

import logging
import re
import sqlite3
from pathlib import Path

from loadcal import schema

logger = logging.getLogger(__name__)

# ============================================================
# SQL IDENTIFIER VALIDATION
# ============================================================

_SAFE_IDENTIFIER_RE = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


def validate_identifier(name: str) -> str:
    """Validate that *name* is a safe SQL identifier (table or column name).

    Returns the name unchanged if valid; raises ``ValueError`` otherwise.
    """
    if not _SAFE_IDENTIFIER_RE.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return name


# ============================================================
# CONNECTION FACTORY
# ============================================================


def connect(db_path: str | Path, timeout: float = 5.0) -> sqlite3.Connection:
    """
    Open a connection with the settings every caller relies on.

    isolation_level=None puts the connection in autocommit mode; multi-statement
    writes go through Store.transaction(), which issues BEGIN IMMEDIATE itself.
    """
    db_path = Path(db_path)
    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(str(db_path), timeout=timeout, isolation_level=None, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys=ON")
    conn.execute("PRAGMA journal_mode=WAL")
    return conn


# ============================================================
# SCHEMA CONVERGENCE
# ============================================================


def _build_create_sql(table_name: str, table_def: dict) -> str:
    """Build a CREATE TABLE IF NOT EXISTS statement from a schema declaration."""
    parts = [f"    {col_name} {col_ddl}" for col_name, col_ddl in table_def["columns"]]
    if table_def.get("primary_key"):
        parts.append(f"    PRIMARY KEY ({', '.join(table_def['primary_key'])})")
    for unique_cols in table_def.get("unique", []):
        parts.append(f"    UNIQUE({', '.join(unique_cols)})")
    body = ",\n".join(parts)
    return f"CREATE TABLE IF NOT EXISTS {validate_identifier(table_name)} (\n{body}\n)"


def get_schema_version(conn: sqlite3.Connection) -> int:
    return conn.execute("PRAGMA user_version").fetchone()[0]


def table_exists(conn: sqlite3.Connection, table: str) -> bool:
    cursor = conn.execute("SELECT name FROM sqlite_master WHERE type='table' AND name=?", (table,))
    return cursor.fetchone() is not None


def converge(conn: sqlite3.Connection) -> dict:
    """
    Create missing tables and indexes, then stamp PRAGMA user_version.

    Never drops anything. Safe to call on every startup.

    Returns:
        {"tables_created": [...], "indexes_created": [...], "previous_version": int, "schema_version": int}
    """
    results: dict = {"tables_created": [], "indexes_created": [], "previous_version": get_schema_version(conn)}

    existing_indexes = {
        row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'index'").fetchall()
    }

    for table_name, table_def in schema.TABLES.items():
        if not table_exists(conn, table_name):
            conn.execute(_build_create_sql(table_name, table_def))
            results["tables_created"].append(table_name)

    for index_name, table_name, columns in schema.INDEXES:
        if index_name in existing_indexes:
            continue
        validate_identifier(index_name)
        validate_identifier(table_name)
        conn.execute(f"CREATE INDEX IF NOT EXISTS {index_name} ON {table_name}({columns})")
        results["indexes_created"].append(index_name)

    conn.execute(f"PRAGMA user_version = {int(schema.SCHEMA_VERSION)}")
    results["schema_version"] = schema.SCHEMA_VERSION

    if results["tables_created"]:
        logger.info("Tables created: %s", results["tables_created"])
    if results["indexes_created"]:
        logger.info("Indexes created: %d", len(results["indexes_created"]))
    if not results["tables_created"] and not results["indexes_created"]:
        logger.info("No changes needed, schema up to date")

    return results
