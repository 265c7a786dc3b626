"""
Declarative Schema Definition.

Every table and index for the load calendar lives here. loadcal.db.converge()
reads this and creates whatever is missing.

Dates are stored as ISO text (YYYY-MM-DD), which sorts and compares as
calendar days.
"""

from collections import OrderedDict

# =============================================================================
# Schema version: bump when you change this file
# =============================================================================
SCHEMA_VERSION = 1

# =============================================================================
# Table Definitions
#
# Format: TABLES[name] = {"columns": [(col_name, col_ddl), ...],
#                         "primary_key": [...], "unique": [[...]]}
# =============================================================================

TABLES: dict[str, dict] = OrderedDict()

# ---------------------------------------------------------------------------
# entities: persons (id = email) and groups (id = slug)
# ---------------------------------------------------------------------------
TABLES["entities"] = {
    "columns": [
        ("id", "TEXT PRIMARY KEY"),
        ("title", "TEXT NOT NULL"),
        ("type", "TEXT NOT NULL CHECK (type IN ('person', 'group'))"),
        ("employee_id", "TEXT"),
        ("default_capacity", "REAL NOT NULL DEFAULT 5.0 CHECK (default_capacity >= 0)"),
        ("created_at", "TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%SZ', 'now'))"),
    ],
}

# ---------------------------------------------------------------------------
# group_members: (group, person) pairs, unique per pair
# ---------------------------------------------------------------------------
TABLES["group_members"] = {
    "columns": [
        ("group_id", "TEXT NOT NULL REFERENCES entities(id) ON DELETE CASCADE"),
        ("person_email", "TEXT NOT NULL REFERENCES entities(id) ON DELETE CASCADE"),
    ],
    "primary_key": ["group_id", "person_email"],
}

# ---------------------------------------------------------------------------
# capacity_overrides: at most one per (entity, date)
# ---------------------------------------------------------------------------
TABLES["capacity_overrides"] = {
    "columns": [
        ("entity_id", "TEXT NOT NULL REFERENCES entities(id) ON DELETE CASCADE"),
        ("date", "TEXT NOT NULL"),
        ("capacity", "REAL NOT NULL CHECK (capacity >= 0)"),
    ],
    "primary_key": ["entity_id", "date"],
}

# ---------------------------------------------------------------------------
# loads: single-day units of work
# ---------------------------------------------------------------------------
TABLES["loads"] = {
    "columns": [
        ("id", "INTEGER PRIMARY KEY AUTOINCREMENT"),
        ("external_id", "TEXT UNIQUE"),
        ("title", "TEXT NOT NULL"),
        ("source", "TEXT"),
        ("url", "TEXT"),
        ("date", "TEXT NOT NULL"),
    ],
}

# ---------------------------------------------------------------------------
# load_assignments: (load, person) -> weight
# ---------------------------------------------------------------------------
TABLES["load_assignments"] = {
    "columns": [
        ("load_id", "INTEGER NOT NULL REFERENCES loads(id) ON DELETE CASCADE"),
        ("person_email", "TEXT NOT NULL REFERENCES entities(id) ON DELETE CASCADE"),
        ("weight", "REAL NOT NULL DEFAULT 1.0 CHECK (weight >= 0)"),
    ],
    "primary_key": ["load_id", "person_email"],
}

# =============================================================================
# Indexes: (name, table, columns)
# =============================================================================
INDEXES: list[tuple[str, str, str]] = [
    ("idx_loads_date", "loads", "date"),
    ("idx_load_assignments_person", "load_assignments", "person_email"),
    ("idx_capacity_overrides_date", "capacity_overrides", "entity_id, date"),
    ("idx_group_members_person", "group_members", "person_email"),
    ("idx_entities_employee_id", "entities", "employee_id"),
]
