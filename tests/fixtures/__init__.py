"""
Test fixtures for deterministic testing.

This module provides:
- create_fixture_db: temp SQLite database with a pinned population
- RecordingChannel: in-memory alert channel
- add_person / add_group helpers
"""

from .fixture_db import TODAY, RecordingChannel, add_group, add_person, create_fixture_db, guard_no_live_db

__all__ = ["TODAY", "RecordingChannel", "add_group", "add_person", "create_fixture_db", "guard_no_live_db"]
