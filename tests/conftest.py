"""
Test configuration - repo root on sys.path, temp databases, determinism guards.

Every test gets its own LOADCAL_HOME under tmp_path, and sqlite3.connect is
guarded so nothing can open the user's real database in ~/.loadcal.
"""

import sqlite3
import sys
from pathlib import Path

import pytest

# Add repo root to sys.path so tests can import loadcal.*, api.*, tests.fixtures
REPO_ROOT = Path(__file__).parent.parent
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from loadcal.app_services import build_services  # noqa: E402
from loadcal.config import Settings  # noqa: E402
from loadcal.repositories import (  # noqa: E402
    CapacityRepository,
    EntityRepository,
    GroupRepository,
    LoadRepository,
)
from tests.fixtures import TODAY, RecordingChannel, create_fixture_db, guard_no_live_db  # noqa: E402

# =============================================================================
# DETERMINISM GUARD: Block live database access
# =============================================================================

_original_sqlite_connect = sqlite3.connect


def _guarded_sqlite_connect(database, *args, **kwargs):
    if str(database) != ":memory:":
        guard_no_live_db(database)
    return _original_sqlite_connect(database, *args, **kwargs)


@pytest.fixture(autouse=True)
def guard_live_db_access(monkeypatch, tmp_path):
    """Point LOADCAL_HOME at a temp dir and block the real DB."""
    monkeypatch.setenv("LOADCAL_HOME", str(tmp_path / "home"))
    monkeypatch.delenv("LOADCAL_DB", raising=False)
    monkeypatch.setattr(sqlite3, "connect", _guarded_sqlite_connect)


# =============================================================================
# STORE / REPOSITORIES
# =============================================================================


@pytest.fixture
def db_path(tmp_path) -> Path:
    return tmp_path / "loadcal-test.db"


@pytest.fixture
def store(db_path):
    """Fixture DB with the pinned population (alice, bob, carol, eng)."""
    return create_fixture_db(db_path)


@pytest.fixture
def empty_store(tmp_path):
    return create_fixture_db(tmp_path / "empty.db", populate=False)


@pytest.fixture
def entities(store) -> EntityRepository:
    return EntityRepository(store)


@pytest.fixture
def groups(store) -> GroupRepository:
    return GroupRepository(store)


@pytest.fixture
def capacities(store) -> CapacityRepository:
    return CapacityRepository(store)


@pytest.fixture
def loads(store) -> LoadRepository:
    return LoadRepository(store)


# =============================================================================
# SERVICES WITH A RECORDING CHANNEL
# =============================================================================


@pytest.fixture
def settings(db_path) -> Settings:
    return Settings(db_path=db_path, webhook_url="http://alerts.test/hook", alert_workers=2)


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def services(settings, channel, store):
    """Fully wired services on the fixture DB; alerts go to `channel`, today is pinned."""
    svc = build_services(settings, channel=channel, store=store)
    svc.dispatcher.today = lambda: TODAY
    yield svc
    svc.shutdown(wait=True)


@pytest.fixture
def drain(services):
    """Call to wait for every queued overload check to finish."""

    def _drain() -> None:
        for task in services.tasks.list_tasks():
            services.tasks.wait(task.id, timeout=5)

    return _drain
