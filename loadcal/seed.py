"""
Demo seed data.

Three persons, two groups and a month of sample loads relative to today,
including a few deliberately overloaded days. Does nothing if the database
already has entities.
"""

import logging
from datetime import date, timedelta

from loadcal.dates import today_utc
from loadcal.models import Entity, EntityType, Load, LoadAssignment
from loadcal.repositories import EntityRepository, LoadRepository
from loadcal.store import Store

logger = logging.getLogger(__name__)

PERSONS = [
    ("alice@example.com", "Alice Johnson", 5.0),
    ("bob@example.com", "Bob Smith", 6.0),
    ("charlie@example.com", "Charlie Brown", 4.0),
]

GROUP_CAPACITY = 10.0
GROUPS = [
    ("engineering", "Engineering Team", ["alice@example.com", "bob@example.com"]),
    ("design", "Design Team", ["charlie@example.com"]),
]

# (title, days from today, assignee, weight)
SAMPLE_LOADS = [
    ("Code Review Sprint", 1, "alice@example.com", 2.0),
    ("Database Migration", 2, "bob@example.com", 3.0),
    ("UI Redesign", 3, "charlie@example.com", 2.5),
    ("API Integration", 4, "alice@example.com", 1.5),
    ("Security Audit", 5, "bob@example.com", 2.0),
    ("Performance Testing", 6, "alice@example.com", 1.0),
    ("Documentation Update", 7, "charlie@example.com", 1.0),
    ("Feature Development", 8, "alice@example.com", 3.0),
    ("Bug Fixes", 9, "bob@example.com", 2.0),
    ("Client Meeting Prep", 10, "charlie@example.com", 1.5),
    # overloaded days
    ("Major Release", 5, "alice@example.com", 4.0),
    ("Sprint Planning", 5, "bob@example.com", 5.0),
    ("Design Review", 10, "charlie@example.com", 4.0),
    ("Team Sync", 15, "alice@example.com", 2.0),
    ("Code Freeze", 20, "bob@example.com", 1.5),
    ("Deployment", 25, "alice@example.com", 2.5),
    ("Retrospective", 30, "charlie@example.com", 1.0),
]


def seed(store: Store, today: date | None = None) -> bool:
    """Populate an empty database. Returns False when data already exists."""
    entities = EntityRepository(store)
    loads = LoadRepository(store)

    if entities.count() > 0:
        logger.info("Database already has data, skipping seed")
        return False

    today = today or today_utc()
    logger.info("Seeding database with sample data")

    with store.transaction(operation="seed") as tx:
        for email, title, capacity in PERSONS:
            entities.create(Entity(id=email, title=title, type=EntityType.PERSON, default_capacity=capacity), tx=tx)

        for group_id, title, members in GROUPS:
            entities.create(
                Entity(id=group_id, title=title, type=EntityType.GROUP, default_capacity=GROUP_CAPACITY), tx=tx
            )
            for member in members:
                tx.execute("INSERT INTO group_members (group_id, person_email) VALUES (?, ?)", [group_id, member])

        for i, (title, days_from, assignee, weight) in enumerate(SAMPLE_LOADS, start=1):
            load = Load(
                external_id=f"seed-{i}",
                title=title,
                source="seed",
                date=today + timedelta(days=days_from),
            )
            loads.upsert_by_external_id(load, [LoadAssignment(person_email=assignee, weight=weight)], tx=tx)

    logger.info("Seeded %d persons, %d groups, %d loads", len(PERSONS), len(GROUPS), len(SAMPLE_LOADS))
    return True
