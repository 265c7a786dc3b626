"""
Load repository - loads, their assignments, and the aggregation queries.

The range queries return sparse {date: total_weight} maps straight from a
single GROUP BY; days without assignments are absent. The group query joins
memberships at read time, so membership changes show up on the next read.
"""

import logging
from collections.abc import Iterable
from datetime import date

from loadcal.context import BACKGROUND, RequestContext
from loadcal.dates import format_date, to_utc_date
from loadcal.errors import NotFoundError
from loadcal.models import EntityType, Load, LoadAssignment, LoadWithAssignments
from loadcal.store import Store, Transaction

logger = logging.getLogger(__name__)

_LOAD_COLUMNS = "l.id, l.external_id, l.title, l.source, l.url, l.date"


def _row_to_load(row: dict) -> Load:
    return Load(
        id=row["id"],
        external_id=row.get("external_id"),
        title=row["title"],
        source=row.get("source"),
        url=row.get("url"),
        date=to_utc_date(row["date"]),
    )


def _sum_by_date(rows: list[dict]) -> dict[date, float]:
    return {to_utc_date(r["date"]): float(r["total"]) for r in rows}


class LoadRepository:
    def __init__(self, store: Store):
        self.store = store

    # ==================== Writes ====================

    def upsert_by_external_id(
        self,
        load: Load,
        assignments: Iterable[LoadAssignment],
        tx: Transaction | None = None,
    ) -> int:
        """
        Insert or update a load keyed by external_id and replace its assignments.

        The load row and the assignment replacement commit together; readers
        never see the load without its assignments. Returns the load id.
        """
        if tx is None:
            with self.store.transaction(operation="load.upsert") as own_tx:
                return self._upsert(own_tx, load, list(assignments))
        return self._upsert(tx, load, list(assignments))

    def _upsert(self, tx: Transaction, load: Load, assignments: list[LoadAssignment]) -> int:
        row = tx.query_one(
            "INSERT INTO loads (external_id, title, source, url, date) VALUES (?, ?, ?, ?, ?) "
            "ON CONFLICT (external_id) DO UPDATE SET "
            "title = excluded.title, source = excluded.source, url = excluded.url, date = excluded.date "
            "RETURNING id",
            [load.external_id, load.title, load.source, load.url, format_date(load.date)],
        )
        load_id = row["id"]

        tx.execute("DELETE FROM load_assignments WHERE load_id = ?", [load_id])
        for a in assignments:
            tx.execute(
                "INSERT INTO load_assignments (load_id, person_email, weight) VALUES (?, ?, ?)",
                [load_id, a.person_email, a.weight],
            )

        logger.info(
            "Upserted load %s (external_id=%s) with %d assignments", load_id, load.external_id, len(assignments)
        )
        return load_id

    def add_assignments(self, load_id: int, assignments: Iterable[LoadAssignment], tx: Transaction | None = None) -> None:
        """Add assignees to a load; a person already assigned gets their weight replaced."""
        sql = (
            "INSERT INTO load_assignments (load_id, person_email, weight) VALUES (?, ?, ?) "
            "ON CONFLICT (load_id, person_email) DO UPDATE SET weight = excluded.weight"
        )
        if tx is None:
            with self.store.transaction(operation="load.add_assignments") as own_tx:
                for a in assignments:
                    own_tx.execute(sql, [load_id, a.person_email, a.weight])
            return
        for a in assignments:
            tx.execute(sql, [load_id, a.person_email, a.weight])

    def remove_assignment(self, load_id: int, person_email: str) -> None:
        count = self.store.execute(
            "DELETE FROM load_assignments WHERE load_id = ? AND person_email = ?",
            [load_id, person_email],
            operation="load.remove_assignment",
        )
        if count == 0:
            raise NotFoundError("assignment", f"{load_id}/{person_email}")

    def delete(self, load_id: int) -> None:
        count = self.store.execute("DELETE FROM loads WHERE id = ?", [load_id], operation="load.delete")
        if count == 0:
            raise NotFoundError("load", load_id)
        logger.info("Deleted load %s", load_id)

    # ==================== Reads ====================

    def _fold(self, sql: str, params: list, ctx: RequestContext, operation: str) -> list[LoadWithAssignments]:
        """
        Run one load x assignment join and group the rows by load id.

        A single statement reads one committed snapshot, so a load never comes
        back without the assignments it was written with. Rows from a LEFT JOIN
        with no assignment leave the load's list empty.
        """
        folded: dict[int, LoadWithAssignments] = {}
        for r in self.store.query(sql, params, ctx=ctx, operation=operation):
            lw = folded.get(r["id"])
            if lw is None:
                lw = folded[r["id"]] = LoadWithAssignments(load=_row_to_load(r), assignments=[])
            if r["person_email"] is not None:
                lw.assignments.append(
                    LoadAssignment(person_email=r["person_email"], weight=float(r["weight"]), load_id=r["id"])
                )
        return list(folded.values())

    def get(self, load_id: int, ctx: RequestContext = BACKGROUND) -> LoadWithAssignments:
        found = self._fold(
            f"SELECT {_LOAD_COLUMNS}, la.person_email, la.weight FROM loads l "
            "LEFT JOIN load_assignments la ON la.load_id = l.id "
            "WHERE l.id = ? ORDER BY la.person_email",
            [load_id],
            ctx,
            "load.get",
        )
        if not found:
            raise NotFoundError("load", load_id)
        return found[0]

    def exists(self, load_id: int) -> bool:
        row = self.store.query_one(
            "SELECT EXISTS(SELECT 1 FROM loads WHERE id = ?) AS present", [load_id], operation="load.exists"
        )
        return bool(row and row["present"])

    def loads_in_range(
        self, start: date, end: date, ctx: RequestContext = BACKGROUND
    ) -> list[LoadWithAssignments]:
        return self._fold(
            f"SELECT {_LOAD_COLUMNS}, la.person_email, la.weight FROM loads l "
            "LEFT JOIN load_assignments la ON la.load_id = l.id "
            "WHERE l.date BETWEEN ? AND ? ORDER BY l.date, l.id, la.person_email",
            [format_date(start), format_date(end)],
            ctx,
            "load.loads_in_range",
        )

    def person_load_for_range(
        self, person_email: str, start: date, end: date, ctx: RequestContext = BACKGROUND
    ) -> dict[date, float]:
        rows = self.store.query(
            "SELECT l.date AS date, SUM(la.weight) AS total "
            "FROM loads l JOIN load_assignments la ON la.load_id = l.id "
            "WHERE la.person_email = ? AND l.date BETWEEN ? AND ? "
            "GROUP BY l.date",
            [person_email, format_date(start), format_date(end)],
            ctx=ctx,
            operation="load.person_load_for_range",
        )
        return _sum_by_date(rows)

    def group_load_for_range(
        self, group_id: str, start: date, end: date, ctx: RequestContext = BACKGROUND
    ) -> dict[date, float]:
        rows = self.store.query(
            "SELECT l.date AS date, SUM(la.weight) AS total "
            "FROM loads l "
            "JOIN load_assignments la ON la.load_id = l.id "
            "JOIN group_members gm ON gm.person_email = la.person_email "
            "WHERE gm.group_id = ? AND l.date BETWEEN ? AND ? "
            "GROUP BY l.date",
            [group_id, format_date(start), format_date(end)],
            ctx=ctx,
            operation="load.group_load_for_range",
        )
        return _sum_by_date(rows)

    def person_load_for_date(self, person_email: str, day: date, ctx: RequestContext = BACKGROUND) -> float:
        row = self.store.query_one(
            "SELECT COALESCE(SUM(la.weight), 0) AS total "
            "FROM loads l JOIN load_assignments la ON la.load_id = l.id "
            "WHERE la.person_email = ? AND l.date = ?",
            [person_email, format_date(day)],
            ctx=ctx,
            operation="load.person_load_for_date",
        )
        return float(row["total"]) if row else 0.0

    def loads_for_person_on_date(
        self, person_email: str, day: date, ctx: RequestContext = BACKGROUND
    ) -> list[LoadWithAssignments]:
        """Loads the person is assigned to on the day, with only their assignment."""
        return self._fold(
            f"SELECT {_LOAD_COLUMNS}, la.person_email, la.weight FROM loads l "
            "JOIN load_assignments la ON la.load_id = l.id "
            "WHERE la.person_email = ? AND l.date = ? ORDER BY l.id",
            [person_email, format_date(day)],
            ctx,
            "load.loads_for_person_on_date",
        )

    def loads_for_group_on_date(
        self, group_id: str, day: date, ctx: RequestContext = BACKGROUND
    ) -> list[LoadWithAssignments]:
        """
        Distinct loads where any current member is assigned on the day.

        Each load appears once, carrying every member assignment it has.
        Membership is joined in the same statement as the assignments.
        """
        return self._fold(
            f"SELECT {_LOAD_COLUMNS}, la.person_email, la.weight FROM loads l "
            "JOIN load_assignments la ON la.load_id = l.id "
            "JOIN group_members gm ON gm.person_email = la.person_email "
            "WHERE gm.group_id = ? AND l.date = ? ORDER BY l.id, la.person_email",
            [group_id, format_date(day)],
            ctx,
            "load.loads_for_group_on_date",
        )

    def loads_for_entity_on_date(
        self, entity_id: str, entity_type: EntityType, day: date, ctx: RequestContext = BACKGROUND
    ) -> list[LoadWithAssignments]:
        if entity_type == EntityType.GROUP:
            return self.loads_for_group_on_date(entity_id, day, ctx)
        return self.loads_for_person_on_date(entity_id, day, ctx)
