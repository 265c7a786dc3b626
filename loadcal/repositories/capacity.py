"""Capacity override repository."""

from datetime import date

from loadcal.context import BACKGROUND, RequestContext
from loadcal.dates import format_date, to_utc_date
from loadcal.errors import NotFoundError
from loadcal.models import CapacityOverride
from loadcal.store import Store


def _row_to_override(row: dict) -> CapacityOverride:
    return CapacityOverride(
        entity_id=row["entity_id"],
        date=to_utc_date(row["date"]),
        capacity=float(row["capacity"]),
    )


class CapacityRepository:
    def __init__(self, store: Store):
        self.store = store

    def default_capacity(self, entity_id: str, ctx: RequestContext = BACKGROUND) -> float:
        row = self.store.query_one(
            "SELECT default_capacity FROM entities WHERE id = ?",
            [entity_id],
            ctx=ctx,
            operation="capacity.default",
        )
        if row is None:
            raise NotFoundError("entity", entity_id)
        return float(row["default_capacity"])

    def get_override(
        self, entity_id: str, day: date, ctx: RequestContext = BACKGROUND
    ) -> CapacityOverride | None:
        """The override for (entity, day), or None. Absence is not an error."""
        row = self.store.query_one(
            "SELECT entity_id, date, capacity FROM capacity_overrides WHERE entity_id = ? AND date = ?",
            [entity_id, format_date(day)],
            ctx=ctx,
            operation="capacity.get_override",
        )
        return _row_to_override(row) if row else None

    def overrides_in_range(
        self, entity_id: str, start: date, end: date, ctx: RequestContext = BACKGROUND
    ) -> list[CapacityOverride]:
        rows = self.store.query(
            "SELECT entity_id, date, capacity FROM capacity_overrides "
            "WHERE entity_id = ? AND date BETWEEN ? AND ? ORDER BY date",
            [entity_id, format_date(start), format_date(end)],
            ctx=ctx,
            operation="capacity.overrides_in_range",
        )
        return [_row_to_override(r) for r in rows]

    def set_override(self, override: CapacityOverride) -> None:
        """Create or replace the override for (entity, date)."""
        self.store.execute(
            "INSERT INTO capacity_overrides (entity_id, date, capacity) VALUES (?, ?, ?) "
            "ON CONFLICT (entity_id, date) DO UPDATE SET capacity = excluded.capacity",
            [override.entity_id, format_date(override.date), override.capacity],
            operation="capacity.set_override",
        )

    def delete_override(self, entity_id: str, day: date) -> bool:
        count = self.store.execute(
            "DELETE FROM capacity_overrides WHERE entity_id = ? AND date = ?",
            [entity_id, format_date(day)],
            operation="capacity.delete_override",
        )
        return count > 0
