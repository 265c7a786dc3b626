"""Capacity service - default capacity and per-date overrides."""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta

from loadcal.dates import parse_date, today_utc
from loadcal.errors import NotFoundError
from loadcal.models import CapacityOverride, Entity
from loadcal.repositories import CapacityRepository, EntityRepository
from loadcal.store import Store
from loadcal.validation import require_amount

logger = logging.getLogger(__name__)

# capacity_info lists overrides from today through this many days ahead
OVERRIDE_HORIZON_DAYS = 90


@dataclass
class CapacityInfo:
    entity: Entity
    overrides: list[CapacityOverride] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"entity": self.entity.to_dict(), "overrides": [o.to_dict() for o in self.overrides]}


def _check_capacity(capacity: float) -> float:
    return require_amount(capacity, "capacity")


class CapacityService:
    def __init__(self, store: Store, entities: EntityRepository, capacities: CapacityRepository):
        self.store = store
        self.entities = entities
        self.capacities = capacities

    def update_default_capacity(self, entity_id: str, capacity: float) -> None:
        self.entities.update_default_capacity(entity_id, _check_capacity(capacity))

    def set_date_override(self, entity_id: str, day: date, capacity: float) -> None:
        capacity = _check_capacity(capacity)
        self.entities.get(entity_id)
        self.capacities.set_override(CapacityOverride(entity_id=entity_id, date=day, capacity=capacity))

    def delete_date_override(self, entity_id: str, day: date) -> None:
        if not self.capacities.delete_override(entity_id, day):
            raise NotFoundError("capacity override", f"{entity_id}/{day.isoformat()}")

    def capacity_info(self, entity_id: str, today: date | None = None) -> CapacityInfo:
        """The entity plus its overrides for the next 90 days."""
        entity = self.entities.get(entity_id)
        start = today or today_utc()
        overrides = self.capacities.overrides_in_range(entity_id, start, start + timedelta(days=OVERRIDE_HORIZON_DAYS))
        return CapacityInfo(entity=entity, overrides=overrides)

    def update_capacity(
        self,
        entity_id: str,
        default_capacity: float | None = None,
        date_overrides: list[tuple[str | date, float]] | None = None,
    ) -> None:
        """
        Update the default and/or a batch of date overrides in one go.

        Every value is validated first; nothing is written if any is bad.
        """
        if default_capacity is not None:
            default_capacity = _check_capacity(default_capacity)
        parsed = []
        for raw_day, capacity in date_overrides or []:
            day = raw_day if isinstance(raw_day, date) else parse_date(raw_day)
            parsed.append((day, _check_capacity(capacity)))

        self.entities.get(entity_id)

        with self.store.transaction(operation="capacity.update") as tx:
            if default_capacity is not None:
                tx.execute("UPDATE entities SET default_capacity = ? WHERE id = ?", [default_capacity, entity_id])
            for day, capacity in parsed:
                tx.execute(
                    "INSERT INTO capacity_overrides (entity_id, date, capacity) VALUES (?, ?, ?) "
                    "ON CONFLICT (entity_id, date) DO UPDATE SET capacity = excluded.capacity",
                    [entity_id, day.isoformat(), capacity],
                )
        logger.info("Updated capacity for %s (%d overrides)", entity_id, len(parsed))
