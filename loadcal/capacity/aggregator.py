"""Load Aggregator - summed assignment weight per day for persons and groups."""

from datetime import date

from loadcal.context import BACKGROUND, RequestContext
from loadcal.models import Entity, EntityType, LoadWithAssignments
from loadcal.repositories import LoadRepository


class LoadAggregator:
    """
    Sparse per-day load totals. A day missing from a result means zero.

    Group totals are computed from current membership at read time.
    """

    def __init__(self, loads: LoadRepository):
        self.loads = loads

    def person_load_for_range(
        self, person_email: str, start: date, end: date, ctx: RequestContext = BACKGROUND
    ) -> dict[date, float]:
        return self.loads.person_load_for_range(person_email, start, end, ctx)

    def group_load_for_range(
        self, group_id: str, start: date, end: date, ctx: RequestContext = BACKGROUND
    ) -> dict[date, float]:
        return self.loads.group_load_for_range(group_id, start, end, ctx)

    def load_for_range(
        self, entity: Entity, start: date, end: date, ctx: RequestContext = BACKGROUND
    ) -> dict[date, float]:
        """Dispatch on entity type; the id alone never decides the query."""
        if entity.type == EntityType.GROUP:
            return self.group_load_for_range(entity.id, start, end, ctx)
        return self.person_load_for_range(entity.id, start, end, ctx)

    def person_load_for_date(self, person_email: str, day: date, ctx: RequestContext = BACKGROUND) -> float:
        """Total weight for one person on one day; 0.0 when nothing is assigned."""
        return self.loads.person_load_for_date(person_email, day, ctx)

    def loads_for_entity_on_date(
        self, entity_id: str, entity_type: EntityType, day: date, ctx: RequestContext = BACKGROUND
    ) -> list[LoadWithAssignments]:
        return self.loads.loads_for_entity_on_date(entity_id, entity_type, day, ctx)
