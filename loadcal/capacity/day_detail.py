"""Day-Detail Assembler - the drill-down behind one heatmap cell."""

from datetime import date

from loadcal.capacity.aggregator import LoadAggregator
from loadcal.capacity.resolver import CapacityResolver
from loadcal.context import BACKGROUND, RequestContext
from loadcal.models import DayDetails
from loadcal.repositories import EntityRepository


class DayDetailAssembler:
    def __init__(self, entities: EntityRepository, resolver: CapacityResolver, aggregator: LoadAggregator):
        self.entities = entities
        self.resolver = resolver
        self.aggregator = aggregator

    def day_details(self, entity_id: str, day: date, ctx: RequestContext = BACKGROUND) -> DayDetails:
        """
        Loads, total weight and effective capacity for one entity on one day.

        For a group, total_load sums every member assignment on every load, so
        a load shared by two members counts twice.
        """
        entity = self.entities.get(entity_id, ctx)
        loads = self.aggregator.loads_for_entity_on_date(entity.id, entity.type, day, ctx)
        total = sum(lw.total_weight for lw in loads)
        capacity = self.resolver.effective_capacity(entity.id, day, ctx)
        return DayDetails(entity=entity, date=day, loads=loads, total_load=total, capacity=capacity)
