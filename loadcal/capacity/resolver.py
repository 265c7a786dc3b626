"""
Capacity Resolver - effective per-day capacity for an entity.

Tracks:
- Default capacity (the entity's own default_capacity)
- Per-date overrides, which replace the default for that day

A group's capacity is its own default/overrides; members' overrides never
feed into it.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date, timedelta

from loadcal.context import BACKGROUND, RequestContext
from loadcal.dates import day_count, iter_days
from loadcal.errors import ValidationError
from loadcal.repositories import CapacityRepository

logger = logging.getLogger(__name__)


@dataclass
class DaySeries:
    """
    Dense per-day values for [start, end], indexed by day offset from start.

    values[i] belongs to start + i days; there is exactly one value per
    calendar day in the range.
    """

    start: date
    values: list[float] = field(default_factory=list)

    @property
    def end(self) -> date:
        return self.start + timedelta(days=len(self.values) - 1)

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[tuple[date, float]]:
        for offset, value in enumerate(self.values):
            yield self.start + timedelta(days=offset), value

    def offset(self, day: date) -> int:
        offset = (day - self.start).days
        if offset < 0 or offset >= len(self.values):
            raise KeyError(day)
        return offset

    def __getitem__(self, day: date) -> float:
        return self.values[self.offset(day)]

    def __setitem__(self, day: date, value: float) -> None:
        self.values[self.offset(day)] = value

    def get(self, day: date, default: float = 0.0) -> float:
        try:
            return self[day]
        except KeyError:
            return default

    def dates(self) -> list[date]:
        return list(iter_days(self.start, self.end)) if self.values else []

    @classmethod
    def filled(cls, start: date, end: date, value: float) -> "DaySeries":
        return cls(start=start, values=[value] * day_count(start, end))


class CapacityResolver:
    """
    Resolves effective capacity for persons and groups.

    Responsibilities:
    - Single-day lookup (override if present, else default)
    - Range lookup as a dense DaySeries with no gaps
    """

    def __init__(self, capacities: CapacityRepository):
        self.capacities = capacities

    def effective_capacity(self, entity_id: str, day: date, ctx: RequestContext = BACKGROUND) -> float:
        """Override for the day if one exists, otherwise the entity default."""
        override = self.capacities.get_override(entity_id, day, ctx)
        if override is not None:
            return override.capacity
        return self.capacities.default_capacity(entity_id, ctx)

    def capacities_for_range(
        self, entity_id: str, start: date, end: date, ctx: RequestContext = BACKGROUND
    ) -> DaySeries:
        """
        One capacity per calendar day in [start, end], inclusive.

        Raises NotFoundError for an unknown entity, ValidationError when
        end precedes start.
        """
        if end < start:
            raise ValidationError(f"range end {end} is before start {start}")

        default = self.capacities.default_capacity(entity_id, ctx)
        series = DaySeries.filled(start, end, default)
        for override in self.capacities.overrides_in_range(entity_id, start, end, ctx):
            series[override.date] = override.capacity

        logger.debug("Resolved %d capacities for %s", len(series), entity_id)
        return series
