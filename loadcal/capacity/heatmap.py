"""
Heatmap Builder - day series of (load, capacity, color) for an entity.

The window is fixed: one month before today through six months after,
inclusive. Days with no assignments get load 0.0 and are still present.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum

from loadcal.capacity.aggregator import LoadAggregator
from loadcal.capacity.resolver import CapacityResolver
from loadcal.context import BACKGROUND, RequestContext
from loadcal.dates import format_date, heatmap_window, today_utc
from loadcal.models import HeatmapData, HeatmapDay
from loadcal.repositories import EntityRepository

logger = logging.getLogger(__name__)


class HeatmapColor(StrEnum):
    """Severity buckets, most severe first."""

    OVERLOADED = "overloaded"
    OVERLOADED_NO_CAPACITY = "overloaded_no_capacity"
    NEAR_CAPACITY = "near_capacity"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    MINIMAL = "minimal"
    IDLE = "idle"

    @property
    def hex(self) -> str:
        return _HEX[self]


_HEX = {
    HeatmapColor.OVERLOADED: "#8B0000",  # blood red
    HeatmapColor.OVERLOADED_NO_CAPACITY: "#8B0000",
    HeatmapColor.NEAR_CAPACITY: "#dc2626",  # red
    HeatmapColor.HIGH: "#f97316",  # orange
    HeatmapColor.MEDIUM: "#fbbf24",  # amber
    HeatmapColor.LOW: "#a3e635",  # lime
    HeatmapColor.MINIMAL: "#22c55e",  # green
    HeatmapColor.IDLE: "#e5e7eb",  # gray
}

# (exclusive lower bound on load/capacity, bucket), checked top-down
_LADDER = [
    (1.0, HeatmapColor.OVERLOADED),
    (0.8, HeatmapColor.NEAR_CAPACITY),
    (0.6, HeatmapColor.HIGH),
    (0.4, HeatmapColor.MEDIUM),
    (0.2, HeatmapColor.LOW),
    (0.0, HeatmapColor.MINIMAL),
]


def heatmap_color(load: float, capacity: float) -> HeatmapColor:
    """Classify a day. Zero capacity with any load is overloaded."""
    if capacity == 0:
        return HeatmapColor.OVERLOADED_NO_CAPACITY if load > 0 else HeatmapColor.IDLE

    ratio = load / capacity
    for bound, color in _LADDER:
        if ratio > bound:
            return color
    return HeatmapColor.IDLE


@dataclass
class MonthBlock:
    """Heatmap days of one calendar month, for calendar-style rendering."""

    year: int
    month: int
    month_name: str
    days: list[dict] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {"year": self.year, "month": self.month, "month_name": self.month_name, "days": self.days}


def group_by_month(days: list[HeatmapDay], today: date | None = None) -> list[MonthBlock]:
    """Group an ordered day series into month blocks, in first-seen order."""
    today = today or today_utc()
    blocks: list[MonthBlock] = []
    for day in days:
        if not blocks or (blocks[-1].year, blocks[-1].month) != (day.date.year, day.date.month):
            blocks.append(MonthBlock(year=day.date.year, month=day.date.month, month_name=day.date.strftime("%B")))
        blocks[-1].days.append(
            {
                "date": format_date(day.date),
                "day": day.date.day,
                "load": day.load,
                "capacity": day.capacity,
                "color": day.color,
                "color_hex": day.color_hex,
                "is_today": day.date == today,
            }
        )
    return blocks


class HeatmapBuilder:
    def __init__(self, entities: EntityRepository, resolver: CapacityResolver, aggregator: LoadAggregator):
        self.entities = entities
        self.resolver = resolver
        self.aggregator = aggregator

    def build(self, entity_id: str, today: date | None = None, ctx: RequestContext = BACKGROUND) -> HeatmapData:
        """
        Build the heatmap for an entity over the fixed window.

        Raises NotFoundError for an unknown entity. An entity with no loads
        gets a fully populated, zero-load series.
        """
        entity = self.entities.get(entity_id, ctx)
        start, end = heatmap_window(today)

        capacities = self.resolver.capacities_for_range(entity.id, start, end, ctx)
        loads = self.aggregator.load_for_range(entity, start, end, ctx)

        days = []
        for day, capacity in capacities:
            load = loads.get(day, 0.0)
            color = heatmap_color(load, capacity)
            days.append(HeatmapDay(date=day, load=load, capacity=capacity, color=str(color), color_hex=color.hex))

        logger.debug("Built heatmap for %s: %d days, %d with load", entity.id, len(days), len(loads))
        return HeatmapData(entity=entity, start=start, end=end, days=days)
