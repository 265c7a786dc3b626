"""
Capacity engine: capacity resolution, load aggregation, heatmap coloring
and the day drill-down.
"""

from loadcal.capacity.aggregator import LoadAggregator
from loadcal.capacity.day_detail import DayDetailAssembler
from loadcal.capacity.heatmap import HeatmapBuilder, HeatmapColor, MonthBlock, group_by_month, heatmap_color
from loadcal.capacity.resolver import CapacityResolver, DaySeries

__all__ = [
    "CapacityResolver",
    "DayDetailAssembler",
    "DaySeries",
    "HeatmapBuilder",
    "HeatmapColor",
    "LoadAggregator",
    "MonthBlock",
    "group_by_month",
    "heatmap_color",
]
