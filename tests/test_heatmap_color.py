"""
Tests for heatmap color classification.

Tests cover:
- Every ladder boundary, exactly on and just either side
- Zero-capacity handling
- Hex codes and bucket ordering
"""

import pytest

from loadcal.capacity import HeatmapColor, heatmap_color


class TestLadderBoundaries:
    """ratio = load / capacity with capacity 10."""

    @pytest.mark.parametrize(
        "load, expected",
        [
            (0.0, HeatmapColor.IDLE),
            (0.01, HeatmapColor.MINIMAL),
            (1.99, HeatmapColor.MINIMAL),
            (2.0, HeatmapColor.MINIMAL),
            (2.01, HeatmapColor.LOW),
            (4.0, HeatmapColor.LOW),
            (4.01, HeatmapColor.MEDIUM),
            (6.0, HeatmapColor.MEDIUM),
            (6.01, HeatmapColor.HIGH),
            (8.0, HeatmapColor.HIGH),
            (8.01, HeatmapColor.NEAR_CAPACITY),
            (10.0, HeatmapColor.NEAR_CAPACITY),
            (10.01, HeatmapColor.OVERLOADED),
            (250.0, HeatmapColor.OVERLOADED),
        ],
    )
    def test_bucket(self, load, expected):
        assert heatmap_color(load, 10.0) == expected

    def test_exact_ratios_with_fractional_capacity(self):
        """Ratios computed from capacity 5 land exactly on the bounds."""
        assert heatmap_color(1.0, 5.0) == HeatmapColor.MINIMAL
        assert heatmap_color(2.0, 5.0) == HeatmapColor.LOW
        assert heatmap_color(3.0, 5.0) == HeatmapColor.MEDIUM
        assert heatmap_color(4.0, 5.0) == HeatmapColor.HIGH
        assert heatmap_color(5.0, 5.0) == HeatmapColor.NEAR_CAPACITY

    def test_monotonic_in_load(self):
        order = [
            HeatmapColor.IDLE,
            HeatmapColor.MINIMAL,
            HeatmapColor.LOW,
            HeatmapColor.MEDIUM,
            HeatmapColor.HIGH,
            HeatmapColor.NEAR_CAPACITY,
            HeatmapColor.OVERLOADED,
        ]
        ranks = [order.index(heatmap_color(load / 10, 7.0)) for load in range(0, 120)]
        assert ranks == sorted(ranks)


class TestZeroCapacity:
    def test_zero_load_is_idle(self):
        assert heatmap_color(0.0, 0.0) == HeatmapColor.IDLE

    @pytest.mark.parametrize("load", [0.001, 1.0, 3.0, 1e9])
    def test_any_load_is_overloaded_no_capacity(self, load):
        assert heatmap_color(load, 0.0) == HeatmapColor.OVERLOADED_NO_CAPACITY

    def test_same_severity_as_overloaded(self):
        """Distinct bucket, same visual severity."""
        assert HeatmapColor.OVERLOADED_NO_CAPACITY != HeatmapColor.OVERLOADED
        assert HeatmapColor.OVERLOADED_NO_CAPACITY.hex == HeatmapColor.OVERLOADED.hex


class TestHexCodes:
    def test_values(self):
        assert HeatmapColor.OVERLOADED.hex == "#8B0000"
        assert HeatmapColor.NEAR_CAPACITY.hex == "#dc2626"
        assert HeatmapColor.HIGH.hex == "#f97316"
        assert HeatmapColor.MEDIUM.hex == "#fbbf24"
        assert HeatmapColor.LOW.hex == "#a3e635"
        assert HeatmapColor.MINIMAL.hex == "#22c55e"
        assert HeatmapColor.IDLE.hex == "#e5e7eb"

    def test_eight_buckets(self):
        assert len(HeatmapColor) == 8

    def test_str_value(self):
        assert str(HeatmapColor.NEAR_CAPACITY) == "near_capacity"
