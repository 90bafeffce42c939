"""
Tests for click histogram and sparkline helpers.
"""
from datetime import datetime, timedelta, timezone

import pytest

from mailshort_app.services.click_aggregator import click_histogram, sparkline_points

T0 = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class TestClickHistogram:
    """Test equal-width bucketing"""

    def test_empty_input_is_all_zeros(self):
        assert click_histogram([], 30) == [0] * 30

    def test_single_timestamp_goes_to_first_bucket(self):
        counts = click_histogram([T0, T0, T0], 5)
        assert counts == [3, 0, 0, 0, 0]

    def test_always_returns_bucket_count_values(self):
        stamps = [T0 + timedelta(minutes=i) for i in range(100)]
        counts = click_histogram(stamps, 30)

        assert len(counts) == 30
        assert sum(counts) == 100

    def test_first_and_last_click_in_outer_buckets(self):
        counts = click_histogram([T0, T0 + timedelta(hours=10)], 10)

        assert counts[0] == 1
        assert counts[-1] == 1
        assert sum(counts[1:-1]) == 0

    def test_even_spread(self):
        # Timestamps at the start of each of 4 equal slices of [0, 4h]
        stamps = [T0 + timedelta(hours=h) for h in (0, 1, 2, 3, 4)]
        assert click_histogram(stamps, 4) == [1, 1, 1, 2]

    def test_order_of_input_does_not_matter(self):
        stamps = [T0 + timedelta(minutes=m) for m in (5, 0, 17, 3, 29)]
        assert click_histogram(stamps, 6) == click_histogram(sorted(stamps), 6)

    def test_naive_timestamps_treated_as_utc(self):
        naive = [T0.replace(tzinfo=None), (T0 + timedelta(hours=1)).replace(tzinfo=None)]
        aware = [T0, T0 + timedelta(hours=1)]
        assert click_histogram(naive, 3) == click_histogram(aware, 3)

    def test_rejects_zero_buckets(self):
        with pytest.raises(ValueError):
            click_histogram([T0], 0)


class TestSparklinePoints:
    def test_empty(self):
        assert sparkline_points([]) == []

    def test_spans_width_and_peak_touches_top(self):
        points = sparkline_points([0, 5, 10], width=100, height=40)

        assert [x for x, _ in points] == [0, 50, 100]
        # Zero sits on the bottom margin, the maximum on the top margin
        assert points[0][1] == 39
        assert points[2][1] == 1

    def test_all_zero_is_flat(self):
        points = sparkline_points([0, 0, 0])
        assert len({y for _, y in points}) == 1
