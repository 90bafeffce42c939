"""
Click aggregation for the link analytics view.

Turns raw click timestamps into a fixed number of equal-width time buckets,
suitable for drawing a sparkline.
"""

import math
from datetime import datetime, timezone
from typing import List, Sequence, Tuple


def _epoch_seconds(ts: datetime) -> float:
    # SQLite hands back naive datetimes; they are stored as UTC
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.timestamp()


def click_histogram(timestamps: Sequence[datetime], bucket_count: int = 30) -> List[int]:
    """
    Count clicks per time bucket between the first and the last click.

    The span [min, max] is split into *bucket_count* equal-width buckets;
    the last click lands in the last bucket. Always returns exactly
    *bucket_count* integers, oldest bucket first.

    - no clicks: all zeros
    - a single distinct timestamp: every click in bucket 0
    """
    if bucket_count < 1:
        raise ValueError("bucket_count must be at least 1")

    counts = [0] * bucket_count
    if not timestamps:
        return counts

    times = [_epoch_seconds(ts) for ts in timestamps]
    min_time = min(times)
    span = max(times) - min_time

    if span <= 0:
        counts[0] = len(times)
        return counts

    width = span / bucket_count
    for t in times:
        index = min(bucket_count - 1, int(math.floor((t - min_time) / width)))
        counts[index] += 1
    return counts


def sparkline_points(counts: Sequence[int], width: int = 240, height: int = 40) -> List[Tuple[int, int]]:
    """
    SVG polyline coordinates for *counts*.

    x spreads the buckets across *width*; y is inverted (SVG origin is top
    left) with a 1px margin so the line is never clipped.
    """
    if not counts:
        return []

    max_count = max(1, max(counts))
    last = max(1, len(counts) - 1)
    return [
        (
            round(i / last * width),
            round(height - (c / max_count) * (height - 2) - 1),
        )
        for i, c in enumerate(counts)
    ]
