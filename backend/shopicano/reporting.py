# Overview: Time-bucket construction for order reports.

"""
Buckets are built by fixed arithmetic walking back from `now`:

    bucket i (0 = most recent): end = now - i*unit, start = now - (i+1)*unit

Timelines: w = 7 x 1 day, m = 5 x 7 days, y = 12 x 30 days. No calendar
awareness: a "month" bucket is always 7 days, a "year" bucket 30.
Each bucket is half-open [start, end).
"""
from __future__ import annotations

from datetime import datetime, timedelta

DEFAULT_TIMELINE = "w"

# timeline -> (number of buckets, bucket width)
TIMELINES = {
    "w": (7, timedelta(days=1)),
    "m": (5, timedelta(days=7)),
    "y": (12, timedelta(days=30)),
}


def build_time_frames(timeline: str, now: datetime) -> list[tuple[datetime, datetime]]:
    """
    Return (start, end) pairs in ascending start order.

    Raises KeyError for an unknown timeline.
    """
    count, unit = TIMELINES[timeline]
    frames = [(now - (i + 1) * unit, now - i * unit) for i in range(count)]
    frames.reverse()
    return frames
