# Overview: UTC clock and the ISO-8601 conversions used by coupon windows and JSON output.

"""
Every datetime column holds naive UTC. Offsets only exist at the edges:
coupon windows arrive as ISO-8601 text with or without an offset, and
timestamps leave the API as `YYYY-MM-DDTHH:MM:SSZ`.
"""
from __future__ import annotations

from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: str | None) -> datetime | None:
    """
    Coupon window text to naive UTC. Blank means unset; a value without an
    offset is already UTC. Raises ValueError on anything else unparseable.
    """
    text = (value or "").strip()
    if not text:
        return None
    if text[-1] in "zZ":
        text = f"{text[:-1]}+00:00"
    return _as_naive_utc(datetime.fromisoformat(text))


def to_utc_z(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    stamp = _as_naive_utc(dt).replace(microsecond=0)
    return f"{stamp.isoformat()}Z"
