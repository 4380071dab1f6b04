"""Calendar helpers shared by the query engine and the aggregator."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Iterable, Optional, Union

from worklog_engine.errors import ValidationError

DateLike = Union[date, datetime, None]


def as_date(value: DateLike = None) -> date:
    """Return the calendar date of ``value``, defaulting to today."""

    if value is None:
        return date.today()
    if isinstance(value, datetime):
        return value.date()
    return value


def day_of_week(day: date) -> int:
    """Day index with Sunday=0 through Saturday=6."""

    return (day.weekday() + 1) % 7


def start_of_week(today: date) -> date:
    """Most recent Sunday at or before ``today``."""

    return today - timedelta(days=day_of_week(today))


def in_month(iso_date: str, today: date) -> bool:
    return iso_date[:7] == today.isoformat()[:7]


def parse_clock(value: str) -> int:
    """Convert ``HH:MM`` into minutes after midnight."""

    try:
        hours, minutes = value.strip().split(":")[:2]
        total = int(hours) * 60 + int(minutes)
    except (AttributeError, ValueError) as exc:
        raise ValidationError(f"Invalid time '{value}', expected HH:MM") from exc
    if not (0 <= int(hours) <= 23 and 0 <= int(minutes) <= 59):
        raise ValidationError(f"Invalid time '{value}', expected HH:MM")
    return total


def hours_between(start_time: str, end_time: str) -> float:
    """Hours from ``start_time`` to ``end_time`` on the same day; may be non-positive."""

    return (parse_clock(end_time) - parse_clock(start_time)) / 60.0


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    if not value:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def iso_now(now: Optional[datetime] = None) -> str:
    return (now or datetime.now()).isoformat(timespec="seconds")


def new_id(existing: Iterable[str], now: Optional[datetime] = None) -> str:
    """Millisecond timestamp id, bumped until it is unused."""

    taken = set(existing)
    candidate = int((now or datetime.now()).timestamp() * 1000)
    while str(candidate) in taken:
        candidate += 1
    return str(candidate)
