"""Filter, sort and paginate the work-log collection."""

from __future__ import annotations

from datetime import date
from math import ceil
from typing import Callable, Optional

from worklog_engine.dates import DateLike, as_date, in_month, start_of_week
from worklog_engine.errors import InvalidArgument
from worklog_engine.schema import PERIODS, QueryResult, QuerySpec, WorkLogEntry

Predicate = Callable[[WorkLogEntry], bool]

_SORTS: dict[str, tuple[Callable[[WorkLogEntry], object], bool]] = {
    "date-desc": (lambda log: log.date, True),
    "date-asc": (lambda log: log.date, False),
    "duration-desc": (lambda log: log.duration, True),
    "duration-asc": (lambda log: log.duration, False),
}


def _period_predicate(spec: QuerySpec, today: date) -> Optional[Predicate]:
    period = spec.period or "all"
    if period not in PERIODS:
        raise InvalidArgument(f"Unknown period '{period}'")

    if period == "today":
        day = today.isoformat()
        return lambda log: log.date == day
    if period == "week":
        # Lower bound only; entries dated after today still match.
        week_start = start_of_week(today).isoformat()
        return lambda log: log.date >= week_start
    if period == "month":
        return lambda log: in_month(log.date, today)
    if period == "custom" and spec.start_date and spec.end_date:
        low, high = spec.start_date, spec.end_date
        return lambda log: low <= log.date <= high
    return None


def _predicates(spec: QuerySpec, today: date) -> list[Predicate]:
    predicates = []

    period = _period_predicate(spec, today)
    if period is not None:
        predicates.append(period)

    if spec.project_id:
        project_id = spec.project_id
        predicates.append(lambda log: log.project_id == project_id)

    if spec.search_text:
        needle = spec.search_text.lower()
        predicates.append(lambda log: needle in log.title.lower() or needle in log.content.lower())

    return predicates


def filter_logs(all_logs: list[WorkLogEntry], spec: QuerySpec, today: DateLike = None) -> list[WorkLogEntry]:
    """Apply the period, project and search filters of ``spec``."""

    predicates = _predicates(spec, as_date(today))
    return [log for log in all_logs if all(predicate(log) for predicate in predicates)]


def sort_logs(logs: list[WorkLogEntry], sort: str) -> list[WorkLogEntry]:
    """Stable sort; unknown keys keep the input order."""

    if sort not in _SORTS:
        return list(logs)
    key, reverse = _SORTS[sort]
    return sorted(logs, key=key, reverse=reverse)


def page_count(total_matched: int, page_size: int) -> int:
    if page_size <= 0:
        raise InvalidArgument(f"page_size must be positive, got {page_size}")
    return max(1, ceil(total_matched / page_size))


def query(all_logs: list[WorkLogEntry], spec: QuerySpec, today: DateLike = None) -> QueryResult:
    """Return one page of matching logs plus pagination metadata.

    ``spec.page`` is clamped into ``[1, page_count]`` so that a page removed
    by a deletion yields the last remaining page instead of an empty one.
    The page actually returned is reported as ``page_number``.
    """

    if spec.page_size <= 0:
        raise InvalidArgument(f"page_size must be positive, got {spec.page_size}")

    matched = sort_logs(filter_logs(all_logs, spec, today), spec.sort)
    total_pages = page_count(len(matched), spec.page_size)

    page_number = min(max(1, spec.page), total_pages)
    start = (page_number - 1) * spec.page_size
    return QueryResult(
        page=matched[start : start + spec.page_size],
        total_matched=len(matched),
        page_count=total_pages,
        page_number=page_number,
    )
