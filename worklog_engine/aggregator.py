"""Dashboard and statistics aggregates."""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Iterable

import numpy as np

from worklog_engine.dates import DateLike, as_date, day_of_week, in_month, parse_iso_date, start_of_week
from worklog_engine.schema import Metrics, Project, ProjectStats, WorkLogEntry

# Entries recorded by the earlier browser app mark completion with "完成".
DONE_TAGS = ("done", "完成")
FALLBACK_COLOR = "#666666"


def weekly_series(logs: list[WorkLogEntry], today: date) -> list[float]:
    """Hours per weekday (Sunday=0) for entries dated on or after the start of this week."""

    week_start = start_of_week(today).isoformat()
    days = []
    hours = []
    for log in logs:
        if log.date < week_start:
            continue
        day = parse_iso_date(log.date)
        if day is None:
            continue
        days.append(day_of_week(day))
        hours.append(log.duration)

    series = np.bincount(np.asarray(days, dtype=int), weights=np.asarray(hours, dtype=float), minlength=7)
    return [float(value) for value in series]


def project_totals(logs: list[WorkLogEntry]) -> dict[str, float]:
    """Total hours grouped by each entry's project name snapshot."""

    totals: dict[str, float] = defaultdict(float)
    for log in logs:
        if log.project_name:
            totals[log.project_name] += log.duration
    return dict(totals)


def project_stats(logs: list[WorkLogEntry], projects: list[Project]) -> dict[str, ProjectStats]:
    """Per-project total, share of all hours, entry count and average per entry."""

    totals = project_totals(logs)
    counts: dict[str, int] = defaultdict(int)
    for log in logs:
        if log.project_name:
            counts[log.project_name] += 1

    colors = {project.name: project.color for project in projects}
    grand_total = sum(totals.values())

    return {
        name: ProjectStats(
            total_hours=total,
            percentage=(total / grand_total * 100.0) if grand_total > 0 else 0.0,
            count=counts[name],
            avg_daily=total / counts[name] if counts[name] else 0.0,
            color=colors.get(name, FALLBACK_COLOR),
        )
        for name, total in totals.items()
    }


def aggregate(
    all_logs: list[WorkLogEntry],
    projects: list[Project],
    as_of: DateLike = None,
    done_tags: Iterable[str] = DONE_TAGS,
) -> Metrics:
    """Compute every dashboard and statistics figure from the full collection."""

    today = as_date(as_of)
    today_iso = today.isoformat()

    today_hours = sum(log.duration for log in all_logs if log.date == today_iso)
    month_logs = [log for log in all_logs if in_month(log.date, today)]
    month_hours = sum(log.duration for log in month_logs)

    markers = {done_tags} if isinstance(done_tags, str) else set(done_tags)
    done_count = sum(1 for log in all_logs if markers.intersection(log.tags))
    completion_rate = round(done_count / len(all_logs) * 100) if all_logs else 0

    return Metrics(
        today_hours=today_hours,
        month_log_count=len(month_logs),
        month_hours=month_hours,
        month_avg_hours=month_hours / len(month_logs) if month_logs else 0.0,
        active_project_count=sum(1 for project in projects if project.status == "active"),
        completion_rate=completion_rate,
        weekly_series=weekly_series(all_logs, today),
        project_totals=project_totals(all_logs),
        project_stats=project_stats(all_logs, projects),
    )


def project_progress(project: Project, today: DateLike = None) -> int:
    """Percentage of the project's scheduled span that has elapsed."""

    start = parse_iso_date(project.start_date)
    end = parse_iso_date(project.end_date)
    if start is None or end is None:
        return 0

    day = as_date(today)
    if day < start:
        return 0
    if day > end or end <= start:
        return 100
    return round((day - start).days / (end - start).days * 100)


def project_cards(logs: list[WorkLogEntry], projects: list[Project], today: DateLike = None) -> list[dict]:
    """Hours, entry count and progress per project, joined live on project id."""

    cards = []
    for project in projects:
        project_logs = [log for log in logs if log.project_id == project.id]
        cards.append(
            {
                "project": project,
                "total_hours": sum(log.duration for log in project_logs),
                "count": len(project_logs),
                "progress": project_progress(project, today),
            }
        )
    return cards


def recent_activity(logs: list[WorkLogEntry], limit: int = 10) -> list[WorkLogEntry]:
    return list(logs[:limit])


def format_hours(value: float, digits: int = 1) -> str:
    return f"{value:.{digits}f}h"
