"""CSV export of work-log entries."""

from __future__ import annotations

import csv
import io
import logging

from worklog_engine.schema import WorkLogEntry

logger = logging.getLogger(__name__)

HEADER = ["Date", "Start Time", "End Time", "Duration", "Title", "Project", "Content"]


def _row(log: WorkLogEntry) -> list[str]:
    content = log.content.replace("\r\n", " ").replace("\n", " ").replace("\r", " ")
    return [
        log.date,
        log.start_time,
        log.end_time,
        f"{log.duration:.2f}",
        log.title,
        log.project_name or "",
        content,
    ]


def dumps(logs: list[WorkLogEntry]) -> str:
    """Render entries as CSV with a fixed seven-column header."""

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(HEADER)
    writer.writerows(_row(log) for log in logs)
    return buffer.getvalue()


def export(file_path: str, logs: list[WorkLogEntry]) -> None:
    with open(file_path, "w", newline="", encoding="utf-8") as handle:
        handle.write(dumps(logs))
    logger.info("Exported %d logs to %s", len(logs), file_path)
