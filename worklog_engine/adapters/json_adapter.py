"""JSON export and import of the full work-log snapshot."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Optional

from worklog_engine.dates import iso_now
from worklog_engine.errors import MalformedInput
from worklog_engine.schema import Project, WorkLogEntry

logger = logging.getLogger(__name__)

IMPORT_MODES = ("replace", "merge")


@dataclass
class Snapshot:
    logs: list[WorkLogEntry] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    settings: dict[str, Any] = field(default_factory=dict)


def export_filename(kind: str, today: Optional[date] = None) -> str:
    day = (today or date.today()).isoformat()
    if kind == "json":
        return f"work-log-backup-{day}.json"
    if kind == "csv":
        return f"work-logs-{day}.csv"
    raise ValueError(f"Unsupported export format '{kind}'")


def dumps(snapshot: Snapshot, now: Optional[datetime] = None) -> str:
    """Serialize logs, projects and settings as ``{logs, projects, settings, exportDate}``."""

    document = {
        "logs": [log.to_dict() for log in snapshot.logs],
        "projects": [project.to_dict() for project in snapshot.projects],
        "settings": snapshot.settings,
        "exportDate": iso_now(now),
    }
    return json.dumps(document, ensure_ascii=False, indent=2)


def export(file_path: str, snapshot: Snapshot, now: Optional[datetime] = None) -> None:
    with open(file_path, "w", encoding="utf-8") as handle:
        handle.write(dumps(snapshot, now))
    logger.info("Exported %d logs to %s", len(snapshot.logs), file_path)


def _section(payload: dict, key: str, kind: type) -> Any:
    value = payload.get(key)
    if value is None:
        return kind()
    if not isinstance(value, kind):
        raise MalformedInput(f"'{key}' must be a {'list' if kind is list else 'object'}")
    return value


def loads(text: str) -> Snapshot:
    """Parse an exported document; nothing is returned unless every item is valid."""

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedInput(f"Invalid JSON: {exc.msg}") from exc

    if not isinstance(payload, dict):
        raise MalformedInput("JSON payload must be an object with logs, projects and settings")

    logs = _section(payload, "logs", list)
    projects = _section(payload, "projects", list)
    settings = _section(payload, "settings", dict)

    return Snapshot(
        logs=[WorkLogEntry.from_dict(item, i) for i, item in enumerate(logs, start=1)],
        projects=[Project.from_dict(item, i) for i, item in enumerate(projects, start=1)],
        settings=dict(settings),
    )


def parse(file_path: str) -> Snapshot:
    """Parse a JSON export file."""

    try:
        with open(file_path, encoding="utf-8") as handle:
            text = handle.read()
    except UnicodeDecodeError as exc:
        raise MalformedInput("File is not UTF-8 text") from exc
    return loads(text)


def apply_import(current: Snapshot, imported: Snapshot, mode: str = "replace") -> Snapshot:
    """Combine an imported snapshot with the current one.

    ``replace`` discards the current data. ``merge`` puts imported logs and
    projects ahead of the existing ones without de-duplicating ids, and lets
    imported settings override existing keys.
    """

    if mode not in IMPORT_MODES:
        raise ValueError(f"Unknown import mode '{mode}'")

    if mode == "replace":
        result = Snapshot(list(imported.logs), list(imported.projects), dict(imported.settings))
    else:
        result = Snapshot(
            logs=[*imported.logs, *current.logs],
            projects=[*imported.projects, *current.projects],
            settings={**current.settings, **imported.settings},
        )

    logger.info(
        "Imported %d logs and %d projects (%s)", len(imported.logs), len(imported.projects), mode
    )
    return result
