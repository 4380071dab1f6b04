"""File-backed key-value store for logs, projects, settings and tags."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from worklog_engine.dates import iso_now
from worklog_engine.errors import MalformedInput
from worklog_engine.projects import default_projects
from worklog_engine.schema import Project, WorkLogEntry

logger = logging.getLogger(__name__)

LOGS_KEY = "workLogs"
PROJECTS_KEY = "workProjects"
SETTINGS_KEY = "workSettings"
TAGS_KEY = "workTags"
BACKUPS_KEY = "workBackups"
BACKUP_VERSION = "1.0"


class LocalStore:
    """One JSON document per key inside ``data_dir``.

    Unreadable documents are reported and treated as absent, and malformed
    items inside a list are skipped, so loading always succeeds and keeps
    every valid item.
    """

    def __init__(self, data_dir: str | Path, backup_limit: int = 10):
        self.data_dir = Path(data_dir)
        self.backup_limit = backup_limit

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def get(self, key: str, default: Any = None) -> Any:
        path = self._path(key)
        if not path.exists():
            return default
        try:
            with open(path, encoding="utf-8") as handle:
                return json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable %s: %s", path, exc)
            return default

    def set(self, key: str, value: Any) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        fd, temp_path = tempfile.mkstemp(dir=self.data_dir, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(value, handle, ensure_ascii=False, indent=2)
            os.replace(temp_path, self._path(key))
        except BaseException:
            Path(temp_path).unlink(missing_ok=True)
            raise

    def _load_list(self, key: str) -> Optional[list]:
        payload = self.get(key)
        if payload is None:
            return None
        if not isinstance(payload, list):
            logger.warning("Ignoring %s: expected a list, got %s", key, type(payload).__name__)
            return None
        return payload

    def _load_items(self, key: str, parse) -> list:
        """Parse each stored item, skipping the malformed ones."""

        items = []
        for index, item in enumerate(self._load_list(key) or [], start=1):
            try:
                items.append(parse(item, index))
            except MalformedInput as exc:
                logger.warning("Skipping stored %s item: %s", key, exc)
        return items

    def load_logs(self) -> list[WorkLogEntry]:
        return self._load_items(LOGS_KEY, WorkLogEntry.from_dict)

    def save_logs(self, logs: list[WorkLogEntry]) -> None:
        self.set(LOGS_KEY, [log.to_dict() for log in logs])

    def load_projects(self) -> list[Project]:
        """Stored projects, seeding and saving the defaults when there are none."""

        projects = self._load_items(PROJECTS_KEY, Project.from_dict)
        if not projects:
            projects = default_projects()
            self.save_projects(projects)
        return projects

    def save_projects(self, projects: list[Project]) -> None:
        self.set(PROJECTS_KEY, [project.to_dict() for project in projects])

    def load_settings(self) -> dict[str, Any]:
        payload = self.get(SETTINGS_KEY, {})
        if not isinstance(payload, dict):
            logger.warning("Ignoring %s: expected an object", SETTINGS_KEY)
            return {}
        return payload

    def save_settings(self, settings: dict[str, Any]) -> None:
        self.set(SETTINGS_KEY, settings)

    def load_tags(self) -> list[str]:
        payload = self._load_list(TAGS_KEY) or []
        return [str(tag) for tag in payload]

    def save_tags(self, tags: list[str]) -> None:
        self.set(TAGS_KEY, list(tags))

    def load_backups(self) -> list[dict[str, Any]]:
        return [item for item in self._load_list(BACKUPS_KEY) or [] if isinstance(item, dict)]

    def create_backup(
        self,
        logs: list[WorkLogEntry],
        projects: list[Project],
        settings: dict[str, Any],
        now: Optional[datetime] = None,
    ) -> dict[str, Any]:
        """Store a snapshot, keeping only the newest ``backup_limit`` backups."""

        backup = {
            "logs": [log.to_dict() for log in logs],
            "projects": [project.to_dict() for project in projects],
            "settings": dict(settings),
            "timestamp": iso_now(now),
            "version": BACKUP_VERSION,
        }
        backups = [backup, *self.load_backups()][: self.backup_limit]
        self.set(BACKUPS_KEY, backups)
        logger.info("Created backup with %d logs (%d kept)", len(logs), len(backups))
        return backup
