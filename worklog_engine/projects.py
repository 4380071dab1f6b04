"""Project bookkeeping."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from worklog_engine.dates import iso_now, new_id, parse_iso_date
from worklog_engine.errors import NotFound, ValidationError
from worklog_engine.schema import DEFAULT_PROJECT_COLOR, PROJECT_STATUSES, Project

logger = logging.getLogger(__name__)

_STATUS_LABELS = {
    "planning": "Planning",
    "active": "Active",
    "completed": "Completed",
    "on-hold": "On hold",
}


@dataclass
class ProjectDraft:
    name: str
    description: str = ""
    color: str = DEFAULT_PROJECT_COLOR
    status: str = "active"
    start_date: Optional[str] = None
    end_date: Optional[str] = None


def default_projects() -> list[Project]:
    """Seed used when no projects have been stored yet."""

    return [
        Project(id="1", name="Daily Work", color="#4CAF50", status="active"),
        Project(id="2", name="Development", color="#2196F3", status="active"),
        Project(id="3", name="Learning", color="#9C27B0", status="active"),
        Project(id="4", name="Meetings", color="#FF9800", status="active"),
    ]


def status_label(status: str) -> str:
    return _STATUS_LABELS.get(status, status)


def find_project(projects: list[Project], project_id: Optional[str]) -> Optional[Project]:
    """Look up a project by id; missing ids resolve to ``None``."""

    if not project_id:
        return None
    return next((project for project in projects if project.id == project_id), None)


def _validate(draft: ProjectDraft) -> None:
    if not draft.name.strip():
        raise ValidationError("Project name is required")
    if draft.status not in PROJECT_STATUSES:
        raise ValidationError(f"Invalid project status '{draft.status}'")
    start = parse_iso_date(draft.start_date)
    end = parse_iso_date(draft.end_date)
    if draft.start_date and start is None:
        raise ValidationError(f"Invalid start date '{draft.start_date}'")
    if draft.end_date and end is None:
        raise ValidationError(f"Invalid end date '{draft.end_date}'")


def save_project(
    projects: list[Project],
    draft: ProjectDraft,
    now: Optional[datetime] = None,
    project_id: Optional[str] = None,
) -> Project:
    """Create a project, or replace the one with ``project_id``.

    Renaming a project leaves the name snapshots on existing entries untouched.
    """

    _validate(draft)
    stamp = iso_now(now)

    index = None
    created_at = stamp
    if project_id is not None:
        index = next((i for i, project in enumerate(projects) if project.id == project_id), None)
        if index is None:
            raise NotFound("Project", project_id)
        created_at = projects[index].created_at or stamp
    else:
        project_id = new_id((project.id for project in projects), now)

    project = Project(
        id=project_id,
        name=draft.name.strip(),
        description=draft.description,
        color=draft.color or DEFAULT_PROJECT_COLOR,
        status=draft.status,
        start_date=draft.start_date or None,
        end_date=draft.end_date or None,
        created_at=created_at,
        updated_at=stamp,
    )

    if index is None:
        projects.append(project)
        logger.info("Created project %s (%s)", project.id, project.name)
    else:
        projects[index] = project
        logger.info("Updated project %s (%s)", project.id, project.name)
    return project


def delete_project(projects: list[Project], project_id: str) -> Project:
    """Remove a project; entries that reference it are kept."""

    for index, project in enumerate(projects):
        if project.id == project_id:
            logger.info("Deleted project %s (%s)", project_id, project.name)
            return projects.pop(index)
    raise NotFound("Project", project_id)
