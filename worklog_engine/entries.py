"""Create, edit, delete and copy work-log entries."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Iterable, Optional

from worklog_engine.dates import hours_between, iso_now, new_id
from worklog_engine.errors import NotFound, ValidationError
from worklog_engine.projects import find_project
from worklog_engine.schema import EntryDraft, Project, TagSet, WorkLogEntry

logger = logging.getLogger(__name__)


def compute_duration(start_time: str, end_time: str) -> float:
    """Validated duration in hours, rounded to two decimals."""

    duration = round(hours_between(start_time, end_time), 2)
    if duration <= 0:
        raise ValidationError("End time must be later than start time")
    return duration


def _index_of(logs: list[WorkLogEntry], entry_id: str) -> int:
    for index, log in enumerate(logs):
        if log.id == entry_id:
            return index
    raise NotFound("Entry", entry_id)


def _project_fields(draft: EntryDraft, projects: list[Project]) -> tuple[Optional[str], Optional[str]]:
    if not draft.project_id:
        return None, None
    project = find_project(projects, draft.project_id)
    return draft.project_id, project.name if project else None


def _validate(draft: EntryDraft) -> float:
    if not draft.title.strip():
        raise ValidationError("Title is required")
    if not draft.date:
        raise ValidationError("Date is required")
    return compute_duration(draft.start_time, draft.end_time)


def create_entry(
    logs: list[WorkLogEntry],
    draft: EntryDraft,
    tags: TagSet,
    projects: list[Project],
    now: Optional[datetime] = None,
) -> tuple[WorkLogEntry, TagSet]:
    """Validate ``draft`` and prepend a new entry to ``logs``.

    Returns the entry and an empty tag set for composing the next one.
    Nothing is added when validation fails.
    """

    duration = _validate(draft)
    project_id, project_name = _project_fields(draft, projects)
    stamp = iso_now(now)

    entry = WorkLogEntry(
        id=new_id((log.id for log in logs), now),
        date=draft.date,
        start_time=draft.start_time,
        end_time=draft.end_time,
        duration=duration,
        title=draft.title.strip(),
        project_id=project_id,
        project_name=project_name,
        content=draft.content,
        tags=list(tags),
        created_at=stamp,
        updated_at=stamp,
    )
    logs.insert(0, entry)
    logger.info("Created entry %s (%.2fh) on %s", entry.id, entry.duration, entry.date)
    return entry, TagSet()


def edit_entry(
    logs: list[WorkLogEntry],
    entry_id: str,
    draft: EntryDraft,
    tags: TagSet,
    projects: list[Project],
    now: Optional[datetime] = None,
) -> tuple[WorkLogEntry, TagSet]:
    """Replace every editable field of an existing entry in place."""

    entry = logs[_index_of(logs, entry_id)]
    duration = _validate(draft)
    project_id, project_name = _project_fields(draft, projects)

    entry.date = draft.date
    entry.start_time = draft.start_time
    entry.end_time = draft.end_time
    entry.duration = duration
    entry.title = draft.title.strip()
    entry.project_id = project_id
    entry.project_name = project_name
    entry.content = draft.content
    entry.tags = list(tags)
    entry.updated_at = iso_now(now)
    logger.info("Updated entry %s", entry.id)
    return entry, TagSet()


def delete_entry(logs: list[WorkLogEntry], entry_id: str) -> WorkLogEntry:
    entry = logs.pop(_index_of(logs, entry_id))
    logger.info("Deleted entry %s", entry_id)
    return entry


def copy_entry(logs: list[WorkLogEntry], entry_id: str, now: Optional[datetime] = None) -> WorkLogEntry:
    """Duplicate an entry dated today, with fresh id and timestamps."""

    source = logs[_index_of(logs, entry_id)]
    current = now or datetime.now()
    stamp = iso_now(current)
    duplicate = replace(
        source,
        id=new_id((log.id for log in logs), current),
        date=current.date().isoformat(),
        tags=list(source.tags),
        created_at=stamp,
        updated_at=stamp,
    )
    logs.insert(0, duplicate)
    logger.info("Copied entry %s to %s", entry_id, duplicate.id)
    return duplicate


def draft_from_entry(entry: WorkLogEntry) -> tuple[EntryDraft, TagSet]:
    """Form values and tag set for editing ``entry``."""

    draft = EntryDraft(
        date=entry.date,
        start_time=entry.start_time,
        end_time=entry.end_time,
        title=entry.title,
        project_id=entry.project_id,
        content=entry.content,
    )
    return draft, TagSet(tuple(entry.tags))


def remember_tags(known: Iterable[str], tags: Iterable[str]) -> list[str]:
    """Union of known tags and ``tags``; existing order kept, new tags appended."""

    merged = list(known)
    for tag in tags:
        if tag not in merged:
            merged.append(tag)
    return merged
