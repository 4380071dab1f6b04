"""Core data schema for work-log entries and projects."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from worklog_engine.errors import MalformedInput

PROJECT_STATUSES = ("planning", "active", "completed", "on-hold")
PERIODS = ("all", "today", "week", "month", "custom")
SORT_KEYS = ("date-desc", "date-asc", "duration-desc", "duration-asc")
DEFAULT_PAGE_SIZE = 10
DEFAULT_PROJECT_COLOR = "#4CAF50"

_ENTRY_REQUIRED = ("id", "date", "startTime", "endTime", "duration", "title")
_PROJECT_REQUIRED = ("id", "name")


def _unique(values) -> list[str]:
    seen: list[str] = []
    for value in values:
        text = str(value).strip()
        if text and text not in seen:
            seen.append(text)
    return seen


def _missing(item: dict, required: tuple[str, ...]) -> list[str]:
    return [name for name in required if item.get(name) in (None, "")]


@dataclass
class WorkLogEntry:
    """One recorded unit of work.

    ``project_name`` is a snapshot of the project's name taken when the entry
    was saved. Renaming a project later does not relabel old entries, and all
    per-project statistics group by this snapshot.
    """

    id: str
    date: str
    start_time: str
    end_time: str
    duration: float
    title: str
    project_id: Optional[str] = None
    project_name: Optional[str] = None
    content: str = ""
    tags: list[str] = field(default_factory=list)
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "startTime": self.start_time,
            "endTime": self.end_time,
            "duration": f"{self.duration:.2f}",
            "title": self.title,
            "projectId": self.project_id or "",
            "projectName": self.project_name,
            "content": self.content,
            "tags": list(self.tags),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, item: Any, index: int = 0) -> "WorkLogEntry":
        if not isinstance(item, dict):
            raise MalformedInput(f"Log {index}: expected an object")
        missing = _missing(item, _ENTRY_REQUIRED)
        if missing:
            raise MalformedInput(f"Log {index}: missing required fields {missing}")

        try:
            duration = float(item["duration"])
        except (TypeError, ValueError) as exc:
            raise MalformedInput(f"Log {index}: invalid duration") from exc

        tags = item.get("tags") or []
        if not isinstance(tags, list):
            raise MalformedInput(f"Log {index}: tags must be a list")

        return cls(
            id=str(item["id"]),
            date=str(item["date"]),
            start_time=str(item["startTime"]),
            end_time=str(item["endTime"]),
            duration=duration,
            title=str(item["title"]),
            project_id=str(item["projectId"]) if item.get("projectId") else None,
            project_name=str(item["projectName"]) if item.get("projectName") else None,
            content=str(item.get("content") or ""),
            tags=_unique(tags),
            created_at=str(item.get("createdAt") or ""),
            updated_at=str(item.get("updatedAt") or ""),
        )


@dataclass
class Project:
    """A named grouping that entries are recorded against."""

    id: str
    name: str
    description: str = ""
    color: str = DEFAULT_PROJECT_COLOR
    status: str = "active"
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "color": self.color,
            "status": self.status,
            "startDate": self.start_date or "",
            "endDate": self.end_date or "",
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, item: Any, index: int = 0) -> "Project":
        if not isinstance(item, dict):
            raise MalformedInput(f"Project {index}: expected an object")
        missing = _missing(item, _PROJECT_REQUIRED)
        if missing:
            raise MalformedInput(f"Project {index}: missing required fields {missing}")

        return cls(
            id=str(item["id"]),
            name=str(item["name"]),
            description=str(item.get("description") or ""),
            color=str(item.get("color") or DEFAULT_PROJECT_COLOR),
            status=str(item.get("status") or "active"),
            start_date=item.get("startDate") or None,
            end_date=item.get("endDate") or None,
            created_at=str(item.get("createdAt") or ""),
            updated_at=str(item.get("updatedAt") or ""),
        )


@dataclass(frozen=True)
class TagSet:
    """Tags attached to the entry currently being composed."""

    tags: tuple[str, ...] = ()

    def add(self, tag: str) -> "TagSet":
        text = tag.strip()
        if not text or text in self.tags:
            return self
        return TagSet(self.tags + (text,))

    def remove(self, tag: str) -> "TagSet":
        return TagSet(tuple(t for t in self.tags if t != tag))

    def __contains__(self, tag: object) -> bool:
        return tag in self.tags

    def __iter__(self):
        return iter(self.tags)

    def __len__(self) -> int:
        return len(self.tags)


@dataclass
class EntryDraft:
    """User-supplied fields for creating or editing an entry."""

    date: str
    start_time: str
    end_time: str
    title: str
    project_id: Optional[str] = None
    content: str = ""


@dataclass
class QuerySpec:
    """Filter, sort and page parameters for the log listing."""

    period: str = "all"
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    project_id: Optional[str] = None
    search_text: Optional[str] = None
    sort: str = "date-desc"
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE


@dataclass
class QueryResult:
    page: list[WorkLogEntry]
    total_matched: int
    page_count: int
    page_number: int


@dataclass
class ProjectStats:
    total_hours: float
    percentage: float
    count: int
    avg_daily: float
    color: str


@dataclass
class Metrics:
    """Dashboard and statistics figures derived from the full collection."""

    today_hours: float
    month_log_count: int
    month_hours: float
    month_avg_hours: float
    active_project_count: int
    completion_rate: int
    weekly_series: list[float]
    project_totals: dict[str, float]
    project_stats: dict[str, ProjectStats]
