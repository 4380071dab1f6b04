"""Error types raised by the work-log engine."""

from __future__ import annotations


class WorkLogError(ValueError):
    """Base class for all work-log input problems."""


class InvalidArgument(WorkLogError):
    """A query specification is malformed (for example a non-positive page size)."""


class ValidationError(WorkLogError):
    """An entry failed validation and was not persisted."""


class NotFound(WorkLogError):
    """An entry or project addressed by id is no longer present."""

    def __init__(self, kind: str, item_id: str):
        super().__init__(f"{kind} '{item_id}' not found")
        self.kind = kind
        self.item_id = item_id


class MalformedInput(WorkLogError):
    """An import document could not be parsed or has an unexpected shape."""
