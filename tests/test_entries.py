from datetime import datetime

import pytest

from worklog_engine.entries import (
    compute_duration,
    copy_entry,
    create_entry,
    delete_entry,
    draft_from_entry,
    edit_entry,
    remember_tags,
)
from worklog_engine.errors import NotFound, ValidationError
from worklog_engine.schema import EntryDraft, Project, TagSet

NOW = datetime(2024, 6, 12, 17, 0, 0)


def projects():
    return [Project(id="p1", name="Development"), Project(id="p2", name="Meetings")]


def draft(**overrides):
    values = {
        "date": "2024-06-12",
        "start_time": "09:00",
        "end_time": "11:30",
        "title": "Write tests",
        "project_id": "p1",
        "content": "line one\nline two",
    }
    values.update(overrides)
    return EntryDraft(**values)


def test_compute_duration():
    assert compute_duration("09:00", "11:30") == 2.5
    assert compute_duration("09:10", "09:30") == 0.33


@pytest.mark.parametrize("start, end", [("09:00", "08:00"), ("09:00", "09:00")])
def test_non_positive_duration_rejected(start, end):
    with pytest.raises(ValidationError):
        compute_duration(start, end)


def test_malformed_time_rejected():
    with pytest.raises(ValidationError):
        compute_duration("9am", "10:00")


def test_create_entry_prepends_and_clears_tags():
    logs = []
    tags = TagSet().add("review").add("done")
    first, tags = create_entry(logs, draft(), tags, projects(), NOW)
    assert len(tags) == 0
    second, _ = create_entry(logs, draft(title="Second"), TagSet(), projects(), NOW)

    assert [log.id for log in logs] == [second.id, first.id]
    assert first.id != second.id
    assert first.duration == 2.5
    assert first.project_name == "Development"
    assert first.tags == ["review", "done"]
    assert first.created_at == first.updated_at == "2024-06-12T17:00:00"


def test_create_entry_rejects_reversed_times():
    logs = []
    with pytest.raises(ValidationError):
        create_entry(logs, draft(start_time="09:00", end_time="08:00"), TagSet(), projects(), NOW)
    assert logs == []


def test_create_entry_requires_title():
    with pytest.raises(ValidationError):
        create_entry([], draft(title="  "), TagSet(), projects(), NOW)


def test_unknown_project_keeps_id_without_name():
    entry, _ = create_entry([], draft(project_id="gone"), TagSet(), projects(), NOW)
    assert entry.project_id == "gone"
    assert entry.project_name is None


def test_edit_entry_replaces_fields_but_keeps_identity():
    logs = []
    entry, _ = create_entry(logs, draft(), TagSet(), projects(), NOW)
    later = datetime(2024, 6, 13, 8, 0, 0)

    edited, tags = edit_entry(
        logs,
        entry.id,
        draft(title="Renamed", project_id="p2", start_time="10:00", end_time="10:45"),
        TagSet(("meeting",)),
        projects(),
        later,
    )

    assert edited is logs[0]
    assert edited.id == entry.id
    assert edited.created_at == "2024-06-12T17:00:00"
    assert edited.updated_at == "2024-06-13T08:00:00"
    assert edited.duration == 0.75
    assert edited.project_name == "Meetings"
    assert edited.tags == ["meeting"]
    assert len(tags) == 0


def test_edit_entry_validates_duration():
    logs = []
    entry, _ = create_entry(logs, draft(), TagSet(), projects(), NOW)
    with pytest.raises(ValidationError):
        edit_entry(logs, entry.id, draft(end_time="08:00"), TagSet(), projects(), NOW)
    assert logs[0].duration == 2.5


def test_missing_ids_raise_not_found():
    logs = []
    create_entry(logs, draft(), TagSet(), projects(), NOW)
    with pytest.raises(NotFound):
        edit_entry(logs, "nope", draft(), TagSet(), projects(), NOW)
    with pytest.raises(NotFound):
        delete_entry(logs, "nope")
    with pytest.raises(NotFound):
        copy_entry(logs, "nope", NOW)
    assert len(logs) == 1


def test_delete_entry():
    logs = []
    entry, _ = create_entry(logs, draft(), TagSet(), projects(), NOW)
    assert delete_entry(logs, entry.id) is entry
    assert logs == []


def test_copy_entry_resets_date_and_identity():
    logs = []
    entry, _ = create_entry(logs, draft(date="2024-06-01"), TagSet(("done",)), projects(), NOW)
    later = datetime(2024, 6, 20, 9, 0, 0)

    duplicate = copy_entry(logs, entry.id, later)

    assert logs[0] is duplicate
    assert duplicate.id != entry.id
    assert duplicate.date == "2024-06-20"
    assert duplicate.created_at == duplicate.updated_at == "2024-06-20T09:00:00"
    assert (duplicate.title, duplicate.duration, duplicate.project_name) == (
        entry.title,
        entry.duration,
        entry.project_name,
    )
    duplicate.tags.append("extra")
    assert entry.tags == ["done"]


def test_draft_from_entry_round_trips_into_edit():
    logs = []
    entry, _ = create_entry(logs, draft(), TagSet(("a", "b")), projects(), NOW)
    form, tags = draft_from_entry(entry)
    assert form.title == entry.title
    assert tuple(tags) == ("a", "b")


def test_tag_set_is_unique_and_immutable():
    tags = TagSet().add("x").add(" x ").add("").add("y")
    assert tuple(tags) == ("x", "y")
    smaller = tags.remove("x")
    assert tuple(smaller) == ("y",)
    assert "x" in tags


def test_remember_tags_never_shrinks():
    assert remember_tags(["a", "b"], ["b", "c"]) == ["a", "b", "c"]
    assert remember_tags(["a"], []) == ["a"]
