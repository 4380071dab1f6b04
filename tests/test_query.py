from datetime import date
from math import ceil

import pytest

from worklog_engine.errors import InvalidArgument
from worklog_engine.query import page_count, query
from worklog_engine.schema import QuerySpec, WorkLogEntry

TODAY = date(2024, 6, 12)  # a Wednesday; the week starts on Sunday 2024-06-09


def entry(entry_id, day, duration, project_name=None, title="Task", content="", project_id=None):
    return WorkLogEntry(
        id=entry_id,
        date=day,
        start_time="09:00",
        end_time="10:00",
        duration=duration,
        title=title,
        project_id=project_id,
        project_name=project_name,
        content=content,
    )


def sample_logs():
    return [
        entry("a", "2024-06-10", 2.0, "A"),
        entry("b", "2024-06-11", 3.5, "B"),
    ]


def ids(result):
    return [log.id for log in result.page]


def test_default_sort_is_newest_first():
    result = query(sample_logs(), QuerySpec(period="all", sort="date-desc", page=1, page_size=10), TODAY)
    assert ids(result) == ["b", "a"]
    assert result.total_matched == 2
    assert result.page_count == 1


def test_second_page_of_size_one():
    result = query(sample_logs(), QuerySpec(page=2, page_size=1), TODAY)
    assert ids(result) == ["a"]
    assert result.page_count == 2


def test_empty_collection():
    result = query([], QuerySpec(), TODAY)
    assert result.page == []
    assert result.total_matched == 0
    assert result.page_count == 1
    assert result.page_number == 1


@pytest.mark.parametrize("size", [0, -3])
def test_non_positive_page_size_rejected(size):
    with pytest.raises(InvalidArgument):
        query(sample_logs(), QuerySpec(page_size=size), TODAY)


def test_unknown_period_rejected():
    with pytest.raises(InvalidArgument):
        query(sample_logs(), QuerySpec(period="decade"), TODAY)


def test_today_period():
    logs = [entry("x", "2024-06-12", 1.0), entry("y", "2024-06-11", 1.0)]
    assert ids(query(logs, QuerySpec(period="today"), TODAY)) == ["x"]


def test_week_period_has_no_upper_bound():
    logs = [
        entry("sat", "2024-06-08", 1.0),
        entry("sun", "2024-06-09", 1.0),
        entry("future", "2024-06-20", 1.0),
    ]
    result = query(logs, QuerySpec(period="week", sort="date-asc"), TODAY)
    assert ids(result) == ["sun", "future"]


def test_week_starts_today_on_sunday():
    logs = [entry("sat", "2024-06-15", 1.0), entry("sun", "2024-06-16", 1.0)]
    assert ids(query(logs, QuerySpec(period="week"), date(2024, 6, 16))) == ["sun"]


def test_month_period():
    logs = [
        entry("may", "2024-05-31", 1.0),
        entry("june", "2024-06-01", 1.0),
        entry("last-year", "2023-06-15", 1.0),
    ]
    assert ids(query(logs, QuerySpec(period="month"), TODAY)) == ["june"]


def test_custom_period_is_inclusive():
    logs = [entry(str(day), f"2024-06-{day:02d}", 1.0) for day in range(1, 8)]
    spec = QuerySpec(period="custom", start_date="2024-06-02", end_date="2024-06-04", sort="date-asc")
    assert ids(query(logs, spec, TODAY)) == ["2", "3", "4"]


def test_custom_period_without_both_bounds_does_not_filter():
    logs = [entry(str(day), f"2024-06-{day:02d}", 1.0) for day in range(1, 4)]
    result = query(logs, QuerySpec(period="custom", start_date="2024-06-02"), TODAY)
    assert result.total_matched == 3


def test_project_filter_and_search_combine():
    logs = [
        entry("1", "2024-06-01", 1.0, title="Write report", project_id="p1"),
        entry("2", "2024-06-02", 1.0, title="Meeting", content="discussed the REPORT", project_id="p1"),
        entry("3", "2024-06-03", 1.0, title="Report review", project_id="p2"),
        entry("4", "2024-06-04", 1.0, title="Lunch", project_id="p1"),
    ]
    result = query(logs, QuerySpec(project_id="p1", search_text="Report", sort="date-asc"), TODAY)
    assert ids(result) == ["1", "2"]


def test_empty_project_id_means_all_projects():
    logs = [entry("1", "2024-06-01", 1.0, project_id="p1"), entry("2", "2024-06-02", 1.0)]
    assert query(logs, QuerySpec(project_id=""), TODAY).total_matched == 2


def test_duration_sorts_are_stable():
    logs = [
        entry("a", "2024-06-01", 2.0),
        entry("b", "2024-06-02", 1.0),
        entry("c", "2024-06-03", 2.0),
    ]
    assert ids(query(logs, QuerySpec(sort="duration-desc"), TODAY)) == ["a", "c", "b"]
    assert ids(query(logs, QuerySpec(sort="duration-asc"), TODAY)) == ["b", "a", "c"]


def test_date_sorts_are_reverses_of_each_other():
    logs = [entry(str(day), f"2024-06-{day:02d}", float(day)) for day in (5, 1, 9, 3)]
    desc = ids(query(logs, QuerySpec(sort="date-desc"), TODAY))
    asc = ids(query(logs, QuerySpec(sort="date-asc"), TODAY))
    assert desc == list(reversed(asc))


def test_page_beyond_end_clamps_to_last_page():
    logs = [entry(str(day), f"2024-06-{day:02d}", 1.0) for day in range(1, 4)]
    result = query(logs, QuerySpec(sort="date-asc", page=5, page_size=2), TODAY)
    assert result.page_number == 2
    assert ids(result) == ["3"]


def test_page_below_one_clamps_to_first_page():
    result = query(sample_logs(), QuerySpec(page=0, page_size=1), TODAY)
    assert result.page_number == 1
    assert ids(result) == ["b"]


@pytest.mark.parametrize("total", [0, 1, 9, 10, 11, 25])
@pytest.mark.parametrize("size", [1, 3, 10])
def test_page_count_matches_ceiling(total, size):
    assert page_count(total, size) == max(1, ceil(total / size))


def test_refiltering_a_full_page_is_idempotent():
    logs = [entry(str(day), f"2024-06-{day:02d}", 1.0, title="focus" if day % 2 else "other") for day in range(1, 20)]
    spec = QuerySpec(period="month", search_text="focus")
    first = query(logs, spec, TODAY)
    again = query(
        first.page,
        QuerySpec(period="month", search_text="focus", page=1, page_size=first.total_matched),
        TODAY,
    )
    assert {log.id for log in again.page} == {log.id for log in first.page}
