"""Streamlit single-page UI for worklog-engine."""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Any, Optional

from worklog_engine.adapters import csv_adapter, json_adapter
from worklog_engine.aggregator import aggregate, format_hours, project_cards, recent_activity
from worklog_engine.config import configure_logging, get_settings
from worklog_engine.dates import parse_iso_date
from worklog_engine.entries import copy_entry, create_entry, delete_entry, draft_from_entry, edit_entry, remember_tags
from worklog_engine.errors import WorkLogError
from worklog_engine.projects import ProjectDraft, delete_project, find_project, save_project, status_label
from worklog_engine.query import query
from worklog_engine.schema import PROJECT_STATUSES, SORT_KEYS, EntryDraft, QuerySpec, TagSet, WorkLogEntry
from worklog_engine.storage import LocalStore

PAGES = ["Dashboard", "Add entry", "Logs", "Projects", "Statistics", "Data", "Settings"]
WEEKDAY_LABELS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
PERIOD_LABELS = {"all": "All time", "today": "Today", "week": "This week", "month": "This month", "custom": "Custom"}
SUGGESTED_TAGS = ["done", "meeting", "bugfix", "review", "research"]
THEMES = ["light", "dark", "auto"]


def build_dashboard(logs: list, projects: list, done_tags, today: Optional[date] = None) -> dict[str, Any]:
    """Collect every figure the dashboard renders."""

    metrics = aggregate(logs, projects, today, done_tags=done_tags)
    colors = {project.name: project.color for project in projects}
    return {
        "cards": {
            "Today": format_hours(metrics.today_hours),
            "Entries this month": str(metrics.month_log_count),
            "Active projects": str(metrics.active_project_count),
            "Completion": f"{metrics.completion_rate}%",
        },
        "weekly": {"day": WEEKDAY_LABELS, "hours": metrics.weekly_series},
        "project_share": [
            {"project": name, "hours": hours, "color": colors.get(name, "#666666")}
            for name, hours in metrics.project_totals.items()
        ],
        "recent": recent_activity(logs),
        "metrics": metrics,
    }


def stats_rows(metrics) -> list[dict[str, str]]:
    return [
        {
            "Project": name,
            "Total": format_hours(stat.total_hours),
            "Share": f"{stat.percentage:.1f}%",
            "Entries": str(stat.count),
            "Average": format_hours(stat.avg_daily),
        }
        for name, stat in metrics.project_stats.items()
    ]


def date_field_bounds(draft_date: str, today: Optional[date] = None) -> tuple[date, date]:
    """Initial value and upper bound for the entry date picker.

    Entries may be dated after today (imported or edited), so the bound never
    sits below the entry's own date. Unparseable dates start from today.
    """

    today = today or date.today()
    value = parse_iso_date(draft_date) or today
    return value, max(today, value)


def list_page_for(previous_filters: Optional[tuple], filters: tuple, page: int) -> int:
    """Current list page, back to the first one whenever the filters change."""

    if previous_filters is not None and previous_filters != filters:
        return 1
    return page


def _state():
    import streamlit as st

    if "store" not in st.session_state:
        config = get_settings()
        configure_logging(config.log_level)
        store = LocalStore(config.data_dir, backup_limit=config.backup_limit)
        st.session_state.config = config
        st.session_state.store = store
        st.session_state.logs = store.load_logs()
        st.session_state.projects = store.load_projects()
        st.session_state.settings = store.load_settings()
        st.session_state.known_tags = store.load_tags()
        st.session_state.tag_set = TagSet()
        st.session_state.editing_id = None
        st.session_state.list_page = 1
    return st.session_state


def _save_all(state) -> None:
    state.store.save_logs(state.logs)
    state.store.save_projects(state.projects)
    state.store.save_settings(state.settings)
    state.store.save_tags(state.known_tags)


def _render_entry(st, state, log: WorkLogEntry) -> None:
    with st.container(border=True):
        st.markdown(f"**{log.title}** · {log.date} {log.start_time}-{log.end_time} · {log.duration:.2f}h")
        st.markdown(f"_{log.project_name or 'No project'}_ " + " ".join(f"`{t}`" for t in log.tags))
        if log.content:
            st.text(log.content)
        c1, c2, c3 = st.columns(3)
        if c1.button("Edit", key=f"edit-{log.id}"):
            state.editing_id = log.id
            state.tag_set = TagSet(tuple(log.tags))
            st.rerun()
        if c2.button("Delete", key=f"delete-{log.id}"):
            try:
                delete_entry(state.logs, log.id)
            except WorkLogError as exc:
                st.warning(str(exc))
            else:
                _save_all(state)
                st.rerun()
        if c3.button("Copy", key=f"copy-{log.id}"):
            try:
                copy_entry(state.logs, log.id)
            except WorkLogError as exc:
                st.warning(str(exc))
            else:
                _save_all(state)
                st.rerun()


def _page_dashboard(st, state) -> None:
    view = build_dashboard(state.logs, state.projects, state.config.done_tags)
    columns = st.columns(len(view["cards"]))
    for column, (label, value) in zip(columns, view["cards"].items()):
        column.metric(label, value)

    left, right = st.columns(2)
    left.subheader("This week")
    left.bar_chart(view["weekly"], x="day", y="hours")
    right.subheader("Hours by project")
    if view["project_share"]:
        right.vega_lite_chart(
            {"values": view["project_share"]},
            {
                "mark": {"type": "arc", "innerRadius": 50},
                "encoding": {
                    "theta": {"field": "hours", "type": "quantitative"},
                    "color": {
                        "field": "project",
                        "type": "nominal",
                        "scale": {
                            "domain": [row["project"] for row in view["project_share"]],
                            "range": [row["color"] for row in view["project_share"]],
                        },
                    },
                },
            },
        )
    else:
        right.info("No project hours yet.")

    st.subheader("Recent activity")
    for log in view["recent"]:
        st.write(f"{log.date} {log.start_time} · {log.title} · {log.duration:.2f}h")


def _entry_form(st, state) -> None:
    editing = next((log for log in state.logs if log.id == state.editing_id), None)
    if editing is not None:
        draft, _ = draft_from_entry(editing)
        st.info(f"Editing '{editing.title}'")
    else:
        now = datetime.now()
        draft = EntryDraft(
            date=date.today().isoformat(),
            start_time=(now - timedelta(hours=2)).strftime("%H:%M"),
            end_time=now.strftime("%H:%M"),
            title="",
        )

    tag_col, suggest_col = st.columns([2, 3])
    new_tag = tag_col.text_input("Add tag")
    if tag_col.button("Add tag") and new_tag:
        state.tag_set = state.tag_set.add(new_tag)
    suggestions = [t for t in dict.fromkeys(SUGGESTED_TAGS + state.known_tags) if t not in state.tag_set]
    picked = suggest_col.multiselect("Suggestions", suggestions)
    for tag in picked:
        state.tag_set = state.tag_set.add(tag)
    removed = st.multiselect("Tags (select to remove)", list(state.tag_set))
    for tag in removed:
        state.tag_set = state.tag_set.remove(tag)

    project_ids = [""] + [project.id for project in state.projects]
    names = {project.id: project.name for project in state.projects}

    with st.form("entry-form", clear_on_submit=True):
        initial_date, latest_date = date_field_bounds(draft.date)
        entry_date = st.date_input("Date", value=initial_date, max_value=latest_date)
        c1, c2 = st.columns(2)
        start_time = c1.text_input("Start", value=draft.start_time)
        end_time = c2.text_input("End", value=draft.end_time)
        title = st.text_input("Title", value=draft.title)
        project_id = st.selectbox(
            "Project",
            project_ids,
            index=project_ids.index(draft.project_id) if draft.project_id in project_ids else 0,
            format_func=lambda pid: names.get(pid, "No project"),
        )
        content = st.text_area("Content", value=draft.content)
        submitted = st.form_submit_button("Save", type="primary")

    if not submitted:
        return

    new_draft = EntryDraft(
        date=entry_date.isoformat(),
        start_time=start_time,
        end_time=end_time,
        title=title,
        project_id=project_id or None,
        content=content,
    )
    try:
        if editing is not None:
            entry, state.tag_set = edit_entry(state.logs, editing.id, new_draft, state.tag_set, state.projects)
        else:
            entry, state.tag_set = create_entry(state.logs, new_draft, state.tag_set, state.projects)
    except WorkLogError as exc:
        st.error(f"Input error: {exc}")
        return

    state.known_tags = remember_tags(state.known_tags, entry.tags)
    state.editing_id = None
    _save_all(state)
    st.success("Entry saved.")


def _page_logs(st, state) -> None:
    with st.expander("Filters", expanded=True):
        c1, c2, c3 = st.columns(3)
        period = c1.selectbox("Period", list(PERIOD_LABELS), format_func=PERIOD_LABELS.get)
        names = {project.id: project.name for project in state.projects}
        project_id = c2.selectbox("Project", [""] + list(names), format_func=lambda pid: names.get(pid, "All projects"))
        sort = c3.selectbox("Sort", SORT_KEYS)
        start_date = end_date = None
        if period == "custom":
            d1, d2 = st.columns(2)
            start_date = d1.date_input("From").isoformat()
            end_date = d2.date_input("To").isoformat()
        search = st.text_input("Search title or content")

    filters = (period, start_date, end_date, project_id, search, sort)
    state.list_page = list_page_for(state.get("list_filters"), filters, state.list_page)
    state.list_filters = filters

    spec = QuerySpec(
        period=period,
        start_date=start_date,
        end_date=end_date,
        project_id=project_id or None,
        search_text=search or None,
        sort=sort,
        page=state.list_page,
        page_size=state.config.page_size,
    )
    try:
        result = query(state.logs, spec)
    except WorkLogError as exc:
        st.error(f"Input error: {exc}")
        return
    state.list_page = result.page_number

    st.caption(f"{result.total_matched} entries")
    if state.editing_id:
        st.info("An entry is open for editing on the 'Add entry' page.")
    if not result.page:
        st.info("No entries yet. Use 'Add entry' to record your work.")
    for log in result.page:
        _render_entry(st, state, log)

    p1, p2, p3 = st.columns([1, 2, 1])
    if p1.button("Previous", disabled=result.page_number <= 1):
        state.list_page = result.page_number - 1
        st.rerun()
    p2.write(f"Page {result.page_number} / {result.page_count}")
    if p3.button("Next", disabled=result.page_number >= result.page_count):
        state.list_page = result.page_number + 1
        st.rerun()


def _page_projects(st, state) -> None:
    for card in project_cards(state.logs, state.projects):
        project = card["project"]
        with st.container(border=True):
            st.markdown(f"**{project.name}** · {status_label(project.status)}")
            st.write(project.description or "No description")
            st.write(f"{format_hours(card['total_hours'])} · {card['count']} entries")
            st.progress(card["progress"] / 100)
            if st.button("Delete project", key=f"delete-project-{project.id}"):
                try:
                    delete_project(state.projects, project.id)
                except WorkLogError as exc:
                    st.warning(str(exc))
                else:
                    _save_all(state)
                    st.rerun()

    st.subheader("Create or edit project")
    choices = {"": "New project", **{project.id: project.name for project in state.projects}}
    selected = st.selectbox("Project", list(choices), format_func=choices.get)
    current = find_project(state.projects, selected)
    with st.form("project-form"):
        name = st.text_input("Name", value=current.name if current else "")
        description = st.text_area("Description", value=current.description if current else "")
        status = st.selectbox(
            "Status",
            PROJECT_STATUSES,
            index=PROJECT_STATUSES.index(current.status) if current and current.status in PROJECT_STATUSES else 1,
            format_func=status_label,
        )
        color = st.color_picker("Color", value=current.color if current else "#4CAF50")
        start_date = st.text_input("Start date (YYYY-MM-DD)", value=(current.start_date or "") if current else "")
        end_date = st.text_input("End date (YYYY-MM-DD)", value=(current.end_date or "") if current else "")
        submitted = st.form_submit_button("Save project")

    if submitted:
        draft = ProjectDraft(name, description, color, status, start_date or None, end_date or None)
        try:
            save_project(state.projects, draft, project_id=current.id if current else None)
        except WorkLogError as exc:
            st.error(f"Input error: {exc}")
        else:
            _save_all(state)
            st.success("Project saved.")


def _page_statistics(st, state) -> None:
    metrics = aggregate(state.logs, state.projects, done_tags=state.config.done_tags)
    c1, c2 = st.columns(2)
    c1.metric("Hours this month", format_hours(metrics.month_hours))
    c2.metric("Average per entry this month", format_hours(metrics.month_avg_hours))
    rows = stats_rows(metrics)
    if rows:
        st.table(rows)
    else:
        st.info("No project hours recorded yet.")


def _page_data(st, state) -> None:
    snapshot = json_adapter.Snapshot(state.logs, state.projects, state.settings)
    c1, c2 = st.columns(2)
    c1.download_button(
        "Export JSON",
        json_adapter.dumps(snapshot),
        file_name=json_adapter.export_filename("json"),
        mime="application/json",
    )
    c2.download_button(
        "Export CSV",
        csv_adapter.dumps(state.logs),
        file_name=json_adapter.export_filename("csv"),
        mime="text/csv",
    )

    st.subheader("Import")
    uploaded = st.file_uploader("JSON backup", type=["json"])
    mode = st.radio("Mode", json_adapter.IMPORT_MODES, horizontal=True)
    if uploaded is not None and st.button("Import"):
        try:
            imported = json_adapter.loads(uploaded.getvalue().decode("utf-8"))
        except (WorkLogError, UnicodeDecodeError) as exc:
            st.error(f"Invalid file: {exc}")
        else:
            result = json_adapter.apply_import(snapshot, imported, mode)
            state.logs, state.projects, state.settings = result.logs, result.projects, result.settings
            state.list_page = 1
            _save_all(state)
            st.success(f"Imported {len(imported.logs)} entries.")

    st.subheader("Backups")
    if st.button("Back up now"):
        state.store.create_backup(state.logs, state.projects, state.settings)
        st.success("Backup created.")
    st.caption(f"{len(state.store.load_backups())} backups stored")


def _page_settings(st, state) -> None:
    settings = state.settings
    with st.form("settings-form"):
        username = st.text_input("Name", value=settings.get("username", ""))
        daily_goal = st.number_input("Daily goal (hours)", min_value=0.0, value=float(settings.get("dailyGoal") or 8))
        weekly_goal = st.number_input("Weekly goal (hours)", min_value=0.0, value=float(settings.get("weeklyGoal") or 40))
        current_theme = settings.get("theme")
        theme = st.selectbox("Theme", THEMES, index=THEMES.index(current_theme) if current_theme in THEMES else 0)
        submitted = st.form_submit_button("Save settings")
    if submitted:
        settings.update(username=username, dailyGoal=daily_goal, weeklyGoal=weekly_goal, theme=theme)
        _save_all(state)
        st.success("Settings saved.")


def main() -> None:
    import streamlit as st

    st.set_page_config(page_title="Work Log", layout="wide")
    state = _state()

    with st.sidebar:
        st.header(state.settings.get("username") or "Work Log")
        st.caption(date.today().strftime("%A, %d %B %Y"))
        page = st.radio("Navigate", PAGES)

    st.title(page)
    handlers = {
        "Dashboard": _page_dashboard,
        "Add entry": _entry_form,
        "Logs": _page_logs,
        "Projects": _page_projects,
        "Statistics": _page_statistics,
        "Data": _page_data,
        "Settings": _page_settings,
    }
    handlers[page](st, state)


if __name__ == "__main__":
    main()
