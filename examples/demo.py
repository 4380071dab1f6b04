"""Demo script for worklog-engine."""

import sys
from datetime import date
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from worklog_engine.adapters.json_adapter import parse
from worklog_engine.aggregator import aggregate
from worklog_engine.query import query
from worklog_engine.schema import QuerySpec


def main() -> None:
    snapshot = parse("examples/sample_worklog.json")
    result = query(snapshot.logs, QuerySpec(sort="duration-desc", page_size=3))
    print("Top entries:", [(log.date, log.title, log.duration) for log in result.page])
    print("Pages:", result.page_count, "matched:", result.total_matched)
    metrics = aggregate(snapshot.logs, snapshot.projects, as_of=date(2024, 6, 12))
    print("Project totals:", metrics.project_totals)
    print("Completion:", f"{metrics.completion_rate}%")


if __name__ == "__main__":
    main()
