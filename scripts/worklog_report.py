"""Query, summarize, export and import a work-log data directory."""

from __future__ import annotations

import argparse
import json
import sys
from dataclasses import asdict
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from worklog_engine.adapters import csv_adapter, json_adapter
from worklog_engine.aggregator import aggregate
from worklog_engine.config import configure_logging, get_settings
from worklog_engine.errors import WorkLogError
from worklog_engine.query import query
from worklog_engine.schema import PERIODS, SORT_KEYS, QuerySpec
from worklog_engine.storage import LocalStore


def _metrics(store: LocalStore, args) -> dict:
    metrics = aggregate(store.load_logs(), store.load_projects(), done_tags=args.done_tags or get_settings().done_tags)
    return asdict(metrics)


def _list(store: LocalStore, args) -> dict:
    spec = QuerySpec(
        period=args.period,
        start_date=args.start,
        end_date=args.end,
        project_id=args.project,
        search_text=args.search,
        sort=args.sort,
        page=args.page,
        page_size=args.page_size,
    )
    result = query(store.load_logs(), spec)
    return {
        "page": [log.to_dict() for log in result.page],
        "total_matched": result.total_matched,
        "page_count": result.page_count,
        "page_number": result.page_number,
    }


def _export(store: LocalStore, args) -> dict:
    out_path = Path(args.out)
    if args.format == "csv":
        csv_adapter.export(str(out_path), store.load_logs())
    else:
        snapshot = json_adapter.Snapshot(store.load_logs(), store.load_projects(), store.load_settings())
        json_adapter.export(str(out_path), snapshot)
    return {"exported": str(out_path)}


def _import(store: LocalStore, args) -> dict:
    imported = json_adapter.parse(args.file)
    current = json_adapter.Snapshot(store.load_logs(), store.load_projects(), store.load_settings())
    result = json_adapter.apply_import(current, imported, args.mode)
    store.save_logs(result.logs)
    store.save_projects(result.projects)
    store.save_settings(result.settings)
    return {"imported_logs": len(imported.logs), "total_logs": len(result.logs)}


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Work-log reporting tool")
    parser.add_argument("--data-dir", default=str(settings.data_dir), help="Directory holding the stored documents")
    sub = parser.add_subparsers(dest="command", required=True)

    metrics = sub.add_parser("metrics", help="Print dashboard metrics")
    metrics.add_argument("--done-tag", dest="done_tags", action="append", help="Tag marking a finished entry (repeatable)")

    listing = sub.add_parser("list", help="Print one page of filtered logs")
    listing.add_argument("--period", choices=PERIODS, default="all")
    listing.add_argument("--start")
    listing.add_argument("--end")
    listing.add_argument("--project")
    listing.add_argument("--search")
    listing.add_argument("--sort", choices=SORT_KEYS, default="date-desc")
    listing.add_argument("--page", type=int, default=1)
    listing.add_argument("--page-size", type=int, default=settings.page_size)

    export = sub.add_parser("export", help="Export logs as JSON or CSV")
    export.add_argument("--format", choices=["json", "csv"], default="json")
    export.add_argument("--out", required=True)

    importer = sub.add_parser("import", help="Import a JSON export")
    importer.add_argument("file")
    importer.add_argument("--mode", choices=json_adapter.IMPORT_MODES, default="merge")

    args = parser.parse_args()
    configure_logging(settings.log_level)

    store = LocalStore(args.data_dir, backup_limit=settings.backup_limit)
    handlers = {"metrics": _metrics, "list": _list, "export": _export, "import": _import}
    try:
        report = handlers[args.command](store, args)
    except (WorkLogError, OSError) as exc:
        parser.exit(2, f"error: {exc}\n")

    print(json.dumps(report, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
