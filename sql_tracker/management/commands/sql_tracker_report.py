"""
Management command printing a report from SQL tracker snapshots.
"""

import json
from typing import Any

from django.core.management.base import BaseCommand, CommandError

from ...reporting import SORT_KEYS, build_report, format_report, load_snapshots
from ...settings import TrackerSettings


class Command(BaseCommand):
    """Summarize tracked SQL fingerprints."""

    help = "Print the most frequent or slowest tracked SQL queries from snapshot files"

    def add_arguments(self, parser):
        parser.add_argument(
            "paths",
            nargs="*",
            help="Snapshot files or directories (default: SQL_TRACKER output_path)",
        )
        parser.add_argument(
            "--sort-by",
            choices=SORT_KEYS,
            default="count",
            help="Rank queries by call count or total duration (default: count)",
        )
        parser.add_argument(
            "--limit",
            type=int,
            default=10,
            help="Number of queries to show (default: 10)",
        )
        parser.add_argument(
            "--json",
            action="store_true",
            help="Output the report as JSON",
        )

    def handle(self, *args, **options):
        paths = options["paths"] or [str(TrackerSettings.from_django().get_output_path())]
        try:
            data = load_snapshots(paths)
        except ValueError as e:
            raise CommandError(str(e))
        if not data:
            raise CommandError(f"No snapshot data found in: {', '.join(paths)}")

        limit = options["limit"]
        if limit is not None and limit < 1:
            raise CommandError("--limit must be a positive integer")

        rows = build_report(data, sort_by=options["sort_by"], limit=limit)
        if options["json"]:
            self.stdout.write(json.dumps(rows, indent=2))
            return
        self._display_report(rows, data)

    def _display_report(self, rows: list[dict[str, Any]], data: dict[str, Any]):
        total_count = sum(record["count"] for record in data.values())
        self.stdout.write(
            self.style.SUCCESS(
                f"{len(data)} distinct queries, {total_count} executions"
            )
        )
        self.stdout.write(format_report(rows))
