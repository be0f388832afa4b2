"""
Snapshot and report helpers.
"""

from .report import SORT_KEYS, build_report, format_report
from .snapshot import dump_snapshot, expand_paths, load_snapshots, merge_records

__all__ = [
    "dump_snapshot",
    "load_snapshots",
    "expand_paths",
    "merge_records",
    "build_report",
    "format_report",
    "SORT_KEYS",
]
