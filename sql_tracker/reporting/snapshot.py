"""
JSON snapshots of a handler's tracking table.
"""

import itertools
import json
import logging
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Union

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1
SNAPSHOT_PREFIX = "sql_tracker-"

_sequence = itertools.count(1)


def dump_snapshot(handler, output_dir: Union[str, Path]) -> Path:
    """
    Write the handler's data to ``output_dir`` and return the file path.

    File names are ``sql_tracker-<pid>-<epoch>-<n>.json`` so several processes, and
    several dumps from one process, can share the same directory.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    name = f"{SNAPSHOT_PREFIX}{os.getpid()}-{int(time.time())}-{next(_sequence)}.json"
    path = output_dir / name
    document = {
        "version": SNAPSHOT_VERSION,
        "generated_at": datetime.now().isoformat(),
        "data": handler.data,
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(document, f, indent=2)
    logger.info("SQL tracker snapshot written to %s", path)
    return path


def expand_paths(paths: Iterable[Union[str, Path]]) -> list[Path]:
    """Files as given, directories replaced by their ``*.json`` entries."""
    files: list[Path] = []
    for entry in paths:
        entry = Path(entry)
        if entry.is_dir():
            files.extend(sorted(entry.glob("*.json")))
        else:
            files.append(entry)
    return files


def merge_records(
    target: dict[str, dict[str, Any]], records: dict[str, dict[str, Any]]
) -> dict[str, dict[str, Any]]:
    """Fold ``records`` into ``target`` by fingerprint key."""
    for key, record in records.items():
        existing = target.get(key)
        if existing is None:
            target[key] = {
                "sql": record.get("sql", key),
                "count": int(record.get("count", 0)),
                "total_duration": float(record.get("total_duration", 0.0)),
                "last_duration": float(record.get("last_duration", 0.0)),
                "sources": list(record.get("sources") or []),
            }
            continue
        existing["count"] += int(record.get("count", 0))
        existing["total_duration"] += float(record.get("total_duration", 0.0))
        existing["last_duration"] = float(
            record.get("last_duration", existing["last_duration"])
        )
        for source in record.get("sources") or []:
            if source not in existing["sources"]:
                existing["sources"].append(source)
    return target


def load_snapshots(paths: Iterable[Union[str, Path]]) -> dict[str, dict[str, Any]]:
    """Read and merge snapshot files. Raises ``ValueError`` on bad input."""
    merged: dict[str, dict[str, Any]] = {}
    for path in expand_paths(paths):
        try:
            with open(path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ValueError(f"Cannot read snapshot {path}: {e}") from e
        data = document.get("data") if isinstance(document, dict) else None
        if not isinstance(data, dict):
            raise ValueError(f"Snapshot {path} has no data section")
        merge_records(merged, data)
    return merged
