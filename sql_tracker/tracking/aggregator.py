"""
Aggregator for per-fingerprint query statistics.
"""

import threading
from typing import Any, Optional

from .types import AggregateRecord


class QueryAggregator:
    """Thread-safe table of fingerprint -> AggregateRecord."""

    def __init__(self):
        self.lock = threading.Lock()
        self._records: dict[str, AggregateRecord] = {}

    def record(
        self,
        key: str,
        duration: float,
        sql: Optional[str] = None,
        source: Optional[str] = None,
    ) -> None:
        """Add one observation of ``key``."""
        with self.lock:
            record = self._records.get(key)
            if record is None:
                record = AggregateRecord(sql=sql if sql is not None else key)
                self._records[key] = record
            record.count += 1
            record.total_duration += duration
            record.last_duration = duration
            if source and source not in record.sources:
                record.sources.append(source)

    def get(self, key: str) -> Optional[dict[str, Any]]:
        with self.lock:
            record = self._records.get(key)
            return record.to_dict() if record is not None else None

    def snapshot(self) -> dict[str, dict[str, Any]]:
        """Copy of the table as plain dicts."""
        with self.lock:
            return {key: record.to_dict() for key, record in self._records.items()}

    def reset(self) -> None:
        with self.lock:
            self._records.clear()

    def __len__(self) -> int:
        with self.lock:
            return len(self._records)
