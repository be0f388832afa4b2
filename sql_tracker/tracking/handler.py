"""
Handler wiring filter, normalizer and aggregator together.
"""

import logging
from typing import Any

from ..normalizer import clean_sql_query
from .aggregator import QueryAggregator
from .filters import QueryFilter
from .types import QueryPayload

logger = logging.getLogger(__name__)


class Handler:
    """
    Receives executed-query events and aggregates them by fingerprint.

    A handler built without a configuration never records anything; its
    ``clean_sql_query`` method can still be used on its own.
    """

    def __init__(self, config=None):
        self.config = config
        self.filter = QueryFilter(config)
        self.aggregator = QueryAggregator()

    @property
    def data(self) -> dict[str, dict[str, Any]]:
        """Snapshot of the tracking table."""
        return self.aggregator.snapshot()

    @property
    def tracks_paths(self) -> bool:
        return self.filter.tracks_paths

    def call(self, name, started_at, finished_at, transaction_id, payload) -> None:
        """Track one executed statement. Never raises."""
        try:
            self._track(started_at, finished_at, QueryPayload.from_value(payload))
        except Exception:
            logger.warning(
                "Failed to track query event %s (%s)", name, transaction_id, exc_info=True
            )

    def clean_sql_query(self, query) -> str:
        return clean_sql_query(query)

    def reset(self) -> None:
        self.aggregator.reset()

    def _track(self, started_at, finished_at, payload: QueryPayload) -> None:
        sql = payload.sql
        if sql is None:
            return
        if not self.filter.accepts(sql, payload.paths):
            return

        duration = finished_at - started_at
        cleaned = self.clean_sql_query(sql)
        source = self.filter.matching_source(payload.paths)
        self.aggregator.record(
            cleaned.lower(),
            duration,
            sql=cleaned,
            source=str(source) if source is not None else None,
        )
