"""
Query tracking package.
"""

from .aggregator import QueryAggregator
from .filters import QueryFilter, extract_sql_command
from .handler import Handler
from .types import AggregateRecord, CallSite, QueryPayload

__all__ = [
    "Handler",
    "QueryFilter",
    "QueryAggregator",
    "QueryPayload",
    "CallSite",
    "AggregateRecord",
    "extract_sql_command",
]
