"""
Tracking types: query events, call sites and aggregate records.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence


@dataclass(frozen=True)
class CallSite:
    """A stack frame that issued a query."""

    filename: str
    lineno: int = 0
    function: str = ""

    @classmethod
    def from_value(cls, value: Any) -> "CallSite":
        if isinstance(value, CallSite):
            return value
        if isinstance(value, str):
            return cls(filename=value)
        # traceback.FrameSummary
        return cls(
            filename=str(getattr(value, "filename", value)),
            lineno=int(getattr(value, "lineno", 0) or 0),
            function=str(getattr(value, "name", "") or ""),
        )

    def __str__(self) -> str:
        if not self.lineno:
            return self.filename
        if self.function:
            return f"{self.filename}:{self.lineno}:in {self.function}"
        return f"{self.filename}:{self.lineno}"


@dataclass
class QueryPayload:
    """Payload of one executed statement."""

    sql: Optional[str] = None
    params: Any = None
    many: bool = False
    alias: Optional[str] = None
    paths: Sequence[CallSite] = field(default_factory=tuple)

    @classmethod
    def from_value(cls, payload: Any) -> "QueryPayload":
        """Coerce a mapping (``{"sql": ...}``) or ``None`` into a payload."""
        if isinstance(payload, QueryPayload):
            return payload
        if not isinstance(payload, Mapping):
            return cls()
        sql = payload.get("sql")
        return cls(
            sql=sql if isinstance(sql, str) else None,
            params=payload.get("params"),
            many=bool(payload.get("many", False)),
            alias=payload.get("alias"),
            paths=tuple(CallSite.from_value(p) for p in payload.get("paths") or ()),
        )


@dataclass
class AggregateRecord:
    """Running statistics for one fingerprint."""

    sql: str
    count: int = 0
    total_duration: float = 0.0
    last_duration: float = 0.0
    sources: list[str] = field(default_factory=list)

    @property
    def average_duration(self) -> float:
        return self.total_duration / self.count if self.count else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "sql": self.sql,
            "count": self.count,
            "total_duration": self.total_duration,
            "last_duration": self.last_duration,
            "sources": list(self.sources),
        }
