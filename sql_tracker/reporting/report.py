"""
Plain-text report over aggregated query statistics.
"""

from typing import Any, Optional

SORT_KEYS = ("count", "duration")


def build_report(
    data: dict[str, dict[str, Any]], sort_by: str = "count", limit: Optional[int] = None
) -> list[dict[str, Any]]:
    """
    Rank records by call count or total duration.

    Durations are reported in milliseconds; the tracker records seconds.
    """
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Invalid sort key '{sort_by}'. Use: {', '.join(SORT_KEYS)}")

    rows = []
    for record in data.values():
        count = int(record.get("count", 0))
        total_ms = float(record.get("total_duration", 0.0)) * 1000.0
        rows.append(
            {
                "sql": record.get("sql", ""),
                "count": count,
                "total_ms": total_ms,
                "average_ms": total_ms / count if count else 0.0,
                "sources": list(record.get("sources") or []),
            }
        )

    field_name = "count" if sort_by == "count" else "total_ms"
    rows.sort(key=lambda row: row[field_name], reverse=True)
    if limit is not None:
        rows = rows[:limit]
    return rows


def format_report(rows: list[dict[str, Any]], max_sql_length: int = 200) -> str:
    if not rows:
        return "No tracked queries."

    lines = [f"{'Count':>8}  {'Total ms':>12}  {'Avg ms':>10}  Query"]
    for row in rows:
        sql = row["sql"]
        if len(sql) > max_sql_length:
            sql = f"{sql[:max_sql_length]}..."
        lines.append(
            f"{row['count']:>8}  {row['total_ms']:>12.3f}  {row['average_ms']:>10.3f}  {sql}"
        )
        for source in row["sources"][:3]:
            lines.append(f"{'':>36}  from {source}")
    return "\n".join(lines)
