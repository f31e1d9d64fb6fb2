from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List

import pyarrow as pa


class QueryStatus(str, Enum):
    CREATED = "created"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (QueryStatus.COMPLETED, QueryStatus.FAILED, QueryStatus.CANCELLED)


@dataclass(slots=True)
class QueryStats:
    state: QueryStatus
    rows_fetched: int = 0
    elapsed_ms: int = 0


@dataclass(slots=True)
class QueryResult:
    """
    Rows and columns of a finished execution. Statements carry no rows; a
    cancelled execution carries the rows fetched before it stopped.
    """

    status: QueryStatus
    columns: List[str] = field(default_factory=list)
    rows: List[List[Any]] = field(default_factory=list)
    elapsed_ms: int = 0
    sql: str = ""

    @property
    def rowcount(self) -> int:
        return len(self.rows)

    def json_safe(self) -> Dict[str, Any]:
        """Return structure suitable for JSON serialization."""
        return {
            "status": self.status.value,
            "columns": self.columns,
            "rows": [[_json_safe(cell) for cell in row] for row in self.rows],
            "rowcount": self.rowcount,
            "elapsed_ms": self.elapsed_ms,
            "sql": self.sql,
        }

    def to_arrow(self) -> pa.Table:
        if not self.columns:
            return pa.table({})
        data: dict[str, list[Any]] = {column: [] for column in self.columns}
        for row in self.rows:
            for index, column in enumerate(self.columns):
                data[column].append(row[index] if index < len(row) else None)
        return pa.table(data)


def _json_safe(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if hasattr(value, "isoformat"):
        return value.isoformat()
    try:
        json.dumps(value)
        return value
    except TypeError:
        return str(value)

