"""Query engine data models.

This module defines the plain data passed across the engine boundary:
- PageRequest: what a caller asks for
- PageResult: ordered columns plus ordered value rows for one page
- TableHandle: the ephemeral ``data`` table created by ingestion
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import duckdb

from flatquery.core.config import UNBOUNDED_LIMIT
from flatquery.core.enums import FileKind

TABLE_NAME = "data"


@dataclass(frozen=True)
class PageRequest:
    """A request for one page of a file.

    Attributes:
        file_path: Source file to ingest.
        offset: Rows to skip (>= 0).
        limit: Maximum rows to return (> 0), or ``UNBOUNDED_LIMIT``.
        search: Free-text needle matched against every column.
        sql: Caller-supplied statement; when non-empty it always wins over ``search``.

    Examples:
        >>> PageRequest("people.csv", offset=0, limit=50, search="Bob")
    """

    file_path: Union[str, Path]
    offset: int = 0
    limit: int = 100
    search: Optional[str] = None
    sql: Optional[str] = None

    def __post_init__(self) -> None:
        """Validate field constraints."""
        if isinstance(self.offset, bool) or not isinstance(self.offset, int) or self.offset < 0:
            raise ValueError(f"offset must be a non-negative integer, got {self.offset!r}")
        if isinstance(self.limit, bool) or not isinstance(self.limit, int) or self.limit <= 0:
            raise ValueError(f"limit must be a positive integer, got {self.limit!r}")

    @property
    def is_unbounded(self) -> bool:
        return self.limit >= UNBOUNDED_LIMIT


@dataclass
class PageResult:
    """One page of query output.

    ``total`` is the row count of the unfiltered ``data`` table, not of the
    search or SQL result. It is the denominator for "of N records".
    """

    columns: List[str]
    rows: List[List[Any]]
    offset: int
    limit: int
    total: int

    def __post_init__(self) -> None:
        """Validate field constraints."""
        width = len(self.columns)
        for i, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(f"Row {i} has {len(row)} values, expected {width}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": list(self.columns),
            "rows": [list(r) for r in self.rows],
            "offset": self.offset,
            "limit": self.limit,
            "total": self.total,
        }


@dataclass
class TableHandle:
    """The ``data`` table inside one ephemeral engine connection.

    An empty handle (no columns) means ingestion found nothing to stage and
    no table was created.
    """

    connection: duckdb.DuckDBPyConnection
    kind: FileKind
    columns: List[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.columns


__all__ = ["TABLE_NAME", "PageRequest", "PageResult", "TableHandle"]
