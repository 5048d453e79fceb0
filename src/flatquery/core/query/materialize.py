from __future__ import annotations

import logging
import math
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, List, Optional, Sequence, Tuple
from uuid import UUID

import duckdb
import numpy as np

from flatquery.core.errors import QueryError
from flatquery.core.models import PageResult
from flatquery.core.utils import unique_column_names

from .plan import count_statement, schema_probe_statement

logger = logging.getLogger(__name__)

# Integers beyond this lose precision in a double-only JSON consumer
MAX_SAFE_INTEGER = 2**53 - 1

WIDE_INTEGER_TYPES = {"BIGINT", "HUGEINT", "UBIGINT", "UHUGEINT", "INT64", "INT128"}


def normalize_value(value: Any, type_name: str = "") -> Any:
    """Make one engine value JSON-safe.

    Wide integer columns and out-of-range integers become decimal strings;
    decimals, temporal values, UUIDs and blobs become strings; nested lists
    and structs are normalized element-wise. Other values pass through.
    """
    if value is None or isinstance(value, (bool, str)):
        return value
    if isinstance(value, np.integer):
        return str(int(value))
    if isinstance(value, int):
        if type_name in WIDE_INTEGER_TYPES or abs(value) > MAX_SAFE_INTEGER:
            return str(value)
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else str(value)
    if isinstance(value, np.floating):
        return float(value) if np.isfinite(value) else str(value)
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, (timedelta, UUID)):
        return str(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value).hex()
    if isinstance(value, (list, tuple)):
        return [normalize_value(v) for v in value]
    if isinstance(value, dict):
        return {str(k): normalize_value(v) for k, v in value.items()}
    return value


def count_rows(con: duckdb.DuckDBPyConnection) -> int:
    """Row count of the unfiltered ``data`` table."""
    try:
        row = con.execute(count_statement()).fetchone()
    except duckdb.Error as exc:
        raise QueryError("Counting rows failed.", statement=count_statement(), detail=str(exc)) from exc
    return int(row[0]) if row else 0


def _probe_columns(con: duckdb.DuckDBPyConnection, statement: str) -> List[str]:
    """Column names the statement would return, or [] when unknowable."""
    try:
        rel = con.sql(schema_probe_statement(statement))
    except duckdb.Error as exc:
        logger.debug("Schema probe failed for %r: %s", statement, exc)
        return []
    if rel is None:
        return []
    return list(rel.columns)


def execute_statement(
    con: duckdb.DuckDBPyConnection, statement: str, *, origin: str = "page"
) -> Tuple[List[str], List[List[Any]]]:
    """Execute ``statement`` and return sanitized columns and normalized rows.

    The first returned row defines the schema. With zero rows the statement
    is wrapped in a ``LIMIT 0`` probe to recover the columns it would
    return; if that fails the column list is empty.
    """
    logger.debug("Executing %s statement: %s", origin, statement)
    try:
        rel = con.sql(statement)
        if rel is None:
            # Statement produced no result set (DDL/DML)
            return [], []
        raw_rows = rel.fetchall()
        type_names = [str(t).upper() for t in rel.types]
        names = list(rel.columns)
    except duckdb.Error as exc:
        raise QueryError(
            "The query could not be executed.",
            statement=statement,
            origin=origin,
            detail=str(exc),
        ) from exc

    if not raw_rows:
        names = _probe_columns(con, statement)
        return unique_column_names(names), []

    columns = unique_column_names(names)
    rows = [
        [normalize_value(v, type_names[i] if i < len(type_names) else "") for i, v in enumerate(r)]
        for r in raw_rows
    ]
    return columns, rows


def run_query(
    con: duckdb.DuckDBPyConnection,
    statement: str,
    declared_columns: Sequence[str],
    *,
    offset: int,
    limit: int,
    origin: str = "page",
    total: Optional[int] = None,
) -> PageResult:
    """Count the base table, run ``statement`` and shape a PageResult.

    ``declared_columns`` is the ingested table's schema; the result columns
    are what the statement actually returned, which differ for projections
    and aggregates.
    """
    if total is None:
        total = count_rows(con)
    columns, rows = execute_statement(con, statement, origin=origin)
    if list(columns) != list(declared_columns):
        logger.debug("Result columns %s differ from table columns %s", columns, list(declared_columns))
    return PageResult(columns=columns, rows=rows, offset=offset, limit=limit, total=total)


__all__ = [
    "MAX_SAFE_INTEGER",
    "WIDE_INTEGER_TYPES",
    "normalize_value",
    "count_rows",
    "execute_statement",
    "run_query",
]
