"""Shared loader helpers: source checks, error translation and manual staging."""

from __future__ import annotations

import json
import logging
import math
import os
from pathlib import Path
from typing import Any, List, Sequence, Tuple, Union

import duckdb
from tqdm import tqdm

from flatquery.core.config import DEFAULT_CONFIG, EngineConfig
from flatquery.core.errors import (
    EngineRejectedError,
    IngestError,
    SourceUnparsableError,
    SourceUnreadableError,
)
from flatquery.core.models import TABLE_NAME
from flatquery.core.utils import (
    quote_ident,
    quote_literal,
    unique_column_names,
)

logger = logging.getLogger(__name__)


def ensure_readable(path: Union[str, Path]) -> Path:
    """Return the resolved path or raise SourceUnreadableError."""
    p = Path(path)
    if not p.exists():
        raise SourceUnreadableError(f"File not found: {p}", path=p)
    if not p.is_file():
        raise SourceUnreadableError(f"Not a regular file: {p}", path=p)
    if not os.access(p, os.R_OK):
        raise SourceUnreadableError(f"Permission denied: {p}", path=p)
    return p.resolve()


def translate_engine_error(exc: duckdb.Error, path: Path, action: str) -> IngestError:
    """Map a DuckDB failure during ingestion onto the IngestError family."""
    if isinstance(exc, duckdb.IOException):
        return SourceUnreadableError(f"Could not read {path.name} while {action}.", path=path, detail=str(exc))
    if isinstance(exc, (duckdb.CatalogException, duckdb.NotImplementedException)):
        return EngineRejectedError(f"The engine cannot handle {path.name} while {action}.", path=path, detail=str(exc))
    return SourceUnparsableError(f"Could not parse {path.name} while {action}.", path=path, detail=str(exc))


def cell_to_text(value: Any) -> str:
    """Coerce one staged cell to text. Missing values become empty strings."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    if isinstance(value, (list, dict)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def sanitized_projection(raw: Sequence[str]) -> Tuple[List[str], str]:
    """Return sanitized unique names and the ``"old" AS "new"`` select list.

    The table is built from this projection in a single statement, so its
    schema matches the declared column list and a header that sanitizes
    onto a later column's name never collides mid-rename.
    """
    clean = unique_column_names(raw)
    for old, new in zip(raw, clean):
        if old != new:
            logger.debug("Renaming column %r -> %r", old, new)
    projection = ", ".join(f"{quote_ident(old)} AS {quote_ident(new)}" for old, new in zip(raw, clean))
    return clean, projection


def _values_clause(rows: Sequence[Sequence[Any]], width: int) -> str:
    tuples = []
    for row in rows:
        cells = [cell_to_text(row[i]) if i < len(row) else "" for i in range(width)]
        tuples.append("(" + ", ".join(quote_literal(c) for c in cells) + ")")
    return ", ".join(tuples)


def stage_text_table(
    con: duckdb.DuckDBPyConnection,
    columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
    *,
    path: Path,
    config: EngineConfig = DEFAULT_CONFIG,
) -> List[str]:
    """Create ``data`` with one VARCHAR column per header and insert ``rows``.

    Column names are used exactly as given; loaders pass names already run
    through ``unique_column_names``. Every cell is coerced to text. Rows
    shorter than the header are padded with empty strings; extra cells are
    dropped.
    """
    names = [str(c) for c in columns]
    ddl = ", ".join(f"{quote_ident(c)} VARCHAR" for c in names)
    try:
        con.execute(f"CREATE TABLE {TABLE_NAME} ({ddl})")
    except duckdb.Error as exc:
        raise EngineRejectedError(
            f"Could not create a table for {path.name}.", path=path, detail=str(exc)
        ) from exc

    width = len(names)
    batch = config.insert_batch_size
    starts = range(0, len(rows), batch)
    pbar = tqdm(
        starts,
        desc=f"{'Staging ' + path.name:<31}",
        unit="batch",
        disable=len(rows) < config.progress_min_rows,
    )
    for start in pbar:
        chunk = rows[start : start + batch]
        try:
            con.execute(f"INSERT INTO {TABLE_NAME} VALUES {_values_clause(chunk, width)}")
        except duckdb.Error as exc:
            raise EngineRejectedError(
                f"Could not insert rows from {path.name}.", path=path, detail=str(exc)
            ) from exc
    logger.debug("Staged %d rows x %d columns from %s", len(rows), width, path)
    return names


__all__ = [
    "ensure_readable",
    "translate_engine_error",
    "cell_to_text",
    "sanitized_projection",
    "stage_text_table",
]
