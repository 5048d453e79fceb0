"""Loaders backed by DuckDB's own file readers (CSV, TSV, Parquet, JSON)."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import duckdb

from flatquery.core.enums import FileKind
from flatquery.core.models import TABLE_NAME
from flatquery.core.utils import quote_literal, sql_path

from ._common import sanitized_projection, translate_engine_error

logger = logging.getLogger(__name__)


def _reader_expression(kind: FileKind, path: Path) -> str:
    src = sql_path(path)
    if kind.is_delimited:
        return f"read_csv({src}, delim = {quote_literal(kind.delimiter)}, header = true)"
    if kind == FileKind.PARQUET:
        return f"read_parquet({src})"
    if kind == FileKind.JSON:
        return f"read_json_auto({src})"
    raise ValueError(f"No native reader for {kind.value}")


def load_native(con: duckdb.DuckDBPyConnection, kind: FileKind, path: Path) -> List[str]:
    """Materialize ``path`` into ``data`` with the engine's reader for ``kind``.

    The reader's schema is described first and the table is created from a
    renaming projection, so ``data`` carries the sanitized column list that
    is returned.
    """
    reader = _reader_expression(kind, path)
    try:
        raw = [row[0] for row in con.execute(f"DESCRIBE SELECT * FROM {reader}").fetchall()]
        columns, projection = sanitized_projection(raw)
        register_query = f"CREATE TABLE {TABLE_NAME} AS SELECT {projection} FROM {reader}"
        logger.debug("Register query: %s", register_query)
        con.execute(register_query)
    except duckdb.Error as exc:
        raise translate_engine_error(exc, path, f"reading it as {kind.value}") from exc
    return columns
