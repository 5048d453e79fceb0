"""Serialize a materialized table to one of the supported file kinds."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, List, Sequence, Union

import duckdb
import pandas as pd

from flatquery.core.config import DEFAULT_CONFIG, EngineConfig
from flatquery.core.enums import FileKind
from flatquery.core.errors import (
    EngineRejectedError,
    SaveError,
    UnsupportedFormat,
    UnsupportedOperation,
)
from flatquery.core.models import TABLE_NAME
from flatquery.core.query.detect import detect_file_kind
from flatquery.core.query.engine import ephemeral_engine
from flatquery.core.utils import sql_path
from flatquery.ingestion.loaders import stage_text_table

logger = logging.getLogger(__name__)

# Legacy binary workbooks can be read but not written
_UNWRITABLE_SUFFIXES = {".xls"}


def _check_shape(columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
    width = len(columns)
    for i, row in enumerate(rows):
        if len(row) != width:
            raise ValueError(f"Row {i} has {len(row)} values, expected {width}")


def _frame(columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> pd.DataFrame:
    # object dtype keeps ints with gaps from being widened to floats
    return pd.DataFrame([list(r) for r in rows], columns=list(columns), dtype=object)


def write_delimited(
    path: Path, columns: Sequence[str], rows: Sequence[Sequence[Any]], delimiter: str = ","
) -> None:
    """Header row plus one line per row; None becomes an empty field."""
    _frame(columns, rows).to_csv(path, sep=delimiter, index=False, lineterminator="\n")


def write_excel(
    path: Path,
    columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
    sheet_name: str = DEFAULT_CONFIG.sheet_name,
) -> None:
    _frame(columns, rows).to_excel(path, sheet_name=sheet_name, index=False, engine="openpyxl")


def write_json(path: Path, columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
    records = [dict(zip(columns, row)) for row in rows]
    with path.open("w", encoding="utf-8") as f:
        json.dump(records, f, indent=2, ensure_ascii=False, default=str)


def write_parquet(
    path: Path,
    columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
    config: EngineConfig = DEFAULT_CONFIG,
) -> None:
    """Stage a text table in a fresh engine and COPY it out as Parquet.

    Column names are written exactly as given.
    """
    with ephemeral_engine() as con:
        try:
            stage_text_table(con, columns, rows, path=path, config=config)
        except EngineRejectedError as exc:
            raise SaveError(f"Could not prepare {path.name} for export.", detail=exc.detail) from exc
        copy = f"COPY {TABLE_NAME} TO {sql_path(path)} (FORMAT PARQUET)"
        logger.debug("Copy statement: %s", copy)
        try:
            con.execute(copy)
        except duckdb.Error as exc:
            raise SaveError(f"Could not write {path.name}.", detail=str(exc)) from exc


def save_as(
    path: Union[str, Path],
    columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
    config: EngineConfig = DEFAULT_CONFIG,
) -> FileKind:
    """Write ``columns``/``rows`` to ``path`` in the format its extension implies.

    Returns the FileKind written.

    Raises:
        UnsupportedOperation: Destination is XML; nothing is written.
        UnsupportedFormat: Destination extension has no writer (.xls).
        ValueError: A row's length differs from the column count.
        SaveError: The destination could not be written.
    """
    dest = Path(path)
    kind = detect_file_kind(dest)
    if kind == FileKind.XML:
        raise UnsupportedOperation(f"Saving {kind.value} files is not supported.")
    if dest.suffix.lower() in _UNWRITABLE_SUFFIXES:
        raise UnsupportedFormat(f"No writer for {dest.suffix} files; save as .xlsx instead.")
    _check_shape(columns, rows)

    logger.info("Saving %d rows to %s as %s", len(rows), dest, kind.value)
    try:
        if kind.is_delimited:
            write_delimited(dest, columns, rows, kind.delimiter)
        elif kind == FileKind.EXCEL:
            write_excel(dest, columns, rows, config.sheet_name)
        elif kind == FileKind.JSON:
            write_json(dest, columns, rows)
        else:
            write_parquet(dest, columns, rows, config)
    except OSError as exc:
        raise SaveError(f"Could not write {dest.name}.", detail=str(exc)) from exc
    return kind


__all__: List[str] = [
    "write_delimited",
    "write_excel",
    "write_json",
    "write_parquet",
    "save_as",
]
