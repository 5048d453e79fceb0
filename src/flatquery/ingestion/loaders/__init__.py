"""Per-format loaders that materialize a file into the ``data`` table.

Public API:
 - ingest: dispatch on FileKind and return a TableHandle
 - load_native, load_excel, load_markup: the individual strategies
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Union

import duckdb

from flatquery.core.config import DEFAULT_CONFIG, EngineConfig
from flatquery.core.enums import FileKind
from flatquery.core.models import TableHandle

from ._common import ensure_readable, stage_text_table
from .excel import load_excel
from .markup import load_markup
from .native import load_native

logger = logging.getLogger(__name__)


def ingest(
    con: duckdb.DuckDBPyConnection,
    kind: FileKind,
    path: Union[str, Path],
    config: EngineConfig = DEFAULT_CONFIG,
) -> TableHandle:
    """Materialize ``path`` into ``data`` inside ``con``.

    Raises:
        SourceUnreadableError: File missing, not a file, or not readable.
        SourceUnparsableError: Content malformed for ``kind``.
        EngineRejectedError: The engine refused a staging statement.
    """
    source = ensure_readable(path)
    logger.debug("Ingesting %s as %s", source, kind.value)

    if kind == FileKind.EXCEL:
        columns = load_excel(con, source, config)
    elif kind == FileKind.XML:
        columns = load_markup(con, source, config)
    else:
        columns = load_native(con, kind, source)

    return TableHandle(connection=con, kind=kind, columns=columns)


__all__ = [
    "ingest",
    "load_native",
    "load_excel",
    "load_markup",
    "stage_text_table",
]
