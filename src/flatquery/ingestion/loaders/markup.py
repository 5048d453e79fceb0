"""XML loader: parse, find the record axis, flatten, stage as text."""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import List

import duckdb

from flatquery.core.config import DEFAULT_CONFIG, EngineConfig
from flatquery.core.errors import SourceUnparsableError, SourceUnreadableError
from flatquery.core.utils import unique_column_names
from flatquery.ingestion.flatten import (
    collect_columns,
    find_record_axis,
    flatten_record,
    parse_markup,
)

from ._common import stage_text_table

logger = logging.getLogger(__name__)


def load_markup(
    con: duckdb.DuckDBPyConnection, path: Path, config: EngineConfig = DEFAULT_CONFIG
) -> List[str]:
    """Stage an XML document into ``data``.

    Returns [] without creating a table when no records are found or the
    first record is not a key/value element.
    """
    try:
        raw = path.read_bytes()
    except OSError as exc:
        raise SourceUnreadableError(f"Could not open {path.name}.", path=path, detail=str(exc)) from exc
    try:
        tree = parse_markup(raw)
    except ET.ParseError as exc:
        raise SourceUnparsableError(f"Malformed XML in {path.name}.", path=path, detail=str(exc)) from exc

    items = find_record_axis(tree)
    if not items or not isinstance(items[0], dict):
        logger.info("No records discovered in %s", path.name)
        return []

    records = [flatten_record(item) for item in items if isinstance(item, dict)]
    keys = collect_columns(records)
    if not keys:
        return []

    columns = unique_column_names(keys)
    rows = [[rec.get(k) for k in keys] for rec in records]
    logger.debug("Discovered %d records with %d columns in %s", len(rows), len(columns), path.name)
    return stage_text_table(con, columns, rows, path=path, config=config)
