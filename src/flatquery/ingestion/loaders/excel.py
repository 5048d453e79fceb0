"""Spreadsheet loader.

Reads the first worksheet with pandas, promotes the first row to the header
and stages every remaining cell as text. Spreadsheet cells are richer than
the engine's readers understand, so the table is built explicitly.
"""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path
from typing import List

import duckdb
import pandas as pd

from flatquery.core.config import DEFAULT_CONFIG, EngineConfig
from flatquery.core.errors import SourceUnparsableError, SourceUnreadableError
from flatquery.core.utils import unique_column_names

from ._common import cell_to_text, stage_text_table

logger = logging.getLogger(__name__)


def read_first_sheet(path: Path) -> List[List[str]]:
    """Return every row of the first worksheet as text cells."""
    try:
        df = pd.read_excel(path, sheet_name=0, header=None, dtype=object)
    except (FileNotFoundError, PermissionError, IsADirectoryError) as exc:
        raise SourceUnreadableError(f"Could not open {path.name}.", path=path, detail=str(exc)) from exc
    except ImportError as exc:
        raise SourceUnparsableError(
            f"No spreadsheet reader available for {path.suffix} files.", path=path, detail=str(exc)
        ) from exc
    except (ValueError, KeyError, zipfile.BadZipFile, OSError) as exc:
        raise SourceUnparsableError(f"Could not parse workbook {path.name}.", path=path, detail=str(exc)) from exc

    logger.debug("Sheet shape for %s: %s", path.name, df.shape)
    return [[cell_to_text(v) for v in row] for row in df.itertuples(index=False, name=None)]


def load_excel(
    con: duckdb.DuckDBPyConnection, path: Path, config: EngineConfig = DEFAULT_CONFIG
) -> List[str]:
    """Stage the first worksheet into ``data``; [] for an empty sheet (no table)."""
    rows = read_first_sheet(path)
    if not rows:
        logger.info("Worksheet in %s is empty", path.name)
        return []
    columns = unique_column_names(rows[0])
    return stage_text_table(con, columns, rows[1:], path=path, config=config)
