from __future__ import annotations

from pathlib import Path
from typing import Dict, Union

from flatquery.core.enums import FileKind

_EXTENSION_KINDS: Dict[str, FileKind] = {
    ".csv": FileKind.CSV,
    ".tsv": FileKind.TSV,
    ".parquet": FileKind.PARQUET,
    ".pq": FileKind.PARQUET,
    ".xlsx": FileKind.EXCEL,
    ".xls": FileKind.EXCEL,
    ".json": FileKind.JSON,
    ".xml": FileKind.XML,
}


def detect_file_kind(path: Union[str, Path]) -> FileKind:
    """Map a path's extension (case-insensitive) to a FileKind.

    Unknown or missing extensions fall back to CSV. No I/O is performed.
    """
    suffix = Path(str(path)).suffix.lower()
    return _EXTENSION_KINDS.get(suffix, FileKind.CSV)
