"""Core enumerations used across the package."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class FileKind(str, Enum):
    """Tabular file formats the engine can ingest.

    Values are strings to ease serialization and CLI interchange.
    """

    CSV = "CSV"
    TSV = "TSV"
    PARQUET = "PARQUET"
    EXCEL = "EXCEL"
    JSON = "JSON"
    XML = "XML"

    @property
    def delimiter(self) -> Optional[str]:
        """Field delimiter for delimited text kinds, None otherwise."""
        if self is FileKind.CSV:
            return ","
        if self is FileKind.TSV:
            return "\t"
        return None

    @property
    def is_delimited(self) -> bool:
        return self.delimiter is not None


__all__ = ["FileKind"]
