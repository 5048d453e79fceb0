"""Shared pytest configuration, fixtures, and utilities for flat file testing."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List

import duckdb
import pandas as pd
import pytest

from flatquery.core.enums import FileKind

SAMPLE_COLUMNS = ["name", "age"]
SAMPLE_ROWS = [["Alice", 30], ["Bob", 25], ["Carol", 35]]

EXTENSIONS: Dict[FileKind, str] = {
    FileKind.CSV: ".csv",
    FileKind.TSV: ".tsv",
    FileKind.PARQUET: ".parquet",
    FileKind.EXCEL: ".xlsx",
    FileKind.JSON: ".json",
    FileKind.XML: ".xml",
}


@dataclass
class SampleFile:
    """Container for a generated sample file."""

    kind: FileKind
    path: Path
    columns: List[str]
    rows: List[list]


def _write_delimited(path: Path, columns, rows, delim: str) -> None:
    lines = [delim.join(columns)] + [delim.join(str(v) for v in r) for r in rows]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")


def _write_parquet(path: Path, columns, rows) -> None:
    con = duckdb.connect(":memory:")
    try:
        con.execute("CREATE TABLE t (name VARCHAR, age INTEGER)")
        con.executemany("INSERT INTO t VALUES (?, ?)", rows)
        con.execute(f"COPY t TO '{path.as_posix()}' (FORMAT PARQUET)")
    finally:
        con.close()


def _write_xml(path: Path, columns, rows) -> None:
    parts = ["<people>"]
    for r in rows:
        fields = "".join(f"<{c}>{v}</{c}>" for c, v in zip(columns, r))
        parts.append(f"<person>{fields}</person>")
    parts.append("</people>")
    path.write_text("".join(parts), encoding="utf-8")


def write_sample(kind: FileKind, directory: Path, columns=None, rows=None, stem: str = "people") -> SampleFile:
    """Write the sample table in ``kind`` format under ``directory``."""
    columns = list(columns or SAMPLE_COLUMNS)
    rows = [list(r) for r in (SAMPLE_ROWS if rows is None else rows)]
    path = directory / f"{stem}{EXTENSIONS[kind]}"

    if kind == FileKind.CSV:
        _write_delimited(path, columns, rows, ",")
    elif kind == FileKind.TSV:
        _write_delimited(path, columns, rows, "\t")
    elif kind == FileKind.PARQUET:
        _write_parquet(path, columns, rows)
    elif kind == FileKind.EXCEL:
        pd.DataFrame(rows, columns=columns).to_excel(path, index=False)
    elif kind == FileKind.JSON:
        path.write_text(json.dumps([dict(zip(columns, r)) for r in rows]), encoding="utf-8")
    elif kind == FileKind.XML:
        _write_xml(path, columns, rows)
    return SampleFile(kind=kind, path=path, columns=columns, rows=rows)


@pytest.fixture
def sample_writer(tmp_path: Path) -> Callable[..., SampleFile]:
    """Factory writing sample files into the test's temp directory."""

    def _factory(kind: FileKind, **kwargs) -> SampleFile:
        return write_sample(kind, tmp_path, **kwargs)

    return _factory


@pytest.fixture(params=list(FileKind), ids=lambda k: k.value)
def sample_file(request, tmp_path: Path) -> SampleFile:
    """Fixture that provides the sample table in every supported format."""
    return write_sample(request.param, tmp_path)


@pytest.fixture
def people_csv(tmp_path: Path) -> Path:
    """The 3-row, 2-column (name, age) comma file."""
    return write_sample(FileKind.CSV, tmp_path).path
