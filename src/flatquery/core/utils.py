"""Core utility functions for flatquery.

This module provides the column-name sanitizer and the small SQL quoting
helpers shared by ingestion, query building and export.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, List, Union

_WHITESPACE_RE = re.compile(r"\s+")


def sanitize_column_name(name: object) -> str:
    """Replace every run of whitespace in a field name with one underscore.

    Idempotent: ``sanitize_column_name(sanitize_column_name(x))`` equals
    ``sanitize_column_name(x)``.

    Examples:
        >>> sanitize_column_name("first  name")
        'first_name'
        >>> sanitize_column_name("a\\tb c")
        'a_b_c'
    """
    return _WHITESPACE_RE.sub("_", str(name))


def unique_column_names(names: Iterable[object]) -> List[str]:
    """Sanitize names and make them unique, keeping the first occurrence as is.

    Blank names become ``column_<n>`` (1-based position); later duplicates get
    a ``_<k>`` suffix. Names are compared case-insensitively, matching how the
    engine resolves identifiers.

    Examples:
        >>> unique_column_names(["a", "a", "", "b c"])
        ['a', 'a_1', 'column_3', 'b_c']
        >>> unique_column_names(["A b", "a_b"])
        ['A_b', 'a_b_1']
    """
    out: List[str] = []
    seen: set[str] = set()  # casefolded
    for i, raw in enumerate(names, start=1):
        if raw is None or not str(raw).strip():
            name = f"column_{i}"
        else:
            name = sanitize_column_name(raw)
        candidate = name
        k = 1
        while candidate.casefold() in seen:
            candidate = f"{name}_{k}"
            k += 1
        seen.add(candidate.casefold())
        out.append(candidate)
    return out


def quote_ident(name: str) -> str:
    """Quote an SQL identifier, doubling embedded double quotes."""
    return '"' + str(name).replace('"', '""') + '"'


def quote_literal(value: object) -> str:
    """Quote a text literal, doubling embedded single quotes."""
    return "'" + str(value).replace("'", "''") + "'"


def sql_path(path: Union[str, Path]) -> str:
    """Absolute, forward-slashed, single-quoted path literal for DuckDB readers."""
    resolved = Path(path).resolve().as_posix()
    return quote_literal(resolved)


__all__ = [
    "sanitize_column_name",
    "unique_column_names",
    "quote_ident",
    "quote_literal",
    "sql_path",
]
