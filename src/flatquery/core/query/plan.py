from __future__ import annotations

import re
from typing import List, Optional, Sequence, Tuple

from flatquery.core.models import TABLE_NAME, PageRequest
from flatquery.core.utils import quote_ident, sanitize_column_name

_WHITESPACE_RE = re.compile(r"\s+")


def _collapse(text: Optional[str]) -> str:
    return _WHITESPACE_RE.sub(" ", text or "").strip()


def _search_predicate(columns: Sequence[str], needle: str) -> str:
    escaped = needle.replace("'", "''")
    conditions = [
        f"CAST({quote_ident(sanitize_column_name(c))} AS VARCHAR) LIKE '%{escaped}%'"
        for c in columns
    ]
    return " OR ".join(conditions)


def plan_statement(columns: Sequence[str], request: PageRequest) -> Tuple[str, str]:
    """Return ``(statement, origin)`` for a page request.

    Precedence, strictly in this order:
    1. ``request.sql`` with whitespace collapsed, verbatim (origin ``"sql"``).
    2. ``request.search``: a LIKE filter over every column of the freshly
       ingested table, paged (origin ``"search"``).
    3. A plain page of ``data`` (origin ``"page"``).

    ``columns`` must come from the ingested table's schema, not from the
    caller. The unbounded limit is rendered literally.
    """
    sql = _collapse(request.sql)
    if sql:
        return sql, "sql"

    paging = f"LIMIT {int(request.limit)} OFFSET {int(request.offset)}"
    needle = (request.search or "").strip()
    if needle and columns:
        where = _search_predicate(columns, needle)
        return f"SELECT * FROM {TABLE_NAME} WHERE {where} {paging}", "search"
    return f"SELECT * FROM {TABLE_NAME} {paging}", "page"


def build_statement(columns: Sequence[str], request: PageRequest) -> str:
    """Effective SQL text for ``request`` against a table with ``columns``."""
    statement, _ = plan_statement(columns, request)
    return statement


def count_statement() -> str:
    return f"SELECT COUNT(*) FROM {TABLE_NAME}"


def schema_probe_statement(statement: str) -> str:
    """Wrap ``statement`` so it returns its column set and no rows."""
    inner = statement.strip().rstrip(";").strip()
    return f"SELECT * FROM ({inner}) AS probe LIMIT 0"


__all__: List[str] = [
    "plan_statement",
    "build_statement",
    "count_statement",
    "schema_probe_statement",
]
