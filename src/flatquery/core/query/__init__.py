"""Core query engine public API.

Exposes the pieces the service façade composes: format detection, the
ephemeral engine scope, statement planning and result materialization.
Once a file is ingested into the ``data`` table every format is queried the
same way through these functions.
"""

from .detect import detect_file_kind
from .engine import ephemeral_engine
from .plan import build_statement, plan_statement, count_statement, schema_probe_statement
from .materialize import normalize_value, count_rows, execute_statement, run_query

__all__ = [
    "detect_file_kind",
    "ephemeral_engine",
    "build_statement",
    "plan_statement",
    "count_statement",
    "schema_probe_statement",
    "normalize_value",
    "count_rows",
    "execute_statement",
    "run_query",
]
