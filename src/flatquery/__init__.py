"""flatquery: page, search and query flat files as one relational table.

CSV, TSV, Parquet, Excel, JSON and XML sources are ingested into an
ephemeral DuckDB table named ``data`` and queried uniformly. The public
entry point is ``PagedQueryService``; a thin CLI lives under
``flatquery.interfaces.cli``.
"""

from flatquery.core.enums import FileKind
from flatquery.core.models import PageRequest, PageResult
from flatquery.service import PagedQueryService

__all__ = [
    "__version__",
    "PagedQueryService",
    "PageRequest",
    "PageResult",
    "FileKind",
]

__version__ = "0.1.0"
