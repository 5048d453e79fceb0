"""Ephemeral DuckDB connections.

Each request gets its own in-memory database; nothing is pooled or shared,
so ingested tables never leak between requests.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

import duckdb

logger = logging.getLogger(__name__)


@contextmanager
def ephemeral_engine() -> Iterator[duckdb.DuckDBPyConnection]:
    """Open a fresh in-memory connection and close it on every exit path."""
    con = duckdb.connect(":memory:")
    logger.debug("Opened ephemeral engine %s", id(con))
    try:
        yield con
    finally:
        con.close()
        logger.debug("Closed ephemeral engine %s", id(con))


__all__ = ["ephemeral_engine"]
