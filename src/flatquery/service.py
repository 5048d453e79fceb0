"""Paged query service: the façade collaborators call.

Every call opens its own in-memory engine, ingests the file, runs one
statement and discards the engine. There is no caching between calls; a
caller that needs repeated low-latency queries over one file must add its
own layer on top.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, Optional, Sequence, Union

from flatquery.core.config import DEFAULT_CONFIG, UNBOUNDED_LIMIT, EngineConfig
from flatquery.core.errors import QueryError
from flatquery.core.models import PageRequest, PageResult
from flatquery.core.query import (
    detect_file_kind,
    ephemeral_engine,
    plan_statement,
    run_query,
)
from flatquery.export import atomic_save, save_as, write_delimited
from flatquery.ingestion import ingest

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class PagedQueryService:
    """Load pages, export results and save tables for any supported file."""

    def __init__(self, config: EngineConfig = DEFAULT_CONFIG) -> None:
        self.config = config

    # -------------------------
    # MARK: Loading
    # -------------------------

    def run(self, request: PageRequest) -> PageResult:
        """Ingest ``request.file_path`` and execute the effective statement."""
        kind = detect_file_kind(request.file_path)
        with ephemeral_engine() as con:
            handle = ingest(con, kind, request.file_path, self.config)
            if handle.is_empty:
                logger.info("%s has no tabular content", request.file_path)
                return PageResult(columns=[], rows=[], offset=request.offset, limit=request.limit, total=0)

            statement, origin = plan_statement(handle.columns, request)
            try:
                result = run_query(
                    con,
                    statement,
                    handle.columns,
                    offset=request.offset,
                    limit=request.limit,
                    origin=origin,
                )
            except QueryError as exc:
                if exc.origin == "sql":
                    logger.warning("Caller SQL rejected: %s", exc.detail)
                else:
                    logger.error("Generated statement failed: %s (%s)", exc.statement, exc.detail)
                raise

        logger.debug(
            "Loaded %d/%d rows from %s (%s)", len(result.rows), result.total, request.file_path, origin
        )
        return result

    def load_page(
        self,
        path: PathLike,
        offset: int = 0,
        limit: Optional[int] = None,
        search: Optional[str] = None,
        sql: Optional[str] = None,
    ) -> PageResult:
        """One page of ``path``; ``total`` is always the unfiltered row count."""
        request = PageRequest(
            file_path=path,
            offset=offset,
            limit=self.config.default_page_size if limit is None else limit,
            search=search,
            sql=sql,
        )
        return self.run(request)

    def load_all(self, path: PathLike, search: Optional[str] = None, sql: Optional[str] = None) -> PageResult:
        return self.load_page(path, 0, UNBOUNDED_LIMIT, search=search, sql=sql)

    # -------------------------
    # MARK: Export and save
    # -------------------------

    def export_to_csv(
        self,
        path: PathLike,
        out_path: PathLike,
        search: Optional[str] = None,
        sql: Optional[str] = None,
    ) -> None:
        """Write the whole filtered/queried result of ``path`` to ``out_path`` as CSV."""
        result = self.load_all(path, search=search, sql=sql)
        out = Path(out_path)
        write_delimited(out, result.columns, result.rows, ",")
        logger.info("Exported %d rows from %s to %s", len(result.rows), path, out)

    def save_as(self, path: PathLike, columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
        """Write a fully materialized table in the format ``path`` implies."""
        save_as(path, columns, rows, self.config)

    def save(self, path: PathLike, columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
        """Editor save-in-place: atomic for CSV/TSV, a direct write otherwise."""
        if detect_file_kind(path).is_delimited:
            atomic_save(path, columns, rows, self.config)
        else:
            save_as(path, columns, rows, self.config)

    # -------------------------
    # MARK: Async wrappers
    # -------------------------

    async def aload_page(
        self,
        path: PathLike,
        offset: int = 0,
        limit: Optional[int] = None,
        search: Optional[str] = None,
        sql: Optional[str] = None,
    ) -> PageResult:
        return await asyncio.to_thread(self.load_page, path, offset, limit, search, sql)

    async def aexport_to_csv(
        self,
        path: PathLike,
        out_path: PathLike,
        search: Optional[str] = None,
        sql: Optional[str] = None,
    ) -> None:
        await asyncio.to_thread(self.export_to_csv, path, out_path, search, sql)

    async def asave_as(self, path: PathLike, columns: Sequence[str], rows: Sequence[Sequence[Any]]) -> None:
        await asyncio.to_thread(self.save_as, path, columns, rows)


__all__ = ["PagedQueryService"]
