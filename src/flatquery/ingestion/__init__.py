"""Ingestion: turning source files into the queryable ``data`` table."""

from .loaders import ingest

__all__ = ["ingest"]
