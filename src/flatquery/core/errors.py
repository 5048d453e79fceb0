"""Typed failures raised by the query engine.

Every error carries a ``user_message`` suitable for showing to a person and
keeps the underlying diagnostic (engine message, OS error) in ``detail`` so
that "your SQL is invalid", "the file could not be read" and "another program
has the file open" stay distinguishable.

Hierarchy:
    FlatQueryError
    ├── UnsupportedFormat
    ├── UnsupportedOperation
    ├── IngestError
    │   ├── SourceUnreadableError
    │   ├── SourceUnparsableError
    │   └── EngineRejectedError
    ├── QueryError
    └── SaveError
        └── FileLocked
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union


class FlatQueryError(Exception):
    """Base class for all flatquery failures."""

    default_message = "The operation failed."

    def __init__(self, message: Optional[str] = None, *, detail: Optional[str] = None) -> None:
        self.detail = detail
        super().__init__(message or self.default_message)

    @property
    def user_message(self) -> str:
        if self.detail:
            return f"{self.args[0]} ({self.detail})"
        return str(self.args[0])


class UnsupportedFormat(FlatQueryError):
    """Destination extension has no corresponding writer."""

    default_message = "Unsupported file type."


class UnsupportedOperation(FlatQueryError):
    """Operation is not defined for the given file kind."""

    default_message = "This operation is not supported for the file type."


class IngestError(FlatQueryError):
    """Source file could not be materialized into the ``data`` table."""

    default_message = "The file could not be loaded."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        path: Union[str, Path, None] = None,
        detail: Optional[str] = None,
    ) -> None:
        self.path = Path(path) if path is not None else None
        super().__init__(message, detail=detail)


class SourceUnreadableError(IngestError):
    """Source file is missing, is not a regular file, or cannot be opened."""

    default_message = "The file could not be read."


class SourceUnparsableError(IngestError):
    """Source file was read but its content is malformed for its kind."""

    default_message = "The file content could not be parsed."


class EngineRejectedError(IngestError):
    """The query engine refused a statement issued while staging the data."""

    default_message = "The query engine rejected the data."


class QueryError(FlatQueryError):
    """The effective statement failed inside the query engine.

    ``origin`` tells where the statement came from: ``"sql"`` for caller
    supplied SQL, ``"search"`` or ``"page"`` for generated statements.
    """

    default_message = "The query failed."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        statement: str = "",
        origin: str = "page",
        detail: Optional[str] = None,
    ) -> None:
        self.statement = statement
        self.origin = origin
        super().__init__(message, detail=detail)

    @property
    def user_message(self) -> str:
        if self.origin == "sql":
            return f"Please check your SQL query: {self.detail or self.args[0]}"
        return super().user_message


class SaveError(FlatQueryError):
    """Writing a file back to disk failed."""

    default_message = "The file could not be saved."


class FileLocked(SaveError):
    """Destination is held open by another process."""

    default_message = (
        "File is still locked. Please close it in the other program and try again."
    )

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        path: Union[str, Path, None] = None,
        temp_path: Union[str, Path, None] = None,
        attempts: int = 0,
        detail: Optional[str] = None,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self.temp_path = Path(temp_path) if temp_path is not None else None
        self.attempts = attempts
        super().__init__(message, detail=detail)


__all__ = [
    "FlatQueryError",
    "UnsupportedFormat",
    "UnsupportedOperation",
    "IngestError",
    "SourceUnreadableError",
    "SourceUnparsableError",
    "EngineRejectedError",
    "QueryError",
    "SaveError",
    "FileLocked",
]
