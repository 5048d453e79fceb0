"""Engine configuration constants.

This module centralizes paging limits, staging batch sizes and the retry
schedule used when finalizing an in-place save. Adjust the constants to tune
behavior, or pass an ``EngineConfig`` loaded from YAML to the service.

YAML layout (all keys optional)::

    flatquery:
      default_page_size: 100
      insert_batch_size: 1000
      progress_min_rows: 5000
      lock_retry_attempts: 10
      lock_retry_base_delay: 0.05
      temp_suffix: ".tmp"
      sheet_name: "Sheet1"
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

# ============================================================================
# PAGING
# ============================================================================

# Largest integer exactly representable as a double; DuckDB accepts it as LIMIT
UNBOUNDED_LIMIT = 2**53 - 1

DEFAULT_PAGE_SIZE = 100


# ============================================================================
# STAGING (spreadsheet and markup ingestion, columnar save)
# ============================================================================

# Rows per generated INSERT statement
INSERT_BATCH_SIZE = 1000

# Show a progress bar only when staging at least this many rows
PROGRESS_MIN_ROWS = 5000


# ============================================================================
# SAVING
# ============================================================================

LOCK_RETRY_ATTEMPTS = 10
LOCK_RETRY_BASE_DELAY = 0.05  # seconds, doubled after each attempt
TEMP_SUFFIX = ".tmp"
SHEET_NAME = "Sheet1"


@dataclass(frozen=True)
class EngineConfig:
    """Overridable runtime settings.

    Attributes:
        default_page_size: Page size used when a caller does not pass a limit.
        insert_batch_size: Rows per INSERT when staging data manually.
        progress_min_rows: Minimum staged rows before a progress bar is shown.
        lock_retry_attempts: Attempts made to finalize a save onto a locked file.
        lock_retry_base_delay: Initial backoff delay in seconds.
        temp_suffix: Suffix of the sibling file written before an in-place save.
        sheet_name: Worksheet name used when saving spreadsheets.
    """

    default_page_size: int = DEFAULT_PAGE_SIZE
    insert_batch_size: int = INSERT_BATCH_SIZE
    progress_min_rows: int = PROGRESS_MIN_ROWS
    lock_retry_attempts: int = LOCK_RETRY_ATTEMPTS
    lock_retry_base_delay: float = LOCK_RETRY_BASE_DELAY
    temp_suffix: str = TEMP_SUFFIX
    sheet_name: str = SHEET_NAME

    def __post_init__(self) -> None:
        """Validate field constraints."""
        if self.default_page_size <= 0:
            raise ValueError("default_page_size must be positive")
        if self.insert_batch_size <= 0:
            raise ValueError("insert_batch_size must be positive")
        if self.lock_retry_attempts <= 0:
            raise ValueError("lock_retry_attempts must be positive")
        if self.lock_retry_base_delay < 0:
            raise ValueError("lock_retry_base_delay must not be negative")
        if not self.temp_suffix:
            raise ValueError("temp_suffix must not be empty")


DEFAULT_CONFIG = EngineConfig()


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================


def config_from_mapping(data: Optional[Dict[str, Any]], base: EngineConfig = DEFAULT_CONFIG) -> EngineConfig:
    """Apply a mapping of overrides on top of ``base``.

    Raises:
        ValueError: If the mapping contains unknown keys.

    Examples:
        >>> config_from_mapping({"lock_retry_attempts": 3}).lock_retry_attempts
        3
    """
    if not data:
        return base
    known = {f.name for f in fields(EngineConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(
            f"Unknown config keys: {', '.join(unknown)}. Valid keys: {', '.join(sorted(known))}"
        )
    return replace(base, **data)


def load_config(path: Path) -> EngineConfig:
    """Load an ``EngineConfig`` from a YAML file.

    Only the top-level ``flatquery`` mapping is read; an empty file yields
    the defaults.
    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    section = data.get("flatquery") or {}
    if not isinstance(section, dict):
        raise ValueError("The 'flatquery' section must be a mapping")
    return config_from_mapping(section)


__all__ = [
    "UNBOUNDED_LIMIT",
    "DEFAULT_PAGE_SIZE",
    "INSERT_BATCH_SIZE",
    "PROGRESS_MIN_ROWS",
    "LOCK_RETRY_ATTEMPTS",
    "LOCK_RETRY_BASE_DELAY",
    "TEMP_SUFFIX",
    "SHEET_NAME",
    "EngineConfig",
    "DEFAULT_CONFIG",
    "config_from_mapping",
    "load_config",
]
