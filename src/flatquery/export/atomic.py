"""In-place saves that never leave a destination half written.

Two phases, usable separately by an editor or together via ``atomic_save``:

1. ``prepare_save`` writes the new content to a sibling ``<dest>.tmp``.
2. ``finalize_save`` checks that no other process holds the destination
   open, then renames the temp file over it. Lock contention is retried
   with exponential backoff; other failures propagate immediately.
"""

from __future__ import annotations

import errno
import logging
import os
import time
from pathlib import Path
from typing import Any, Sequence, Union

from flatquery.core.config import DEFAULT_CONFIG, EngineConfig
from flatquery.core.errors import FileLocked, SaveError, UnsupportedOperation
from flatquery.core.query.detect import detect_file_kind

from .writers import write_delimited

logger = logging.getLogger(__name__)

_LOCK_ERRNOS = {errno.EBUSY, errno.EPERM, errno.EACCES}


def temp_path_for(dest: Union[str, Path], config: EngineConfig = DEFAULT_CONFIG) -> Path:
    dest = Path(dest)
    return dest.with_name(dest.name + config.temp_suffix)


def is_locked(path: Path) -> bool:
    """True when ``path`` cannot be reopened for writing because it is held open.

    A missing destination is not locked. OS errors other than busy/permission
    denials propagate.
    """
    try:
        with open(path, "r+b"):
            pass
    except FileNotFoundError:
        return False
    except OSError as exc:
        if exc.errno in _LOCK_ERRNOS:
            return True
        raise
    return False


def prepare_save(
    dest: Union[str, Path],
    columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
    config: EngineConfig = DEFAULT_CONFIG,
) -> Path:
    """Write the new content next to ``dest`` and return the temp path.

    Only delimited text destinations support the in-place path.
    """
    dest = Path(dest)
    kind = detect_file_kind(dest)
    if not kind.is_delimited:
        raise UnsupportedOperation("In-place save is only supported for CSV and TSV files.")
    tmp = temp_path_for(dest, config)
    try:
        write_delimited(tmp, columns, rows, kind.delimiter)
    except OSError as exc:
        raise SaveError("Failed to prepare save.", detail=str(exc)) from exc
    logger.debug("Prepared save for %s at %s", dest, tmp)
    return tmp


def finalize_save(
    temp_path: Union[str, Path],
    dest: Union[str, Path],
    config: EngineConfig = DEFAULT_CONFIG,
) -> None:
    """Rename ``temp_path`` onto ``dest`` once ``dest`` is not locked.

    Raises:
        SaveError: The temp file no longer exists.
        FileLocked: ``dest`` stayed locked for every attempt. The temp file is
            kept so the caller can retry once the other program lets go.
    """
    tmp = Path(temp_path)
    dest = Path(dest)
    if not tmp.exists():
        raise SaveError("Temp file no longer exists.", detail=str(tmp))

    delay = config.lock_retry_base_delay
    attempts = config.lock_retry_attempts
    last_error = ""
    for attempt in range(1, attempts + 1):
        try:
            if not is_locked(dest):
                os.replace(tmp, dest)
                logger.info("Finalized save for %s", dest)
                return
            last_error = "destination is open in another program"
        except PermissionError as exc:
            # Windows refuses the rename while another handle is open
            last_error = str(exc)
        if attempt < attempts:
            logger.warning(
                "%s is locked (attempt %d/%d), retrying in %.2fs", dest, attempt, attempts, delay
            )
            time.sleep(delay)
            delay *= 2

    logger.error("Giving up on %s after %d attempts", dest, attempts)
    raise FileLocked(path=dest, temp_path=tmp, attempts=attempts, detail=last_error)


def atomic_save(
    dest: Union[str, Path],
    columns: Sequence[str],
    rows: Sequence[Sequence[Any]],
    config: EngineConfig = DEFAULT_CONFIG,
) -> None:
    """Prepare and finalize in one call, removing the temp file on failure."""
    tmp = prepare_save(dest, columns, rows, config)
    try:
        finalize_save(tmp, dest, config)
    except FileLocked:
        tmp.unlink(missing_ok=True)
        raise


__all__ = [
    "temp_path_for",
    "is_locked",
    "prepare_save",
    "finalize_save",
    "atomic_save",
]
