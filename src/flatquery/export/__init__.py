"""Export and save-back of materialized tables."""

from .writers import save_as, write_delimited, write_excel, write_json, write_parquet
from .atomic import atomic_save, finalize_save, is_locked, prepare_save, temp_path_for

__all__ = [
    "save_as",
    "write_delimited",
    "write_excel",
    "write_json",
    "write_parquet",
    "atomic_save",
    "finalize_save",
    "is_locked",
    "prepare_save",
    "temp_path_for",
]
