import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

import colorlog

from flatquery.core.config import DEFAULT_CONFIG, EngineConfig, load_config
from flatquery.core.errors import FileLocked, FlatQueryError
from flatquery.service import PagedQueryService

try:
    # Prefer package-defined version
    from flatquery import __version__ as _PACKAGE_VERSION
except ImportError:  # pragma: no cover
    _PACKAGE_VERSION = "unknown"  # type: ignore[assignment]


def setup_logging(
    verbose: bool = False, warnings_only: bool = False, errors_only: bool = False
) -> None:
    logger = logging.getLogger()
    for h in list(logger.handlers):
        logger.removeHandler(h)
    log_format = (
        "%(asctime)s:%(levelname)s:%(name)s in %(filename)s:%(funcName)s:%(lineno)d: %(message)s"
    )
    log_colors = {
        "DEBUG": "cyan",
        "INFO": "green",
        "WARNING": "yellow",
        "ERROR": "red",
        "CRITICAL": "bold_red",
    }
    # stdout carries command output
    stream_handler = colorlog.StreamHandler(sys.stderr)
    formatter = colorlog.ColoredFormatter(f"%(log_color)s{log_format}", log_colors=log_colors)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)
    if errors_only:
        logger.setLevel(logging.ERROR)
    elif warnings_only:
        logger.setLevel(logging.WARNING)
    else:
        logger.setLevel(logging.DEBUG if verbose else logging.INFO)


def _resolve_config(args: argparse.Namespace) -> Optional[EngineConfig]:
    config_arg = getattr(args, "config", None)
    if not config_arg:
        return DEFAULT_CONFIG
    try:
        return load_config(Path(config_arg))
    except (FileNotFoundError, ValueError) as e:
        logging.error("Invalid config %s: %s", config_arg, e)
        return None


def _exit_code_for(exc: FlatQueryError) -> int:
    return 3 if isinstance(exc, FileLocked) else 2


def cmd_page(args: argparse.Namespace) -> int:
    """Print one page of a file as JSON.

    Returns:
        0 on success
        2 if the file could not be loaded or the query failed
    """
    config = _resolve_config(args)
    if config is None:
        return 2
    service = PagedQueryService(config)
    try:
        result = service.load_page(
            args.file,
            offset=args.offset,
            limit=args.limit,
            search=args.search,
            sql=args.sql,
        )
    except ValueError as e:
        logging.error("Invalid page request: %s", e)
        return 2
    except FlatQueryError as e:
        logging.error("%s", e.user_message)
        return _exit_code_for(e)

    print(json.dumps(result.to_dict(), ensure_ascii=False, indent=2 if args.pretty else None))
    logging.info(
        "Showing %d rows (offset %d) of %d records", len(result.rows), result.offset, result.total
    )
    return 0


def cmd_export(args: argparse.Namespace) -> int:
    """Export the full (optionally searched or queried) result to CSV."""
    config = _resolve_config(args)
    if config is None:
        return 2
    service = PagedQueryService(config)
    try:
        service.export_to_csv(args.file, args.out, search=args.search, sql=args.sql)
    except FlatQueryError as e:
        logging.error("%s", e.user_message)
        return _exit_code_for(e)
    except OSError as e:
        logging.error("Could not write %s: %s", args.out, e)
        return 2
    logging.info("Exported %s -> %s", args.file, args.out)
    return 0


def cmd_convert(args: argparse.Namespace) -> int:
    """Load a whole file and save it in the format implied by the output path.

    When the output is the input file itself, delimited files are saved
    through the temp-file-and-rename path.
    """
    config = _resolve_config(args)
    if config is None:
        return 2
    service = PagedQueryService(config)
    src = Path(args.file).resolve()
    out = Path(args.out).resolve()
    try:
        result = service.load_all(src, search=args.search, sql=args.sql)
        if src == out:
            service.save(out, result.columns, result.rows)
        else:
            service.save_as(out, result.columns, result.rows)
    except FlatQueryError as e:
        logging.error("%s", e.user_message)
        return _exit_code_for(e)
    logging.info("Wrote %d rows to %s", len(result.rows), out)
    return 0


def _add_query_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("file", help="Source file (csv, tsv, parquet, xlsx, json, xml)")
    p.add_argument("--search", default=None, help="Substring matched against every column")
    p.add_argument(
        "--sql",
        default=None,
        help="SQL against the table named 'data' (overrides --search)",
    )
    p.add_argument("--config", default=None, help="Path to a flatquery YAML config")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="flatquery", description="Query flat files with SQL")
    p.add_argument("--version", action="version", version=f"%(prog)s {_PACKAGE_VERSION}")
    p.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    p.add_argument(
        "--warnings-only",
        action="store_true",
        help="Show only warnings and errors (overrides --verbose)",
    )
    p.add_argument(
        "--errors-only",
        action="store_true",
        help="Show only errors (overrides --warnings-only and --verbose)",
    )

    sub = p.add_subparsers(dest="command", required=True)

    p_page = sub.add_parser("page", help="Print one page of a file as JSON")
    _add_query_args(p_page)
    p_page.add_argument("--offset", type=int, default=0, help="Rows to skip (default 0)")
    p_page.add_argument(
        "--limit",
        type=int,
        default=None,
        help=f"Rows per page (default {DEFAULT_CONFIG.default_page_size})",
    )
    p_page.add_argument("--pretty", action="store_true", help="Indent the JSON output")
    p_page.set_defaults(func=cmd_page)

    p_export = sub.add_parser("export", help="Export the full result to CSV")
    _add_query_args(p_export)
    p_export.add_argument("--out", required=True, help="Destination CSV path (overwritten)")
    p_export.set_defaults(func=cmd_export)

    p_convert = sub.add_parser(
        "convert", help="Save a file in the format implied by --out (csv, tsv, parquet, xlsx, json)"
    )
    _add_query_args(p_convert)
    p_convert.add_argument("--out", required=True, help="Destination path")
    p_convert.set_defaults(func=cmd_convert)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(
        verbose=bool(args.verbose),
        warnings_only=bool(getattr(args, "warnings_only", False)),
        errors_only=bool(getattr(args, "errors_only", False)),
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
