from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from xls2json.config.loader import ConfigError, ConvertConfig, load_config
from xls2json.excel.reader import ConversionError, read_excel_file
from xls2json.logging.init import log_summary, set_debug, setup_logging
from xls2json.models.processing_result import ProcessingResult
from xls2json.services.converter import HEADER_ROW, INCLUDE_MARKER, MARKER_ROW, MIN_ROWS
from xls2json.services.orchestrator import ProcessingError, discover, process_all
from xls2json.services.summary import render_summary_line

"""CLI entrypoint.

Flow:
- Load config (optional YAML) and apply command line overrides
- Discover workbooks under the root (recursive)
- Convert them concurrently, one JSON document per workbook
- Print the SUMMARY line and exit with 0 / 1 / 2
"""

EXIT_SUCCESS_ALL = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="xls2json",
        description="Convert Excel sheets (row 1 = header, row 4 = '3' column markers) into JSON files",
    )
    p.add_argument("root", nargs="?", help="Directory to scan (default: config source_directory or '.')")
    p.add_argument("--config", type=Path, help="YAML config file (default: config/convert.yml if present)")
    p.add_argument("--workers", type=int, help="Number of concurrent conversions")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument("--inspect-data", action="store_true", help="Print header/marker rows of each file then exit")
    p.add_argument("--pause", action="store_true", help="Wait for Enter before exiting")
    return p.parse_args(argv)


def _inspect_data(cfg: ConvertConfig) -> int:
    try:
        files = discover(cfg)
    except ProcessingError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    if not files:
        print("inspect: no spreadsheet files")
        return EXIT_SUCCESS_ALL
    for f in files:
        print(f"FILE: {f}")
        try:
            rows = read_excel_file(f)
        except ConversionError as e:
            print(f"  {e.error_type.lower()}: {e}")
            continue
        if len(rows) < MIN_ROWS:
            print(f"  rows={len(rows)} (need at least {MIN_ROWS})")
            continue
        headers = rows[HEADER_ROW]
        marker = rows[MARKER_ROW]
        included = [
            headers[i] for i, m in enumerate(marker)
            if m == INCLUDE_MARKER and i < len(headers)
        ]
        print(f"  headers={headers}")
        print(f"  marker={marker}")
        print(f"  included={included} data_rows={len(rows) - MIN_ROWS}")
    return EXIT_SUCCESS_ALL


def _log_file_stats(logger: logging.Logger, result: ProcessingResult) -> None:
    for stat in result.file_stats or []:
        logger.debug(
            f"file={stat.file_name} status={stat.status} records={stat.records} "
            f"elapsed_sec={stat.elapsed_seconds:.3f} output={stat.output_path or '-'} "
            f"error_type={stat.error_type or '-'}"
        )


def _pause() -> None:
    try:
        input("Press Enter to continue...")
    except EOFError:
        pass


def _run(args: argparse.Namespace) -> int:
    logger = setup_logging()

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL
    cfg = cfg.with_overrides(source_directory=args.root, workers=args.workers)

    if args.debug:
        set_debug(logger)

    if args.inspect_data:
        return _inspect_data(cfg)

    logger.info(f"Converting files under: {Path(cfg.source_directory).resolve()}")

    try:
        result = process_all(cfg)
    except ProcessingError as e:
        logger.error(f"discovery: {e}")
        return EXIT_FATAL

    _log_file_stats(logger, result)
    summary_line = render_summary_line(result.total_files, result)
    # log_summary が "SUMMARY " を付与するため除去
    log_summary(summary_line[len("SUMMARY "):])

    if result.failed_files > 0:
        return EXIT_PARTIAL_FAILURE
    # All files succeeded (or no files found)
    return EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    # 空リスト [] はそのまま使う (None のときのみ sys.argv を読む)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    try:
        return _run(args)
    finally:
        if args.pause:
            _pause()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
