from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import ConvertConfig
from ..excel.reader import ConversionError
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.processing_result import FileStat, ProcessingResult
from ..models.spreadsheet_file import FileStatus, SpreadsheetFile
from .converter import convert_file
from .discovery import DiscoveryError, scan_excel_files
from .progress import ProgressTracker

"""Batch orchestration.

Coordinates a run: discover the workbooks under the configured root, convert
each one in its own worker task, wait for every task, then aggregate the
per-file outcomes into a ProcessingResult.

Tasks share nothing; each reads its own workbook and writes its own JSON
file. The calling thread is the only consumer of completed futures, so result
aggregation, logging of outcomes and the error log need no locking.
"""

logger = logging.getLogger(__name__)

UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


class ProcessingError(Exception):
    """Fatal error that prevents the batch from running (e.g. discovery)."""
    pass


def discover(config: ConvertConfig) -> list[Path]:
    """Run discovery, turning DiscoveryError into a fatal ProcessingError."""
    directory = Path(config.source_directory)
    try:
        return scan_excel_files(directory, config.extensions)
    except DiscoveryError as e:
        raise ProcessingError(str(e)) from e


def process_all(config: ConvertConfig) -> ProcessingResult:
    """Convert every spreadsheet under ``config.source_directory``.

    1. Scan the directory tree (fatal on failure)
    2. Submit one conversion task per file to a bounded thread pool
    3. Collect outcomes as tasks complete; a failed file never stops others
    4. Return ProcessingResult once all tasks have finished

    Raises:
        ProcessingError: discovery failed
    """
    start_time = datetime.now(UTC)
    error_log = ErrorLogBuffer() if config.error_log else None

    file_paths = discover(config)

    if not file_paths:
        logger.info(f"no spreadsheet files ({', '.join(config.extensions)}) found under {config.source_directory}")
        end_time = datetime.now(UTC)
        return ProcessingResult(
            success_files=0,
            failed_files=0,
            total_records=0,
            start_time=start_time,
            end_time=end_time,
            elapsed_seconds=(end_time - start_time).total_seconds(),
            throughput_records_per_sec=0.0,
            file_stats=[],
        )

    logger.debug(f"found {len(file_paths)} files, workers={config.workers}")

    outcomes: list[SpreadsheetFile] = []
    with ProgressTracker(len(file_paths)) as progress:
        with ThreadPoolExecutor(max_workers=config.workers) as executor:
            futures = [
                executor.submit(_process_single_file, file_path, config)
                for file_path in file_paths
            ]
            for future in as_completed(futures):
                outcome = future.result()
                outcomes.append(outcome)
                progress.finish_file(outcome.path, success=(outcome.status == FileStatus.SUCCESS))
                _report_outcome(outcome, error_log)

    if error_log is not None:
        try:
            log_path = error_log.flush()
        except OSError as e:
            # エラーログ書き込み失敗で全体を失敗にしない
            logger.warning(f"failed to write error log: {e}")
        else:
            if log_path is not None:
                logger.info(f"error log: {log_path}")

    # 出力順を入力順に揃える (完了順は非決定的)
    order = {p: i for i, p in enumerate(file_paths)}
    outcomes.sort(key=lambda o: order[o.path])

    success_count = sum(1 for o in outcomes if o.status == FileStatus.SUCCESS)
    failed_count = len(outcomes) - success_count
    total_records = sum(o.record_count for o in outcomes if o.status == FileStatus.SUCCESS)

    end_time = datetime.now(UTC)
    elapsed_seconds = (end_time - start_time).total_seconds()
    throughput = total_records / elapsed_seconds if elapsed_seconds > 0 else 0.0

    return ProcessingResult(
        success_files=success_count,
        failed_files=failed_count,
        total_records=total_records,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=elapsed_seconds,
        throughput_records_per_sec=throughput,
        file_stats=[
            FileStat(
                file_name=o.name,
                status=o.status.value,
                records=o.record_count,
                elapsed_seconds=o.elapsed_seconds,
                output_path=str(o.output_path) if o.output_path is not None else None,
                error_type=o.error_type,
            )
            for o in outcomes
        ],
    )


def _report_outcome(outcome: SpreadsheetFile, error_log: ErrorLogBuffer | None) -> None:
    if outcome.status == FileStatus.SUCCESS:
        logger.info(f"converted {outcome.path} -> {outcome.output_path} ({outcome.record_count} records)")
        return
    logger.error(f"{outcome.path}: {outcome.error_type}: {outcome.error}")
    if error_log is not None:
        error_log.append(
            ErrorRecord.create(
                file=str(outcome.path),
                error_type=outcome.error_type or UNEXPECTED_ERROR,
                message=outcome.error or "",
            )
        )


def _process_single_file(file_path: Path, config: ConvertConfig) -> SpreadsheetFile:
    """Convert one workbook; never raises.

    Conversion errors and any unexpected exception are captured in the
    returned SpreadsheetFile so sibling tasks are unaffected.
    """
    start_time = datetime.now(UTC)
    try:
        output_path, record_count = convert_file(
            file_path,
            output_dir_name=config.output_dir_name,
            indent=config.indent,
            sort_keys=config.sort_keys,
        )
    except ConversionError as e:
        return SpreadsheetFile(
            path=file_path,
            name=file_path.name,
            start_time=start_time,
            end_time=datetime.now(UTC),
            status=FileStatus.FAILED,
            error_type=e.error_type,
            error=str(e),
        )
    except Exception as e:
        logger.debug(f"unexpected failure converting {file_path}", exc_info=True)
        return SpreadsheetFile(
            path=file_path,
            name=file_path.name,
            start_time=start_time,
            end_time=datetime.now(UTC),
            status=FileStatus.FAILED,
            error_type=UNEXPECTED_ERROR,
            error=f"{type(e).__name__}: {e}",
        )

    return SpreadsheetFile(
        path=file_path,
        name=file_path.name,
        output_path=output_path,
        start_time=start_time,
        end_time=datetime.now(UTC),
        status=FileStatus.SUCCESS,
        record_count=record_count,
    )
