from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Processing result models for the Excel -> JSON converter.

Aggregates per-file outcomes of one batch run into the figures reported on
the SUMMARY line.
"""


@dataclass(frozen=True)
class FileStat:
    """Per-file statistics (internal helper for ProcessingResult)."""
    file_name: str  # ファイル名
    status: str  # success/failed
    records: int  # 成功時レコード数
    elapsed_seconds: float  # ファイル処理時間
    output_path: str | None = None
    error_type: str | None = None


@dataclass(frozen=True)
class ProcessingResult:
    """Aggregated results of a batch run."""
    success_files: int  # 成功ファイル数
    failed_files: int  # 失敗ファイル数
    total_records: int  # 総レコード数
    start_time: datetime  # 全体開始
    end_time: datetime  # 全体終了
    elapsed_seconds: float  # end - start
    throughput_records_per_sec: float  # total_records / elapsed
    file_stats: list[FileStat] | None = None  # ファイル詳細

    @property
    def total_files(self) -> int:
        return self.success_files + self.failed_files
