from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

"""SpreadsheetFile domain model and FileStatus enum.

The SpreadsheetFile represents the conversion context for a single workbook,
tracking its status from discovery to success/failed and, on success, the path
of the JSON document that was written.
"""


class FileStatus(Enum):
    """Status enum for SpreadsheetFile lifecycle.

    A file is only materialised once its conversion task has finished.
    """
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class SpreadsheetFile:
    """Conversion result for a single spreadsheet file."""
    path: Path                           # Source workbook
    name: str                            # File name
    status: FileStatus                   # Outcome of the conversion task
    output_path: Path | None = None      # Written JSON document (success only)
    start_time: datetime | None = None   # Conversion start (UTC)
    end_time: datetime | None = None     # Conversion end (UTC)
    record_count: int = 0                # Records in the Output Document
    error_type: str | None = None        # UPPER_SNAKE error classification
    error: str | None = None             # Failure reason summary

    @property
    def elapsed_seconds(self) -> float:
        if self.start_time is None or self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time).total_seconds()
