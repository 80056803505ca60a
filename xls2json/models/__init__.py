"""Domain models for the Excel -> JSON converter."""

from .error_record import ErrorRecord
from .processing_result import FileStat, ProcessingResult
from .record import Record
from .spreadsheet_file import FileStatus, SpreadsheetFile

__all__ = [
    # Conversion models
    "Record",
    "SpreadsheetFile",
    "FileStatus",
    # Reporting models
    "ErrorRecord",
    "FileStat",
    "ProcessingResult",
]
