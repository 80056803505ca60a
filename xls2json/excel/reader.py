from __future__ import annotations

from datetime import date, datetime, time
from pathlib import Path
from typing import Any

import pandas as pd

"""Excel reader.

Only the first sheet (by position) of a workbook is read. Cells are read as
raw values and rendered as the text a spreadsheet shows for them (booleans as
TRUE/FALSE, whole dates without a time part), empty cells as "". Each row has
its trailing empty cells trimmed so row lengths reflect the last filled cell.
"""

__all__ = [
    "ConversionError",
    "OpenError",
    "ReadError",
    "StructureError",
    "engine_for",
    "read_excel_file",
]


class ConversionError(Exception):
    """Base class of per-file conversion failures."""

    error_type = "CONVERSION_ERROR"


class OpenError(ConversionError):
    """Raised when the workbook cannot be opened (bad format / unreadable)."""

    error_type = "OPEN_ERROR"


class ReadError(ConversionError):
    """Raised when the rows of the first sheet cannot be retrieved."""

    error_type = "READ_ERROR"


class StructureError(ConversionError):
    """Raised when the sheet lacks the header/marker rows."""

    error_type = "STRUCTURE_ERROR"

    def __init__(self, message: str, *, required: int, actual: int) -> None:
        super().__init__(message)
        self.required = required
        self.actual = actual


def engine_for(path: Path) -> str:
    """Pick the pandas Excel engine by suffix (xlrd for legacy .xls)."""
    return "xlrd" if path.suffix.lower() == ".xls" else "openpyxl"


DATE_FMT = "%Y-%m-%d"
DATETIME_FMT = "%Y-%m-%d %H:%M:%S"
TIME_FMT = "%H:%M:%S"


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if value is pd.NaT or (isinstance(value, float) and pd.isna(value)):
        return ""
    # bool は int のサブクラスなので先に判定
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, datetime):
        if value.time() == time(0):
            return value.strftime(DATE_FMT)
        return value.strftime(DATETIME_FMT)
    if isinstance(value, date):
        return value.strftime(DATE_FMT)
    if isinstance(value, time):
        return value.strftime(TIME_FMT)
    return str(value)


def _trim_row(values: list[Any]) -> list[str]:
    row = [_cell_text(v) for v in values]
    while row and row[-1] == "":
        row.pop()
    return row


def read_excel_file(path: Path) -> list[list[str]]:
    """Read the first sheet of a workbook as rows of strings.

    Raises
    ------
    OpenError: the file is missing, unreadable or not a workbook
    ReadError: the workbook has no sheet or the sheet cannot be parsed
    """
    try:
        xls = pd.ExcelFile(path, engine=engine_for(path))
    except Exception as e:
        raise OpenError(f"cannot open workbook {path}: {e}") from e

    with xls:
        if not xls.sheet_names:
            raise ReadError(f"workbook {path} has no sheets")
        sheet_name = xls.sheet_names[0]
        try:
            # ヘッダなし・NA 変換・型推論なしで生読み (セル値そのまま)
            df = xls.parse(
                sheet_name,
                header=None,
                dtype=object,
                keep_default_na=False,
                na_filter=False,
            )
        except Exception as e:
            raise ReadError(f"cannot read sheet '{sheet_name}' of {path}: {e}") from e

    return [_trim_row(raw) for raw in df.values.tolist()]
