from __future__ import annotations

import json
import logging
import re
from collections.abc import Sequence
from pathlib import Path

from ..excel.reader import ConversionError, StructureError, read_excel_file
from ..models.record import Record

"""Record converter: spreadsheet rows -> Output Document -> JSON file.

Sheet layout:
- row 1: header (field names, lower-cased in the output)
- rows 2-3: unused
- row 4: marker row, a column is exported iff its marker cell is exactly "3"
- row 5+: data rows, one record each, keyed by the value of column A when
  column A is exported
"""

__all__ = [
    "SerializationError",
    "WriteError",
    "HEADER_ROW",
    "MARKER_ROW",
    "FIRST_DATA_ROW",
    "MIN_ROWS",
    "INCLUDE_MARKER",
    "coerce_value",
    "build_records",
    "build_document",
    "output_path_for",
    "serialize_document",
    "write_document",
    "convert_file",
]

logger = logging.getLogger(__name__)

HEADER_ROW = 0
MARKER_ROW = 3
FIRST_DATA_ROW = 4
MIN_ROWS = MARKER_ROW + 1
INCLUDE_MARKER = "3"

# ASCII base-10 decimal literal (no inf/nan, no hex, no digit separators,
# no full-width or other non-ASCII digits)
_DECIMAL_RE = re.compile(r"^[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?\Z")


class SerializationError(ConversionError):
    """Raised when the Output Document cannot be encoded as JSON."""

    error_type = "SERIALIZATION_ERROR"


class WriteError(ConversionError):
    """Raised when the JSON document cannot be written."""

    error_type = "WRITE_ERROR"


def coerce_value(cell: str) -> str:
    """Normalize a cell for output.

    Non-integral numbers are rendered with exactly 4 decimals; integral numbers
    and non-numeric text are returned unchanged.

    >>> coerce_value("3.14159")
    '3.1416'
    >>> coerce_value("42")
    '42'
    >>> coerce_value("abc")
    'abc'
    """
    if not _DECIMAL_RE.match(cell):
        return cell
    try:
        value = float(cell)
    except ValueError:
        return cell
    if value != value or value in (float("inf"), float("-inf")):
        # 桁あふれ (例: "1e999") は元の文字列のまま
        return cell
    if value.is_integer():
        return cell
    return f"{value:.4f}"


def placeholder_key(row_number: int) -> str:
    return f"#{row_number}"


def build_records(rows: Sequence[Sequence[str]]) -> list[Record]:
    """Select the marked columns of every data row.

    Rows yielding no field are dropped. Raises StructureError when the header
    or marker row is missing.
    """
    if len(rows) < MIN_ROWS:
        raise StructureError(
            f"expected at least {MIN_ROWS} rows (header + 2 unused + marker), found {len(rows)}",
            required=MIN_ROWS,
            actual=len(rows),
        )
    headers = rows[HEADER_ROW]
    marker = rows[MARKER_ROW]
    width = len(marker)

    records: list[Record] = []
    for index in range(FIRST_DATA_ROW, len(rows)):
        row = list(rows[index])
        if len(row) < width:
            row.extend([""] * (width - len(row)))

        key = ""
        fields: dict[str, str] = {}
        for i in range(width):
            if i >= len(row) or i >= len(headers):
                continue
            if marker[i] != INCLUDE_MARKER:
                continue
            cell = row[i]
            if i == 0:
                key = cell
            fields[headers[i].lower()] = coerce_value(cell)

        if not fields:
            continue
        row_number = index + 1
        if not key:
            key = placeholder_key(row_number)
        records.append(Record(row_number=row_number, key=key, fields=fields))
    return records


def build_document(rows: Sequence[Sequence[str]]) -> dict[str, dict[str, str]]:
    """Build the Output Document (record key -> fields).

    A key seen twice keeps the later row.
    """
    document: dict[str, dict[str, str]] = {}
    seen: dict[str, int] = {}
    for record in build_records(rows):
        if record.key in seen:
            logger.warning(
                f"duplicate key '{record.key}' at row {record.row_number} "
                f"overwrites row {seen[record.key]}"
            )
        seen[record.key] = record.row_number
        document[record.key] = record.fields
    return document


def output_path_for(path: Path, output_dir_name: str = "json") -> Path:
    """``D/name.ext`` -> ``D/<output_dir_name>/name.json``."""
    return path.parent / output_dir_name / f"{path.stem}.json"


def serialize_document(
    document: dict[str, dict[str, str]], *, indent: int = 2, sort_keys: bool = False
) -> bytes:
    try:
        text = json.dumps(document, ensure_ascii=False, indent=indent, sort_keys=sort_keys)
    except (TypeError, ValueError) as e:
        raise SerializationError(f"cannot encode JSON document: {e}") from e
    return text.encode("utf-8")


def write_document(target: Path, payload: bytes) -> None:
    """Create the output folder if needed and replace ``target`` with payload."""
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(payload)
    except OSError as e:
        raise WriteError(f"cannot write JSON file {target}: {e}") from e


def convert_file(
    path: Path,
    *,
    output_dir_name: str = "json",
    indent: int = 2,
    sort_keys: bool = False,
) -> tuple[Path, int]:
    """Convert one spreadsheet and write its JSON document.

    Returns:
        (output path, number of records written)

    Raises:
        OpenError / ReadError / StructureError / SerializationError / WriteError
    """
    rows = read_excel_file(path)
    document = build_document(rows)
    payload = serialize_document(document, indent=indent, sort_keys=sort_keys)
    target = output_path_for(path, output_dir_name)
    write_document(target, payload)
    logger.debug(f"{path.name}: {len(document)} records -> {target}")
    return target, len(document)
