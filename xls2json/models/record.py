from __future__ import annotations

from dataclasses import dataclass, field

"""Record model for the Excel -> JSON converter.

A Record is one data row after column selection: the outer JSON key plus the
lower-cased header -> string value mapping of every included column.
"""

__all__ = [
    "Record",
]


@dataclass(frozen=True)
class Record:
    """Logical representation of one converted data row.

    ``row_number`` is the 1-based sheet row (the first data row is row 5).
    """
    row_number: int
    key: str
    fields: dict[str, str] = field(default_factory=dict)
