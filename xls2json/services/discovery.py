from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path

"""Spreadsheet discovery.

Walks a directory tree and collects workbook paths by exact suffix match,
skipping names that contain "~" (Office lock / temp files such as
``~$budget.xlsx``).
"""

__all__ = [
    "DiscoveryError",
    "DEFAULT_EXTENSIONS",
    "is_spreadsheet",
    "scan_excel_files",
]

DEFAULT_EXTENSIONS = (".xlsx", ".xls")


class DiscoveryError(Exception):
    """Raised when the root cannot be read or the walk hits an I/O error."""


def is_spreadsheet(name: str, extensions: Iterable[str] = DEFAULT_EXTENSIONS) -> bool:
    # 末尾一致 (".xlsx" のみのファイル名も対象)
    return "~" not in name and any(name.endswith(ext) for ext in extensions)


def scan_excel_files(
    root: Path, extensions: Iterable[str] = DEFAULT_EXTENSIONS
) -> list[Path]:
    """Recursively scan ``root`` for spreadsheet files.

    Args:
        root: Directory to scan
        extensions: Recognised suffixes (case-sensitive, with the leading dot)

    Returns:
        Sorted list of matching paths; empty when nothing matches

    Raises:
        DiscoveryError: If root doesn't exist, isn't a directory, or can't be read
    """
    if not root.exists():
        raise DiscoveryError(f"Directory not found: {root}")

    if not root.is_dir():
        raise DiscoveryError(f"Path is not a directory: {root}")

    def _raise(err: OSError) -> None:
        raise DiscoveryError(f"Error reading directory {err.filename}: {err}") from err

    suffixes = tuple(extensions)
    found: list[Path] = []
    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise):
        for name in filenames:
            if is_spreadsheet(name, suffixes):
                found.append(Path(dirpath) / name)
    return sorted(found)
