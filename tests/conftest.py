# Shared pytest fixtures
from __future__ import annotations
import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from xls2json.logging.init import reset_logging


def write_workbook(path: Path, rows: list[list[object]], sheet_name: str = "Sheet1") -> Path:
    """Write rows as-is (no header/index) into the first sheet of an .xlsx."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        pd.DataFrame(rows).to_excel(writer, sheet_name=sheet_name, header=False, index=False)
    return path


# header / type / description / marker の 4 行構成
STANDARD_ROWS: list[list[object]] = [
    ["ID", "Name", "Score", "Memo"],
    ["int", "string", "float", "string"],
    ["identifier", "display name", "score", "internal memo"],
    ["3", "3", "3", "0"],
    ["1", "Alice", "10.5", "skip me"],
    ["2", "Bob", "7", "skip me too"],
]


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_logging():
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def make_workbook(temp_workdir: Path) -> Callable[..., Path]:
    def _make(relpath: str, rows: list[list[object]] | None = None) -> Path:
        return write_workbook(temp_workdir / relpath, STANDARD_ROWS if rows is None else rows)
    return _make


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data
extensions: [".xlsx", ".xls"]
output_dir_name: json
workers: 2
indent: 2
sort_keys: false
error_log: false
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "convert.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def standard_rows() -> list[list[object]]:
    return [list(r) for r in STANDARD_ROWS]
