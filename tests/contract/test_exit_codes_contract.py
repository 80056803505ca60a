from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

from xls2json.cli import main as cli_main

"""Exit code contract: 0 = all converted / no files, 1 = fatal, 2 = any file failed."""


def test_exit_code_fatal_config(temp_workdir: Path, capsys):
    (temp_workdir / "config" / "convert.yml").write_text("workers: -1\n", encoding="utf-8")
    code = cli_main([])
    assert code == 1
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_fatal_discovery(temp_workdir: Path, capsys):
    with patch("os.scandir", side_effect=PermissionError(13, "Permission denied", "data")):
        code = cli_main(["data"])
    assert code == 1
    assert "ERROR discovery:" in capsys.readouterr().out


def test_exit_code_no_files(temp_workdir: Path, capsys):
    code = cli_main(["data"])
    assert code == 0
    assert "SUMMARY files=0/0" in capsys.readouterr().out


def test_exit_code_all_success(make_workbook, temp_workdir: Path, capsys):
    make_workbook("data/a.xlsx")
    make_workbook("data/b.xlsx")
    code = cli_main(["data"])
    out = capsys.readouterr().out
    assert code == 0
    assert "SUMMARY files=2/2 success=2 failed=0 records=4" in out


def test_exit_code_partial_failure(make_workbook, temp_workdir: Path, capsys):
    make_workbook("data/a.xlsx")
    (temp_workdir / "data" / "b.xlsx").write_bytes(b"")
    code = cli_main(["data"])
    out = capsys.readouterr().out
    assert code == 2
    assert "SUMMARY files=2/2 success=1 failed=1" in out


def test_exit_code_all_failed(temp_workdir: Path, capsys):
    (temp_workdir / "data" / "a.xlsx").write_bytes(b"")
    code = cli_main(["data"])
    assert code == 2
    assert "success=0 failed=1" in capsys.readouterr().out
