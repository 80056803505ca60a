from __future__ import annotations

import pytest

from xls2json.excel.reader import StructureError
from xls2json.services.converter import build_document, build_records, coerce_value

"""Row -> record selection rules (marker row, key, padding, coercion)."""


def _sheet(header, marker, *data):
    return [header, ["t"] * len(header), ["d"] * len(header), marker, *data]


def test_spec_example_document():
    rows = _sheet(["ID", "Name", "Score"], ["3", "3", "3"], ["1", "Alice", "10.5"])
    assert build_document(rows) == {"1": {"id": "1", "name": "Alice", "score": "10.5000"}}


@pytest.mark.parametrize("n", [0, 1, 2, 3])
def test_fewer_than_four_rows_is_structure_error(n):
    rows = [["ID"], ["t"], ["d"]][:n]
    with pytest.raises(StructureError) as e:
        build_records(rows)
    assert e.value.required == 4
    assert e.value.actual == n
    assert f"found {n}" in str(e.value)


def test_exactly_four_rows_yields_empty_document():
    rows = _sheet(["ID"], ["3"])
    assert build_document(rows) == {}


@pytest.mark.parametrize("marker_value", ["03", "30", "", " 3", "3.0", "x"])
def test_only_literal_3_includes_a_column(marker_value):
    rows = _sheet(["ID", "Name"], ["3", marker_value], ["1", "Alice"])
    assert build_document(rows) == {"1": {"id": "1"}}


def test_row_without_included_columns_is_skipped():
    rows = _sheet(["ID", "Name"], ["0", "1"], ["1", "Alice"], ["2", "Bob"])
    assert build_records(rows) == []
    assert build_document(rows) == {}


def test_short_data_row_is_padded():
    rows = _sheet(["ID", "Name", "Score"], ["3", "3", "3"], ["7"])
    assert build_document(rows) == {"7": {"id": "7", "name": "", "score": ""}}


def test_columns_beyond_marker_are_ignored():
    rows = _sheet(["ID", "Name", "Extra"], ["3", "3"], ["1", "Alice", "ignored"])
    assert build_document(rows) == {"1": {"id": "1", "name": "Alice"}}


def test_columns_beyond_header_are_ignored():
    rows = [["ID"], [], [], ["3", "3"], ["1", "no header"]]
    assert build_document(rows) == {"1": {"id": "1"}}


def test_key_preserves_case_and_field_names_are_lowercased():
    rows = _sheet(["Code", "DisplayName"], ["3", "3"], ["AbC", "x"])
    doc = build_document(rows)
    assert doc == {"AbC": {"code": "AbC", "displayname": "x"}}


def test_placeholder_key_when_first_column_not_included():
    rows = _sheet(["ID", "Name"], ["", "3"], ["1", "Alice"], ["2", "Bob"])
    records = build_records(rows)
    assert [r.key for r in records] == ["#5", "#6"]
    assert [r.row_number for r in records] == [5, 6]
    assert build_document(rows) == {"#5": {"name": "Alice"}, "#6": {"name": "Bob"}}


def test_placeholder_key_when_first_cell_empty():
    rows = _sheet(["ID", "Name"], ["3", "3"], ["", "Alice"])
    assert build_document(rows) == {"#5": {"id": "", "name": "Alice"}}


def test_duplicate_key_later_row_wins():
    rows = _sheet(["ID", "Name"], ["3", "3"], ["1", "first"], ["1", "second"])
    assert build_document(rows) == {"1": {"id": "1", "name": "second"}}


def test_document_keeps_row_order():
    rows = _sheet(["ID"], ["3"], ["b"], ["a"], ["c"])
    assert list(build_document(rows)) == ["b", "a", "c"]


@pytest.mark.parametrize(
    "cell, expected",
    [
        ("42", "42"),
        ("42.0", "42.0"),
        ("-7", "-7"),
        ("1e3", "1e3"),
        ("3.14159", "3.1416"),
        ("10.5", "10.5000"),
        ("-0.5", "-0.5000"),
        (".25", "0.2500"),
        ("1.5e-3", "0.0015"),
        ("abc", "abc"),
        ("", ""),
        ("12abc", "12abc"),
        ("nan", "nan"),
        ("inf", "inf"),
        ("1_000.5", "1_000.5"),
        (" 1.5", " 1.5"),
        ("1e999", "1e999"),
        ("１.５", "１.５"),
        ("١.٥", "١.٥"),
        ("４２", "４２"),
        ("1.5\n", "1.5\n"),
    ],
)
def test_coerce_value(cell, expected):
    assert coerce_value(cell) == expected
