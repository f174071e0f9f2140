from __future__ import annotations

from pathlib import Path

import pytest

from maternal_tidy.models.tidy_rules import TidyRules
from maternal_tidy.pipeline.errors import MarkerNotFoundError, TableReadError
from maternal_tidy.pipeline.skip_rows import determine_skip_rows, find_skip_rows
from maternal_tidy.table.reader import read_raw_table, read_table


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("a1,a2\nb1,b2\niso3,stuff\nc1,c2\n", 2),
        ("a1,a2\nb1,b2\n,\niso3,stuff\nc1,c2\n,\n", 3),  # blank rows count
        ("iso3,stuff\nc1,c2\n", 0),
    ],
)
def test_determine_skip_rows_literal_text(text: str, expected: int):
    assert determine_skip_rows(text) == expected


def test_skip_count_promotes_marker_row_to_header():
    text = "a1,a2\nb1,b2\n,\niso3,stuff\nc1,c2\n,\n"
    skip = determine_skip_rows(text)
    table = read_table(text, skip_rows=skip)
    assert table.columns[0] == "iso3"
    assert table.iloc[0].tolist() == ["c1", "c2"]


def test_marker_absent_raises():
    with pytest.raises(MarkerNotFoundError) as e:
        determine_skip_rows("a1,a2\nb1,b1\n")
    assert e.value.stage == "skip_rows"
    assert e.value.source == "<inline text>"


def test_marker_outside_first_column_raises():
    with pytest.raises(MarkerNotFoundError):
        determine_skip_rows("stuff,iso3\n")


def test_marker_error_names_source_file(tmp_path: Path):
    src = tmp_path / "no_marker.csv"
    src.write_text("title,\nx,y\n", encoding="utf-8")
    with pytest.raises(MarkerNotFoundError) as e:
        determine_skip_rows(src)
    assert e.value.source == str(src)
    assert str(src) in str(e.value)


def test_determine_skip_rows_from_export_file(tmp_path: Path, export_text: str):
    src = tmp_path / "c_sections.csv"
    src.write_text(export_text, encoding="utf-8")
    # 8 metadata rows before the header
    assert determine_skip_rows(src) == 8
    assert determine_skip_rows(str(src)) == 8


def test_ragged_metadata_rows_are_counted(tmp_path: Path):
    # metadata narrower than the table must not break parsing
    src = tmp_path / "ragged.csv"
    src.write_text("Title only\nSecond note\niso3,Total,Rural\nAFG,1,2\n", encoding="utf-8")
    assert determine_skip_rows(src) == 2


def test_utf8_bom_does_not_hide_marker(tmp_path: Path):
    src = tmp_path / "bom.csv"
    src.write_bytes("\ufeffiso3,Total\nAFG,1\n".encode("utf-8"))
    assert determine_skip_rows(src) == 0


def test_custom_marker():
    rules = TidyRules(marker="ISO3")
    assert determine_skip_rows("t,\nISO3,x\nAFG,1\n", rules) == 1


def test_find_skip_rows_on_raw_table():
    raw = read_raw_table("x,y\niso3,y\n")
    assert find_skip_rows(raw, "mem") == 1


def test_missing_file_is_read_error(tmp_path: Path):
    with pytest.raises(TableReadError) as e:
        determine_skip_rows(tmp_path / "missing.csv")
    assert e.value.stage == "read"
