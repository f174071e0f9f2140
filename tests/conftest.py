# Shared pytest fixtures
from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

HEADER = [
    "iso3", "Country/areas", "year", "Total", "Age 15-17", "Q1 (poorest)",
    "Rural", "Source", "Source year", "",
]

METADATA_ROWS = [
    ["Delivery care: C-section rates"],
    ["Percentage of live births delivered by caesarean section"],
    [],
    ["Source: UNICEF global databases"],
    ["Last update: April 2016"],
    [],
    ["Disaggregated by age, wealth and residence"],
    [],
]

DATA_ROWS = [
    ["AFG", "Afghanistan", "2010", "3.6", "-", "1.2", "2.4", "MICS 2010", "2010", ""],
    ["ALB", "Albania", "2009", "19.1", "22.0", "11.5", "15.0", "DHS 2008-2009", "2009", ""],
    ["BGD", "Bangladesh", "2014", "23.1", "n/a", "6.1", "18.0", "DHS 2014", "2014", ""],
    ["ZWE", "Zimbabwe", "2014", "6.0", "4.5", "2.4", "3.9", "MICS 2014", "2014", ""],
]

FOOTER_ROWS = [
    [],
    ["Notes:"],
    ["- Data not available"],
]


def _csv_line(cells: list[str], width: int) -> str:
    padded = list(cells) + [""] * (width - len(cells))
    return ",".join(f'"{c}"' if "," in c else c for c in padded)


def build_export(
    metadata: list[list[str]] | None = None,
    header: list[str] | None = None,
    rows: list[list[str]] | None = None,
    footer: list[list[str]] | None = None,
) -> str:
    """Return CSV text laid out like a UNICEF export (all records padded to one width)."""
    metadata = METADATA_ROWS if metadata is None else metadata
    header = HEADER if header is None else header
    rows = DATA_ROWS if rows is None else rows
    footer = FOOTER_ROWS if footer is None else footer
    width = len(header)
    records = [*metadata, header, *rows, *footer]
    return "".join(_csv_line(r, width) + "\n" for r in records)


def pytest_addoption(parser):
    parser.addoption(
        "--only",
        action="store",
        default=None,
        metavar="SUBSTRING",
        help="collect only test files whose name (without test_ prefix, _test suffix or .py) contains SUBSTRING",
    )


def normalize_test_filename(name: str) -> str:
    stem = name[:-3] if name.endswith(".py") else name
    if stem.startswith("test_"):
        stem = stem[len("test_"):]
    elif stem.endswith("_test"):
        stem = stem[: -len("_test")]
    return stem


def _is_test_file(path: Path) -> bool:
    # pytest の既定 python_files (test_*.py / *_test.py) と同じ判定
    return path.suffix == ".py" and (path.name.startswith("test_") or path.stem.endswith("_test"))


def pytest_ignore_collect(collection_path: Path, config):
    only = config.getoption("--only")
    if not only or not collection_path.is_file():
        return None
    if not _is_test_file(collection_path):
        return None
    if only not in normalize_test_filename(collection_path.name):
        return True
    return None


@pytest.fixture()
def export_text() -> str:
    return build_export()


@pytest.fixture()
def make_export():
    return build_export


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data-raw").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture()
def sample_config_yaml() -> str:
    return """source_directory: ./data-raw
datasets:
  c_sections: c_sections.csv
  anc4: anc4.csv
output:
  backend: file
  directory: ./data
database:
  host: localhost
  port: 5432
  user: appuser
  password: secret
  database: appdb
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "tidy.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


@pytest.fixture()
def export_files(temp_workdir: Path) -> list[Path]:
    """Write well-formed exports for both configured datasets."""
    files = []
    for name in ["c_sections.csv", "anc4.csv"]:
        f = temp_workdir / "data-raw" / name
        f.write_text(build_export(), encoding="utf-8")
        files.append(f)
    return files
