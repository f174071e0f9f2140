from __future__ import annotations

from pathlib import Path

"""``--only SUBSTRING`` collection filter defined in tests/conftest.py."""

CONFTEST = Path(__file__).resolve().parents[1] / "conftest.py"


def _make_suite(pytester) -> None:
    pytester.makeconftest(CONFTEST.read_text(encoding="utf-8"))
    pytester.makepyfile(
        test_skip_rows="def test_prefixed():\n    pass\n",
        skip_rows_extra_test="def test_suffixed():\n    pass\n",
        row_bounds_test="def test_other_suffixed():\n    pass\n",
        test_reshape="def test_other_prefixed():\n    pass\n",
    )


def test_only_filters_prefix_and_suffix_files(pytester):
    _make_suite(pytester)
    result = pytester.runpytest("--only", "skip_rows", "--collect-only", "-q")
    result.stdout.fnmatch_lines_random([
        "test_skip_rows.py::test_prefixed",
        "skip_rows_extra_test.py::test_suffixed",
    ])
    result.stdout.no_fnmatch_line("*row_bounds_test.py*")
    result.stdout.no_fnmatch_line("*test_reshape.py*")


def test_only_matches_normalized_name(pytester):
    _make_suite(pytester)
    # "test_" と "_test" は照合前に外される
    result = pytester.runpytest("--only", "test", "--collect-only", "-q")
    result.stdout.no_fnmatch_line("*.py::*")


def test_without_only_collects_everything(pytester):
    _make_suite(pytester)
    result = pytester.runpytest("--collect-only", "-q")
    result.stdout.fnmatch_lines_random([
        "test_skip_rows.py::test_prefixed",
        "skip_rows_extra_test.py::test_suffixed",
        "row_bounds_test.py::test_other_suffixed",
        "test_reshape.py::test_other_prefixed",
    ])
