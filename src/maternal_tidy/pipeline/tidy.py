from __future__ import annotations

import logging
from dataclasses import dataclass

import pandas as pd

from ..models.tidy_rules import DEFAULT_RULES, TidyRules
from ..table.reader import Source, describe_source, promote_header, read_raw_table
from .errors import ReshapeError, TidyError
from .reshape import subsection_and_tidy
from .row_bounds import RowBounds, determine_first_and_last_row
from .skip_rows import find_skip_rows

"""End-to-end dataset transform: source path -> TidyTable.

The source is parsed once; the skip count is applied by promoting the marker
record of the raw table rather than re-reading the file.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "DatasetLayout",
    "inspect_dataset",
    "tidy_dataset",
]


@dataclass(frozen=True)
class DatasetLayout:
    """What the pipeline found in a source (used by ``--inspect-data``)."""

    source: str
    skip_rows: int
    bounds: RowBounds
    columns: list[str]
    data_rows: int


def _locate(source: Source, rules: TidyRules) -> tuple[pd.DataFrame, int, RowBounds]:
    name = describe_source(source)
    raw = read_raw_table(source)
    skip = find_skip_rows(raw, name, rules)
    table = promote_header(raw, skip, source=name)
    bounds = determine_first_and_last_row(table, rules, source=name)
    return table, skip, bounds


def inspect_dataset(source: Source, rules: TidyRules = DEFAULT_RULES) -> DatasetLayout:
    table, skip, bounds = _locate(source, rules)
    return DatasetLayout(
        source=describe_source(source),
        skip_rows=skip,
        bounds=bounds,
        columns=[str(c) for c in table.columns],
        data_rows=bounds.last_row - bounds.first_row + 1,
    )


def tidy_dataset(source: Source, rules: TidyRules = DEFAULT_RULES) -> pd.DataFrame:
    """Run the full pipeline on one source.

    Raises:
        TidyError: subclass naming the failed stage (read, skip_rows,
            row_bounds, reshape).
    """
    name = describe_source(source)
    table, skip, bounds = _locate(source, rules)
    try:
        tidy = subsection_and_tidy(table, bounds, rules)
    except TidyError as e:
        if e.source is None:
            e.source = name
        raise
    except (KeyError, TypeError, ValueError) as e:
        raise ReshapeError(f"reshape failed: {e}", source=name) from e
    logger.debug(
        "source=%s skip_rows=%d bounds=(%d, %d) rows=%d cols=%d",
        name, skip, bounds.first_row, bounds.last_row, len(tidy), tidy.shape[1],
    )
    return tidy
