from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass

import pandas as pd

from ..models.tidy_rules import DEFAULT_RULES, TidyRules
from .errors import BoundsNotFoundError

"""Data region bounds.

Rows are numbered from 1 in table order. The region starts at the single row
keyed ``rules.first_key`` and ends at the single row keyed ``rules.last_key``;
anything after the last row is notes.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "RowBounds",
    "determine_first_and_last_row",
]


@dataclass(frozen=True)
class RowBounds:
    """Inclusive 1-based row range of the data region."""

    first_row: int
    last_row: int

    def __iter__(self) -> Iterator[int]:
        yield self.first_row
        yield self.last_row


def _row_numbers(keys: pd.Series, value: str) -> list[int]:
    return [int(p) + 1 for p in keys.eq(value).to_numpy().nonzero()[0]]


def determine_first_and_last_row(
    table: pd.DataFrame, rules: TidyRules = DEFAULT_RULES, source: str | None = None
) -> RowBounds:
    """Locate the boundary rows of a ParsedTable.

    Exactly one row must match each boundary key; the matched-row count is
    therefore exactly two.

    Raises:
        BoundsNotFoundError: key column missing, a boundary key matched zero or
            several rows, or the first boundary comes after the last one.
    """
    if rules.key_column not in table.columns:
        raise BoundsNotFoundError(
            f"key column '{rules.key_column}' not in table columns", source=source
        )
    keys = table[rules.key_column]
    first_rows = _row_numbers(keys, rules.first_key)
    last_rows = _row_numbers(keys, rules.last_key)
    matched = len(first_rows) + len(last_rows)
    if len(first_rows) != 1 or len(last_rows) != 1:
        raise BoundsNotFoundError(
            f"expected exactly 2 boundary rows ('{rules.first_key}' once, "
            f"'{rules.last_key}' once), matched {matched} "
            f"({rules.first_key}={first_rows}, {rules.last_key}={last_rows})",
            source=source,
        )
    bounds = RowBounds(first_rows[0], last_rows[0])
    if bounds.first_row > bounds.last_row:
        raise BoundsNotFoundError(
            f"'{rules.first_key}' row {bounds.first_row} comes after "
            f"'{rules.last_key}' row {bounds.last_row}",
            source=source,
        )
    logger.debug("source=%s bounds=(%d, %d)", source, bounds.first_row, bounds.last_row)
    return bounds
