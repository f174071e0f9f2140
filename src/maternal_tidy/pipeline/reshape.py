from __future__ import annotations

import logging

import pandas as pd

from ..models.tidy_rules import DEFAULT_RULES, TidyRules
from .errors import ReshapeError
from .row_bounds import RowBounds

"""Region reshaping: ParsedTable + RowBounds -> TidyTable.

Steps (each returns a new frame):
1. keep rows 1..last_row (rows before first_row were removed with the header)
2. drop label / auto-named columns
3. dash cells -> missing, then numeric coercion of non-text columns
4. percentage -> fraction for numeric columns outside ``unscaled_columns``
5. rename to snake_case identifiers

The transform is one-way: feeding a TidyTable back in rescales it again.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "subsection_rows",
    "drop_columns",
    "coerce_numeric",
    "rescale_percentages",
    "rename_columns",
    "subsection_and_tidy",
]


def subsection_rows(table: pd.DataFrame, bounds: RowBounds) -> pd.DataFrame:
    if bounds.last_row > len(table):
        raise ReshapeError(
            f"last row {bounds.last_row} beyond table of {len(table)} rows"
        )
    return table.iloc[: bounds.last_row].reset_index(drop=True)


def drop_columns(table: pd.DataFrame, rules: TidyRules = DEFAULT_RULES) -> pd.DataFrame:
    doomed = [c for c in table.columns if c in rules.drop_columns or rules.is_unnamed(c)]
    return table.drop(columns=doomed)


def _clean_cell(value: object, missing_marker: str) -> str | None:
    if pd.isna(value):
        return None
    text = str(value).strip()
    if text == "" or missing_marker in text:
        return None
    return text


def coerce_numeric(table: pd.DataFrame, rules: TidyRules = DEFAULT_RULES) -> pd.DataFrame:
    """Convert every non-text column to float.

    Cells containing ``rules.missing_marker`` become NaN before conversion; any
    other cell that does not parse as a number also becomes NaN (logged, never
    raised).
    """
    result = table.copy()
    for column in result.columns:
        if column in rules.text_columns:
            continue
        cleaned = result[column].map(lambda v: _clean_cell(v, rules.missing_marker))
        numeric = pd.to_numeric(cleaned, errors="coerce").astype("float64")
        failed = int((numeric.isna() & cleaned.notna()).sum())
        if failed:
            logger.debug("column=%r non-numeric cells set to missing: %d", column, failed)
        result[column] = numeric
    return result


def rescale_percentages(table: pd.DataFrame, rules: TidyRules = DEFAULT_RULES) -> pd.DataFrame:
    result = table.copy()
    for column in result.columns:
        if column in rules.unscaled_columns:
            continue
        if not pd.api.types.is_numeric_dtype(result[column]):
            continue
        result[column] = result[column] / rules.scale_divisor
    return result


def rename_columns(table: pd.DataFrame, rules: TidyRules = DEFAULT_RULES) -> pd.DataFrame:
    return table.rename(columns=dict(rules.rename))


def subsection_and_tidy(
    table: pd.DataFrame, bounds: RowBounds, rules: TidyRules = DEFAULT_RULES
) -> pd.DataFrame:
    """Cut the data region out of ``table`` and normalize it into a TidyTable."""
    tidy = subsection_rows(table, bounds)
    tidy = drop_columns(tidy, rules)
    tidy = coerce_numeric(tidy, rules)
    tidy = rescale_percentages(tidy, rules)
    return rename_columns(tidy, rules)
