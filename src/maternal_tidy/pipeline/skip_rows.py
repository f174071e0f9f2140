from __future__ import annotations

import logging

import pandas as pd

from ..models.tidy_rules import DEFAULT_RULES, TidyRules
from ..table.reader import Source, describe_source, read_raw_table
from .errors import MarkerNotFoundError

"""Header skip detection.

The number of records to skip is the position of the first record whose first
cell equals the marker. Counting on the raw table (no header promotion) makes
that position the skip count directly: parsing with a header first would
silently consume one record and shift every position by one.

    "a1,a2\\nb1,b2\\niso3,stuff\\nc1,c2\\n"   -> 2
    "iso3,stuff\\nc1,c2\\n"                 -> 0
"""

logger = logging.getLogger(__name__)

__all__ = [
    "find_skip_rows",
    "determine_skip_rows",
]


def find_skip_rows(
    raw: pd.DataFrame, source: str = "<table>", rules: TidyRules = DEFAULT_RULES
) -> int:
    """Return the number of leading records before the marker record of ``raw``.

    Raises:
        MarkerNotFoundError: no first-column cell equals ``rules.marker``.
    """
    if raw.shape[1] == 0 or raw.shape[0] == 0:
        raise MarkerNotFoundError(f"marker '{rules.marker}' not found: empty table", source=source)
    first_column = raw.iloc[:, 0]
    positions = first_column.eq(rules.marker).to_numpy().nonzero()[0]
    if len(positions) == 0:
        raise MarkerNotFoundError(
            f"marker '{rules.marker}' not found in first column", source=source
        )
    skip = int(positions[0])
    logger.debug("source=%s marker=%s skip_rows=%d", source, rules.marker, skip)
    return skip


def determine_skip_rows(source: Source, rules: TidyRules = DEFAULT_RULES) -> int:
    """Read ``source`` (path or literal CSV text) and return its skip count."""
    raw = read_raw_table(source)
    return find_skip_rows(raw, describe_source(source), rules)
