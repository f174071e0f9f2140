"""maternal_tidy: tidy UNICEF-style maternal health CSV exports.

The pipeline locates the real header row of each export, cuts the country
table out of its surrounding notes, normalizes the values and stores the result
under a dataset name.
"""

from .models.tidy_rules import DEFAULT_RULES, TidyRules
from .pipeline.errors import (
    BoundsNotFoundError,
    MarkerNotFoundError,
    ReshapeError,
    TableReadError,
    TidyError,
)
from .pipeline.reshape import subsection_and_tidy
from .pipeline.row_bounds import RowBounds, determine_first_and_last_row
from .pipeline.skip_rows import determine_skip_rows
from .pipeline.tidy import tidy_dataset

__all__ = [
    "DEFAULT_RULES",
    "TidyRules",
    "TidyError",
    "TableReadError",
    "MarkerNotFoundError",
    "BoundsNotFoundError",
    "ReshapeError",
    "RowBounds",
    "determine_skip_rows",
    "determine_first_and_last_row",
    "subsection_and_tidy",
    "tidy_dataset",
]

__version__ = "0.1.0"
