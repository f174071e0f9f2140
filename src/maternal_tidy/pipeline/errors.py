"""Pipeline exception hierarchy.

Every fatal failure carries the source it was raised for and the stage that
raised it, so the batch driver can report ``file=... stage=...`` without
knowing which step failed.
"""

from __future__ import annotations


class TidyError(Exception):
    """Base exception for a dataset transform failure."""

    stage = "tidy"
    error_type = "TIDY_ERROR"

    def __init__(self, message: str, source: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.source = source

    def __str__(self) -> str:
        if self.source is None:
            return self.message
        return f"{self.message} (source={self.source})"


class TableReadError(TidyError):
    """Raised when a source cannot be opened or parsed as delimited text."""

    stage = "read"
    error_type = "TABLE_READ_ERROR"


class MarkerNotFoundError(TidyError):
    """Raised when the header marker never appears in the first column."""

    stage = "skip_rows"
    error_type = "MARKER_NOT_FOUND"


class BoundsNotFoundError(TidyError):
    """Raised when the first/last boundary rows cannot be located exactly."""

    stage = "row_bounds"
    error_type = "BOUNDS_NOT_FOUND"


class ReshapeError(TidyError):
    """Raised when the data region cannot be reshaped."""

    stage = "reshape"
    error_type = "RESHAPE_ERROR"
