from __future__ import annotations

import re
from typing import Protocol

import pandas as pd

from ..pipeline.errors import TidyError

"""Named-dataset store interface.

A store maps a dataset name to its TidyTable. ``write`` replaces any previous
table under the same name and must either fully succeed or leave the previous
value untouched.
"""

__all__ = [
    "DATASET_NAME_PATTERN",
    "DatasetStore",
    "StoreWriteError",
    "validate_dataset_name",
]

DATASET_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


class StoreWriteError(TidyError):
    """Raised when a tidy table cannot be persisted."""

    stage = "store"
    error_type = "STORE_WRITE_ERROR"


class DatasetStore(Protocol):
    def write(self, name: str, table: pd.DataFrame) -> str:
        """Persist ``table`` under ``name``; return a description of where."""
        ...

    def read(self, name: str) -> pd.DataFrame:
        ...

    def names(self) -> list[str]:
        ...


def validate_dataset_name(name: str) -> str:
    if not DATASET_NAME_PATTERN.match(name):
        raise StoreWriteError(f"invalid dataset name: {name!r}")
    return name
