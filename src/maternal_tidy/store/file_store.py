from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

import pandas as pd

from .base import StoreWriteError, validate_dataset_name

"""CSV directory store: one ``<name>.csv`` per dataset.

Writes go to a temp file in the target directory and are moved into place with
``os.replace``, so a failed write never leaves a half-written table behind.
Serialization options are fixed so that re-running on unchanged inputs gives
byte-identical files.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "FileDatasetStore",
]

FLOAT_FORMAT = "%.10g"


class FileDatasetStore:
    def __init__(self, directory: Path | str, suffix: str = ".csv") -> None:
        self.directory = Path(directory)
        self.suffix = suffix

    def path_for(self, name: str) -> Path:
        return self.directory / f"{validate_dataset_name(name)}{self.suffix}"

    def write(self, name: str, table: pd.DataFrame) -> str:
        target = self.path_for(name)
        tmp_path: Path | None = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=f".{name}-", suffix=".tmp", dir=self.directory)
            tmp_path = Path(tmp)
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                table.to_csv(f, index=False, float_format=FLOAT_FORMAT, lineterminator="\n")
            os.replace(tmp_path, target)
        except (OSError, ValueError) as e:
            if tmp_path is not None:
                tmp_path.unlink(missing_ok=True)
            raise StoreWriteError(f"failed to write dataset '{name}': {e}", source=str(target)) from e
        logger.debug("dataset=%s written to %s", name, target)
        return str(target)

    def read(self, name: str) -> pd.DataFrame:
        path = self.path_for(name)
        if not path.exists():
            raise KeyError(name)
        return pd.read_csv(path)

    def names(self) -> list[str]:
        if not self.directory.exists():
            return []
        return sorted(p.stem for p in self.directory.glob(f"*{self.suffix}"))
