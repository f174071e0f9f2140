from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path

"""DatasetSpec / DatasetRun models.

A DatasetSpec names one known source file; a DatasetRun is the outcome of
tidying and storing it during one batch run.
"""


class DatasetStatus(Enum):
    """Status of a dataset within a batch run.

    State transitions: pending -> (success | failed)
    """
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class DatasetSpec:
    name: str  # store key (e.g. "c_sections")
    file: str  # file name relative to source_directory


@dataclass(frozen=True)
class DatasetRun:
    """Processing context and result for a single dataset."""
    spec: DatasetSpec
    path: Path                           # resolved source path
    start_time: datetime | None = None
    end_time: datetime | None = None
    status: DatasetStatus = DatasetStatus.PENDING
    rows: int = 0                        # tidy rows written
    location: str | None = None          # where the store put it
    stage: str | None = None             # failed stage
    error: str | None = None             # failure summary
