from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

"""Processing result models for a batch run.

ProcessingResult carries everything the SUMMARY line and the exit code need.
"""


@dataclass(frozen=True)
class DatasetStat:
    """Per-dataset statistics (helper for ProcessingResult)."""
    dataset: str
    file_name: str
    status: str  # success/failed
    rows: int
    elapsed_seconds: float
    stage: str | None = None  # 失敗時のステージ


@dataclass(frozen=True)
class ProcessingResult:
    success_datasets: int
    failed_datasets: int
    total_rows: int
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    dataset_stats: list[DatasetStat] | None = None

    @property
    def failed_names(self) -> list[str]:
        return [s.dataset for s in self.dataset_stats or [] if s.status == "failed"]
