"""Domain models for the maternal health tidying tool."""

from .dataset_run import DatasetRun, DatasetSpec, DatasetStatus
from .error_record import ErrorRecord
from .processing_result import DatasetStat, ProcessingResult
from .tidy_rules import DEFAULT_RULES, TidyRules

__all__ = [
    # Configuration models
    "DatasetSpec",
    "TidyRules",
    "DEFAULT_RULES",
    # Processing models
    "DatasetRun",
    "DatasetStatus",
    "DatasetStat",
    "ProcessingResult",
    "ErrorRecord",
]
