from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path

from ..config.loader import TidyConfig
from ..logging.error_log import ErrorLogBuffer, ErrorRecord
from ..models.dataset_run import DatasetRun, DatasetSpec, DatasetStatus
from ..models.processing_result import DatasetStat, ProcessingResult
from ..models.tidy_rules import TidyRules
from ..pipeline.errors import TidyError
from ..pipeline.tidy import tidy_dataset
from ..store.base import DatasetStore
from .progress import ProgressTracker

"""Batch driver: tidy every configured dataset and persist it.

Each dataset is independent. A failure in one (any stage, including the store
write) is logged with its file and stage, recorded in the error log and
counted; the store keeps its previous value for that name and the remaining
datasets still run.
"""

logger = logging.getLogger(__name__)


class ProcessingError(Exception):
    """Fatal error that prevents the batch from starting."""
    pass


def select_datasets(config: TidyConfig, names: Iterable[str] | None = None) -> list[DatasetSpec]:
    """Return the configured datasets, optionally restricted to ``names`` (config order kept)."""
    if names is None:
        return list(config.datasets)
    selected: set[str] = set()
    unknown: list[str] = []
    for name in dict.fromkeys(names):
        try:
            selected.add(config.dataset(name).name)
        except KeyError:
            unknown.append(name)
    if unknown:
        raise ProcessingError(f"unknown dataset(s): {', '.join(unknown)}")
    return [spec for spec in config.datasets if spec.name in selected]


def process_all(
    config: TidyConfig,
    store: DatasetStore,
    names: Iterable[str] | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> ProcessingResult:
    """Tidy and store every selected dataset.

    Raises:
        ProcessingError: source directory missing or unknown dataset names.
    """
    start_time = datetime.now(UTC)
    if error_log is None:
        error_log = ErrorLogBuffer()

    directory = Path(config.source_directory)
    if not directory.is_dir():
        raise ProcessingError(f"Directory not found: {directory}")
    specs = select_datasets(config, names)

    dataset_stats: list[DatasetStat] = []
    success_count = 0
    failed_count = 0
    total_rows = 0

    with ProgressTracker(len(specs), description="Tidying datasets") as progress:
        for spec in specs:
            progress.start_dataset(spec.name)
            run = _process_single_dataset(spec, directory, config.rules, store, error_log)
            if run.status == DatasetStatus.SUCCESS:
                success_count += 1
                total_rows += run.rows
            else:
                failed_count += 1
            progress.set_postfix(success=success_count, failed=failed_count, rows=total_rows)
            progress.finish_dataset(success=(run.status == DatasetStatus.SUCCESS))

            elapsed = 0.0
            if run.start_time is not None and run.end_time is not None:
                elapsed = (run.end_time - run.start_time).total_seconds()
            dataset_stats.append(
                DatasetStat(
                    dataset=spec.name,
                    file_name=spec.file,
                    status=run.status.value,
                    rows=run.rows,
                    elapsed_seconds=elapsed,
                    stage=run.stage,
                )
            )

    # Flush error log once; a broken log directory must not hide the batch result
    try:
        log_path = error_log.flush()
    except OSError as e:
        logger.warning(f"could not write error log: {e}")
    else:
        if log_path is not None:
            logger.info(f"error log written: {log_path}")

    end_time = datetime.now(UTC)
    return ProcessingResult(
        success_datasets=success_count,
        failed_datasets=failed_count,
        total_rows=total_rows,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        dataset_stats=dataset_stats,
    )


def _process_single_dataset(
    spec: DatasetSpec,
    directory: Path,
    rules: TidyRules,
    store: DatasetStore,
    error_log: ErrorLogBuffer,
) -> DatasetRun:
    """Tidy one dataset and write it; never raises TidyError."""
    path = directory / spec.file
    start_time = datetime.now(UTC)
    try:
        table = tidy_dataset(path, rules)
        location = store.write(spec.name, table)
    except TidyError as e:
        logger.error(f"dataset={spec.name} file={spec.file} stage={e.stage}: {e.message}")
        error_log.append(
            ErrorRecord.create(
                file=spec.file,
                dataset=spec.name,
                stage=e.stage,
                error_type=e.error_type,
                message=e.message,
            )
        )
        return DatasetRun(
            spec=spec,
            path=path,
            start_time=start_time,
            end_time=datetime.now(UTC),
            status=DatasetStatus.FAILED,
            stage=e.stage,
            error=str(e),
        )

    logger.info(f"dataset={spec.name} rows={len(table)} -> {location}")
    return DatasetRun(
        spec=spec,
        path=path,
        start_time=start_time,
        end_time=datetime.now(UTC),
        status=DatasetStatus.SUCCESS,
        rows=len(table),
        location=location,
    )
