from __future__ import annotations

import argparse
import os
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, ConfigError, TidyConfig, load_config
from ..logging.init import log_summary, set_debug, setup_logging
from ..pipeline.errors import TidyError
from ..pipeline.tidy import inspect_dataset
from ..services.orchestrator import ProcessingError, process_all, select_datasets
from ..services.summary import render_summary_line
from ..store.base import DatasetStore
from ..store.file_store import FileDatasetStore
from ..store.postgres_store import PostgresDatasetStore

"""CLI entrypoint.

Flow:
- load .env, then config/tidy.yml (or --config)
- open the configured store (CSV directory or PostgreSQL)
- tidy every configured dataset (or the --dataset subset) and print SUMMARY

Exit codes: 0 all datasets stored, 2 at least one dataset failed, 1 fatal.
"""

EXIT_SUCCESS_ALL = 0
EXIT_PARTIAL_FAILURE = 2
EXIT_FATAL = 1


class StoreOpenError(Exception):
    pass


def _resolve_dsn(cfg: TidyConfig) -> str:
    """Connection string, in priority order.

    1. DATABASE_URL / PGDSN (``.env`` は main() 冒頭で上書きロード済み)
    2. individual PGHOST / PGPORT / PGUSER / PGPASSWORD / PGDATABASE
    3. the ``database`` section of the config (fallback for missing parts)
    """
    db_cfg = cfg.database
    dsn = os.getenv("DATABASE_URL") or os.getenv("PGDSN") or db_cfg.dsn
    if dsn:
        return dsn
    host = os.getenv("PGHOST", db_cfg.host or "localhost")
    port = os.getenv("PGPORT", str(db_cfg.port) if db_cfg.port else "5432")
    user = os.getenv("PGUSER", db_cfg.user or "postgres")
    password = os.getenv("PGPASSWORD", db_cfg.password or "")
    database = os.getenv("PGDATABASE", db_cfg.database or "postgres")
    dsn = f"host={host} port={port} user={user} dbname={database}"
    if password:
        dsn += f" password={password}"
    return dsn


@contextmanager
def _db_cursor(cfg: TidyConfig) -> Iterator[object]:  # pragma: no cover (thin wrapper)
    try:
        import psycopg2  # type: ignore
    except ImportError as e:
        raise StoreOpenError(f"psycopg2 not available: {e}") from e

    try:
        conn = psycopg2.connect(_resolve_dsn(cfg))
    except psycopg2.Error as e:
        raise StoreOpenError(f"database connection failed: {e}") from e
    # BEGIN/COMMIT は PostgresDatasetStore が dataset 単位で発行する
    conn.autocommit = True
    cur = conn.cursor()
    try:
        yield cur
    finally:
        cur.close()
        conn.close()


@contextmanager
def open_store(cfg: TidyConfig) -> Iterator[DatasetStore]:
    if cfg.output.backend == "postgres":
        with _db_cursor(cfg) as cur:
            yield PostgresDatasetStore(cur, table_prefix=cfg.output.table_prefix)
    else:
        yield FileDatasetStore(Path(cfg.output.directory))


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        prog="maternal-tidy", description="Tidy maternal health CSV exports into a dataset store"
    )
    p.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Config YAML path")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    p.add_argument(
        "--dataset",
        action="append",
        dest="datasets",
        metavar="NAME",
        help="Process only this dataset (repeatable)",
    )
    p.add_argument(
        "--inspect-data",
        action="store_true",
        help="Print skip rows, bounds and header of each dataset then exit",
    )
    return p.parse_args(argv)


def _inspect_data(cfg: TidyConfig, names: list[str] | None) -> int:
    try:
        specs = select_datasets(cfg, names)
    except ProcessingError as e:
        print(f"inspect: {e}")
        return EXIT_FATAL
    directory = Path(cfg.source_directory)
    failed = 0
    for spec in specs:
        print(f"DATASET: {spec.name} file={spec.file}")
        try:
            layout = inspect_dataset(directory / spec.file, cfg.rules)
        except TidyError as e:
            failed += 1
            print(f"  error stage={e.stage}: {e.message}")
            continue
        print(
            f"  skip_rows={layout.skip_rows} "
            f"bounds=({layout.bounds.first_row}, {layout.bounds.last_row}) "
            f"data_rows={layout.data_rows}"
        )
        print(f"  columns={layout.columns}")
    return EXIT_PARTIAL_FAILURE if failed else EXIT_SUCCESS_ALL


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む (テストの cli_main([]) で pytest 引数を拾わない)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    # .env を最優先で読み込む (DB 接続パラメータ優先順位保証)
    load_dotenv(dotenv_path=Path(".env"), override=True)

    if args.debug:
        set_debug(True)
        logger.debug("debug mode enabled")

    try:
        cfg = load_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    directory = Path(cfg.source_directory)
    if not directory.is_dir():
        logger.error(f"directory not found: {directory}")
        return EXIT_FATAL

    if args.inspect_data:
        return _inspect_data(cfg, args.datasets)

    logger.info(f"Tidying datasets from: {directory} backend={cfg.output.backend}")
    try:
        with open_store(cfg) as store:
            result = process_all(cfg, store, names=args.datasets)
    except StoreOpenError as e:
        logger.error(f"store: {e}")
        return EXIT_FATAL
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL

    total = result.success_datasets + result.failed_datasets
    summary_line = render_summary_line(total, result)
    # log_summary adds the "SUMMARY " label itself
    log_summary(summary_line[len("SUMMARY "):])
    if result.failed_datasets:
        logger.error(f"failed datasets: {', '.join(result.failed_names)}")
        return EXIT_PARTIAL_FAILURE
    return EXIT_SUCCESS_ALL
