from __future__ import annotations

import logging
from typing import Any

import pandas as pd

from ..db.batch_insert import batch_insert, quote_identifier
from .base import StoreWriteError, validate_dataset_name

"""PostgreSQL store: one table per dataset (``<prefix><name>``).

Each write is its own transaction: DROP + CREATE + INSERT, then COMMIT. Any
failure rolls back, so the previous table (if any) survives unchanged. The
connection must be in autocommit mode so the explicit BEGIN/COMMIT are the
only transaction boundaries.
"""

logger = logging.getLogger(__name__)

__all__ = [
    "PostgresDatasetStore",
]


def _sql_type(series: pd.Series) -> str:
    if pd.api.types.is_bool_dtype(series):
        return "boolean"
    if pd.api.types.is_integer_dtype(series):
        return "bigint"
    if pd.api.types.is_float_dtype(series):
        return "double precision"
    return "text"


def _rows(table: pd.DataFrame) -> list[tuple[Any, ...]]:
    # NaN -> None (NULL), numpy スカラー -> Python 値
    boxed = table.astype(object).where(table.notna(), None)
    return [tuple(r) for r in boxed.itertuples(index=False, name=None)]


class PostgresDatasetStore:
    def __init__(self, cursor: Any, table_prefix: str = "") -> None:
        self.cursor = cursor
        self.table_prefix = table_prefix

    def table_name(self, name: str) -> str:
        return quote_identifier(f"{self.table_prefix}{validate_dataset_name(name)}")

    def write(self, name: str, table: pd.DataFrame) -> str:
        relation = self.table_name(name)
        columns = [str(c) for c in table.columns]
        column_defs = ", ".join(
            f"{quote_identifier(c)} {_sql_type(table[c])}" for c in columns
        )
        cur = self.cursor
        try:
            cur.execute("BEGIN")
            cur.execute(f"DROP TABLE IF EXISTS {relation}")
            cur.execute(f"CREATE TABLE {relation} ({column_defs})")
            result = batch_insert(cur, relation, columns, _rows(table))
            cur.execute("COMMIT")
        except Exception as e:
            try:
                cur.execute("ROLLBACK")
            except Exception:
                logger.debug("rollback failed for %s", relation)
            raise StoreWriteError(f"failed to write dataset '{name}': {e}", source=relation) from e
        logger.debug("dataset=%s inserted %d rows into %s", name, result.inserted_rows, relation)
        return relation

    def read(self, name: str) -> pd.DataFrame:
        relation = self.table_name(name)
        self.cursor.execute(f"SELECT * FROM {relation}")
        columns = [d[0] for d in self.cursor.description]
        return pd.DataFrame(self.cursor.fetchall(), columns=columns)

    def names(self) -> list[str]:
        self.cursor.execute(
            "SELECT table_name FROM information_schema.tables "
            "WHERE table_schema = current_schema() AND table_name LIKE %s ORDER BY table_name",
            (self.table_prefix.replace("_", r"\_") + "%",),
        )
        return [r[0][len(self.table_prefix):] for r in self.cursor.fetchall()]
