"""Named-dataset stores (CSV directory, PostgreSQL)."""

from .base import DatasetStore, StoreWriteError
from .file_store import FileDatasetStore
from .postgres_store import PostgresDatasetStore

__all__ = [
    "DatasetStore",
    "StoreWriteError",
    "FileDatasetStore",
    "PostgresDatasetStore",
]
