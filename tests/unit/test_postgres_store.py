from __future__ import annotations

import pandas as pd
import pytest

from maternal_tidy.store.base import StoreWriteError
from maternal_tidy.store.postgres_store import PostgresDatasetStore


class RecordingCursor:
    def __init__(self, fail_on: str | None = None) -> None:
        self.statements: list[str] = []
        self.inserted: list[tuple] = []
        self.fail_on = fail_on
        self.description = None
        self._result: list[tuple] = []

    def execute(self, sql, params=None):
        self.statements.append(sql)
        if self.fail_on and sql.startswith(self.fail_on):
            raise RuntimeError(f"boom on {self.fail_on}")

    def fetchall(self):
        return self._result


@pytest.fixture(autouse=True)
def patch_execute_values(monkeypatch):
    import maternal_tidy.db.batch_insert as bi

    def fake_execute_values(cursor, sql, rows, page_size=1000):
        cursor.statements.append(sql)
        cursor.inserted.extend(rows)

    monkeypatch.setattr(bi, "execute_values", fake_execute_values)


def _table() -> pd.DataFrame:
    return pd.DataFrame({"iso3": ["AFG", "ZWE"], "total": [0.5, float("nan")]})


def test_write_runs_in_one_transaction():
    cur = RecordingCursor()
    store = PostgresDatasetStore(cur, table_prefix="maternal_")
    relation = store.write("anc4", _table())
    assert relation == '"maternal_anc4"'
    assert cur.statements[0] == "BEGIN"
    assert cur.statements[1] == 'DROP TABLE IF EXISTS "maternal_anc4"'
    assert cur.statements[2] == 'CREATE TABLE "maternal_anc4" ("iso3" text, "total" double precision)'
    assert cur.statements[3].startswith('INSERT INTO "maternal_anc4"')
    assert cur.statements[-1] == "COMMIT"
    # NaN -> NULL
    assert cur.inserted == [("AFG", 0.5), ("ZWE", None)]


def test_failed_write_rolls_back():
    cur = RecordingCursor(fail_on="CREATE TABLE")
    store = PostgresDatasetStore(cur)
    with pytest.raises(StoreWriteError) as e:
        store.write("anc4", _table())
    assert e.value.stage == "store"
    assert cur.statements[-1] == "ROLLBACK"
    assert "COMMIT" not in cur.statements


def test_invalid_name_never_touches_database():
    cur = RecordingCursor()
    with pytest.raises(StoreWriteError):
        PostgresDatasetStore(cur).write('x"; DROP TABLE y; --', _table())
    assert cur.statements == []


def test_read_and_names():
    cur = RecordingCursor()
    store = PostgresDatasetStore(cur, table_prefix="m_")
    cur.description = [("iso3",), ("total",)]
    cur._result = [("AFG", 0.5)]
    df = store.read("anc4")
    assert cur.statements[-1] == 'SELECT * FROM "m_anc4"'
    assert df.to_dict("records") == [{"iso3": "AFG", "total": 0.5}]

    cur._result = [("m_anc4",), ("m_c_sections",)]
    assert store.names() == ["anc4", "c_sections"]
