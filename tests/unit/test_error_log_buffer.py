from __future__ import annotations

import json
from pathlib import Path

from maternal_tidy.logging.error_log import ErrorLogBuffer, ErrorRecord

KEYS = {"timestamp", "file", "dataset", "stage", "error_type", "message"}


def test_error_record_creation_and_json_line():
    rec = ErrorRecord.create(
        file="anc4.csv",
        dataset="anc4",
        stage="skip_rows",
        error_type="MARKER_NOT_FOUND",
        message="marker 'iso3' not found in first column",
    )
    data = json.loads(rec.to_json_line())
    assert data["file"] == "anc4.csv"
    assert data["stage"] == "skip_rows"
    assert data["timestamp"].endswith("Z")
    assert set(data.keys()) == KEYS


def test_error_log_buffer_flush(temp_workdir: Path):
    buf = ErrorLogBuffer()
    buf.append(ErrorRecord.create("a.csv", "a", "skip_rows", "MARKER_NOT_FOUND", "no marker"))
    buf.append(ErrorRecord.create("b.csv", "b", "row_bounds", "BOUNDS_NOT_FOUND", "no bounds"))
    path = buf.flush()
    assert path is not None and path.exists()
    assert path.parent == Path("logs")
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert len(lines) == 2
    for raw in lines:
        assert set(json.loads(raw).keys()) == KEYS
    # flush 後バッファクリア
    assert len(buf) == 0


def test_error_log_buffer_empty_flush_creates_nothing(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path / "logs")
    assert buf.flush() is None
    assert not (tmp_path / "logs").exists()


def test_error_log_buffer_multiple_flushes(tmp_path: Path):
    buf = ErrorLogBuffer(logs_dir=tmp_path)
    buf.append(ErrorRecord.create("f.csv", "f", "store", "STORE_WRITE_ERROR", "disk full"))
    path = buf.flush()
    size1 = path.stat().st_size
    buf.append(ErrorRecord.create("f.csv", "f", "store", "STORE_WRITE_ERROR", "disk full again"))
    path2 = buf.flush()
    assert path == path2
    assert path2.stat().st_size > size1
    assert len(buf.records) == 0
