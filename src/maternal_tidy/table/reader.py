from __future__ import annotations

import csv
import io
from pathlib import Path
from typing import Union

import pandas as pd

from ..pipeline.errors import TableReadError

"""Delimited text reader.

Exports are read raw (``header=None``) so that every physical record keeps its
position: the skip-row detector counts records, and blank separator records
such as ``,`` have to count too. The header row is promoted afterwards.

Metadata records at the top of an export are often narrower than the country
table, so the widest record decides the column count instead of the first one
(pandas would otherwise reject the first wide row).
"""

__all__ = [
    "Source",
    "describe_source",
    "read_source_text",
    "read_raw_table",
    "promote_header",
    "read_table",
]

Source = Union[str, Path]

INLINE_SOURCE_NAME = "<inline text>"
DEFAULT_ENCODING = "utf-8-sig"  # BOM 付き CSV でも先頭セルが "iso3" になるように


def _is_literal_text(source: Source) -> bool:
    # readr と同じ規約: 改行を含む文字列はファイルパスではなく CSV 本文
    return isinstance(source, str) and ("\n" in source or "\r" in source)


def describe_source(source: Source) -> str:
    """Return a short identifier for diagnostics."""
    if _is_literal_text(source):
        return INLINE_SOURCE_NAME
    return str(source)


def read_source_text(source: Source, encoding: str = DEFAULT_ENCODING) -> str:
    """Return the full text of a path or literal CSV source.

    The file is opened, read to completion and closed here.
    """
    if _is_literal_text(source):
        return str(source)
    path = Path(source)
    if not path.exists():
        raise TableReadError(f"source file not found: {path}", source=str(path))
    if not path.is_file():
        raise TableReadError(f"source is not a file: {path}", source=str(path))
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        raise TableReadError(f"cannot read source: {e}", source=str(path)) from e


def _record_width(text: str) -> int:
    return max((len(record) for record in csv.reader(io.StringIO(text))), default=0)


def read_raw_table(source: Source, encoding: str = DEFAULT_ENCODING) -> pd.DataFrame:
    """Parse a source into a RawTable: positional columns, string-or-NaN cells.

    Row ``i`` of the result is physical record ``i`` of the text; blank records
    are kept as all-NaN rows.
    """
    name = describe_source(source)
    text = read_source_text(source, encoding=encoding)
    try:
        width = _record_width(text)
    except csv.Error as e:
        # csv.field_size_limit() (131072 文字) を超えるセルなど
        raise TableReadError(f"cannot parse delimited text: {e}", source=name) from e
    if width == 0:
        raise TableReadError("source contains no records", source=name)
    try:
        return pd.read_csv(
            io.StringIO(text),
            header=None,
            names=list(range(width)),
            dtype=str,
            skip_blank_lines=False,
        )
    except (pd.errors.ParserError, pd.errors.EmptyDataError, ValueError) as e:
        raise TableReadError(f"cannot parse delimited text: {e}", source=name) from e


def _normalize_header(values: list[object]) -> list[str]:
    """Turn a raw header record into unique column names.

    Missing cells become ``Unnamed: <position>``; repeated names get a ``.N``
    suffix, the same way pandas mangles duplicate headers.
    """
    columns: list[str] = []
    seen: dict[str, int] = {}
    for position, value in enumerate(values):
        if pd.isna(value) or str(value).strip() == "":
            name = f"Unnamed: {position}"
        else:
            name = str(value).strip()
        if name in seen:
            seen[name] += 1
            name = f"{name}.{seen[name]}"
        else:
            seen[name] = 0
        columns.append(name)
    return columns


def promote_header(
    raw: pd.DataFrame, header_row: int = 0, source: str | None = None
) -> pd.DataFrame:
    """Build a ParsedTable by adopting raw record ``header_row`` as the header.

    Records before the header are discarded; fully blank records after it are
    dropped and the index is renumbered from 0.
    """
    if header_row < 0 or header_row >= len(raw):
        raise TableReadError(
            f"header row {header_row} outside table of {len(raw)} records", source=source
        )
    columns = _normalize_header(raw.iloc[header_row].tolist())
    data = raw.iloc[header_row + 1 :].copy()
    data.columns = columns
    data = data.dropna(how="all").reset_index(drop=True)
    return data


def read_table(
    source: Source, skip_rows: int = 0, encoding: str = DEFAULT_ENCODING
) -> pd.DataFrame:
    """Read a source, skip ``skip_rows`` records and promote the next one to header."""
    raw = read_raw_table(source, encoding=encoding)
    return promote_header(raw, skip_rows, source=describe_source(source))
