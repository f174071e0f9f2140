from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import Any

"""TidyRules model: structural constants of a maternal health export.

Every export shares the same layout: a metadata block, a header row whose first
cell is ``iso3``, one row per country from ``AFG`` to ``ZWE`` and a block of
notes. The defaults below describe that layout; config/tidy.yml may override
any field (see ``TidyRules.with_overrides``).
"""

__all__ = [
    "DEFAULT_RENAME",
    "DEFAULT_RULES",
    "TidyRules",
]


DEFAULT_RENAME: dict[str, str] = {
    "Total": "total",
    "Age 15-17": "age_15_17",
    "Age 18-19": "age_18_19",
    "Age less than 20": "age_less_than_20",
    "Q1 (poorest)": "q1_poorest",
    "Q2": "q2",
    "Q3": "q3",
    "Q4": "q4",
    "Q5 (richest)": "q5_richest",
    "Rural": "rural",
    "Urban": "urban",
    "No education": "no_education",
    "Primary education": "primary_education",
    "Secondary education": "secondary_education",
    "Higher education": "higher_education",
    "Source": "source",
    "Source year": "source_year",
}


@dataclass(frozen=True)
class TidyRules:
    """Markers, column sets and the rename table used by the pipeline."""

    marker: str = "iso3"  # 先頭列でヘッダ行を示す値
    key_column: str = "iso3"
    first_key: str = "AFG"
    last_key: str = "ZWE"
    drop_columns: tuple[str, ...] = ("Country/areas",)
    unnamed_pattern: str = r"^Unnamed: \d+$"
    text_columns: tuple[str, ...] = ("iso3", "Source")  # 数値化しない列
    unscaled_columns: tuple[str, ...] = ("iso3", "year", "Source", "Source year")
    scale_divisor: float = 100.0
    missing_marker: str = "-"
    rename: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_RENAME))

    def __post_init__(self) -> None:
        if self.first_key == self.last_key:
            raise ValueError(
                f"first_key and last_key must differ (both '{self.first_key}')"
            )
        if self.scale_divisor == 0:
            raise ValueError("scale_divisor must be non-zero")
        if not self.missing_marker:
            raise ValueError("missing_marker must be a non-empty string")
        try:
            re.compile(self.unnamed_pattern)
        except re.error as e:
            raise ValueError(f"invalid unnamed_pattern: {e}") from e

    def is_unnamed(self, column: object) -> bool:
        return re.match(self.unnamed_pattern, str(column)) is not None

    @classmethod
    def with_overrides(cls, overrides: Mapping[str, Any] | None) -> TidyRules:
        """Build rules from the defaults plus a ``rules:`` config section.

        List values replace the defaults; ``rename`` entries are merged over the
        default rename table.
        """
        base = DEFAULT_RULES
        if not overrides:
            return base
        known = {f.name for f in fields(cls)}
        unknown = set(overrides) - known
        if unknown:
            raise ValueError(f"unknown rule keys: {sorted(unknown)}")

        changes: dict[str, Any] = {}
        for key, value in overrides.items():
            if key == "rename":
                merged = dict(base.rename)
                merged.update(value or {})
                changes[key] = merged
            elif isinstance(value, list):
                changes[key] = tuple(value)
            else:
                changes[key] = value
        return replace(base, **changes)


DEFAULT_RULES = TidyRules()
