#!/usr/bin/env python3
"""Generate synthetic UNICEF-style maternal health CSV exports.

Each generated file follows the layout the tidying pipeline expects:
- 8 metadata rows (title, indicator definition, source notes, blanks)
- header row starting with ``iso3``
- one row per country from AFG to ZWE
- a footer block of notes

Useful for trying ``maternal-tidy`` without the real exports.
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

import numpy as np
import pandas as pd

COLUMNS = [
    "iso3", "Country/areas", "year", "Total",
    "Age 15-17", "Age 18-19", "Age less than 20",
    "Q1 (poorest)", "Q2", "Q3", "Q4", "Q5 (richest)",
    "Rural", "Urban",
    "No education", "Primary education", "Secondary education", "Higher education",
    "Source", "Source year",
]

COUNTRIES = [
    ("AFG", "Afghanistan"), ("ALB", "Albania"), ("BGD", "Bangladesh"),
    ("BEN", "Benin"), ("COL", "Colombia"), ("ETH", "Ethiopia"),
    ("GHA", "Ghana"), ("IND", "India"), ("KEN", "Kenya"),
    ("MWI", "Malawi"), ("NPL", "Nepal"), ("NGA", "Nigeria"),
    ("PER", "Peru"), ("UGA", "Uganda"), ("ZMB", "Zambia"), ("ZWE", "Zimbabwe"),
]

DATASETS = {
    "at_health_facilities": "Delivery care: institutional deliveries",
    "c_sections": "Delivery care: C-section rates",
    "skilled_birth_attendant": "Delivery care: skilled birth attendant",
    "anc4": "Antenatal care: at least four visits",
}


def generate_table(rng: np.random.Generator, missing_rate: float = 0.1) -> pd.DataFrame:
    """Build the country table with percentages and ``-`` placeholders."""
    rows = []
    for iso3, name in COUNTRIES:
        year = int(rng.integers(2008, 2016))
        values = []
        for _ in COLUMNS[3:-2]:
            if rng.random() < missing_rate:
                values.append("-")
            else:
                values.append(f"{rng.uniform(5, 99):.1f}")
        source = str(rng.choice(["DHS", "MICS", "Other NS"]))
        rows.append([iso3, name, str(year), *values, f"{source} {year}", str(year)])
    return pd.DataFrame(rows, columns=COLUMNS)


def write_export(path: Path, title: str, table: pd.DataFrame) -> None:
    width = len(COLUMNS)

    def pad(cells: list[str]) -> list[str]:
        return cells + [""] * (width - len(cells))

    metadata = [
        pad([title]),
        pad(["Percentage of live births"]),
        pad([""]),
        pad(["Source: synthetic data generated for testing"]),
        pad(["Last update: April 2016"]),
        pad([""]),
        pad(["Disaggregated by age, wealth, residence and education"]),
        pad([""]),
    ]
    footer = [
        pad([""]),
        pad(["Notes:"]),
        pad(["- Data not available"]),
    ]
    records = pd.DataFrame(metadata + [COLUMNS] + table.values.tolist() + footer)
    path.parent.mkdir(parents=True, exist_ok=True)
    records.to_csv(path, header=False, index=False, lineterminator="\n")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic maternal health CSV exports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Write the four default exports into ./data-raw
  %(prog)s

  # Different seed and output directory
  %(prog)s --out /tmp/exports --seed 7
        """,
    )
    parser.add_argument("--out", type=Path, default=Path("data-raw"), help="Output directory")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument(
        "--missing-rate", type=float, default=0.1,
        help="Share of cells written as '-' (default: 0.1)",
    )
    args = parser.parse_args()

    if not 0 <= args.missing_rate < 1:
        print("Error: --missing-rate must be in [0, 1)", file=sys.stderr)
        return 1

    rng = np.random.default_rng(args.seed)
    for name, title in DATASETS.items():
        path = args.out / f"{name}.csv"
        write_export(path, title, generate_table(rng, args.missing_rate))
        print(f"Created export: {path} ({len(COUNTRIES)} countries)")
    return 0


if __name__ == "__main__":
    sys.exit(main())
