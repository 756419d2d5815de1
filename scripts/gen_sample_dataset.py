#!/usr/bin/env python3
"""Sample dataset generation for manual and performance checks.

Writes a workbook/CSV pair that sheetsync can reconcile:
- workbook: header in row 1, ``--rows`` data rows keyed by ``id``
- CSV: the same rows with a fraction of cells changed, plus ``--new-rows`` new keys

Booleans are written to the CSV as YES/NO and dates as M/D/YYYY so the
normalizer path is exercised.
"""
from __future__ import annotations

import argparse
import sys
from datetime import datetime
from pathlib import Path

import numpy as np
import pandas as pd

CATEGORIES = ["Electronics", "Clothing", "Books", "Food", "Sports", "Home"]


def generate_sheet_frame(rows: int, seed: int = 42) -> pd.DataFrame:
    """Synthetic sheet contents (typed values, as the workbook stores them)."""
    rng = np.random.default_rng(seed)
    dates = pd.date_range("2023-01-01", "2024-12-31", periods=100)
    return pd.DataFrame({
        "id": list(range(1, rows + 1)),
        "name": [f"Item_{rng.integers(1000, 9999)}_{chr(65 + (j % 26))}" for j in range(rows)],
        "category": rng.choice(CATEGORIES, rows).tolist(),
        "quantity": rng.integers(1, 1000, rows).tolist(),
        "active": rng.choice([True, False], rows).tolist(),
        "created_date": list(pd.DatetimeIndex(rng.choice(dates, rows)).to_pydatetime()),
    })


def _csv_value(value: object) -> str:
    if isinstance(value, (bool, np.bool_)):
        return "YES" if value else "NO"
    if isinstance(value, (pd.Timestamp, datetime)):
        return f"{value.month}/{value.day}/{value.year}"
    return str(value)


def derive_csv_frame(
    sheet: pd.DataFrame, change_ratio: float, new_rows: int, seed: int = 42
) -> pd.DataFrame:
    """Copy of ``sheet`` with some quantities changed and ``new_rows`` appended."""
    rng = np.random.default_rng(seed + 1)
    csv = sheet.copy()
    changed = rng.random(len(csv)) < change_ratio
    csv.loc[changed, "quantity"] = csv.loc[changed, "quantity"] + 1
    if new_rows:
        extra = generate_sheet_frame(new_rows, seed + 2)
        extra["id"] = list(range(len(sheet) + 1, len(sheet) + new_rows + 1))
        csv = pd.concat([csv, extra], ignore_index=True)
    return csv


def write_pair(
    workbook_path: Path,
    csv_path: Path,
    rows: int,
    change_ratio: float,
    new_rows: int,
    seed: int = 42,
    sheet_name: str = "Sheet1",
) -> None:
    sheet = generate_sheet_frame(rows, seed)
    csv = derive_csv_frame(sheet, change_ratio, new_rows, seed)

    workbook_path.parent.mkdir(parents=True, exist_ok=True)
    csv_path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(workbook_path, engine="openpyxl") as writer:
        sheet.to_excel(writer, sheet_name=sheet_name, index=False)

    lines = [",".join(csv.columns)]
    for record in csv.itertuples(index=False):
        lines.append(",".join(_csv_value(v) for v in record))
    csv_path.write_text("\n".join(lines) + "\n", encoding="utf-8")

    print(f"Created workbook: {workbook_path} ({rows} rows, sheet={sheet_name})")
    print(f"Created csv:      {csv_path} ({len(csv)} rows, {new_rows} new)")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate a workbook/CSV pair for sheetsync",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s data/sheet.xlsx data/snapshot.csv
  %(prog)s data/big.xlsx data/big.csv --rows 20000 --change-ratio 0.05 --new-rows 500
        """,
    )
    parser.add_argument("workbook", type=Path, help="Output workbook path")
    parser.add_argument("csv", type=Path, help="Output CSV path")
    parser.add_argument("--rows", type=int, default=1_000, help="Existing sheet rows (default: 1,000)")
    parser.add_argument("--change-ratio", type=float, default=0.1, help="Share of rows changed in the CSV")
    parser.add_argument("--new-rows", type=int, default=10, help="Rows only present in the CSV")
    parser.add_argument("--sheet", default="Sheet1", help="Sheet name (default: Sheet1)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1
    if not 0.0 <= args.change_ratio <= 1.0:
        print("Error: --change-ratio must be within [0, 1]", file=sys.stderr)
        return 1
    if args.new_rows < 0:
        print("Error: --new-rows must not be negative", file=sys.stderr)
        return 1

    write_pair(args.workbook, args.csv, args.rows, args.change_ratio, args.new_rows, args.seed, args.sheet)
    return 0


if __name__ == "__main__":
    sys.exit(main())
