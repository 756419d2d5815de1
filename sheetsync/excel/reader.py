from __future__ import annotations

from pathlib import Path
from typing import Any

import pandas as pd

"""Sheet grid reader.

Reads the used range of one worksheet as a list of rows (first row = header)
with pandas. No header inference and no NA coercion: literal strings such as
"NA" or "null" must survive so they compare equal to the same CSV text.
Empty cells come back as None.
"""

__all__ = [
    "list_sheet_names",
    "read_sheet_grid",
    "frame_to_grid",
]


def list_sheet_names(path: Path) -> list[str]:
    with pd.ExcelFile(path, engine="openpyxl") as xls:
        return [str(n) for n in xls.sheet_names]


def frame_to_grid(df: pd.DataFrame) -> list[list[Any]]:
    """Convert a raw (header=None) DataFrame to a list of rows, NaN/"" -> None."""
    if df.empty:
        return []
    cleaned = df.astype(object).where(df.notna(), None)
    grid: list[list[Any]] = []
    for row in cleaned.values.tolist():
        grid.append([None if (isinstance(v, str) and v == "") else v for v in row])
    return grid


def read_sheet_grid(path: Path, sheet_name: str) -> list[list[Any]]:
    """Read ``sheet_name`` from an .xlsx file as a rectangular grid.

    Parameters
    ----------
    path: workbook path
    sheet_name: worksheet title (must exist)
    """
    with pd.ExcelFile(path, engine="openpyxl") as xls:
        # ヘッダなし・NA 変換なしで生読み (1行目がヘッダ)
        df = xls.parse(
            sheet_name,
            header=None,
            dtype=object,
            keep_default_na=False,
            na_values=[],
        )
    return frame_to_grid(df)
