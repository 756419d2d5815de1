from __future__ import annotations

import logging
import math
import zipfile
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any, Protocol

from openpyxl import load_workbook
from openpyxl.utils.exceptions import IllegalCharacterError, InvalidFileException

from ..tables.indexer import stringify_cell
from .reader import read_sheet_grid

"""Sheet stores: the only place the sync touches a spreadsheet.

A store reads the whole grid of one sheet, reports which cells hold formulas and writes one
cell at a time by coordinates. Rows are counted from the header row (header = 0) and
columns from 0, so a RowPatch position is used as-is.

- InMemorySheetStore: list-of-lists grid (tests, dry runs)
- WorkbookStore: one worksheet of an .xlsx file (pandas read, openpyxl write)
"""

__all__ = [
    "SheetStore",
    "StoreError",
    "SheetNotFoundError",
    "StoreWriteError",
    "InMemorySheetStore",
    "WorkbookStore",
]

logger = logging.getLogger(__name__)


class StoreError(Exception):
    """Base exception for sheet store failures."""


class SheetNotFoundError(StoreError):
    """Raised when the requested worksheet does not exist."""


class StoreWriteError(StoreError):
    """Raised when a cell write or save is rejected."""


class SheetStore(Protocol):
    def read_grid(self) -> list[list[Any]]: ...

    def formula_cells(self) -> set[tuple[int, int]]: ...

    def write_cell(self, row: int, column: int, value: str) -> None: ...


def _check_coordinates(row: int, column: int) -> None:
    if row < 0 or column < 0:
        raise StoreWriteError(f"invalid cell coordinates row={row} column={column}")


class InMemorySheetStore:
    """Grid held in memory. Writes grow the grid as needed and are logged in ``writes``.

    ``formulas`` lists (row, column) coordinates to report as formula cells.
    """

    def __init__(
        self,
        grid: Sequence[Sequence[Any]] | None = None,
        formulas: Iterable[tuple[int, int]] = (),
    ) -> None:
        self.grid: list[list[Any]] = [list(r) for r in (grid or [])]
        self.formulas: set[tuple[int, int]] = set(formulas)
        self.writes: list[tuple[int, int, str]] = []

    def read_grid(self) -> list[list[Any]]:
        return [list(r) for r in self.grid]

    def formula_cells(self) -> set[tuple[int, int]]:
        return set(self.formulas)

    def write_cell(self, row: int, column: int, value: str) -> None:
        _check_coordinates(row, column)
        while len(self.grid) <= row:
            self.grid.append([])
        target = self.grid[row]
        if len(target) <= column:
            target.extend([None] * (column + 1 - len(target)))
        target[column] = value
        self.writes.append((row, column, value))


def coerce_cell_value(value: str) -> Any:
    """Turn a written string into the typed value the spreadsheet would store.

    Only converts when the typed value reads back as the same text
    ("42" -> 42, "true" -> True), so "007" or "1.50" stay strings. Non-finite
    numbers ("Infinity", "NaN") also stay strings; the xlsx format cannot hold them.
    """
    if value in ("true", "false"):
        return value == "true"
    try:
        number: int | float = int(value)
    except ValueError:
        try:
            number = float(value)
        except ValueError:
            return value
        if not math.isfinite(number):
            return value
    return number if stringify_cell(number) == value else value


class WorkbookStore:
    """One worksheet of an .xlsx workbook.

    The workbook is loaded once with openpyxl and kept in memory; writes are
    persisted only by save(). The grid is read with pandas from the file on disk.
    """

    def __init__(self, path: Path, sheet_name: str | None = None) -> None:
        self.path = Path(path)
        if not self.path.exists():
            raise StoreError(f"workbook not found: {self.path}")
        try:
            self._wb = load_workbook(self.path)
        except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
            raise StoreError(f"cannot open workbook {self.path}: {e}") from e

        if sheet_name is None:
            ws = self._wb.active
            if ws is None:
                raise SheetNotFoundError(f"workbook {self.path.name} has no active sheet")
        elif sheet_name in self._wb.sheetnames:
            ws = self._wb[sheet_name]
        else:
            raise SheetNotFoundError(
                f"sheet '{sheet_name}' not found in {self.path.name} (sheets={self._wb.sheetnames})"
            )
        self._ws = ws
        self.write_count = 0

    @property
    def sheet_name(self) -> str:
        return str(self._ws.title)

    def read_grid(self) -> list[list[Any]]:
        try:
            return read_sheet_grid(self.path, self.sheet_name)
        except (ValueError, KeyError, zipfile.BadZipFile, OSError) as e:
            raise StoreError(f"cannot read sheet '{self.sheet_name}' of {self.path.name}: {e}") from e

    def formula_cells(self) -> set[tuple[int, int]]:
        """Coordinates (header = row 0) of cells holding a formula.

        read_grid() returns the cached result of a formula, and openpyxl drops
        those cached results on save, so formula cells must never be diffed or
        written.
        """
        return {
            (cell.row - 1, cell.column - 1)
            for row in self._ws.iter_rows()
            for cell in row
            if cell.data_type == "f"
        }

    def write_cell(self, row: int, column: int, value: str) -> None:
        _check_coordinates(row, column)
        try:
            self._ws.cell(row=row + 1, column=column + 1, value=coerce_cell_value(value))
        except (IllegalCharacterError, ValueError, TypeError) as e:
            raise StoreWriteError(f"cell row={row} column={column} rejected: {e}") from e
        self.write_count += 1

    def save(self) -> None:
        try:
            self._wb.save(self.path)
        except OSError as e:
            raise StoreWriteError(f"failed saving {self.path}: {e}") from e
        logger.debug("saved workbook %s (%d cell write(s))", self.path, self.write_count)

    def close(self) -> None:
        self._wb.close()

    def __enter__(self) -> WorkbookStore:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
