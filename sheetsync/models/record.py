from __future__ import annotations

from dataclasses import dataclass

"""Keyed record model shared by the CSV and sheet indexes.

A Record is one row of a source table identified by the value of the key column.
Both indexes use the same shape so the differ can compare them cell by cell.
"""

__all__ = [
    "Cell",
    "Record",
    "TableIndex",
]


@dataclass(frozen=True)
class Cell:
    """A single (column, value) pair in canonical string form."""
    column: str
    value: str


@dataclass(frozen=True)
class Record:
    """One keyed row of a source table.

    origin_position is the 1-based data row position on the sheet (header = 0).
    CSV records are not on the sheet yet, so they carry None.
    """
    key: str
    cells: tuple[Cell, ...]
    origin_position: int | None = None

    def value_of(self, column: str) -> str | None:
        """Return the value of the first cell named ``column`` (None if absent)."""
        for cell in self.cells:
            if cell.column == column:
                return cell.value
        return None


# key -> Record (dict は挿入順を保持する。CSV 側の順序がパッチ出力順になる)
TableIndex = dict[str, Record]
