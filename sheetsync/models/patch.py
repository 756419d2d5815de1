from __future__ import annotations

from dataclasses import dataclass, field

"""Row patch models produced by the differ and consumed by the applier.

Append and update patches share one shape. Row positions are 1-based data row
positions on the sheet (header = 0); column positions are 0-based header offsets.
"""

__all__ = [
    "CellWrite",
    "RowPatch",
    "PartitionResult",
]


@dataclass(frozen=True)
class CellWrite:
    column_position: int
    value: str


@dataclass(frozen=True)
class RowPatch:
    """Target row plus the cells to write on it (may be empty for unchanged rows)."""
    row_position: int
    cells: tuple[CellWrite, ...] = ()
    key: str = ""  # 診断/dry-run 表示用。書き込みには使わない

    @property
    def is_empty(self) -> bool:
        return not self.cells


@dataclass(frozen=True)
class PartitionResult:
    """Output of partition(): append patches and update patches in CSV key order."""
    append_patches: tuple[RowPatch, ...] = field(default_factory=tuple)
    update_patches: tuple[RowPatch, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.append_patches and not self.update_patches

    @property
    def write_count(self) -> int:
        return sum(len(p.cells) for p in self.append_patches) + sum(
            len(p.cells) for p in self.update_patches
        )

    @property
    def changed_updates(self) -> int:
        return sum(1 for p in self.update_patches if not p.is_empty)

    @property
    def unchanged_updates(self) -> int:
        return sum(1 for p in self.update_patches if p.is_empty)
