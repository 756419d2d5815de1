from __future__ import annotations

import logging
from dataclasses import replace

from ..models.patch import CellWrite, PartitionResult, RowPatch
from ..models.record import TableIndex

"""Differ / partitioner.

Classifies every CSV record as an append (key not on the sheet) or an update (key
already on the sheet) and keeps only the cells whose value differs.

Nothing in here raises on bad data: unknown columns and missing sheet cells are
skipped silently. Patch order follows the CSV index iteration order.
"""

__all__ = [
    "partition",
    "unmapped_columns",
    "drop_protected_cells",
]

logger = logging.getLogger(__name__)


def partition(
    csv_index: TableIndex,
    sheet_index: TableIndex,
    column_positions: dict[str, int],
) -> PartitionResult:
    """Split CSV records into append patches and update patches.

    Update: target row is the sheet record's origin_position; a cell is written
    only if the sheet has that column, the value differs and the column has a
    position.
    Append: target row is ``len(sheet_index) + appends_so_far + 1``; every mapped
    cell is written.
    """
    append_patches: list[RowPatch] = []
    update_patches: list[RowPatch] = []
    existing = len(sheet_index)

    for key, csv_rec in csv_index.items():
        sheet_rec = sheet_index.get(key)
        if sheet_rec is not None:
            row_position = sheet_rec.origin_position or 0
            cells: list[CellWrite] = []
            for cell in csv_rec.cells:
                current = sheet_rec.value_of(cell.column)
                if current is None or current == cell.value:
                    continue
                position = column_positions.get(cell.column)
                if position is not None:
                    cells.append(CellWrite(column_position=position, value=cell.value))
            update_patches.append(RowPatch(row_position=row_position, cells=tuple(cells), key=key))
        else:
            row_position = existing + len(append_patches) + 1
            cells = [
                CellWrite(column_position=column_positions[cell.column], value=cell.value)
                for cell in csv_rec.cells
                if cell.column in column_positions
            ]
            append_patches.append(RowPatch(row_position=row_position, cells=tuple(cells), key=key))

    result = PartitionResult(
        append_patches=tuple(append_patches),
        update_patches=tuple(update_patches),
    )
    logger.debug(
        "partition: append=%d update=%d (changed=%d) writes=%d",
        len(result.append_patches),
        len(result.update_patches),
        result.changed_updates,
        result.write_count,
    )
    return result


def unmapped_columns(csv_index: TableIndex, column_positions: dict[str, int]) -> list[str]:
    """CSV column names with no sheet position, in first-seen order."""
    seen: dict[str, None] = {}
    for rec in csv_index.values():
        for cell in rec.cells:
            if cell.column not in column_positions:
                seen.setdefault(cell.column, None)
    return list(seen)


def drop_protected_cells(
    result: PartitionResult,
    protected: set[tuple[int, int]],
) -> tuple[PartitionResult, list[tuple[RowPatch, CellWrite]]]:
    """Remove writes that target ``protected`` (row, column) coordinates.

    Patches keep their place even when all of their cells are dropped, so an
    update patch left without cells counts as unchanged.

    Returns:
        (filtered PartitionResult, dropped (patch, cell) pairs in write order)
    """
    if not protected:
        return result, []

    dropped: list[tuple[RowPatch, CellWrite]] = []

    def _filter(patches: tuple[RowPatch, ...]) -> tuple[RowPatch, ...]:
        kept_patches: list[RowPatch] = []
        for patch in patches:
            kept: list[CellWrite] = []
            for cell in patch.cells:
                if (patch.row_position, cell.column_position) in protected:
                    dropped.append((patch, cell))
                else:
                    kept.append(cell)
            kept_patches.append(replace(patch, cells=tuple(kept)))
        return tuple(kept_patches)

    filtered = PartitionResult(
        append_patches=_filter(result.append_patches),
        update_patches=_filter(result.update_patches),
    )
    return filtered, dropped
