from __future__ import annotations

import logging
from collections.abc import Sequence

from ..excel.store import SheetStore
from ..models.patch import RowPatch
from .progress import WriteProgress

"""Patch applier.

Issues one point write per patch cell against a SheetStore, append patches
first, then update patches. Writes are neither batched nor transactional: when
the store rejects a write, earlier writes stay applied and the failure is raised
as PatchApplyError carrying the number of writes that landed.
"""

__all__ = [
    "PatchApplyError",
    "apply_patches",
]

logger = logging.getLogger(__name__)


class PatchApplyError(Exception):
    """Raised when the store fails part-way through applying patches."""

    def __init__(self, message: str, applied_writes: int, row_position: int, column_position: int) -> None:
        super().__init__(message)
        self.applied_writes = applied_writes
        self.row_position = row_position
        self.column_position = column_position


def apply_patches(
    store: SheetStore,
    append_patches: Sequence[RowPatch],
    update_patches: Sequence[RowPatch],
    *,
    progress: bool | None = None,
) -> int:
    """Write every patch cell to ``store``.

    Args:
        store: target sheet store
        append_patches: applied first
        update_patches: applied after the appends
        progress: show a tqdm bar (None = only on a TTY)

    Returns:
        number of cell writes issued (0 when both lists are empty; the store
        is not touched in that case)

    Raises:
        PatchApplyError: the store rejected a write
    """
    if not append_patches and not update_patches:
        return 0

    total = sum(len(p.cells) for p in append_patches) + sum(len(p.cells) for p in update_patches)
    applied = 0
    batches = (("append", append_patches), ("update", update_patches))
    with WriteProgress(total, enabled=progress) as bar:
        for kind, patches in batches:
            for patch in patches:
                if not patch.cells:
                    continue
                bar.start_row(patch.row_position, kind)
                for cell in patch.cells:
                    try:
                        store.write_cell(patch.row_position, cell.column_position, cell.value)
                    except Exception as e:
                        raise PatchApplyError(
                            f"write failed at row={patch.row_position} column={cell.column_position} "
                            f"after {applied} write(s): {e}",
                            applied_writes=applied,
                            row_position=patch.row_position,
                            column_position=cell.column_position,
                        ) from e
                    applied += 1
                    bar.advance()
    logger.debug("applied %d cell write(s) (append rows=%d update rows=%d)",
                 applied, len(append_patches), len(update_patches))
    return applied
