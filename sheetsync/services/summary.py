from __future__ import annotations

from collections.abc import Sequence

import pandas as pd

from ..models.patch import PartitionResult
from ..models.sync_result import SyncResult

"""Summary line and dry-run plan rendering.

SUMMARY format (one line, fixed key order):
SUMMARY appended={n} updated={n} unchanged={n} cells={n} skipped_rows={n}
diagnostics={n} elapsed_sec={x} mode={live|dry-run}
"""

__all__ = [
    "render_summary_line",
    "plan_frame",
    "render_plan",
    "PLAN_COLUMNS",
]

PLAN_COLUMNS = ["action", "key", "row", "column", "value"]


def _format_seconds(seconds: float) -> str:
    # 指数表記を避ける (0.000012 -> "0.000012")
    if seconds == 0:
        return "0"
    if seconds == int(seconds):
        return str(int(seconds))
    if seconds < 0.01:
        return f"{seconds:.6f}".rstrip("0").rstrip(".")
    return f"{seconds:.3f}".rstrip("0").rstrip(".")


def render_summary_line(result: SyncResult) -> str:
    """Render the SUMMARY line for a finished run.

    Examples:
        >>> from datetime import datetime, timezone
        >>> t = datetime(2024, 1, 1, tzinfo=timezone.utc)
        >>> r = SyncResult(
        ...     appended_rows=1, updated_rows=1, unchanged_rows=0, cell_writes=3,
        ...     applied_writes=3, csv_records=2, sheet_records=1, skipped_csv_rows=0,
        ...     diagnostics=0, dry_run=False, start_time=t, end_time=t, elapsed_seconds=0.5,
        ... )
        >>> render_summary_line(r)
        'SUMMARY appended=1 updated=1 unchanged=0 cells=3 skipped_rows=0 diagnostics=0 elapsed_sec=0.5 mode=live'
    """
    mode = "dry-run" if result.dry_run else "live"
    return (
        f"SUMMARY appended={result.appended_rows} "
        f"updated={result.updated_rows} "
        f"unchanged={result.unchanged_rows} "
        f"cells={result.cell_writes} "
        f"skipped_rows={result.skipped_csv_rows} "
        f"diagnostics={result.diagnostics} "
        f"elapsed_sec={_format_seconds(result.elapsed_seconds)} "
        f"mode={mode}"
    )


def plan_frame(partition: PartitionResult, columns: Sequence[str]) -> pd.DataFrame:
    """One DataFrame row per planned cell write (append patches first)."""
    rows: list[dict[str, object]] = []
    for action, patches in (("append", partition.append_patches), ("update", partition.update_patches)):
        for patch in patches:
            for cell in patch.cells:
                pos = cell.column_position
                rows.append({
                    "action": action,
                    "key": patch.key,
                    "row": patch.row_position,
                    "column": columns[pos] if pos < len(columns) else str(pos),
                    "value": cell.value,
                })
    return pd.DataFrame(rows, columns=PLAN_COLUMNS)


def render_plan(partition: PartitionResult, columns: Sequence[str]) -> str:
    df = plan_frame(partition, columns)
    if df.empty:
        return "(no changes)"
    return df.to_string(index=False)
