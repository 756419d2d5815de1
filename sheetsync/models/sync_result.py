from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from .patch import PartitionResult

"""Result model for one sync run.

Carries the counters rendered in the SUMMARY line plus the partition itself so the
CLI can print a dry-run plan.
"""


@dataclass(frozen=True)
class SyncResult:
    """Aggregated outcome of run_sync() / sync_tables()."""
    appended_rows: int  # append パッチ数
    updated_rows: int  # 1セル以上の差分がある update パッチ数
    unchanged_rows: int  # 差分なし update パッチ数
    cell_writes: int  # 計画された書き込みセル数
    applied_writes: int  # 実際に store へ発行した書き込み数 (dry-run は 0)
    csv_records: int
    sheet_records: int
    skipped_csv_rows: int
    diagnostics: int
    dry_run: bool
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    partition: PartitionResult = field(default_factory=PartitionResult)
    columns: list[str] = field(default_factory=list)  # シートのヘッダ列 (順序保持)
