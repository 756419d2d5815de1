from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

from ..excel.store import SheetStore, StoreError, WorkbookStore
from ..logging.diagnostic_log import DiagnosticLogBuffer
from ..models.config_models import SyncConfig
from ..models.diagnostic import DiagnosticKind
from ..models.sync_result import SyncResult
from ..tables.indexer import build_column_positions, index_csv, index_spreadsheet
from ..tables.normalizer import InvalidDateFormat
from .applier import PatchApplyError, apply_patches
from .differ import drop_protected_cells, partition, unmapped_columns

"""Sync orchestration.

One run:
1. read CSV text
2. open the workbook store (named or active sheet)
3. index both sides, derive column positions
4. partition into append / update patches (writes onto formula cells are dropped)
5. apply (skipped for dry runs) and save the workbook
6. flush diagnostics, return SyncResult

sync_tables() is the store-agnostic core (steps 3-5 without saving);
run_sync() wraps it with file handling for a SyncConfig.
"""

__all__ = [
    "SyncError",
    "read_csv_text",
    "sync_tables",
    "run_sync",
]

logger = logging.getLogger(__name__)


class SyncError(Exception):
    """Fatal failure that stops a run before any write is issued."""


def read_csv_text(path: Path, encoding: str) -> str:
    if not path.exists():
        raise SyncError(f"csv file not found: {path}")
    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError, LookupError) as e:
        raise SyncError(f"cannot read csv {path}: {e}") from e


def sync_tables(
    csv_text: str,
    store: SheetStore,
    key_column: str,
    *,
    strict_dates: bool = False,
    dry_run: bool = False,
    diagnostics: DiagnosticLogBuffer | None = None,
    progress: bool | None = None,
) -> SyncResult:
    """Reconcile ``store`` with ``csv_text`` keyed by ``key_column``.

    Args:
        csv_text: raw CSV text (header line first)
        store: sheet store to read and patch
        key_column: join key header name
        strict_dates: fail on impossible date values instead of passing them through
        dry_run: compute patches without writing
        diagnostics: buffer receiving data-quality records (not flushed here)
        progress: tqdm bar during writes (None = TTY only)

    Raises:
        SyncError: strict date failure
        PatchApplyError: the store failed part-way through writing
    """
    start_time = datetime.now(UTC)
    diag = diagnostics if diagnostics is not None else DiagnosticLogBuffer()
    diag_before = diag.total
    skipped_before = diag.count(DiagnosticKind.SKIPPED_ROW)

    try:
        csv_index = index_csv(csv_text, key_column, strict_dates=strict_dates, diagnostics=diag)
    except InvalidDateFormat as e:
        raise SyncError(f"csv: {e}") from e

    grid = store.read_grid()
    sheet_index, columns = index_spreadsheet(grid, key_column, diagnostics=diag)
    positions = build_column_positions(columns, diagnostics=diag)
    logger.info(
        "indexed csv_records=%d sheet_records=%d sheet_columns=%d",
        len(csv_index),
        len(sheet_index),
        len(columns),
    )

    missing = unmapped_columns(csv_index, positions)
    for column in missing:
        diag.record(source="partition", row=-1, kind=DiagnosticKind.UNMAPPED_COLUMN,
                    message=f"csv column '{column}' not in sheet header; values ignored")
    if missing:
        logger.warning("csv column(s) not on sheet, ignored: %s", missing)

    result, skipped_formulas = drop_protected_cells(
        partition(csv_index, sheet_index, positions), store.formula_cells()
    )
    for patch, cell in skipped_formulas:
        diag.record(source="sheet", row=patch.row_position, kind=DiagnosticKind.FORMULA_CELL,
                    message=f"column {cell.column_position} holds a formula; value '{cell.value}' not written")
    if skipped_formulas:
        logger.warning("%d formula cell(s) left untouched", len(skipped_formulas))

    applied = 0
    if dry_run:
        logger.info("dry-run: %d cell write(s) planned, store untouched", result.write_count)
    else:
        applied = apply_patches(store, result.append_patches, result.update_patches, progress=progress)

    end_time = datetime.now(UTC)
    return SyncResult(
        appended_rows=len(result.append_patches),
        updated_rows=result.changed_updates,
        unchanged_rows=result.unchanged_updates,
        cell_writes=result.write_count,
        applied_writes=applied,
        csv_records=len(csv_index),
        sheet_records=len(sheet_index),
        skipped_csv_rows=diag.count(DiagnosticKind.SKIPPED_ROW) - skipped_before,
        diagnostics=diag.total - diag_before,
        dry_run=dry_run,
        start_time=start_time,
        end_time=end_time,
        elapsed_seconds=(end_time - start_time).total_seconds(),
        partition=result,
        columns=columns,
    )


def _flush_diagnostics(diag: DiagnosticLogBuffer) -> None:
    try:
        path = diag.flush()
    except OSError as e:
        # 診断ログの書き出し失敗で処理全体を失敗させない
        logger.warning("failed writing diagnostics log: %s", e)
        return
    if path is not None:
        logger.info("diagnostics written to %s", path)


def run_sync(config: SyncConfig, *, dry_run: bool = False, progress: bool | None = None) -> SyncResult:
    """Run one sync for ``config``.

    The workbook is saved only when at least one write was issued. After a
    partial failure the writes that landed are saved too (no rollback) and the
    PatchApplyError is re-raised.

    Raises:
        SyncError: CSV / workbook / sheet unavailable, strict date failure, save failure
        PatchApplyError: a cell write was rejected part-way
    """
    diag = DiagnosticLogBuffer(Path(config.logs_directory))
    csv_path = Path(config.csv_path)
    csv_text = read_csv_text(csv_path, config.csv_encoding)

    try:
        store = WorkbookStore(Path(config.workbook_path), config.sheet_name)
    except StoreError as e:
        raise SyncError(str(e)) from e

    logger.info("sync csv=%s workbook=%s sheet=%s key=%s",
                csv_path.name, store.path.name, store.sheet_name, config.key_column)
    with store:
        try:
            result = sync_tables(
                csv_text,
                store,
                config.key_column,
                strict_dates=config.strict_dates,
                dry_run=dry_run,
                diagnostics=diag,
                progress=progress,
            )
        except PatchApplyError as e:
            if e.applied_writes:
                try:
                    store.save()
                except StoreError as save_e:
                    logger.error("failed saving partial writes: %s", save_e)
            raise
        except StoreError as e:
            raise SyncError(str(e)) from e
        finally:
            _flush_diagnostics(diag)

        if result.applied_writes:
            try:
                store.save()
            except StoreError as e:
                raise SyncError(str(e)) from e
    return result
