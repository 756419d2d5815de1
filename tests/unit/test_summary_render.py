from __future__ import annotations

from datetime import UTC, datetime

import pytest

from sheetsync.models.patch import CellWrite, PartitionResult, RowPatch
from sheetsync.models.sync_result import SyncResult
from sheetsync.services.summary import PLAN_COLUMNS, plan_frame, render_plan, render_summary_line

T0 = datetime(2024, 1, 1, tzinfo=UTC)


def _result(**kw) -> SyncResult:
    base = dict(
        appended_rows=0,
        updated_rows=0,
        unchanged_rows=0,
        cell_writes=0,
        applied_writes=0,
        csv_records=0,
        sheet_records=0,
        skipped_csv_rows=0,
        diagnostics=0,
        dry_run=False,
        start_time=T0,
        end_time=T0,
        elapsed_seconds=0.0,
    )
    base.update(kw)
    return SyncResult(**base)


def test_render_summary_line_fixed_key_order():
    line = render_summary_line(_result(
        appended_rows=1, updated_rows=2, unchanged_rows=3, cell_writes=7,
        skipped_csv_rows=1, diagnostics=4, elapsed_seconds=1.25,
    ))
    assert line == (
        "SUMMARY appended=1 updated=2 unchanged=3 cells=7 skipped_rows=1 "
        "diagnostics=4 elapsed_sec=1.25 mode=live"
    )


def test_render_summary_line_dry_run_mode():
    assert render_summary_line(_result(dry_run=True)).endswith("elapsed_sec=0 mode=dry-run")


@pytest.mark.parametrize(
    "seconds,expected",
    [(0.0, "0"), (2.0, "2"), (0.5, "0.5"), (0.000012, "0.000012"), (12.3456, "12.346")],
)
def test_elapsed_seconds_never_scientific(seconds: float, expected: str):
    assert f"elapsed_sec={expected} " in render_summary_line(_result(elapsed_seconds=seconds))


def test_plan_frame_one_row_per_write_append_first():
    part = PartitionResult(
        append_patches=(RowPatch(2, (CellWrite(0, "2"), CellWrite(1, "Bob")), key="2"),),
        update_patches=(
            RowPatch(1, (CellWrite(2, "true"),), key="1"),
            RowPatch(3, (), key="3"),
        ),
    )
    df = plan_frame(part, ["ID", "Name", "Active"])
    assert list(df.columns) == PLAN_COLUMNS
    assert df.to_dict("records") == [
        {"action": "append", "key": "2", "row": 2, "column": "ID", "value": "2"},
        {"action": "append", "key": "2", "row": 2, "column": "Name", "value": "Bob"},
        {"action": "update", "key": "1", "row": 1, "column": "Active", "value": "true"},
    ]


def test_render_plan_no_changes():
    assert render_plan(PartitionResult(), ["ID"]) == "(no changes)"


def test_render_plan_table_text():
    part = PartitionResult(update_patches=(RowPatch(1, (CellWrite(1, "Alicia"),), key="1"),))
    text = render_plan(part, ["ID", "Name"])
    assert "update" in text
    assert "Alicia" in text
    assert text.splitlines()[0].split() == PLAN_COLUMNS
