from __future__ import annotations

from datetime import datetime
from pathlib import Path

import pytest
from openpyxl import load_workbook

from sheetsync.cli import main as cli_main
from sheetsync.excel.reader import read_sheet_grid

"""End-to-end runs against a real .xlsx workbook.

Sheet values are typed (ints, bools, datetimes) while the CSV is plain text, so a
successful run proves the normalized CSV values compare equal to the stringified
sheet values and that only real differences are written.
"""


@pytest.fixture()
def inventory(temp_workdir: Path, make_workbook) -> Path:
    wb = make_workbook(
        temp_workdir / "data" / "inventory.xlsx",
        {
            "Summary": [["note"], ["not synced"]],
            "Items": [
                ["sku", "name", "qty", "active", "received"],
                ["A-1", "Bolt", 100, True, datetime(2024, 1, 1)],
                ["A-2", "Nut", 250, False, datetime(2024, 1, 2)],
                ["A-3", "Washer", 75, True, datetime(2024, 1, 3)],
            ],
        },
    )
    (temp_workdir / "config" / "sync.yml").write_text(
        "csv_path: ./data/items.csv\n"
        "workbook_path: ./data/inventory.xlsx\n"
        "key_column: sku\n"
        "sheet_name: Items\n",
        encoding="utf-8",
    )
    return wb


def _write_csv(temp_workdir: Path, text: str) -> None:
    (temp_workdir / "data" / "items.csv").write_text(text, encoding="utf-8")


def test_run_updates_changed_cells_and_appends_new_keys(inventory: Path, temp_workdir: Path, capsys):
    _write_csv(
        temp_workdir,
        "sku,name,qty,active,received\n"
        "A-1,Bolt,100,YES,1/1/2024\n"     # unchanged
        "A-2,Nut,240,no,1/2/2024\n"       # qty changed
        "A-3,Washer,75,N,1/3/2024\n"      # active changed
        "B-1,Screw,10,Y,2/1/2024\n"       # new
        "B-2,Rivet,5,F,2/2/2024\n",       # new
    )

    assert cli_main([]) == 0
    out = capsys.readouterr().out
    assert "SUMMARY appended=2 updated=2 unchanged=1 cells=12 " in out

    grid = read_sheet_grid(inventory, "Items")
    assert len(grid) == 6
    assert grid[2][2] == 240
    assert grid[3][3] is False
    assert grid[4][:4] == ["B-1", "Screw", 10, True]
    assert grid[5][:4] == ["B-2", "Rivet", 5, False]

    ws = load_workbook(inventory)["Items"]
    # 日付は serial 値として書き込まれる
    assert ws["E5"].value == 45323
    # 既存の日付セルには触れない
    assert isinstance(ws["E2"].value, datetime)
    assert load_workbook(inventory)["Summary"]["A2"].value == "not synced"


def test_second_run_is_idempotent(inventory: Path, temp_workdir: Path, capsys):
    _write_csv(
        temp_workdir,
        "sku,name,qty,active,received\n"
        "A-2,Nut,240,no,1/2/2024\n"
        "C-9,Pin,1,YES,3/1/2024\n",
    )
    assert cli_main([]) == 0
    capsys.readouterr()

    assert cli_main([]) == 0
    out = capsys.readouterr().out
    assert "SUMMARY appended=0 updated=0 unchanged=2 cells=0 " in out


def test_empty_key_rows_contribute_nothing(inventory: Path, temp_workdir: Path, capsys):
    _write_csv(
        temp_workdir,
        "sku,name,qty,active,received\n"
        ",Ghost,1,YES,1/1/2024\n"
        "A-1,Bolt,100,TRUE,1/1/2024\n",
    )
    assert cli_main([]) == 0
    out = capsys.readouterr().out
    assert "appended=0 updated=0 unchanged=1 cells=0 skipped_rows=1" in out
    assert len(read_sheet_grid(inventory, "Items")) == 4
    assert list((temp_workdir / "logs").glob("diagnostics-*.log"))


def test_csv_with_bom_and_crlf(inventory: Path, temp_workdir: Path, capsys):
    text = "sku,name,qty,active,received\r\nA-1,Bolt,101,YES,1/1/2024\r\n"
    (temp_workdir / "data" / "items.csv").write_bytes(text.encode("utf-8-sig"))
    assert cli_main([]) == 0
    assert "updated=1" in capsys.readouterr().out
    assert read_sheet_grid(inventory, "Items")[1][2] == 101
