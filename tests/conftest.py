# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from sheetsync.logging.init import reset_logging


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        yield p


@pytest.fixture(autouse=True)
def _clean_sheetsync_env(monkeypatch):
    # 実行環境の SHEETSYNC_* がテストに混入しないようにする
    for var in ("SHEETSYNC_CSV_PATH", "SHEETSYNC_WORKBOOK_PATH", "SHEETSYNC_KEY_COLUMN", "SHEETSYNC_SHEET_NAME"):
        monkeypatch.delenv(var, raising=False)
    reset_logging()
    yield
    reset_logging()


@pytest.fixture()
def sample_config_yaml() -> str:
    return """csv_path: ./data/snapshot.csv
workbook_path: ./data/sheet.xlsx
key_column: ID
sheet_name: People
strict_dates: false
logs_directory: ./logs
"""


@pytest.fixture()
def write_config(temp_workdir: Path, sample_config_yaml: str) -> Path:
    cfg = temp_workdir / "config" / "sync.yml"
    cfg.write_text(sample_config_yaml, encoding="utf-8")
    return cfg


def _make_workbook(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def make_workbook() -> Callable[[Path, dict[str, list[list[object]]]], Path]:
    """Factory writing raw rows (first row = header) to an .xlsx file."""
    return _make_workbook


@pytest.fixture()
def people_workbook(temp_workdir: Path) -> Path:
    return _make_workbook(
        temp_workdir / "data" / "sheet.xlsx",
        {
            "People": [
                ["ID", "Name", "Active"],
                [1, "Alice", False],
            ],
            "Other": [
                ["x"],
                [1],
            ],
        },
    )


@pytest.fixture()
def people_csv(temp_workdir: Path) -> Path:
    p = temp_workdir / "data" / "snapshot.csv"
    p.write_text("ID,Name,Active\n1,Alice,YES\n2,Bob,N\n", encoding="utf-8")
    return p
