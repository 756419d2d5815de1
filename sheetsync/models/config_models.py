from __future__ import annotations

from dataclasses import dataclass

"""Config dataclasses for the CSV -> spreadsheet sync tool.

The loader in sheetsync/config/loader.py reads YAML, validates it against the JSON
schema and builds a SyncConfig. Environment variables and CLI flags are layered on
top with apply_overrides().
"""

__all__ = [
    "SyncConfig",
    "DEFAULT_CSV_ENCODING",
    "DEFAULT_LOGS_DIRECTORY",
]

DEFAULT_CSV_ENCODING = "utf-8-sig"  # BOM 付き CSV (Excel 出力) を許容
DEFAULT_LOGS_DIRECTORY = "./logs"


@dataclass(frozen=True)
class SyncConfig:
    """Root configuration object for one sync run.

    csv_path: CSV snapshot (authoritative side)
    workbook_path: .xlsx workbook to patch in place
    key_column: header name used as the join key on both sides
    sheet_name: worksheet to sync (None = the workbook's active sheet)
    strict_dates: raise on impossible date-shaped CSV values instead of passing them through
    """
    csv_path: str
    workbook_path: str
    key_column: str
    sheet_name: str | None = None
    strict_dates: bool = False
    csv_encoding: str = DEFAULT_CSV_ENCODING
    logs_directory: str = DEFAULT_LOGS_DIRECTORY
