from __future__ import annotations

import logging
import math
import numbers
import re
from collections.abc import Sequence
from datetime import date, datetime, time, timedelta
from typing import Any

from ..logging.diagnostic_log import DiagnosticLogBuffer
from ..models.diagnostic import DiagnosticKind
from ..models.record import Cell, Record, TableIndex
from .normalizer import EXCEL_EPOCH, InvalidDateFormat, normalize

"""Table indexer: builds a keyed index from CSV text or a sheet grid.

Both sources end up as ``key -> Record`` so the differ can treat them alike.

CSV side:
- naive parsing (quote / tab characters removed, split on commas, no escaping)
- rows without a key value are skipped
- every value goes through the normalizer

Sheet side:
- values come pre-typed from the workbook and are only stringified
- every row is indexed, even with an empty key (colliding rows overwrite each other)

Input shape problems never raise here. They are recorded in the optional
DiagnosticLogBuffer and logged once per kind.
"""

__all__ = [
    "index_csv",
    "index_spreadsheet",
    "build_column_positions",
    "split_csv_lines",
    "stringify_cell",
]

logger = logging.getLogger(__name__)

LINE_SEPARATOR = re.compile(r"[\r\n]+")
STRIPPED_CHARS = re.compile(r'["\t]')

_EXCEL_EPOCH_DT = datetime.combine(EXCEL_EPOCH, time())


def split_csv_lines(raw_text: str) -> list[list[str]]:
    """Split CSV text into rows of raw cells (header included)."""
    return [
        STRIPPED_CHARS.sub("", line).strip().split(",")
        for line in LINE_SEPARATOR.split(raw_text)
    ]


def _format_number(value: float | int) -> str:
    if isinstance(value, numbers.Integral):
        return str(int(value))
    v = float(value)
    if math.isnan(v):
        return ""
    if math.isinf(v):
        return "Infinity" if v > 0 else "-Infinity"
    if v.is_integer() and abs(v) < 1e21:
        return str(int(v))
    return repr(v)


def stringify_cell(value: Any) -> str:
    """Render a pre-typed sheet value the way the spreadsheet reports it as text.

    None -> "", bool -> "true"/"false", integral numbers without a decimal point,
    date/datetime/time -> serial day number, strings stripped.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, datetime):
        naive = value.replace(tzinfo=None)
        return _format_number((naive - _EXCEL_EPOCH_DT) / timedelta(days=1))
    if isinstance(value, date):
        return str((value - EXCEL_EPOCH).days)
    if isinstance(value, time):
        seconds = value.hour * 3600 + value.minute * 60 + value.second + value.microsecond / 1e6
        return _format_number(seconds / 86400)
    if isinstance(value, numbers.Real):
        return _format_number(value)
    return str(value).strip()


def _record(
    diagnostics: DiagnosticLogBuffer | None, source: str, row: int, kind: str, message: str
) -> None:
    if diagnostics is not None:
        diagnostics.record(source=source, row=row, kind=kind, message=message)


def _find_key_position(columns: Sequence[str], key_column: str) -> int | None:
    try:
        return list(columns).index(key_column)
    except ValueError:
        return None


def index_csv(
    raw_text: str,
    key_column: str,
    *,
    strict_dates: bool = False,
    diagnostics: DiagnosticLogBuffer | None = None,
) -> TableIndex:
    """Index CSV text by ``key_column``.

    Returns:
        key -> Record with origin_position None and normalized cell values

    Raises:
        InvalidDateFormat: only with strict_dates, for an impossible date value
    """
    header, *rows = split_csv_lines(raw_text)
    key_pos = _find_key_position(header, key_column)
    index: TableIndex = {}

    if key_pos is None:
        logger.warning("csv: key column '%s' not found in header %s; no rows indexed", key_column, header)
        _record(diagnostics, "csv", -1, DiagnosticKind.MISSING_KEY_COLUMN,
                f"key column '{key_column}' not in header {header}")
        return index

    skipped = duplicates = ragged = invalid_dates = 0
    for row_no, row in enumerate(rows, start=1):
        if row == [""]:
            continue  # 空行 (末尾改行など) は診断対象外
        key = row[key_pos] if key_pos < len(row) else ""
        if not key:
            skipped += 1
            _record(diagnostics, "csv", row_no, DiagnosticKind.SKIPPED_ROW,
                    f"empty value in key column '{key_column}'")
            continue

        if len(row) > len(header):
            ragged += 1
            _record(diagnostics, "csv", row_no, DiagnosticKind.RAGGED_ROW,
                    f"{len(row)} cells for {len(header)} header columns; extra cells dropped")

        cells: list[Cell] = []
        for column, raw in zip(header, row, strict=False):
            try:
                value = normalize(raw, strict_dates=True)
            except InvalidDateFormat as e:
                if strict_dates:
                    raise
                invalid_dates += 1
                _record(diagnostics, "csv", row_no, DiagnosticKind.INVALID_DATE,
                        f"column '{column}': {e}")
                value = raw
            cells.append(Cell(column=column, value=value))

        if key in index:
            # last write wins (キー位置は最初の出現のまま)
            duplicates += 1
            _record(diagnostics, "csv", row_no, DiagnosticKind.DUPLICATE_KEY,
                    f"key '{key}' repeated; earlier row replaced")
        index[key] = Record(key=key, cells=tuple(cells))

    if skipped:
        logger.warning("csv: skipped %d row(s) with empty key column '%s'", skipped, key_column)
    if duplicates:
        logger.warning("csv: %d duplicate key(s); later rows replaced earlier ones", duplicates)
    if ragged:
        logger.warning("csv: %d row(s) wider than header; extra cells dropped", ragged)
    if invalid_dates:
        logger.warning("csv: %d invalid date value(s) kept as-is", invalid_dates)
    logger.debug("csv: indexed %d record(s) from %d data line(s)", len(index), len(rows))
    return index


def index_spreadsheet(
    grid: Sequence[Sequence[Any]],
    key_column: str,
    *,
    diagnostics: DiagnosticLogBuffer | None = None,
) -> tuple[TableIndex, list[str]]:
    """Index a sheet grid (first row = header) by ``key_column``.

    Returns:
        (key -> Record with 1-based origin_position, header column names in order)
    """
    if not grid:
        return {}, []

    columns = [stringify_cell(c) for c in grid[0]]
    key_pos = _find_key_position(columns, key_column)
    if key_pos is None:
        # 全行が空キーに衝突する (既存挙動)
        logger.warning("sheet: key column '%s' not found in header %s; rows collide on empty key",
                       key_column, columns)
        _record(diagnostics, "sheet", -1, DiagnosticKind.MISSING_KEY_COLUMN,
                f"key column '{key_column}' not in header {columns}")

    index: TableIndex = {}
    duplicates = 0
    for row_index, raw_row in enumerate(grid[1:]):
        position = row_index + 1
        row = [stringify_cell(v) for v in raw_row]
        if len(row) > len(columns):
            _record(diagnostics, "sheet", position, DiagnosticKind.RAGGED_ROW,
                    f"{len(row)} cells for {len(columns)} header columns; extra cells dropped")
        key = row[key_pos] if key_pos is not None and key_pos < len(row) else ""
        cells = tuple(Cell(column=c, value=v) for c, v in zip(columns, row, strict=False))
        if key in index:
            duplicates += 1
            _record(diagnostics, "sheet", position, DiagnosticKind.DUPLICATE_KEY,
                    f"key '{key}' also at row {index[key].origin_position}; earlier row replaced")
        index[key] = Record(key=key, cells=cells, origin_position=position)

    if duplicates and key_pos is not None:
        logger.warning("sheet: %d duplicate key(s); later rows replaced earlier ones", duplicates)
    logger.debug("sheet: indexed %d record(s) from %d data row(s)", len(index), len(grid) - 1)
    return index, columns


def build_column_positions(
    columns: Sequence[str],
    *,
    diagnostics: DiagnosticLogBuffer | None = None,
) -> dict[str, int]:
    """Map header names to their 0-based position; the first occurrence wins."""
    positions: dict[str, int] = {}
    for i, name in enumerate(columns):
        if name in positions:
            _record(diagnostics, "sheet", -1, DiagnosticKind.DUPLICATE_COLUMN,
                    f"header '{name}' at position {i} duplicates position {positions[name]}")
            continue
        positions[name] = i
    return positions
