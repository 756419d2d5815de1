from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""DiagnosticRecord model for data-quality reporting.

Indexing and partitioning never fail on bad input shape; they skip or drop instead.
Each such event is captured as a DiagnosticRecord so it can be counted in the
SUMMARY line and written to the JSON Lines diagnostics log.

row=-1 is used when the event is not tied to a specific data row
(e.g. a missing key column or an unmapped column).
"""

__all__ = [
    "DiagnosticRecord",
    "DiagnosticKind",
]


class DiagnosticKind:
    """UPPER_SNAKE identifiers used in DiagnosticRecord.kind."""
    MISSING_KEY_COLUMN = "MISSING_KEY_COLUMN"
    SKIPPED_ROW = "SKIPPED_ROW"
    DUPLICATE_KEY = "DUPLICATE_KEY"
    RAGGED_ROW = "RAGGED_ROW"
    INVALID_DATE = "INVALID_DATE"
    DUPLICATE_COLUMN = "DUPLICATE_COLUMN"
    UNMAPPED_COLUMN = "UNMAPPED_COLUMN"
    FORMULA_CELL = "FORMULA_CELL"


@dataclass(frozen=True)
class DiagnosticRecord:
    """Structured diagnostic record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        source: "csv", "sheet" or "partition"
        row: 1-based data row position. -1 when not row specific
        kind: one of DiagnosticKind
        message: human readable detail
    """
    timestamp: str
    source: str
    row: int
    kind: str
    message: str

    @staticmethod
    def create(source: str, row: int, kind: str, message: str) -> DiagnosticRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return DiagnosticRecord(
            timestamp=ts,
            source=source,
            row=row,
            kind=kind,
            message=message,
        )

    def to_json_line(self) -> str:
        # 追加キー禁止: dataclass -> dict のみ
        return json.dumps(asdict(self), ensure_ascii=False)
