from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime
from pathlib import Path

from sheetsync.models.diagnostic import DiagnosticRecord

"""Diagnostics buffering module.

- JSON Lines, fixed schema (no extra keys)
- one ``diagnostics-YYYYMMDD-HHMMSS.log`` (UTC) per run, created on first flush
- buffered in memory, flushed once at the end of the run
"""

__all__ = [
    "DiagnosticRecord",
    "DiagnosticLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class DiagnosticLogBuffer:
    """In-memory buffer for diagnostic records. flush() appends JSON Lines.

    - file path is fixed on first access
    - not thread safe (serial execution only)
    """
    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[DiagnosticRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir if logs_dir is not None else LOGS_DIR
        self._total = 0
        self._kinds: Counter[str] = Counter()

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"diagnostics-{stamp}.log"
        return self._file_path

    def append(self, record: DiagnosticRecord) -> None:
        self._records.append(record)
        self._total += 1
        self._kinds[record.kind] += 1

    def record(self, source: str, row: int, kind: str, message: str) -> DiagnosticRecord:
        rec = DiagnosticRecord.create(source=source, row=row, kind=kind, message=message)
        self.append(rec)
        return rec

    @property
    def records(self) -> list[DiagnosticRecord]:
        """Records not yet flushed."""
        return list(self._records)

    @property
    def total(self) -> int:
        """Records appended since creation, flushed or not."""
        return self._total

    def count(self, kind: str) -> int:
        return self._kinds[kind]

    def __len__(self) -> int:  # pragma: no cover (trivial)
        return len(self._records)

    def flush(self) -> Path | None:
        """Append buffered records to the log file. Returns None when nothing was written."""
        if not self._records:
            return None  # 空なら診断ファイルを作らない
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
