"""Domain models for the CSV -> spreadsheet sync tool.

Records and indexes built from both sources, the row patches computed from them,
run configuration, diagnostics and the run result.
"""

from .config_models import SyncConfig
from .diagnostic import DiagnosticKind, DiagnosticRecord
from .patch import CellWrite, PartitionResult, RowPatch
from .record import Cell, Record, TableIndex
from .sync_result import SyncResult

__all__ = [
    # Configuration models
    "SyncConfig",
    # Index models
    "Cell",
    "Record",
    "TableIndex",
    # Patch models
    "CellWrite",
    "RowPatch",
    "PartitionResult",
    # Reporting models
    "DiagnosticKind",
    "DiagnosticRecord",
    "SyncResult",
]
