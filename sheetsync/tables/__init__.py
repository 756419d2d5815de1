"""Value normalization and keyed indexing of CSV text and sheet grids."""

from .indexer import build_column_positions, index_csv, index_spreadsheet, stringify_cell
from .normalizer import InvalidDateFormat, normalize

__all__ = [
    "InvalidDateFormat",
    "normalize",
    "index_csv",
    "index_spreadsheet",
    "build_column_positions",
    "stringify_cell",
]
