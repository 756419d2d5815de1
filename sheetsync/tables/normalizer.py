from __future__ import annotations

import re
from datetime import date

"""Value normalizer for CSV cells.

CSV values arrive as plain text while the sheet reports dates as serial day numbers
and booleans as true/false. normalize() rewrites date-like and boolean-like CSV
values into that canonical form so the two sides compare as strings.

Sheet values are never passed through here.
"""

__all__ = [
    "InvalidDateFormat",
    "normalize",
    "is_date",
    "is_boolean",
    "serialize_date",
    "serialize_boolean",
    "BOOLEAN_VALUES",
    "TRUTHY_VALUES",
    "DATE_PATTERN",
    "EXCEL_EPOCH",
    "EXCEL_EPOCH_OFFSET",
]

BOOLEAN_VALUES = frozenset({"TRUE", "FALSE", "YES", "NO", "Y", "N", "T", "F"})
TRUTHY_VALUES = frozenset({"TRUE", "YES", "Y", "T"})

# M/D/Y (月/日 は 1-2 桁, 年は 2-4 桁)
DATE_PATTERN = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{2,4})", re.ASCII)

# Spreadsheet serial day 0. 1970-01-01 is serial 25569.
EXCEL_EPOCH = date(1899, 12, 30)
EXCEL_EPOCH_OFFSET = 25569

# 2桁年: 00-49 -> 20xx, 50-99 -> 19xx
TWO_DIGIT_YEAR_PIVOT = 50


class InvalidDateFormat(ValueError):
    """Raised when a date-shaped value is not a real calendar date (e.g. 13/45/99)."""


def is_date(value: str) -> bool:
    return DATE_PATTERN.fullmatch(value) is not None


def is_boolean(value: str) -> bool:
    return value.upper() in BOOLEAN_VALUES


def serialize_boolean(value: str) -> str:
    return "true" if value.upper() in TRUTHY_VALUES else "false"


def _expand_year(text: str) -> int:
    year = int(text)
    if len(text) == 2:
        return year + (2000 if year < TWO_DIGIT_YEAR_PIVOT else 1900)
    return year


def serialize_date(value: str) -> str:
    """Convert ``M/D/Y`` to the spreadsheet serial day number as a string.

    Raises:
        InvalidDateFormat: value does not match the pattern or is not a real date
    """
    m = DATE_PATTERN.fullmatch(value)
    if m is None:
        raise InvalidDateFormat(f"not a M/D/Y date: {value!r}")
    month, day = int(m.group(1)), int(m.group(2))
    year = _expand_year(m.group(3))
    try:
        parsed = date(year, month, day)
    except ValueError as e:
        raise InvalidDateFormat(f"invalid date {value!r}: {e}") from e
    return str((parsed - EXCEL_EPOCH).days)


def normalize(raw: str, *, strict_dates: bool = False) -> str:
    """Return the canonical form of a raw CSV value.

    Date-like -> serial day number, boolean-like -> "true"/"false",
    anything else unchanged. An impossible date is returned unchanged unless
    ``strict_dates`` is set, in which case InvalidDateFormat propagates.
    """
    if is_date(raw):
        try:
            return serialize_date(raw)
        except InvalidDateFormat:
            if strict_dates:
                raise
            return raw
    if is_boolean(raw):
        return serialize_boolean(raw)
    return raw
