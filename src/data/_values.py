"""Lenient numeric coercion for spreadsheet-exported government tables.

Cells in the NCRB and EM-DAT exports are inconsistent: blanks, ``"NA"``,
trailing footnote markers, thousands separators.  These helpers read the
leading number of a cell and give up quietly otherwise.
"""

from __future__ import annotations

import math
import re

_INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
_FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)")


def parse_int(value: object) -> int | None:
    """Leading integer of *value*, or ``None`` when there is none.

    >>> parse_int("1,234")
    1
    >>> parse_int("2012 (P)")
    2012
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    match = _INT_PREFIX.match(str(value))
    return int(match.group(1)) if match else None


def parse_float(value: object) -> float | None:
    """Leading decimal number of *value*, or ``None`` when there is none."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return float(value) if math.isfinite(value) else None
    match = _FLOAT_PREFIX.match(str(value))
    return float(match.group(1)) if match else None


def int_or_zero(value: object) -> int:
    return parse_int(value) or 0


def float_or_zero(value: object) -> float:
    return parse_float(value) or 0.0


def cell(row: dict[str, str | None], column: str) -> str:
    """Stripped cell text; missing columns and short rows read as empty."""
    value = row.get(column)
    return value.strip() if isinstance(value, str) else ""
