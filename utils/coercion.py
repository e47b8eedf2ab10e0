# utils/coercion.py
"""
Lenient numeric coercion for rows decoded from the school API.

The API returns every column as a string (or null), so numeric fields are
coerced once when a row is turned into a model. None of these helpers
raise: bad values degrade to a default and, when a reporter is given, a
diagnostic message is emitted.
"""

import math
import re
from typing import Any, Optional

from utils.diagnostics import Reporter, emit

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def coerce_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def coerce_int(value: Any, default: int = 0, report: Optional[Reporter] = None, label: str = "value") -> int:
    """
    Parse `value` as a base-10 integer.

    Leading digits win, so "480" and "480.0" give 480 and "12abc" gives 12.
    Anything without leading digits (None, "", "abc", NaN) gives `default`.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            emit(report, f"{label}: non-finite number {value!r}, using {default}")
            return default
        return int(value)
    if value is None:
        return default

    match = _LEADING_INT.match(str(value))
    if not match:
        if str(value).strip():
            emit(report, f"{label}: cannot parse {value!r} as an integer, using {default}")
        return default
    return int(match.group(1))


def coerce_float(value: Any, default: float = 0.0, report: Optional[Reporter] = None, label: str = "value") -> float:
    """
    Plain numeric coercion: no locale handling, "3,5" is not a number here.
    """
    if value is None:
        return default
    if isinstance(value, str) and value.strip() == "":
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        emit(report, f"{label}: cannot parse {value!r} as a number, using {default}")
        return default
    if math.isnan(number) or math.isinf(number):
        emit(report, f"{label}: non-finite number {value!r}, using {default}")
        return default
    return number


def coerce_flag(value: Any) -> bool:
    """True only for the API's "1" marker (or 1 / True)."""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip() == "1"
