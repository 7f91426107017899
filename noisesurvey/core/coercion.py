"""
noisesurvey Input Coercion

Survey fields arrive from form inputs as strings. These helpers turn them
into numbers and dates without raising: unparseable input becomes a
defined default so every calculation stays total.
"""

from __future__ import annotations
from datetime import date, datetime, timedelta
from typing import Any, Iterable, List, Optional
import math
import re


# Leading numeric prefix, e.g. "92.5", "-3", "85 dB", ".5"
_NUMBER_PREFIX = re.compile(r"^\s*[+-]?(\d+(\.\d*)?|\.\d+)([eE][+-]?\d+)?")


def try_parse_number(value: Any) -> Optional[float]:
    """
    Parse a number leniently.

    Accepts ints, floats and strings with a leading numeric prefix
    ("85 dB" -> 85.0). Returns None for anything unparseable, for NaN
    and for infinities.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        match = _NUMBER_PREFIX.match(value)
        if not match:
            return None
        number = float(match.group(0))
    else:
        return None

    if math.isnan(number) or math.isinf(number):
        return None
    return number


def parse_number(value: Any, default: float = 0.0) -> float:
    """Parse a number, falling back to ``default`` when unparseable."""
    number = try_parse_number(value)
    return default if number is None else number


def parse_numbers(values: Optional[Iterable[Any]]) -> List[float]:
    """Parse a sequence of values, dropping the unparseable ones."""
    if not values:
        return []
    parsed = []
    for value in values:
        number = try_parse_number(value)
        if number is not None:
            parsed.append(number)
    return parsed


def is_blank(value: Any) -> bool:
    """True for None and for strings that are empty after stripping."""
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def parse_date(value: Any) -> Optional[date]:
    """
    Parse an ISO date or datetime string to a date.

    Returns None for blank or malformed input.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None

    text = value.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass

    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        return None


def add_years(start: date, years: int) -> date:
    """
    Shift a date by whole calendar years.

    29 February rolls forward to 1 March in non-leap target years.
    """
    try:
        return start.replace(year=start.year + years)
    except ValueError:
        return start.replace(year=start.year + years, month=2, day=28) + timedelta(days=1)


def whole_years_between(start: date, end: date) -> int:
    """Completed calendar years from ``start`` to ``end`` (age arithmetic)."""
    years = end.year - start.year
    if (end.month, end.day) < (start.month, start.day):
        years -= 1
    return years


def round_half_up(value: float, places: int = 0) -> float:
    """Round with halves going up (85.25 -> 85.3), as displayed to users."""
    factor = 10 ** places
    return math.floor(value * factor + 0.5) / factor
