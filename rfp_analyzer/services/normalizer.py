"""
Date / Number Normalizer — canonical ISO dates and plain numeric amounts.

Dates:
  • "November 15, 2025" / "November 15 2025"   (DateShape.MONTH_NAME)
  • "15 November 2025"                         (DateShape.DAY_MONTH_NAME)
  • "15/11/2025", "15-11-25", "2025-11-15"     (DateShape.NUMERIC)

Numbers:
  • "200,000", "2.5" + magnitude suffix ("M", "million", "B", "K")

Every function returns None instead of raising on unparseable input.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Optional

MIN_YEAR = 2020
MAX_YEAR = 2050

MONTHS: dict[str, int] = {
    "january": 1,
    "february": 2,
    "march": 3,
    "april": 4,
    "may": 5,
    "june": 6,
    "july": 7,
    "august": 8,
    "september": 9,
    "october": 10,
    "november": 11,
    "december": 12,
}

MONTH_NAME_PATTERN = "(?:" + "|".join(name.capitalize() for name in MONTHS) + ")"

_MAGNITUDES: dict[str, float] = {
    "k": 1e3,
    "thousand": 1e3,
    "m": 1e6,
    "million": 1e6,
    "b": 1e9,
    "billion": 1e9,
}

# a lone letter followed by "." or ")" is an outline marker, not a suffix
MAGNITUDE_PATTERN = r"(?:thousand|million|billion|[KkMmBb](?![.)]))\b"

_MONTH_FIRST_RE = re.compile(r"^\s*([A-Za-z]+)\.?\s+(\d{1,2}),?\s+(\d{4})\s*$")
_DAY_FIRST_RE = re.compile(r"^\s*(\d{1,2})\s+([A-Za-z]+),?\s+(\d{4})\s*$")
_NUMERIC_SPLIT_RE = re.compile(r"[-/]")
_MAGNITUDE_RE = re.compile(r"^[ \t]*(" + MAGNITUDE_PATTERN + ")")


class DateShape(str, Enum):
    MONTH_NAME = "month_name"
    DAY_MONTH_NAME = "day_month_name"
    NUMERIC = "numeric"


# ── Dates ────────────────────────────────────────────────


def normalize_date(token: str, shape: DateShape) -> Optional[str]:
    """Convert a matched date substring into ``YYYY-MM-DD`` or None."""
    if not token:
        return None
    if shape == DateShape.NUMERIC:
        return _normalize_numeric_date(token)

    if shape == DateShape.MONTH_NAME:
        m = _MONTH_FIRST_RE.match(token)
        if not m:
            return None
        month_name, day, year = m.group(1), m.group(2), m.group(3)
    else:
        m = _DAY_FIRST_RE.match(token)
        if not m:
            return None
        day, month_name, year = m.group(1), m.group(2), m.group(3)

    month = MONTHS.get(month_name.lower())
    if month is None:
        return None
    return _format_date(int(year), month, int(day))


def _normalize_numeric_date(token: str) -> Optional[str]:
    parts = [p for p in _NUMERIC_SPLIT_RE.split(token.strip()) if p]
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None

    if len(parts[2]) == 4:
        # DD-MM-YYYY; MM/DD is never inferred
        day, month, year = (int(p) for p in parts)
    else:
        year, month, day = (int(p) for p in parts)

    if year < 100:
        year += 2000
    return _format_date(year, month, day)


def _format_date(year: int, month: int, day: int) -> Optional[str]:
    if not (1 <= day <= 31):
        return None
    if not (1 <= month <= 12):
        return None
    if not (MIN_YEAR <= year <= MAX_YEAR):
        return None
    return f"{year:04d}-{month:02d}-{day:02d}"


# ── Numbers ──────────────────────────────────────────────


def parse_amount(token: str) -> Optional[float]:
    """Parse ``"200,000"`` / ``"1.5"`` into a float; None if not numeric."""
    if token is None:
        return None
    cleaned = token.replace(",", "").replace(" ", "").strip()
    if not cleaned:
        return None
    try:
        value = float(cleaned)
    except ValueError:
        return None
    return value if value >= 0 else None


def magnitude_multiplier(suffix: Optional[str]) -> float:
    """Map a magnitude suffix (``M``, ``billion`` …) to its multiplier; 1.0 if none."""
    if not suffix:
        return 1.0
    return _MAGNITUDES.get(suffix.strip().lower(), 1.0)


def find_magnitude(window: str) -> Optional[str]:
    """Return the magnitude suffix that opens *window*, if any."""
    m = _MAGNITUDE_RE.match(window or "")
    return m.group(1) if m else None
