"""Calendar date parser for US-style claim dates.

Accepts ``M/D/YYYY``, ``M-D-YYYY`` and two-digit years.  Two-digit years
expand 00-29 → 2000s and 30-99 → 1900s.  Anything that does not name a real
calendar day (``02/30/2024``, ``13/01/2024``) is rejected.

Safety rule: raw values are never logged.
"""
from __future__ import annotations

import re
from datetime import date

_SEPARATOR_RE = re.compile(r"[-/.]")


def parse_calendar_date(raw: str) -> date | None:
    """Return the ``date`` named by *raw*, or ``None``.  Never raises."""
    if not raw or not raw.strip():
        return None

    parts = [p.strip() for p in _SEPARATOR_RE.split(raw.strip())]
    if len(parts) != 3 or not all(p.isdigit() for p in parts):
        return None

    month_str, day_str, year_str = parts
    if len(year_str) not in (2, 4):
        return None

    year = int(year_str)
    if len(year_str) == 2:
        year = 2000 + year if year < 30 else 1900 + year

    try:
        return date(year, int(month_str), int(day_str))
    except (ValueError, OverflowError):
        return None
