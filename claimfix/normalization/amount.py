"""Monetary amount parser.

Strips currency symbols, thousands separators and any other non-numeric
characters, keeping digits and the decimal point.  ``"$10,050.00"`` becomes
``10050.0``.

Safety rule: raw values are never logged.
"""
from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

_NON_NUMERIC_RE = re.compile(r"[^0-9.]")


def parse_amount(raw: str) -> float | None:
    """Return *raw* as a float, or ``None`` if no number can be read."""
    if not raw or not raw.strip():
        return None

    digits = _NON_NUMERIC_RE.sub("", raw)
    if not digits:
        return None

    try:
        return float(digits)
    except ValueError:
        # more than one decimal point, e.g. "1.234.56"
        logger.debug("parse_amount: unreadable number (length=%d)", len(raw))
        return None
