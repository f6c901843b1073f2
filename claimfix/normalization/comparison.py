"""Comparison key used to decide whether two documents agree on a field.

Lowercases and drops every character outside ``[a-z0-9]`` so that
punctuation, spacing and case differences never count as a disagreement
(``"CLM-2024-001"`` and ``"clm 2024 001"`` compare equal).
"""
from __future__ import annotations

import re

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]")


def normalize_for_comparison(raw: str) -> str:
    """Return the comparison key for *raw*; ``""`` for empty input."""
    if not raw:
        return ""
    return _NON_ALNUM_RE.sub("", raw.lower())
