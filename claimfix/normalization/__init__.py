"""Normalization package.

One small normalizer per value family.  Each takes a raw string captured
from document text and returns either a canonical form or ``None`` when the
value cannot be interpreted.  None of them raise.

Safety rule: raw values are never logged.
"""
