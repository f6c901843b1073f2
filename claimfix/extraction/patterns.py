"""Versioned regex pattern sets for claim field extraction.

A ``PatternSet`` is immutable configuration: an ordered tuple of
``FieldPattern`` objects per validated field.  The extractor tries a field's
patterns in order and stops at the first one whose capture passes the
field category's acceptance check.

Capture convention
------------------
The value is capture group 1 when the pattern has one and it matched a
non-empty string, otherwise the whole match.

Case handling
-------------
``ignore_case=True`` compiles the whole pattern with ``re.IGNORECASE``.
Name patterns need a case-insensitive label but a case-sensitive
capitalised value, so they use a scoped ``(?i:...)`` group instead.

Additional sets (per-jurisdiction, per-carrier) are loaded from YAML by
``claimfix.extraction.loader`` and inherit any field they do not override
from ``DEFAULT_PATTERN_SET``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from claimfix.core.constants import ValidatedField


@dataclass(frozen=True)
class FieldPattern:
    """One candidate regex for a field."""

    regex: str
    ignore_case: bool = False

    def compile(self) -> re.Pattern[str]:
        return re.compile(self.regex, re.IGNORECASE if self.ignore_case else 0)


@dataclass(frozen=True)
class PatternSet:
    """Named, versioned, read-only mapping of field → ordered patterns.

    Attributes
    ----------
    name:     Registry key (e.g. ``"default"``, ``"ca_property"``).
    version:  Free-form version string recorded alongside extractions.
    fields:   Field → tuple of patterns; wrapped in a ``MappingProxyType``.
    """

    name: str
    version: str
    fields: Mapping[ValidatedField, tuple[FieldPattern, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        frozen = {ValidatedField(k): tuple(v) for k, v in self.fields.items()}
        object.__setattr__(self, "fields", MappingProxyType(frozen))

    def patterns_for(self, field_name: ValidatedField | str) -> tuple[FieldPattern, ...]:
        return self.fields.get(ValidatedField(field_name), ())

    def with_overrides(
        self,
        name: str,
        version: str,
        overrides: Mapping[ValidatedField, tuple[FieldPattern, ...]],
    ) -> PatternSet:
        """Return a new set whose listed fields replace this set's patterns."""
        merged = dict(self.fields)
        merged.update({ValidatedField(k): tuple(v) for k, v in overrides.items()})
        return PatternSet(name=name, version=version, fields=merged)


def _ci(regex: str) -> FieldPattern:
    return FieldPattern(regex=regex, ignore_case=True)


def _cs(regex: str) -> FieldPattern:
    return FieldPattern(regex=regex, ignore_case=False)


# ---------------------------------------------------------------------------
# Shared fragments
# ---------------------------------------------------------------------------

_DATE = r"([0-9]{1,2}[/\-][0-9]{1,2}[/\-][0-9]{2,4})"
_AMOUNT = r"\$?\s*([0-9,]+\.?[0-9]*)"
_PHONE = r"(\(?[0-9]{3}\)?[\s\-.]?[0-9]{3}[\s\-.]?[0-9]{4})"
_PERSON = r"([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+)+)"
_EMAIL = r"([a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,})"
_STREET_SUFFIX = r"(?:Street|St|Avenue|Ave|Road|Rd|Drive|Dr|Lane|Ln|Boulevard|Blvd|Court|Ct|Place|Pl)"


# ---------------------------------------------------------------------------
# Built-in catalogue
# ---------------------------------------------------------------------------

DEFAULT_PATTERN_SET = PatternSet(
    name="default",
    version="1.0.0",
    fields={
        ValidatedField.CLAIM_NUMBER: (
            _ci(r"claim\s*(?:number|#|id)[\s:]*([A-Z0-9\-]+)"),
            _ci(r"(?:claim|CLM)[\s\-]*([0-9]{6,})"),
            _ci(r"CLM[\-_]?([A-Z0-9]+)"),
        ),
        ValidatedField.POLICY_NUMBER: (
            _ci(r"policy\s*(?:number|#|id)[\s:]*([A-Z0-9\-]+)"),
            _ci(r"(?:policy|POL)[\s\-]*([0-9]{6,})"),
        ),
        ValidatedField.DATE_OF_LOSS: (
            _ci(r"date\s*of\s*loss[\s:]*" + _DATE),
            _ci(r"loss\s*date[\s:]*" + _DATE),
            _ci(r"(?:occurred|incident)\s*on[\s:]*" + _DATE),
        ),
        ValidatedField.INSURED_NAME: (
            _cs(r"(?i:insured\s*(?:name|party))[\s:]*" + _PERSON),
            _cs(r"(?i:name\s*of\s*insured|insured)[\s:]*" + _PERSON),
        ),
        ValidatedField.INSURED_PHONE: (
            _ci(r"phone[\s:]*" + _PHONE),
            _ci(r"tel[\s:]*" + _PHONE),
        ),
        ValidatedField.INSURED_EMAIL: (
            _ci(r"e-?mail[\s:]*" + _EMAIL),
            _cs(_EMAIL),
        ),
        ValidatedField.PROPERTY_ADDRESS: (
            _ci(
                r"address[\s:]*([0-9]+\s+[A-Za-z0-9\s,]+" + _STREET_SUFFIX
                + r"[\s,]+[A-Za-z\s,]+[0-9]{5})"
            ),
            _ci(
                r"([0-9]+\s+[A-Za-z0-9\s,]+(?:Street|St|Avenue|Ave|Road|Rd|Drive|Dr)"
                r"[\s,]+[A-Za-z\s,]+[0-9]{5})"
            ),
        ),
        ValidatedField.LOSS_AMOUNT: (
            _ci(r"loss\s*amount[\s:]*" + _AMOUNT),
            _ci(r"total\s*loss[\s:]*" + _AMOUNT),
            # bare "loss" needs a currency sign so "Date of Loss: 01/15" is not an amount
            _ci(r"loss[\s:]*\$\s*([0-9,]+\.?[0-9]*)"),
        ),
        ValidatedField.PAYMENT_AMOUNT: (
            _ci(r"payment\s*amount[\s:]*" + _AMOUNT),
            _ci(r"total\s*payment[\s:]*" + _AMOUNT),
            _ci(r"payment[\s:]*\$\s*([0-9,]+\.?[0-9]*)"),
        ),
        ValidatedField.ADJUSTER_NAME: (
            _cs(r"(?i:(?:assigned\s*)?adjuster(?:\s*name)?)[\s:]*" + _PERSON),
        ),
        ValidatedField.ADJUSTER_PHONE: (
            _ci(r"adjuster\s*phone[\s:]*" + _PHONE),
        ),
        ValidatedField.COVERAGE_TYPE: (
            _ci(r"coverage\s*type[\s:]*([A-Za-z][A-Za-z \t]*)"),
            _ci(r"(?:type\s*of\s*)?coverage[\s:]+([A-Za-z][A-Za-z \t]*)"),
        ),
        ValidatedField.DEDUCTIBLE: (
            _ci(r"deductible[\s:]*" + _AMOUNT),
        ),
    },
)
