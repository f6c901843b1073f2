"""Field extractor: raw document text → typed, confidence-scored candidates.

For each of the 13 validated fields the extractor walks the field's
patterns in order.  The first pattern whose capture passes the field
category's acceptance check wins; later patterns are not tried.

Acceptance and confidence per category
--------------------------------------
identifier  any match                                     0.85
date        capture names a real calendar day             0.80
name        capture has ≥ 2 whitespace-separated tokens   0.75
phone       capture has ≥ ``phone_min_digits`` digits     0.85
email       capture contains both "@" and "."             0.90
address     capture contains a digit and a letter         0.70
amount      numeric part of the capture parses to > 0     0.85

Precision ceiling
-----------------
Extraction never sees page coordinates.  Every location is a
``search_text`` descriptor built from the first 50 characters of the
matched substring, so downstream consumers must treat these locations as
approximate and resolve them through ``LocationResolver``.

Extraction is a pure function of its input: identical text always yields
an identical result.  Raw values are never logged.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from claimfix.core.constants import (
    CATEGORY_CONFIDENCE,
    FIELD_CATEGORY,
    FieldCategory,
    ValidatedField,
    require_complete,
)
from claimfix.extraction.patterns import DEFAULT_PATTERN_SET, PatternSet
from claimfix.normalization.amount import parse_amount
from claimfix.normalization.date import parse_calendar_date
from claimfix.schemas.location import Location, SearchText

logger = logging.getLogger(__name__)

SEARCH_TEXT_LIMIT = 50


@dataclass(frozen=True)
class ExtractedValue:
    """One candidate value for one field in one document (never persisted)."""

    value: str
    confidence: float
    location: Location


ExtractedFields = dict[ValidatedField, ExtractedValue]


# ---------------------------------------------------------------------------
# Acceptance checks
# ---------------------------------------------------------------------------

_DIGIT_RE = re.compile(r"\d")
_LETTER_RE = re.compile(r"[A-Za-z]")


def _accept_identifier(value: str, phone_min_digits: int) -> bool:
    return True


def _accept_date(value: str, phone_min_digits: int) -> bool:
    return parse_calendar_date(value) is not None


def _accept_name(value: str, phone_min_digits: int) -> bool:
    return len(value.split()) >= 2


def _accept_phone(value: str, phone_min_digits: int) -> bool:
    return len(_DIGIT_RE.findall(value)) >= phone_min_digits


def _accept_email(value: str, phone_min_digits: int) -> bool:
    return "@" in value and "." in value


def _accept_address(value: str, phone_min_digits: int) -> bool:
    return bool(_DIGIT_RE.search(value)) and bool(_LETTER_RE.search(value))


def _accept_amount(value: str, phone_min_digits: int) -> bool:
    amount = parse_amount(value)
    return amount is not None and amount > 0


_ACCEPTORS: dict[FieldCategory, Callable[[str, int], bool]] = {
    FieldCategory.IDENTIFIER: _accept_identifier,
    FieldCategory.DATE: _accept_date,
    FieldCategory.NAME: _accept_name,
    FieldCategory.PHONE: _accept_phone,
    FieldCategory.EMAIL: _accept_email,
    FieldCategory.ADDRESS: _accept_address,
    FieldCategory.AMOUNT: _accept_amount,
}

require_complete(_ACCEPTORS, FieldCategory, "_ACCEPTORS")


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _captured_value(match: re.Match[str]) -> str:
    if match.lastindex and match.group(1):
        return match.group(1).strip()
    return match.group(0).strip()


def _search_location(content: str, match: re.Match[str]) -> Location:
    """Build an approximate search_text location for *match*.

    ``occurrence`` counts earlier copies of the snippet so a later search
    lands on this match rather than the first identical text on the page.
    """
    snippet = match.group(0)[:SEARCH_TEXT_LIMIT]
    occurrence = content.count(snippet, 0, match.start()) + 1
    return Location(search_text=SearchText(text=snippet, occurrence=occurrence))


def _join_pages(pages: list[Mapping[str, Any]]) -> str:
    ordered = sorted(pages, key=lambda p: p.get("pageIndex", p.get("page_index", 0)))
    return "\n".join(str(p.get("text", "")) for p in ordered)


# ---------------------------------------------------------------------------
# FieldExtractor
# ---------------------------------------------------------------------------

class FieldExtractor:
    """Pattern-based extractor for the validated claim fields.

    Parameters
    ----------
    pattern_set:
        Patterns to apply.  Defaults to the built-in ``"default"`` set.
    phone_min_digits:
        Minimum digit count for a phone capture.  Defaults to
        ``settings.phone_min_digits`` (10).

    Stateless after construction; one instance may be shared across
    threads.
    """

    def __init__(
        self,
        pattern_set: PatternSet | None = None,
        *,
        phone_min_digits: int | None = None,
    ) -> None:
        if phone_min_digits is None:
            from claimfix.core.settings import get_settings

            phone_min_digits = get_settings().phone_min_digits

        self.pattern_set = pattern_set or DEFAULT_PATTERN_SET
        self.phone_min_digits = phone_min_digits
        self._compiled: dict[ValidatedField, tuple[re.Pattern[str], ...]] = {
            field: tuple(p.compile() for p in self.pattern_set.patterns_for(field))
            for field in ValidatedField
        }

    def extract(self, text: str) -> ExtractedFields:
        """Return the sparse field → ``ExtractedValue`` mapping for *text*.

        Fields with no accepted match are absent.  Keys appear in
        ``ValidatedField`` declaration order.
        """
        fields: ExtractedFields = {}
        if not text:
            return fields

        for field in ValidatedField:
            extracted = self._extract_field(text, field)
            if extracted is not None:
                fields[field] = extracted

        logger.debug(
            "field_extractor: pattern_set=%s extracted=%d/%d",
            self.pattern_set.name,
            len(fields),
            len(ValidatedField),
        )
        return fields

    def extract_from_document(
        self,
        document_id: str,
        content: str | Mapping[str, Any],
    ) -> ExtractedFields:
        """Extract fields from a document given as text or as per-page text.

        *content* is either a string or a mapping with a ``pages`` list of
        ``{"pageIndex": int, "text": str}`` entries (pages are joined in
        page order), optionally with a pre-joined ``text``.
        """
        if isinstance(content, str):
            text = content
        elif content.get("pages"):
            text = _join_pages(list(content["pages"]))
        else:
            text = str(content.get("text", ""))

        fields = self.extract(text)
        logger.info("Extracted %d fields from document %s", len(fields), document_id)
        return fields

    def _extract_field(self, content: str, field: ValidatedField) -> ExtractedValue | None:
        category = FIELD_CATEGORY[field]
        accept = _ACCEPTORS[category]

        for pattern in self._compiled[field]:
            match = pattern.search(content)
            if match is None:
                continue
            value = _captured_value(match)
            if not accept(value, self.phone_min_digits):
                continue
            return ExtractedValue(
                value=value,
                confidence=CATEGORY_CONFIDENCE[category],
                location=_search_location(content, match),
            )
        return None
