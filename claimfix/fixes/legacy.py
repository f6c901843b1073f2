"""Legacy ``Issue`` records.

Older analysis bundles describe each problem as a camelCase ``Issue``
with a page index plus an optional rectangle.  ``migrate_issue_to_correction``
maps one onto the canonical ``Correction`` so it can go through the normal
fix path.
"""
from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from claimfix.core.constants import (
    CorrectionStatus,
    CorrectionType,
    FixMethod,
    RecommendedAction,
    Severity,
)
from claimfix.schemas.correction import Correction, Evidence
from claimfix.schemas.location import BBox, Location, SearchText


class IssueRect(BaseModel):
    left: float
    top: float
    width: float
    height: float


class SuggestedFix(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    strategy: Literal["auto", "manual"]
    requires_approval: bool = Field(alias="requiresApproval")
    fallback_order: list[FixMethod] = Field(default_factory=list, alias="fallbackOrder")


class Issue(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    issue_id: str = Field(alias="issueId")
    type: str
    severity: str
    confidence: float = Field(ge=0.0, le=1.0)
    page_index: int = Field(alias="pageIndex", ge=0)
    rect: IssueRect | None = None
    search_text: str | None = Field(default=None, alias="searchText")
    found_value: str | None = Field(default=None, alias="foundValue")
    expected_value: str | None = Field(default=None, alias="expectedValue")
    form_field_name: str | None = Field(default=None, alias="formFieldName")
    suggested_fix: SuggestedFix = Field(alias="suggestedFix")
    label: str | None = None
    status: Literal["OPEN", "APPLIED", "MANUAL", "REJECTED"] | None = None


# ---------------------------------------------------------------------------
# Vocabulary maps
# ---------------------------------------------------------------------------

_ISSUE_TYPES: dict[str, CorrectionType] = {
    "typo": CorrectionType.TYPO,
    "date": CorrectionType.DATE_ERROR,
    "phone": CorrectionType.PHONE_FORMAT,
    "name": CorrectionType.NAME_MISMATCH,
    "address": CorrectionType.ADDRESS_ERROR,
    "numeric": CorrectionType.NUMERIC_ERROR,
    "missing": CorrectionType.MISSING_VALUE,
    "format": CorrectionType.FORMAT_STANDARDIZATION,
    "inconsistency": CorrectionType.DATA_INCONSISTENCY,
}

_ISSUE_SEVERITIES: dict[str, Severity] = {
    "critical": Severity.CRITICAL,
    "high": Severity.WARNING,
    "medium": Severity.WARNING,
    "warning": Severity.WARNING,
    "low": Severity.INFO,
    "info": Severity.INFO,
}

_ISSUE_STATUSES: dict[str, CorrectionStatus] = {
    "OPEN": CorrectionStatus.PENDING,
    "APPLIED": CorrectionStatus.APPLIED,
    "MANUAL": CorrectionStatus.MANUAL,
    "REJECTED": CorrectionStatus.REJECTED,
}

# Canonical → legacy severity, used when emitting issue bundles
LEGACY_SEVERITY: dict[Severity, str] = {
    Severity.CRITICAL: "critical",
    Severity.WARNING: "high",
    Severity.INFO: "low",
}


def map_issue_type(raw: str) -> CorrectionType:
    """Map a legacy type label ("Date", "numeric", a canonical name) to a ``CorrectionType``.

    Unknown labels fall back to ``typo``.
    """
    try:
        return CorrectionType(raw)
    except ValueError:
        pass
    return _ISSUE_TYPES.get(re.sub(r"[^a-z]", "", raw.lower()), CorrectionType.TYPO)


def migrate_issue_to_correction(issue: Issue) -> Correction:
    if issue.rect is not None:
        location = Location(
            bbox=BBox(
                page_index=issue.page_index,
                left=issue.rect.left,
                top=issue.rect.top,
                width=issue.rect.width,
                height=issue.rect.height,
            )
        )
    else:
        text = issue.search_text or issue.found_value or issue.expected_value or "unknown"
        location = Location(search_text=SearchText(text=text, occurrence=1))

    if issue.suggested_fix.strategy == "auto":
        action = RecommendedAction.AUTO_CORRECT
    else:
        action = RecommendedAction.FLAG_FOR_REVIEW

    return Correction(
        id=issue.issue_id,
        type=map_issue_type(issue.type),
        severity=_ISSUE_SEVERITIES.get(issue.severity.lower(), Severity.INFO),
        location=location,
        found_value=issue.found_value or "",
        expected_value=issue.expected_value or "",
        confidence=issue.confidence,
        requires_human_review=issue.suggested_fix.requires_approval,
        recommended_action=action,
        evidence=Evidence(reasoning=issue.label or "Detected by analysis"),
        form_field_name=issue.form_field_name,
        status=_ISSUE_STATUSES[issue.status] if issue.status else CorrectionStatus.PENDING,
    )


class IssueDocumentRef(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_id: str = Field(alias="documentId")
    fingerprint: str


class IssueBundle(BaseModel):
    """Per-document list of legacy issues, as consumed by older viewers."""

    model_config = ConfigDict(populate_by_name=True)

    schema_version: str = Field(default="1.0.0", alias="schemaVersion")
    claim_id: str = Field(alias="claimId")
    document: IssueDocumentRef
    issues: list[Issue] = Field(default_factory=list)
