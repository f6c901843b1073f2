from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field

from claimfix.core.constants import (
    CorrectionStatus,
    CorrectionType,
    FixMethod,
    RecommendedAction,
    Severity,
)
from claimfix.schemas.location import Location


class Evidence(BaseModel):
    reasoning: str
    source_document: str | None = None
    source_field: str | None = None


class Correction(BaseModel):
    """A single proposed fix for a found-vs-expected discrepancy.

    ``status`` only moves out of ``pending`` through an explicit action in
    ``claimfix.review.workflow``; nothing in the engine changes it.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    type: CorrectionType
    severity: Severity
    location: Location
    found_value: str
    expected_value: str
    confidence: float = Field(ge=0.0, le=1.0)
    requires_human_review: bool
    recommended_action: RecommendedAction
    evidence: Evidence
    form_field_name: str | None = None
    status: CorrectionStatus = CorrectionStatus.PENDING

    claim_id: str | None = None
    document_id: str | None = None

    applied_at: datetime | None = None
    applied_by: str | None = None
    applied_method: FixMethod | None = None


class CorrectionResult(BaseModel):
    """Outcome of applying one correction to the target document."""

    success: bool
    method: FixMethod
    error: str | None = None
