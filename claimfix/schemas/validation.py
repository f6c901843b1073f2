from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from pydantic import BaseModel, Field

from claimfix.core.constants import (
    RecommendedAction,
    Severity,
    ValidatedField,
    ValidationStatus,
)
from claimfix.schemas.location import Location


class DocumentValue(BaseModel):
    """Where (and with what confidence) one document reports a field value."""

    document_id: str
    document_name: str
    found_value: str
    location: Location
    confidence: float = Field(ge=0.0, le=1.0)


class CrossDocumentValidation(BaseModel):
    """A disagreement on one semantic field across documents of a claim."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    claim_id: str
    field: ValidatedField
    severity: Severity
    documents: list[DocumentValue] = Field(min_length=2)
    expected_value: str | None = None
    recommended_action: RecommendedAction
    reasoning: str
    status: ValidationStatus = ValidationStatus.PENDING

    resolved_value: str | None = None
    resolved_by: str | None = None
    resolved_at: datetime | None = None
