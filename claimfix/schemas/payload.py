"""Canonical correction bundle consumed by ``FixEngine.process_correction_payload``."""
from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from claimfix.schemas.annotation import Annotation
from claimfix.schemas.correction import Correction
from claimfix.schemas.validation import CrossDocumentValidation


class DocumentCorrections(BaseModel):
    document_id: str
    document_name: str
    fingerprint: str = ""
    corrections: list[Correction] = Field(default_factory=list)
    annotations: list[Annotation] = Field(default_factory=list)


class CorrectionSummary(BaseModel):
    total_corrections: int = 0
    auto_correctable: int = 0
    requires_review: int = 0
    cross_doc_issues: int = 0


class ClaimRef(BaseModel):
    claim_id: str
    claim_number: str | None = None
    policy_number: str | None = None


class DocumentCorrectionPayload(BaseModel):
    schema_version: str = "1.0.0"
    claim: ClaimRef
    documents: list[DocumentCorrections] = Field(default_factory=list)
    cross_document_validations: list[CrossDocumentValidation] = Field(default_factory=list)
    processed_at: datetime
    processed_by: str
    summary: CorrectionSummary = Field(default_factory=CorrectionSummary)
