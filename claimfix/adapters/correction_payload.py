"""Correction payload adapter.

Maps the upstream analysis payload (snake_case, 1-based pages, loose
optional fields) onto canonical ``Correction``/``Annotation``/
``CrossDocumentValidation`` records.

Upstream shape (abridged)::

    {
      "correction_job_id": "...",
      "generated_at": "2024-03-01T12:00:00Z",
      "claim_context": {"claim_number": ..., "policy_number": ..., ...},
      "documents": [{
        "document_id", "document_type", "source_filename", "page_count",
        "corrections": [{type, severity, location, original_value,
                         corrected_value, confidence, requires_human_review,
                         reason, evidence: {source_document_id, source_field}}],
        "annotations": [{type, location, message, color}]
      }],
      "cross_document_validations": [{field_name, severity, occurrences:
          [{document_id, document_type, value, location}],
          expected_value, recommended_action, message}],
      "summary": {...}
    }

Mapping rules
-------------
- ``location.page`` (1-based) → ``bbox.pageIndex`` (0-based); missing bbox
  width/height default to 100/20.  A location with neither bbox nor
  search text falls back to searching for ``text_context`` (or
  ``"unknown"``).
- ``recommended_action`` is ``auto_correct`` only when the payload says
  ``requires_human_review: false`` *and* confidence ≥ 0.95.
- Validations with fewer than two occurrences are padded with a
  ``"(not found)"`` placeholder of confidence 0.
- With schema validation enabled the raw payload is checked against the
  active JSON Schema before any mapping; violations reject the whole
  payload.
"""
from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Mapping

from pydantic import BaseModel, Field

from claimfix.adapters.schema_store import SchemaStore, SchemaValidationError
from claimfix.core.constants import FixMethod, RecommendedAction, Severity
from claimfix.fixes.engine import is_auto_applicable
from claimfix.fixes.legacy import (
    LEGACY_SEVERITY,
    Issue,
    IssueBundle,
    IssueDocumentRef,
    IssueRect,
    SuggestedFix,
)
from claimfix.schemas.annotation import Annotation
from claimfix.schemas.correction import Correction, Evidence
from claimfix.schemas.location import BBox, Location, SearchText
from claimfix.schemas.payload import (
    ClaimRef,
    CorrectionSummary,
    DocumentCorrectionPayload,
    DocumentCorrections,
)
from claimfix.schemas.validation import CrossDocumentValidation, DocumentValue

logger = logging.getLogger(__name__)

AUTO_CORRECT_MIN_CONFIDENCE = 0.95
DEFAULT_CONFIDENCE = 0.5
DEFAULT_ANNOTATION_COLOR = "#FFFF00"
CREATED_BY = "claimfix-core"
NOT_FOUND = "(not found)"


# ---------------------------------------------------------------------------
# Result records
# ---------------------------------------------------------------------------

class ClaimContext(BaseModel):
    claim_number: str | None = None
    policy_number: str | None = None
    insured_name: str | None = None
    date_of_loss: str | None = None
    property_address: str | None = None


class AdaptedDocument(BaseModel):
    document_id: str
    document_type: str | None = None
    source_filename: str | None = None
    page_count: int | None = None
    corrections: list[Correction] = Field(default_factory=list)
    annotations: list[Annotation] = Field(default_factory=list)


class SeverityCounts(BaseModel):
    critical: int = 0
    warning: int = 0
    info: int = 0


class PayloadSummary(BaseModel):
    total_corrections: int = 0
    total_annotations: int = 0
    total_cross_doc_flags: int = 0
    severity_counts: SeverityCounts = Field(default_factory=SeverityCounts)
    confidence_average: float = 0.0


class CorrectionPayloadResult(BaseModel):
    claim_id: str
    claim_context: ClaimContext
    documents: list[AdaptedDocument] = Field(default_factory=list)
    cross_document_validations: list[CrossDocumentValidation] = Field(default_factory=list)
    summary: PayloadSummary
    correction_job_id: str
    generated_at: str | None = None

    def to_document_payload(self, processed_by: str = CREATED_BY) -> DocumentCorrectionPayload:
        """Bundle the adapted records for ``FixEngine.process_correction_payload``."""
        corrections = [c for doc in self.documents for c in doc.corrections]
        return DocumentCorrectionPayload(
            claim=ClaimRef(
                claim_id=self.claim_id,
                claim_number=self.claim_context.claim_number,
                policy_number=self.claim_context.policy_number,
            ),
            documents=[
                DocumentCorrections(
                    document_id=doc.document_id,
                    document_name=doc.source_filename or doc.document_type or doc.document_id,
                    fingerprint=self.correction_job_id,
                    corrections=doc.corrections,
                    annotations=doc.annotations,
                )
                for doc in self.documents
            ],
            cross_document_validations=self.cross_document_validations,
            processed_at=self.generated_at or datetime.now(timezone.utc),
            processed_by=processed_by,
            summary=CorrectionSummary(
                total_corrections=len(corrections),
                auto_correctable=sum(1 for c in corrections if is_auto_applicable(c)),
                requires_review=sum(1 for c in corrections if c.requires_human_review),
                cross_doc_issues=len(self.cross_document_validations),
            ),
        )


# ---------------------------------------------------------------------------
# Shape check
# ---------------------------------------------------------------------------

def is_correction_payload(data: Any) -> bool:
    return (
        isinstance(data, Mapping)
        and isinstance(data.get("correction_job_id"), str)
        and isinstance(data.get("claim_context"), Mapping)
        and isinstance(data.get("documents"), list)
    )


# ---------------------------------------------------------------------------
# Field mappers
# ---------------------------------------------------------------------------

def map_location(raw: Mapping[str, Any] | None) -> Location:
    if not isinstance(raw, Mapping):
        raw = {}
    bbox = None
    search_text = None

    raw_bbox = raw.get("bbox")
    if isinstance(raw_bbox, Mapping) and raw_bbox:
        page = raw.get("page")
        bbox = BBox(
            page_index=page - 1 if isinstance(page, int) and page > 0 else 0,
            left=raw_bbox.get("x") or 0,
            top=raw_bbox.get("y") or 0,
            width=raw_bbox.get("width") or 100,
            height=raw_bbox.get("height") or 20,
        )

    if raw.get("search_text"):
        search_text = SearchText(
            text=raw["search_text"],
            occurrence=1,
            context_before=raw.get("text_context") or None,
        )

    if bbox is None and search_text is None:
        search_text = SearchText(text=raw.get("text_context") or "unknown", occurrence=1)

    return Location(bbox=bbox, search_text=search_text)


def _recommended_action(raw: Mapping[str, Any]) -> RecommendedAction:
    confidence = raw.get("confidence")
    if not isinstance(confidence, (int, float)):
        return RecommendedAction.FLAG_FOR_REVIEW
    if raw.get("requires_human_review") is False and confidence >= AUTO_CORRECT_MIN_CONFIDENCE:
        return RecommendedAction.AUTO_CORRECT
    return RecommendedAction.FLAG_FOR_REVIEW


def _validation_action(raw: Any) -> RecommendedAction:
    try:
        return RecommendedAction(raw)
    except ValueError:
        return RecommendedAction.FLAG_FOR_REVIEW


def _generated_claim_id() -> str:
    return f"CLM-{int(time.time() * 1000) % 1_000_000:06d}"


def _map_correction(raw: Mapping[str, Any], claim_id: str, document_id: str) -> Correction:
    evidence = raw.get("evidence")
    if not isinstance(evidence, Mapping):
        evidence = {}
    confidence = raw.get("confidence")
    requires_review = raw.get("requires_human_review")
    return Correction(
        claim_id=claim_id,
        document_id=document_id,
        type=raw.get("type"),
        severity=raw.get("severity"),
        location=map_location(raw.get("location")),
        found_value=raw.get("original_value") or "",
        expected_value=raw.get("corrected_value") or "",
        confidence=DEFAULT_CONFIDENCE if confidence is None else confidence,
        requires_human_review=True if requires_review is None else requires_review,
        recommended_action=_recommended_action(raw),
        evidence=Evidence(
            reasoning=raw.get("reason") or "",
            source_document=evidence.get("source_document_id") or document_id,
            source_field=evidence.get("source_field"),
        ),
        form_field_name=raw.get("form_field_name"),
    )


def _map_annotation(raw: Mapping[str, Any], created_at: datetime) -> Annotation:
    return Annotation(
        type=raw.get("type"),
        location=map_location(raw.get("location")),
        text=raw.get("message"),
        color=raw.get("color") or DEFAULT_ANNOTATION_COLOR,
        created_by=CREATED_BY,
        created_at=created_at,
    )


def _map_validation(raw: Mapping[str, Any], claim_id: str) -> CrossDocumentValidation:
    documents = [
        DocumentValue(
            document_id=occ.get("document_id"),
            document_name=occ.get("document_type") or occ.get("document_id"),
            found_value="" if occ.get("value") is None else str(occ["value"]),
            location=map_location(occ.get("location")),
            confidence=1.0,
        )
        for occ in _records(raw.get("occurrences"), "occurrences")
    ]
    while len(documents) < 2:
        documents.append(
            DocumentValue(
                document_id="unknown",
                document_name="unknown",
                found_value=NOT_FOUND,
                location=Location(search_text=SearchText(text="unknown", occurrence=1)),
                confidence=0.0,
            )
        )

    return CrossDocumentValidation(
        claim_id=claim_id,
        field=raw.get("field_name"),
        severity=raw.get("severity"),
        documents=documents,
        expected_value=raw.get("expected_value") or None,
        recommended_action=_validation_action(raw.get("recommended_action")),
        reasoning=raw.get("message") or "",
    )


def _records(items: Any, name: str) -> list[Mapping[str, Any]]:
    """Return *items* as a list of mappings, raising ``ValueError`` for any other entry."""
    records = list(items or [])
    for index, item in enumerate(records):
        if not isinstance(item, Mapping):
            raise ValueError(f"{name}[{index}] must be an object")
    return records


def _map_document(raw: Mapping[str, Any], claim_id: str, created_at: datetime) -> AdaptedDocument:
    document_id = raw.get("document_id")
    if not isinstance(document_id, str) or not document_id:
        raise ValueError("Document is missing document_id")
    return AdaptedDocument(
        document_id=document_id,
        document_type=raw.get("document_type"),
        source_filename=raw.get("source_filename"),
        page_count=raw.get("page_count"),
        corrections=[
            _map_correction(c, claim_id, document_id)
            for c in _records(raw.get("corrections"), f"{document_id}.corrections")
        ],
        annotations=[
            _map_annotation(a, created_at)
            for a in _records(raw.get("annotations"), f"{document_id}.annotations")
        ],
    )


def _computed_summary(
    documents: list[AdaptedDocument],
    validations: list[CrossDocumentValidation],
) -> PayloadSummary:
    corrections = [c for doc in documents for c in doc.corrections]
    counts = SeverityCounts()
    for correction in corrections:
        key = correction.severity.value
        setattr(counts, key, getattr(counts, key) + 1)

    average = sum(c.confidence for c in corrections) / len(corrections) if corrections else 0.0
    return PayloadSummary(
        total_corrections=len(corrections),
        total_annotations=sum(len(doc.annotations) for doc in documents),
        total_cross_doc_flags=len(validations),
        severity_counts=counts,
        confidence_average=round(average, 4),
    )


def _supplied_summary(raw: Mapping[str, Any]) -> PayloadSummary:
    counts = raw.get("severity_counts")
    return PayloadSummary(
        total_corrections=raw.get("total_corrections") or 0,
        total_annotations=raw.get("total_annotations") or 0,
        total_cross_doc_flags=raw.get("total_cross_doc_flags") or 0,
        severity_counts=SeverityCounts.model_validate(dict(counts)) if isinstance(counts, Mapping) else SeverityCounts(),
        confidence_average=raw.get("confidence_average") or 0.0,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def adapt_correction_payload(
    raw: Any,
    *,
    schema_store: SchemaStore | None = None,
    validate: bool | None = None,
) -> CorrectionPayloadResult:
    """Validate and map an upstream payload.

    Raises
    ------
    SchemaValidationError
        The payload violates the active schema (nothing is mapped).
    ValueError
        The payload is not shaped like a correction payload, or a record
        fails canonical validation.
    """
    if validate is None:
        from claimfix.core.settings import get_settings

        validate = get_settings().schema_validation_enabled

    if validate:
        errors = (schema_store or SchemaStore()).validate(raw)
        if errors:
            logger.warning("Correction payload rejected: %d schema violations", len(errors))
            raise SchemaValidationError(errors)

    if not is_correction_payload(raw):
        raise ValueError("Not a correction payload (need correction_job_id, claim_context, documents)")

    claim_ctx = raw["claim_context"]
    claim_id = claim_ctx.get("claim_number") or _generated_claim_id()
    now = datetime.now(timezone.utc)

    documents = [_map_document(doc, claim_id, now) for doc in _records(raw["documents"], "documents")]
    validations = [
        _map_validation(v, claim_id)
        for v in _records(raw.get("cross_document_validations"), "cross_document_validations")
    ]

    summary_raw = raw.get("summary")
    if isinstance(summary_raw, Mapping) and summary_raw:
        summary = _supplied_summary(summary_raw)
    else:
        summary = _computed_summary(documents, validations)

    logger.info(
        "Adapted payload %s for claim %s: %d documents, %d corrections, %d validations",
        raw["correction_job_id"],
        claim_id,
        len(documents),
        sum(len(d.corrections) for d in documents),
        len(validations),
    )
    return CorrectionPayloadResult(
        claim_id=claim_id,
        claim_context=ClaimContext(
            claim_number=claim_ctx.get("claim_number"),
            policy_number=claim_ctx.get("policy_number"),
            insured_name=claim_ctx.get("insured_name"),
            date_of_loss=claim_ctx.get("date_of_loss"),
            property_address=claim_ctx.get("property_address"),
        ),
        documents=documents,
        cross_document_validations=validations,
        summary=summary,
        correction_job_id=raw["correction_job_id"],
        generated_at=raw.get("generated_at"),
    )


def adapt_to_issue_bundle(raw: Any, document_id: str, **kwargs: Any) -> dict[str, Any]:
    """Flatten every correction of *raw* into a legacy issue bundle for *document_id*."""
    adapted = adapt_correction_payload(raw, **kwargs)

    issues = []
    for doc in adapted.documents:
        for corr in doc.corrections:
            bbox = corr.location.bbox
            rect = (
                IssueRect(left=bbox.left, top=bbox.top, width=bbox.width, height=bbox.height)
                if bbox is not None
                else IssueRect(left=0, top=0, width=100, height=20)
            )
            issues.append(
                Issue(
                    issue_id=corr.id,
                    type=corr.type.value,
                    severity=LEGACY_SEVERITY[Severity(corr.severity)],
                    confidence=corr.confidence,
                    page_index=bbox.page_index if bbox is not None else 0,
                    rect=rect,
                    found_value=corr.found_value,
                    expected_value=corr.expected_value,
                    suggested_fix=SuggestedFix(
                        strategy="manual" if corr.requires_human_review else "auto",
                        requires_approval=corr.requires_human_review,
                        fallback_order=[
                            FixMethod.FORM_FIELD,
                            FixMethod.CONTENT_EDIT,
                            FixMethod.REDACTION_OVERLAY,
                        ],
                    ),
                    label=corr.evidence.reasoning,
                    status="OPEN",
                )
            )

    bundle = IssueBundle(
        claim_id=adapted.claim_id,
        document=IssueDocumentRef(document_id=document_id, fingerprint=adapted.correction_job_id),
        issues=issues,
    )
    return bundle.model_dump(by_alias=True, mode="json", exclude_none=True)
