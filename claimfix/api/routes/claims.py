"""Claim extraction and cross-document validation routes.

POST /claims/extract                 extract validated fields from one document
POST /claims/{claim_id}/validate     extract every document, report disagreements

Responses carry extracted values back to the caller; values are never logged.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from claimfix.api.deps import get_field_extractor
from claimfix.extraction.field_extractor import ExtractedFields, FieldExtractor
from claimfix.validation.service import validate_claim_documents

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/claims", tags=["claims"])


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class ExtractBody(BaseModel):
    document_id: str = "document"
    text: str | None = None
    pages: list[dict[str, Any]] | None = None


class ClaimDocumentBody(BaseModel):
    document_id: str
    document_name: str | None = None
    content: str | dict[str, Any] = ""


class ValidateBody(BaseModel):
    documents: list[ClaimDocumentBody] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _serialize_fields(fields: ExtractedFields) -> dict[str, Any]:
    return {
        field.value: {
            "value": extracted.value,
            "confidence": extracted.confidence,
            "location": extracted.location.model_dump(mode="json", by_alias=True, exclude_none=True),
        }
        for field, extracted in fields.items()
    }


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------

@router.post("/extract", summary="Extract validated fields from document text")
def extract_fields(body: ExtractBody, extractor: FieldExtractor = Depends(get_field_extractor)):
    if body.text is None and not body.pages:
        raise HTTPException(status_code=400, detail="Provide either text or pages")

    content: str | dict[str, Any] = body.text if body.text is not None else {"pages": body.pages}
    fields = extractor.extract_from_document(body.document_id, content)
    return {
        "document_id": body.document_id,
        "pattern_set": extractor.pattern_set.name,
        "pattern_set_version": extractor.pattern_set.version,
        "fields": _serialize_fields(fields),
    }


@router.post("/{claim_id}/validate", summary="Cross-document validation for a claim")
async def validate_claim(
    claim_id: str,
    body: ValidateBody,
    extractor: FieldExtractor = Depends(get_field_extractor),
):
    validations = await validate_claim_documents(
        claim_id,
        [doc.model_dump() for doc in body.documents],
        extractor=extractor,
    )
    return {
        "claim_id": claim_id,
        "documents_compared": len(body.documents),
        "validations": [v.model_dump(mode="json", by_alias=True) for v in validations],
    }
