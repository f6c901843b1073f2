"""Claim validation service.

Runs field extraction for every document of a claim, then compares the
results with ``CrossDocumentValidator``.

Extraction is independent per document, so each document is extracted in a
worker thread and the service awaits all of them before validating.  The
extractor is stateless after construction and is shared across threads.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

from claimfix.extraction.field_extractor import FieldExtractor
from claimfix.schemas.validation import CrossDocumentValidation
from claimfix.validation.cross_document import CrossDocumentValidator, ExtractedDocument

logger = logging.getLogger(__name__)


async def _extract_document(extractor: FieldExtractor, document: Mapping[str, Any]) -> ExtractedDocument:
    document_id = str(document["document_id"])
    fields = await asyncio.to_thread(
        extractor.extract_from_document,
        document_id,
        document.get("content") or "",
    )
    return ExtractedDocument(
        document_id=document_id,
        document_name=str(document.get("document_name") or document_id),
        fields=fields,
    )


async def validate_claim_documents(
    claim_id: str,
    documents: list[Mapping[str, Any]],
    *,
    extractor: FieldExtractor | None = None,
    validator: CrossDocumentValidator | None = None,
) -> list[CrossDocumentValidation]:
    """Extract every document of *claim_id* concurrently and validate them.

    Each entry of *documents* is ``{"document_id", "document_name",
    "content"}`` where ``content`` is text or a ``{"pages": [...]}`` mapping.
    Results keep the input document order.
    """
    extractor = extractor or FieldExtractor()
    validator = validator or CrossDocumentValidator()

    extracted = await asyncio.gather(*(_extract_document(extractor, doc) for doc in documents))

    logger.info("Claim %s: extracted %d documents", claim_id, len(extracted))
    return validator.validate_claim(claim_id, list(extracted))
