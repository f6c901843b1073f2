"""Canonical interchange records.

These pydantic models are the storage/wire contract between the engine and
the persistence and API layers.  Engine components only read and produce
them; ownership stays with the claim/document aggregate they reference.
"""
from claimfix.schemas.annotation import Annotation, AnnotationResult
from claimfix.schemas.correction import Correction, CorrectionResult, Evidence
from claimfix.schemas.location import BBox, Location, SearchText
from claimfix.schemas.payload import (
    ClaimRef,
    CorrectionSummary,
    DocumentCorrectionPayload,
    DocumentCorrections,
)
from claimfix.schemas.validation import CrossDocumentValidation, DocumentValue

__all__ = [
    "Annotation",
    "AnnotationResult",
    "BBox",
    "ClaimRef",
    "Correction",
    "CorrectionResult",
    "CorrectionSummary",
    "CrossDocumentValidation",
    "DocumentCorrectionPayload",
    "DocumentCorrections",
    "DocumentValue",
    "Evidence",
    "Location",
    "SearchText",
]
