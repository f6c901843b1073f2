from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from pydantic import BaseModel, Field

from claimfix.core.constants import AnnotationType
from claimfix.schemas.location import Location


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Annotation(BaseModel):
    """Visual marker or note placed on a document page."""

    id: str = Field(default_factory=lambda: str(uuid4()))
    type: AnnotationType
    location: Location
    text: str | None = None
    color: str | None = None  # hex, e.g. "#FFFF00"
    created_by: str
    created_at: datetime = Field(default_factory=_utcnow)
    related_correction_id: str | None = None
    related_validation_id: str | None = None


class AnnotationResult(BaseModel):
    success: bool
    native_id: str = ""  # the viewer's own id for the created annotation
    error: str | None = None
