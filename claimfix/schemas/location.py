"""Dual-strategy location descriptor.

``bbox`` is the precise rectangle reported by upstream analysis; it drifts
when page layout shifts.  ``search_text`` is the fallback: resilient to
layout changes but ambiguous without an occurrence index or surrounding
context.  At least one of the two must be present.
"""
from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator


class BBox(BaseModel):
    """Axis-aligned rectangle on one page (percentage or pixel units)."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    page_index: int = Field(alias="pageIndex", ge=0)
    left: float
    top: float
    width: float
    height: float


class SearchText(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    occurrence: int = Field(default=1, ge=1)
    context_before: str | None = None
    context_after: str | None = None


class Location(BaseModel):
    model_config = ConfigDict(frozen=True)

    bbox: BBox | None = None
    search_text: SearchText | None = None

    @model_validator(mode="after")
    def _require_bbox_or_search_text(self) -> Location:
        if self.bbox is None and self.search_text is None:
            raise ValueError("Location must have either bbox or search_text")
        return self
