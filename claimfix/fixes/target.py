"""Correction-target interface implemented by the document viewer adapter."""
from __future__ import annotations

from typing import Protocol, runtime_checkable

from claimfix.schemas.annotation import Annotation, AnnotationResult
from claimfix.schemas.correction import Correction
from claimfix.schemas.location import Location


@runtime_checkable
class CorrectionTarget(Protocol):
    """Write capabilities of the external document viewer.

    Every method is a coroutine.  Boolean methods return ``False`` (or raise)
    when the viewer could not apply the change; the fix engine treats both
    the same way.
    """

    async def set_form_field_value(self, name: str, value: str) -> bool: ...

    async def edit_text_content(self, correction: Correction) -> bool: ...

    async def create_redaction_overlay(self, location: Location, overlay_text: str) -> bool: ...

    async def create_annotation(self, annotation: Annotation) -> AnnotationResult: ...
