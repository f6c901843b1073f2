"""Fix engine.

Applies corrections and annotations to a live document through a
``CorrectionTarget``.

Per correction
--------------
1. Resolve the location once with ``LocationResolver``.  Failure ends the
   correction with a resolution error; no strategy is attempted.
2. Replace the location with the resolved bbox.
3. Try the strategy cascade in order.  A strategy that raises or returns
   ``False`` has failed and the next one runs; the first success wins.
4. All strategies failed → ``"All strategies failed"``.  The engine never
   retries and never escalates on its own.

Batch
-----
``process_correction_payload`` applies only corrections that are both
``auto_correct`` and not flagged for human review; the rest are listed in
``skipped`` for the manual workflow.  Every annotation is applied.  Each
item is isolated: an unexpected error is logged, recorded in ``errors`` and
the batch moves on.  The batch call itself never raises.
"""
from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field

from claimfix.core.constants import FixMethod, RecommendedAction
from claimfix.fixes.legacy import Issue, migrate_issue_to_correction
from claimfix.fixes.strategies import STRATEGIES, select_strategies
from claimfix.fixes.target import CorrectionTarget
from claimfix.resolution.location_resolver import LocationResolver
from claimfix.schemas.annotation import Annotation, AnnotationResult
from claimfix.schemas.correction import Correction, CorrectionResult
from claimfix.schemas.payload import DocumentCorrectionPayload

logger = logging.getLogger(__name__)

RESOLUTION_FAILED = "Could not resolve location (bbox and search_text both failed)"
ANNOTATION_RESOLUTION_FAILED = "Could not resolve annotation location"
ALL_STRATEGIES_FAILED = "All strategies failed"


# ---------------------------------------------------------------------------
# Batch result records
# ---------------------------------------------------------------------------

class CorrectionOutcome(CorrectionResult):
    id: str


class AnnotationOutcome(AnnotationResult):
    id: str


class ItemError(BaseModel):
    id: str
    error: str


class ProcessingResult(BaseModel):
    corrections: list[CorrectionOutcome] = Field(default_factory=list)
    annotations: list[AnnotationOutcome] = Field(default_factory=list)
    errors: list[ItemError] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)


def is_auto_applicable(correction: Correction) -> bool:
    return (
        correction.recommended_action is RecommendedAction.AUTO_CORRECT
        and not correction.requires_human_review
    )


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class FixEngine:
    """Drive corrections through location resolution and the strategy cascade.

    *accessor* is the viewer's read side (text at location, search); pass
    *resolver* instead to reuse a configured ``LocationResolver``.
    """

    def __init__(
        self,
        target: CorrectionTarget,
        accessor: Any = None,
        *,
        resolver: LocationResolver | None = None,
    ) -> None:
        if resolver is None:
            resolver = LocationResolver(accessor if accessor is not None else target)
        self.target = target
        self.resolver = resolver

    async def apply_correction(self, correction: Correction) -> CorrectionResult:
        resolved = await self.resolver.resolve_location(correction.location)
        if resolved is None:
            logger.info("Correction %s: location unresolved, no strategy attempted", correction.id)
            return CorrectionResult(success=False, method=FixMethod.CONTENT_EDIT, error=RESOLUTION_FAILED)

        pinned = correction.model_copy(update={"location": resolved.to_location()})

        for method in select_strategies(pinned):
            try:
                applied = await STRATEGIES[method](self.target, pinned)
            except Exception as exc:
                logger.warning(
                    "Correction %s: strategy %s raised %s",
                    correction.id, method.value, type(exc).__name__,
                )
                continue
            if applied:
                logger.info("Correction %s applied via %s", correction.id, method.value)
                return CorrectionResult(success=True, method=method)
            logger.debug("Correction %s: strategy %s declined", correction.id, method.value)

        logger.warning("Correction %s: all strategies failed", correction.id)
        return CorrectionResult(success=False, method=FixMethod.CONTENT_EDIT, error=ALL_STRATEGIES_FAILED)

    async def apply_annotation(self, annotation: Annotation) -> AnnotationResult:
        resolved = await self.resolver.resolve_location(annotation.location)
        if resolved is None:
            return AnnotationResult(success=False, native_id="", error=ANNOTATION_RESOLUTION_FAILED)

        pinned = annotation.model_copy(update={"location": resolved.to_location()})
        return await self.target.create_annotation(pinned)

    async def apply_fix(self, issue: Issue) -> CorrectionResult:
        """Apply a legacy ``Issue`` through the normal correction path."""
        return await self.apply_correction(migrate_issue_to_correction(issue))

    async def process_correction_payload(self, payload: DocumentCorrectionPayload) -> ProcessingResult:
        result = ProcessingResult()

        for document in payload.documents:
            for correction in document.corrections:
                if not is_auto_applicable(correction):
                    result.skipped.append(correction.id)
                    continue
                try:
                    outcome = await self.apply_correction(correction)
                except Exception as exc:
                    logger.exception("Correction %s failed in document %s", correction.id, document.document_id)
                    result.errors.append(ItemError(id=correction.id, error=str(exc) or "Unknown error"))
                    continue
                result.corrections.append(CorrectionOutcome(id=correction.id, **outcome.model_dump()))

            for annotation in document.annotations:
                try:
                    annotated = await self.apply_annotation(annotation)
                except Exception as exc:
                    logger.exception("Annotation %s failed in document %s", annotation.id, document.document_id)
                    result.errors.append(ItemError(id=annotation.id, error=str(exc) or "Unknown error"))
                    continue
                result.annotations.append(AnnotationOutcome(id=annotation.id, **annotated.model_dump()))

        logger.info(
            "Payload for claim %s: %d corrections, %d annotations, %d errors, %d skipped",
            payload.claim.claim_id,
            len(result.corrections),
            len(result.annotations),
            len(result.errors),
            len(result.skipped),
        )
        return result
