"""Status workflow for corrections and validations.

Corrections::

    pending → applied | rejected | manual

Validations::

    pending → resolved | ignored | escalated

Every target status is terminal.  Nothing in the engine moves a record out
of ``pending``; only these explicit actions do.  Records are immutable
inputs: each action returns an updated copy.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from claimfix.core.constants import CorrectionStatus, FixMethod, ValidationStatus
from claimfix.schemas.correction import Correction
from claimfix.schemas.validation import CrossDocumentValidation

logger = logging.getLogger(__name__)


class InvalidTransitionError(ValueError):
    """Raised when a record cannot move to the requested status."""


# Allowed transitions: current_status → {valid target statuses}
_CORRECTION_TRANSITIONS: dict[CorrectionStatus, set[CorrectionStatus]] = {
    CorrectionStatus.PENDING: {
        CorrectionStatus.APPLIED,
        CorrectionStatus.REJECTED,
        CorrectionStatus.MANUAL,
    },
}

_VALIDATION_TRANSITIONS: dict[ValidationStatus, set[ValidationStatus]] = {
    ValidationStatus.PENDING: {
        ValidationStatus.RESOLVED,
        ValidationStatus.IGNORED,
        ValidationStatus.ESCALATED,
    },
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CorrectionWorkflow:
    """Move corrections out of ``pending``."""

    def can_transition(self, current_status: CorrectionStatus | str, to_status: CorrectionStatus | str) -> bool:
        """Return whether *current_status* → *to_status* is allowed."""
        allowed = _CORRECTION_TRANSITIONS.get(CorrectionStatus(current_status), set())
        return CorrectionStatus(to_status) in allowed

    def _check(self, correction: Correction, to_status: CorrectionStatus) -> None:
        if not self.can_transition(correction.status, to_status):
            raise InvalidTransitionError(
                f"Invalid correction transition {correction.status.value!r} → {to_status.value!r}"
            )

    def apply(self, correction: Correction, actor: str, method: FixMethod | str) -> Correction:
        """Mark *correction* applied by *actor* via *method*."""
        self._check(correction, CorrectionStatus.APPLIED)
        logger.info("Correction %s applied by %s", correction.id, actor)
        return correction.model_copy(
            update={
                "status": CorrectionStatus.APPLIED,
                "applied_at": _utcnow(),
                "applied_by": actor,
                "applied_method": FixMethod(method),
            }
        )

    def reject(self, correction: Correction, actor: str) -> Correction:
        self._check(correction, CorrectionStatus.REJECTED)
        logger.info("Correction %s rejected by %s", correction.id, actor)
        return correction.model_copy(update={"status": CorrectionStatus.REJECTED})

    def mark_manual(self, correction: Correction, actor: str) -> Correction:
        """Record that *actor* fixed the value by hand outside the engine."""
        self._check(correction, CorrectionStatus.MANUAL)
        logger.info("Correction %s marked manual by %s", correction.id, actor)
        return correction.model_copy(update={"status": CorrectionStatus.MANUAL, "applied_by": actor})

    def transition(
        self,
        correction: Correction,
        to_status: CorrectionStatus | str,
        actor: str,
        method: FixMethod | str | None = None,
    ) -> Correction:
        """Dispatch to the action matching *to_status*."""
        target = CorrectionStatus(to_status)
        if target is CorrectionStatus.APPLIED:
            if method is None:
                raise InvalidTransitionError("Applying a correction requires a fix method")
            return self.apply(correction, actor, method)
        if target is CorrectionStatus.REJECTED:
            return self.reject(correction, actor)
        if target is CorrectionStatus.MANUAL:
            return self.mark_manual(correction, actor)
        raise InvalidTransitionError(
            f"Invalid correction transition {correction.status.value!r} → {target.value!r}"
        )


class ValidationWorkflow:
    """Move cross-document validations out of ``pending``."""

    def can_transition(self, current_status: ValidationStatus | str, to_status: ValidationStatus | str) -> bool:
        allowed = _VALIDATION_TRANSITIONS.get(ValidationStatus(current_status), set())
        return ValidationStatus(to_status) in allowed

    def _move(
        self,
        validation: CrossDocumentValidation,
        to_status: ValidationStatus,
        actor: str,
        value: str | None = None,
    ) -> CrossDocumentValidation:
        if not self.can_transition(validation.status, to_status):
            raise InvalidTransitionError(
                f"Invalid validation transition {validation.status.value!r} → {to_status.value!r}"
            )
        logger.info("Validation %s (%s) → %s by %s", validation.id, validation.field.value, to_status.value, actor)
        return validation.model_copy(
            update={
                "status": to_status,
                "resolved_value": value,
                "resolved_by": actor,
                "resolved_at": _utcnow(),
            }
        )

    def resolve(self, validation: CrossDocumentValidation, actor: str, value: str) -> CrossDocumentValidation:
        """Settle the disagreement on *value*."""
        return self._move(validation, ValidationStatus.RESOLVED, actor, value)

    def ignore(self, validation: CrossDocumentValidation, actor: str) -> CrossDocumentValidation:
        return self._move(validation, ValidationStatus.IGNORED, actor)

    def escalate(self, validation: CrossDocumentValidation, actor: str) -> CrossDocumentValidation:
        return self._move(validation, ValidationStatus.ESCALATED, actor)

    def transition(
        self,
        validation: CrossDocumentValidation,
        to_status: ValidationStatus | str,
        actor: str,
        value: str | None = None,
    ) -> CrossDocumentValidation:
        target = ValidationStatus(to_status)
        if target is ValidationStatus.RESOLVED:
            if value is None:
                raise InvalidTransitionError("Resolving a validation requires a value")
            return self.resolve(validation, actor, value)
        if target is ValidationStatus.IGNORED:
            return self.ignore(validation, actor)
        if target is ValidationStatus.ESCALATED:
            return self.escalate(validation, actor)
        raise InvalidTransitionError(
            f"Invalid validation transition {validation.status.value!r} → {target.value!r}"
        )
