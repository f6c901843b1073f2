"""Fix strategies and cascade selection.

Each strategy is a coroutine ``(target, correction) -> bool``.  The engine
tries a correction's strategies in order and stops at the first ``True``.
"""
from __future__ import annotations

from typing import Awaitable, Callable

from claimfix.core.constants import (
    FORM_FIELD_CASCADE,
    STRATEGIES_BY_TYPE,
    FixMethod,
    require_complete,
)
from claimfix.fixes.target import CorrectionTarget
from claimfix.schemas.correction import Correction

Strategy = Callable[[CorrectionTarget, Correction], Awaitable[bool]]


async def apply_form_field(target: CorrectionTarget, correction: Correction) -> bool:
    if not correction.form_field_name or not correction.expected_value:
        return False
    return bool(await target.set_form_field_value(correction.form_field_name, correction.expected_value))


async def apply_content_edit(target: CorrectionTarget, correction: Correction) -> bool:
    return bool(await target.edit_text_content(correction))


async def apply_redaction_overlay(target: CorrectionTarget, correction: Correction) -> bool:
    return bool(await target.create_redaction_overlay(correction.location, correction.expected_value))


STRATEGIES: dict[FixMethod, Strategy] = {
    FixMethod.FORM_FIELD: apply_form_field,
    FixMethod.CONTENT_EDIT: apply_content_edit,
    FixMethod.REDACTION_OVERLAY: apply_redaction_overlay,
}

require_complete(STRATEGIES, FixMethod, "STRATEGIES")


def select_strategies(correction: Correction) -> tuple[FixMethod, ...]:
    """Return the ordered cascade for *correction*.

    A form field name always puts ``form_field`` first; otherwise the
    cascade is looked up by correction type.
    """
    if correction.form_field_name:
        return FORM_FIELD_CASCADE
    return STRATEGIES_BY_TYPE[correction.type]
