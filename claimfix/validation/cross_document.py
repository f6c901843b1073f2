"""Cross-document validator.

Compares the value each document of a claim reports for every validated
field and emits one ``CrossDocumentValidation`` per field on which at least
two documents disagree after normalisation.

Per field
---------
1. Collect the field's ``ExtractedValue`` from every document that has it.
   Fewer than two → skip (no comparison possible; not an error).
2. Normalise each value (lowercase, drop non-alphanumerics).
3. One distinct normalised value → consistent, skip.
4. Otherwise emit a validation with:

   severity            fixed per field (``FIELD_SEVERITY``)
   expected_value      highest-confidence value if that confidence > 0.9,
                       else the most frequent normalised value (first seen
                       wins ties)
   recommended_action  amount fields (loss, payment): escalate when the
                       coefficient of variation exceeds 0.2, otherwise
                       fall through to the confidence rule
                       other critical fields: escalate
                       auto_correct if mean confidence > 0.9 and the
                       field is not critical
                       flag_for_review otherwise

Pure, synchronous and in-memory.  Raw values are never logged.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Mapping

from claimfix.core.constants import (
    AMOUNT_FIELDS,
    FIELD_SEVERITY,
    RecommendedAction,
    Severity,
    ValidatedField,
)
from claimfix.extraction.field_extractor import ExtractedValue
from claimfix.normalization.amount import parse_amount
from claimfix.normalization.comparison import normalize_for_comparison
from claimfix.schemas.validation import CrossDocumentValidation, DocumentValue

logger = logging.getLogger(__name__)

HIGH_CONFIDENCE = 0.9
AMOUNT_VARIATION_LIMIT = 0.2


# ---------------------------------------------------------------------------
# Input dataclass
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExtractedDocument:
    """The extracted fields of one document belonging to a claim."""

    document_id: str
    document_name: str
    fields: Mapping[ValidatedField, ExtractedValue]


@dataclass(frozen=True)
class _Observation:
    document_id: str
    document_name: str
    value: ExtractedValue
    normalized: str


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _collect(field: ValidatedField, documents: list[ExtractedDocument]) -> list[_Observation]:
    observations: list[_Observation] = []
    for doc in documents:
        extracted = doc.fields.get(field)
        if extracted is None:
            continue
        observations.append(
            _Observation(
                document_id=doc.document_id,
                document_name=doc.document_name,
                value=extracted,
                normalized=normalize_for_comparison(extracted.value),
            )
        )
    return observations


def _value_counts(observations: list[_Observation]) -> dict[str, tuple[int, str]]:
    """Return normalised value → (count, first raw value), in first-seen order."""
    counts: dict[str, tuple[int, str]] = {}
    for obs in observations:
        count, first_raw = counts.get(obs.normalized, (0, obs.value.value))
        counts[obs.normalized] = (count + 1, first_raw)
    return counts


def _most_common(counts: dict[str, tuple[int, str]]) -> tuple[str, int, str]:
    """Return (normalised, count, first raw) of the most frequent value.

    ``max`` keeps the first maximal item, so ties go to first-seen order.
    """
    normalized, (count, raw) = max(counts.items(), key=lambda item: item[1][0])
    return normalized, count, raw


def coefficient_of_variation(values: list[float]) -> float:
    """Population standard deviation divided by the mean (0.0 when mean ≤ 0)."""
    if not values:
        return 0.0
    mean = sum(values) / len(values)
    if mean <= 0:
        return 0.0
    variance = sum((v - mean) ** 2 for v in values) / len(values)
    return math.sqrt(variance) / mean


def determine_expected_value(observations: list[_Observation]) -> str:
    """Pick the value the claim most likely intends."""
    best = observations[0]
    for obs in observations[1:]:
        if obs.value.confidence > best.value.confidence:
            best = obs
    if best.value.confidence > HIGH_CONFIDENCE:
        return best.value.value

    _, _, raw = _most_common(_value_counts(observations))
    return raw


def determine_action(field: ValidatedField, observations: list[_Observation]) -> RecommendedAction:
    severity = FIELD_SEVERITY[field]

    if field in AMOUNT_FIELDS:
        # amount spread decides escalation; severity alone does not
        amounts = [parse_amount(obs.value.value) for obs in observations]
        numeric = [a for a in amounts if a is not None]
        if coefficient_of_variation(numeric) > AMOUNT_VARIATION_LIMIT:
            return RecommendedAction.ESCALATE
    elif severity is Severity.CRITICAL:
        return RecommendedAction.ESCALATE

    mean_confidence = sum(obs.value.confidence for obs in observations) / len(observations)
    if mean_confidence > HIGH_CONFIDENCE and severity is not Severity.CRITICAL:
        return RecommendedAction.AUTO_CORRECT

    return RecommendedAction.FLAG_FOR_REVIEW


def generate_reasoning(field: ValidatedField, observations: list[_Observation]) -> str:
    total = len(observations)
    counts = _value_counts(observations)

    if len(counts) == total:
        return f"All {total} documents have different values for {field.value}."

    normalized, count, _ = _most_common(counts)
    return (
        f'{count} of {total} documents have the value "{normalized}" for {field.value}, '
        f"but {total - count} document(s) have different values."
    )


# ---------------------------------------------------------------------------
# Validator
# ---------------------------------------------------------------------------

class CrossDocumentValidator:
    """Detect and classify field disagreements across a claim's documents."""

    def validate_claim(
        self,
        claim_id: str,
        documents: list[ExtractedDocument],
    ) -> list[CrossDocumentValidation]:
        """Return one validation per inconsistent field, in field order."""
        validations: list[CrossDocumentValidation] = []

        for field in ValidatedField:
            observations = _collect(field, documents)
            if len(observations) < 2:
                continue

            if len({obs.normalized for obs in observations}) == 1:
                continue

            validations.append(
                CrossDocumentValidation(
                    claim_id=claim_id,
                    field=field,
                    severity=FIELD_SEVERITY[field],
                    documents=[
                        DocumentValue(
                            document_id=obs.document_id,
                            document_name=obs.document_name,
                            found_value=obs.value.value,
                            location=obs.value.location,
                            confidence=obs.value.confidence,
                        )
                        for obs in observations
                    ],
                    expected_value=determine_expected_value(observations),
                    recommended_action=determine_action(field, observations),
                    reasoning=generate_reasoning(field, observations),
                )
            )

        logger.info(
            "Claim %s: %d documents compared, %d inconsistent fields",
            claim_id,
            len(documents),
            len(validations),
        )
        return validations
