"""Closed vocabularies and per-member policy tables.

Every vocabulary shared across the engine lives here as a ``str`` Enum so
that records serialise to their plain wire values.

Per-member tables
-----------------
FIELD_SEVERITY       business impact of a cross-document disagreement
FIELD_CATEGORY       semantic category driving extraction acceptance
CATEGORY_CONFIDENCE  fixed confidence assigned per category
STRATEGIES_BY_TYPE   fix cascade for corrections without a form field

Each table is keyed by *every* member of its Enum.  ``require_complete``
runs at import time and raises for a member missing from any table.
"""
from __future__ import annotations

from enum import Enum
from typing import Mapping


class CorrectionType(str, Enum):
    TYPO = "typo"
    DATE_ERROR = "date_error"
    PHONE_FORMAT = "phone_format"
    NAME_MISMATCH = "name_mismatch"
    ADDRESS_ERROR = "address_error"
    NUMERIC_ERROR = "numeric_error"
    MISSING_VALUE = "missing_value"
    FORMAT_STANDARDIZATION = "format_standardization"
    DATA_INCONSISTENCY = "data_inconsistency"


class Severity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class RecommendedAction(str, Enum):
    AUTO_CORRECT = "auto_correct"
    FLAG_FOR_REVIEW = "flag_for_review"
    ESCALATE = "escalate"
    INFORMATIONAL = "informational"


class ValidatedField(str, Enum):
    CLAIM_NUMBER = "claim_number"
    POLICY_NUMBER = "policy_number"
    INSURED_NAME = "insured_name"
    INSURED_PHONE = "insured_phone"
    INSURED_EMAIL = "insured_email"
    DATE_OF_LOSS = "date_of_loss"
    PROPERTY_ADDRESS = "property_address"
    LOSS_AMOUNT = "loss_amount"
    PAYMENT_AMOUNT = "payment_amount"
    ADJUSTER_NAME = "adjuster_name"
    ADJUSTER_PHONE = "adjuster_phone"
    COVERAGE_TYPE = "coverage_type"
    DEDUCTIBLE = "deductible"


class FieldCategory(str, Enum):
    IDENTIFIER = "identifier"
    DATE = "date"
    NAME = "name"
    PHONE = "phone"
    EMAIL = "email"
    ADDRESS = "address"
    AMOUNT = "amount"


class AnnotationType(str, Enum):
    HIGHLIGHT = "highlight"
    COMMENT = "comment"
    FLAG = "flag"
    STRIKETHROUGH = "strikethrough"
    UNDERLINE = "underline"


class CorrectionStatus(str, Enum):
    PENDING = "pending"
    APPLIED = "applied"
    REJECTED = "rejected"
    MANUAL = "manual"


class ValidationStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    IGNORED = "ignored"
    ESCALATED = "escalated"


class FixMethod(str, Enum):
    FORM_FIELD = "form_field"
    CONTENT_EDIT = "content_edit"
    REDACTION_OVERLAY = "redaction_overlay"


# ---------------------------------------------------------------------------
# Per-member tables
# ---------------------------------------------------------------------------

FIELD_SEVERITY: dict[ValidatedField, Severity] = {
    ValidatedField.CLAIM_NUMBER: Severity.CRITICAL,
    ValidatedField.POLICY_NUMBER: Severity.CRITICAL,
    ValidatedField.LOSS_AMOUNT: Severity.CRITICAL,
    ValidatedField.INSURED_NAME: Severity.WARNING,
    ValidatedField.DATE_OF_LOSS: Severity.WARNING,
    ValidatedField.PROPERTY_ADDRESS: Severity.WARNING,
    ValidatedField.PAYMENT_AMOUNT: Severity.WARNING,
    ValidatedField.INSURED_PHONE: Severity.INFO,
    ValidatedField.INSURED_EMAIL: Severity.INFO,
    ValidatedField.ADJUSTER_NAME: Severity.INFO,
    ValidatedField.ADJUSTER_PHONE: Severity.INFO,
    ValidatedField.COVERAGE_TYPE: Severity.INFO,
    ValidatedField.DEDUCTIBLE: Severity.INFO,
}

FIELD_CATEGORY: dict[ValidatedField, FieldCategory] = {
    ValidatedField.CLAIM_NUMBER: FieldCategory.IDENTIFIER,
    ValidatedField.POLICY_NUMBER: FieldCategory.IDENTIFIER,
    ValidatedField.INSURED_NAME: FieldCategory.NAME,
    ValidatedField.INSURED_PHONE: FieldCategory.PHONE,
    ValidatedField.INSURED_EMAIL: FieldCategory.EMAIL,
    ValidatedField.DATE_OF_LOSS: FieldCategory.DATE,
    ValidatedField.PROPERTY_ADDRESS: FieldCategory.ADDRESS,
    ValidatedField.LOSS_AMOUNT: FieldCategory.AMOUNT,
    ValidatedField.PAYMENT_AMOUNT: FieldCategory.AMOUNT,
    ValidatedField.ADJUSTER_NAME: FieldCategory.NAME,
    ValidatedField.ADJUSTER_PHONE: FieldCategory.PHONE,
    ValidatedField.COVERAGE_TYPE: FieldCategory.IDENTIFIER,
    ValidatedField.DEDUCTIBLE: FieldCategory.AMOUNT,
}

CATEGORY_CONFIDENCE: dict[FieldCategory, float] = {
    FieldCategory.IDENTIFIER: 0.85,
    FieldCategory.DATE: 0.80,
    FieldCategory.NAME: 0.75,
    FieldCategory.PHONE: 0.85,
    FieldCategory.EMAIL: 0.90,
    FieldCategory.ADDRESS: 0.70,
    FieldCategory.AMOUNT: 0.85,
}

_DEFAULT_CASCADE: tuple[FixMethod, ...] = (FixMethod.CONTENT_EDIT, FixMethod.REDACTION_OVERLAY)

STRATEGIES_BY_TYPE: dict[CorrectionType, tuple[FixMethod, ...]] = {
    # Dates and numbers may need an overlay when in-place editing fails
    CorrectionType.DATE_ERROR: (FixMethod.CONTENT_EDIT, FixMethod.REDACTION_OVERLAY),
    CorrectionType.NUMERIC_ERROR: (FixMethod.CONTENT_EDIT, FixMethod.REDACTION_OVERLAY),
    CorrectionType.TYPO: _DEFAULT_CASCADE,
    CorrectionType.PHONE_FORMAT: _DEFAULT_CASCADE,
    CorrectionType.NAME_MISMATCH: _DEFAULT_CASCADE,
    CorrectionType.ADDRESS_ERROR: _DEFAULT_CASCADE,
    CorrectionType.MISSING_VALUE: _DEFAULT_CASCADE,
    CorrectionType.FORMAT_STANDARDIZATION: _DEFAULT_CASCADE,
    CorrectionType.DATA_INCONSISTENCY: _DEFAULT_CASCADE,
}

FORM_FIELD_CASCADE: tuple[FixMethod, ...] = (
    FixMethod.FORM_FIELD,
    FixMethod.CONTENT_EDIT,
    FixMethod.REDACTION_OVERLAY,
)

# Fields whose numeric spread can force escalation regardless of severity
AMOUNT_FIELDS: frozenset[ValidatedField] = frozenset({
    ValidatedField.LOSS_AMOUNT,
    ValidatedField.PAYMENT_AMOUNT,
})


def require_complete(table: Mapping, enum_cls: type[Enum], table_name: str) -> None:
    missing = set(enum_cls) - set(table)
    if missing:
        names = sorted(m.value for m in missing)
        raise RuntimeError(f"{table_name} is missing entries for {names}")


require_complete(FIELD_SEVERITY, ValidatedField, "FIELD_SEVERITY")
require_complete(FIELD_CATEGORY, ValidatedField, "FIELD_CATEGORY")
require_complete(CATEGORY_CONFIDENCE, FieldCategory, "CATEGORY_CONFIDENCE")
require_complete(STRATEGIES_BY_TYPE, CorrectionType, "STRATEGIES_BY_TYPE")


def severity_for_field(field: ValidatedField | str) -> Severity:
    """Return the fixed severity for a validated field.

    Raises ``ValueError`` for a name outside the closed field set.
    """
    return FIELD_SEVERITY[ValidatedField(field)]
