"""Validation package."""

from erp_assistant.validation.validator import (
    GENERIC_MISSING_MESSAGE,
    PO_DELIVERY_NOTE,
    RequirementValidator,
    ValidationOutcome,
    first_item,
    has_requirements,
    missing_fields,
    question_for,
    status_for,
    summarize,
)

__all__ = [
    "GENERIC_MISSING_MESSAGE",
    "PO_DELIVERY_NOTE",
    "RequirementValidator",
    "ValidationOutcome",
    "first_item",
    "has_requirements",
    "missing_fields",
    "question_for",
    "status_for",
    "summarize",
]
