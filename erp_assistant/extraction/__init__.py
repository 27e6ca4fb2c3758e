"""
Extraction Package

Rule-based drafting: field extractors and the intent classifier that
dispatches to them.
"""

from erp_assistant.extraction.classifier import (
    GREETING_MESSAGE,
    IntentClassifier,
    Rule,
    is_greeting,
)
from erp_assistant.extraction.extractors import (
    classify_payment_answer,
    extract_amount,
    extract_party_name,
    extract_payment_method,
    extract_po_number,
    extract_product_name,
    extract_quantity,
    extract_sku,
    extract_unit_price,
    match_quantity,
    normalize_text,
    to_decimal,
)

__all__ = [
    "GREETING_MESSAGE",
    "IntentClassifier",
    "Rule",
    "is_greeting",
    "classify_payment_answer",
    "extract_amount",
    "extract_party_name",
    "extract_payment_method",
    "extract_po_number",
    "extract_product_name",
    "extract_quantity",
    "extract_sku",
    "extract_unit_price",
    "match_quantity",
    "normalize_text",
    "to_decimal",
]
