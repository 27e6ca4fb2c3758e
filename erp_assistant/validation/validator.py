"""
Requirement Validation

DESIGN DECISION: Requirement checking is a PURE function of (intent, data).
It reports the ordered list of missing fields; it never fills anything in
and never touches the pending-draft store. The orchestrator decides what
to persist.

WHY ONE QUESTION AT A TIME:
1. Users answer a single short question far more reliably than a form
2. The answer can be merged without re-parsing the whole request
3. The stored status tells the resolver exactly where the answer goes

Only the FIRST missing field drives the question and the stored status;
the full list is kept for diagnostics. A first missing field without a
status mapping cannot be asked for, so that draft is discarded with a
generic message instead of being parked.

IMPORTANT: The payload may come from a language model, so every read
here is defensive (wrong types count as missing, never as errors).
"""

from typing import Any, Callable, Optional

from pydantic import BaseModel, Field

from erp_assistant.extraction.extractors import to_decimal
from erp_assistant.models.draft import (
    Draft,
    DraftSummary,
    FieldLabel,
    Intent,
    MissingFieldStatus,
    PendingDraft,
)


GENERIC_MISSING_MESSAGE = "Missing required information. Please provide the requested value."
PO_DELIVERY_NOTE = (
    "\n(Optional) You can also provide an expected delivery date for this Purchase Order."
)


# =============================================================================
# FIELD PRESENCE HELPERS
# =============================================================================

def _present(value: Any) -> bool:
    return value is not None and str(value).strip() != ""


def _positive(value: Any) -> bool:
    number = to_decimal(value)
    return number is not None and number > 0


def first_item(data: dict[str, Any]) -> Optional[dict[str, Any]]:
    """The first line item, or None when `items` is absent or empty."""
    items = data.get("items")
    if not isinstance(items, list) or not items:
        return None
    return items[0] if isinstance(items[0], dict) else {}


# =============================================================================
# PER-INTENT CHECKS (in check order)
# =============================================================================

def _trade_document(
    data: dict[str, Any],
    party_label: FieldLabel,
    name_label: FieldLabel,
    price_label: FieldLabel,
) -> list[FieldLabel]:
    """Shared checks of invoices and bills."""
    missing = []
    if not _present(data.get("partnerName")):
        missing.append(party_label)

    item = first_item(data)
    if item is None:
        missing.append(FieldLabel.ITEM_DETAILS)
    else:
        if not (_present(item.get("productName")) or _present(item.get("description"))):
            missing.append(name_label)
        if not _positive(item.get("quantity")):
            missing.append(FieldLabel.QUANTITY)
        if not _positive(item.get("price")):
            missing.append(price_label)
        if not _present(item.get("sku")):
            missing.append(FieldLabel.SKU)

    if not _present(data.get("paymentMethod")):
        missing.append(FieldLabel.PAYMENT_METHOD)
    return missing


def _invoice(data: dict[str, Any]) -> list[FieldLabel]:
    return _trade_document(
        data, FieldLabel.CUSTOMER_NAME, FieldLabel.GOODS_NAME, FieldLabel.SALE_PRICE
    )


def _bill(data: dict[str, Any]) -> list[FieldLabel]:
    return _trade_document(
        data, FieldLabel.SUPPLIER_NAME, FieldLabel.INVENTORY_NAME, FieldLabel.COST_PRICE
    )


def _payment(data: dict[str, Any]) -> list[FieldLabel]:
    missing = []
    if not _present(data.get("partnerName")):
        missing.append(FieldLabel.PARTY_NAME)
    if not _positive(data.get("amount")):
        missing.append(FieldLabel.AMOUNT)
    if not _present(data.get("method")):
        missing.append(FieldLabel.PAYMENT_METHOD)
    return missing


def _payroll(data: dict[str, Any]) -> list[FieldLabel]:
    missing = []
    if not _present(data.get("month")):
        missing.append(FieldLabel.MONTH)
    if not _present(data.get("year")):
        missing.append(FieldLabel.YEAR)
    return missing


def _salary(data: dict[str, Any]) -> list[FieldLabel]:
    missing = []
    if not _present(data.get("employeeName")):
        missing.append(FieldLabel.EMPLOYEE_NAME)
    if not _positive(data.get("amount")):
        missing.append(FieldLabel.SALARY_AMOUNT)
    if not _present(data.get("salaryType")):
        missing.append(FieldLabel.SALARY_TYPE)
    if not _present(data.get("paymentMethod")):
        missing.append(FieldLabel.PAYMENT_METHOD)
    if not _present(data.get("period")):
        missing.append(FieldLabel.SALARY_PERIOD)
    return missing


def _purchase_order(data: dict[str, Any]) -> list[FieldLabel]:
    missing = []
    if not _present(data.get("supplierName")):
        missing.append(FieldLabel.SUPPLIER_NAME)

    item = first_item(data)
    if item is None:
        missing.append(FieldLabel.ITEM_DETAILS)
    else:
        # Purchase orders need a real product name; a description is not enough
        if not _present(item.get("productName")):
            missing.append(FieldLabel.PRODUCT_NAME)
        if not _positive(item.get("quantity")):
            missing.append(FieldLabel.QUANTITY)
        if not _positive(item.get("unitPrice")):
            missing.append(FieldLabel.UNIT_PRICE)
        if not _present(item.get("sku")):
            missing.append(FieldLabel.SKU)
    return missing


def _po_conversion(data: dict[str, Any]) -> list[FieldLabel]:
    return [] if _present(data.get("poNumber")) else [FieldLabel.PO_NUMBER]


REQUIREMENTS: dict[Intent, Callable[[dict[str, Any]], list[FieldLabel]]] = {
    Intent.CREATE_INVOICE: _invoice,
    Intent.CREATE_BILL: _bill,
    Intent.RECEIVE_PAYMENT: _payment,
    Intent.PAY_BILL: _payment,
    Intent.RUN_PAYROLL: _payroll,
    Intent.RECORD_SALARY_PAYMENT: _salary,
    Intent.CREATE_PURCHASE_ORDER: _purchase_order,
    Intent.CONVERT_PO_TO_BILL: _po_conversion,
}


def has_requirements(intent: Intent) -> bool:
    return intent in REQUIREMENTS


def missing_fields(intent: Intent, data: Optional[dict[str, Any]]) -> list[str]:
    """
    Ordered labels of the required fields absent from `data`.

    Intents without a requirement table (journals, leads, employees,
    general chat) always yield an empty list.
    """
    check = REQUIREMENTS.get(intent)
    if check is None:
        return []
    return [label.value for label in check(data if isinstance(data, dict) else {})]


# =============================================================================
# STATUS MAPPING AND QUESTIONS
# =============================================================================

S = MissingFieldStatus
L = FieldLabel

STATUS_TABLE: dict[tuple[Intent, FieldLabel], MissingFieldStatus] = {
    (Intent.CREATE_BILL, L.SUPPLIER_NAME): S.WAITING_FOR_SUPPLIER,
    (Intent.CREATE_BILL, L.INVENTORY_NAME): S.WAITING_FOR_BILL_PRODUCT,
    (Intent.CREATE_BILL, L.QUANTITY): S.WAITING_FOR_BILL_QUANTITY,
    (Intent.CREATE_BILL, L.COST_PRICE): S.WAITING_FOR_BILL_PRICE,
    (Intent.CREATE_BILL, L.ITEM_DETAILS): S.WAITING_FOR_BILL_ITEM,
    (Intent.CREATE_BILL, L.SKU): S.WAITING_FOR_SKU,
    (Intent.CREATE_INVOICE, L.CUSTOMER_NAME): S.WAITING_FOR_CUSTOMER,
    (Intent.CREATE_INVOICE, L.GOODS_NAME): S.WAITING_FOR_INVOICE_PRODUCT,
    (Intent.CREATE_INVOICE, L.QUANTITY): S.WAITING_FOR_INVOICE_QUANTITY,
    (Intent.CREATE_INVOICE, L.SALE_PRICE): S.WAITING_FOR_INVOICE_PRICE,
    (Intent.CREATE_INVOICE, L.ITEM_DETAILS): S.WAITING_FOR_INVOICE_ITEM,
    (Intent.CREATE_INVOICE, L.SKU): S.WAITING_FOR_SKU,
    (Intent.RECEIVE_PAYMENT, L.PARTY_NAME): S.WAITING_FOR_PARTY,
    (Intent.PAY_BILL, L.PARTY_NAME): S.WAITING_FOR_PARTY,
    (Intent.RUN_PAYROLL, L.MONTH): S.WAITING_FOR_PAYROLL_MONTH,
    (Intent.RUN_PAYROLL, L.YEAR): S.WAITING_FOR_PAYROLL_YEAR,
    (Intent.RECORD_SALARY_PAYMENT, L.EMPLOYEE_NAME): S.WAITING_FOR_SALARY_EMPLOYEE,
    (Intent.RECORD_SALARY_PAYMENT, L.SALARY_AMOUNT): S.WAITING_FOR_SALARY_AMOUNT,
    (Intent.RECORD_SALARY_PAYMENT, L.SALARY_TYPE): S.WAITING_FOR_SALARY_TYPE,
    (Intent.RECORD_SALARY_PAYMENT, L.SALARY_PERIOD): S.WAITING_FOR_SALARY_PERIOD,
    (Intent.CREATE_PURCHASE_ORDER, L.SUPPLIER_NAME): S.WAITING_FOR_PO_SUPPLIER,
    (Intent.CREATE_PURCHASE_ORDER, L.PRODUCT_NAME): S.WAITING_FOR_PO_PRODUCT,
    (Intent.CREATE_PURCHASE_ORDER, L.QUANTITY): S.WAITING_FOR_PO_QUANTITY,
    (Intent.CREATE_PURCHASE_ORDER, L.UNIT_PRICE): S.WAITING_FOR_PO_PRICE,
    (Intent.CREATE_PURCHASE_ORDER, L.SKU): S.WAITING_FOR_PO_SKU,
    (Intent.CREATE_PURCHASE_ORDER, L.ITEM_DETAILS): S.WAITING_FOR_PO_ITEM,
    (Intent.CONVERT_PO_TO_BILL, L.PO_NUMBER): S.WAITING_FOR_PO_NUMBER,
}


def status_for(intent: Intent, label: str) -> Optional[MissingFieldStatus]:
    """
    The status that asks for `label`, or None when the combination is unmapped.

    "cash or credit" is asked the same way for every intent.
    """
    try:
        field_label = FieldLabel(label)
    except ValueError:
        return None
    if field_label == FieldLabel.PAYMENT_METHOD:
        return MissingFieldStatus.WAITING_FOR_PAYMENT_METHOD
    return STATUS_TABLE.get((intent, field_label))


_DOCUMENT_NAMES: dict[Intent, str] = {
    Intent.CREATE_INVOICE: "Sales Invoice",
    Intent.CREATE_BILL: "Purchase Bill",
    Intent.CREATE_PURCHASE_ORDER: "Purchase Order",
}

_QUESTIONS: dict[FieldLabel, str] = {
    L.SUPPLIER_NAME: "Supplier name is missing. Please provide supplier name.",
    L.CUSTOMER_NAME: "Customer name is missing. Please provide customer name.",
    L.INVENTORY_NAME: "Item name is missing. Please provide item name.",
    L.GOODS_NAME: "Item name is missing. Please provide item name.",
    L.PAYMENT_METHOD: "Payment method is missing. Please specify Cash or Credit.",
    L.PARTY_NAME: "Party name is missing. Please provide party name.",
    L.MONTH: "Month is missing. Please provide month.",
    L.YEAR: "Year is missing. Please provide year.",
    L.EMPLOYEE_NAME: "Employee name is missing. Please provide employee name.",
    L.SALARY_AMOUNT: "Salary amount is missing. Please provide salary amount.",
    L.SALARY_TYPE: "Salary type is missing. Please specify Monthly or Advance.",
    L.SALARY_PERIOD: (
        "Salary period is missing. Please provide month and year (e.g., January 2025)."
    ),
    L.PRODUCT_NAME: (
        "Product name is missing for the Purchase Order. Please provide product name."
    ),
    L.UNIT_PRICE: "Unit price is missing for the Purchase Order. Please provide unit price.",
    L.PO_NUMBER: (
        "PO Number is missing. Please provide the Purchase Order number (e.g., PO-2025-0001)."
    ),
}


def question_for(intent: Intent, label: str, data: dict[str, Any]) -> str:
    """User-facing question for the first missing field."""
    try:
        field_label = FieldLabel(label)
    except ValueError:
        return GENERIC_MISSING_MESSAGE

    if field_label == FieldLabel.QUANTITY:
        if intent == Intent.CREATE_BILL:
            return "Please specify quantity purchased."
        if intent == Intent.CREATE_INVOICE:
            return "Please specify quantity sold."
        return "Quantity is missing. Please provide quantity."

    if field_label in (FieldLabel.COST_PRICE, FieldLabel.SALE_PRICE):
        if intent == Intent.CREATE_BILL:
            return "Unit price is missing. Please provide unit price."
        if intent == Intent.CREATE_INVOICE:
            return "Unit selling price is missing. Please provide unit price."
        return "Unit price is missing. Please provide unit price or amount."

    if field_label == FieldLabel.ITEM_DETAILS:
        document = _DOCUMENT_NAMES.get(intent, "this transaction")
        return (
            f"Item details are missing for the {document}. "
            "Please provide product, quantity, price and SKU."
        )

    if field_label == FieldLabel.SKU:
        item = first_item(data) or {}
        name = item.get("productName") or item.get("description") or "this product"
        return f'SKU is missing for product "{name}". Please provide SKU.'

    return _QUESTIONS.get(field_label, GENERIC_MISSING_MESSAGE)


def summarize(data: dict[str, Any]) -> DraftSummary:
    """Running summary of the first line item."""
    item = first_item(data)
    if not item:
        return DraftSummary()
    quantity = to_decimal(item.get("quantity"))
    unit_price = to_decimal(item.get("price"))
    if unit_price is None:
        unit_price = to_decimal(item.get("unitPrice"))
    total = quantity * unit_price if quantity is not None and unit_price is not None else None
    return DraftSummary(
        item=item.get("productName") or item.get("description") or None,
        quantity=quantity,
        unit_price=unit_price,
        total=total,
    )


# =============================================================================
# ENFORCEMENT
# =============================================================================

class ValidationOutcome(BaseModel):
    """
    Result of enforcing requirements on a candidate draft.

    `draft` is what the user sees. `pending` is set only when the draft
    should be parked; `discarded` when fields are missing but none of
    them can be asked for.
    """
    draft: Draft
    missing: list[str] = Field(default_factory=list)
    status: Optional[MissingFieldStatus] = None
    pending: Optional[PendingDraft] = None
    discarded: bool = False

    @property
    def is_ready(self) -> bool:
        return self.draft.ready_to_execute


class RequirementValidator:
    """
    Applies the per-intent requirement tables to candidate drafts.

    Stateless; safe to share across sessions.
    """

    def enforce(self, draft: Draft) -> ValidationOutcome:
        """
        Turn a candidate into either a ready draft or a single question.

        - general chat and intents without a table pass through unchanged
        - complete drafts are marked ready (purchase orders without an
          expected delivery date get an optional note)
        - incomplete drafts become a general_chat question; a PendingDraft
          is attached when the first missing field has a status
        """
        if draft.intent == Intent.GENERAL_CHAT or not has_requirements(draft.intent):
            return ValidationOutcome(draft=draft)

        data = dict(draft.data)
        missing = missing_fields(draft.intent, data)

        if not missing:
            message = draft.message
            if (
                draft.intent == Intent.CREATE_PURCHASE_ORDER
                and not _present(data.get("expectedDeliveryDate"))
                and PO_DELIVERY_NOTE not in message
            ):
                message = message + PO_DELIVERY_NOTE
            ready = draft.model_copy(update={
                "ready_to_execute": True,
                "data": data,
                "message": message,
                "status": None,
                "missing": [],
            })
            return ValidationOutcome(draft=ready)

        primary = missing[0]
        status = status_for(draft.intent, primary)
        question = Draft(
            intent=Intent.GENERAL_CHAT,
            confidence=draft.confidence,
            ready_to_execute=False,
            data={},
            message=question_for(draft.intent, primary, data) if status else GENERIC_MISSING_MESSAGE,
            status=status,
            missing=missing,
        )

        if status is None:
            return ValidationOutcome(draft=question, missing=missing, discarded=True)

        pending = PendingDraft(
            intent=draft.intent,
            data=data,
            status=status.value,
            missing=missing,
            summary=summarize(data),
        )
        return ValidationOutcome(draft=question, missing=missing, status=status, pending=pending)
