"""
Draft Models for the Transaction Drafting Engine

A Draft is the structured, possibly incomplete representation of a
business transaction extracted from a user's message. Drafts are PROPOSED
data: the engine never posts them. A Draft with ready_to_execute=True is
handed to an external poster that creates the ledger records.

DESIGN DECISION: The draft payload (`data`) stays a camelCase dict because
its shape depends on the intent and because the same payload arrives from
an untrusted language model. Typed models (LineItem, JournalLine) are used
to BUILD payloads; validation reads the dict defensively.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Closed sets
# =============================================================================

class Intent(str, Enum):
    """Business action a message is interpreted as requesting."""
    CREATE_INVOICE = "create_invoice"
    CREATE_BILL = "create_bill"
    CREATE_JOURNAL = "create_journal"
    CREATE_PURCHASE_ORDER = "create_purchase_order"
    CONVERT_PO_TO_BILL = "convert_po_to_bill"
    RUN_PAYROLL = "run_payroll"
    RECORD_SALARY_PAYMENT = "record_salary_payment"
    RECEIVE_PAYMENT = "receive_payment"
    PAY_BILL = "pay_bill"
    CREATE_LEAD = "create_lead"
    FOLLOW_UP_CLIENT = "follow_up_client"
    CREATE_EMPLOYEE = "create_employee"
    GENERAL_CHAT = "general_chat"

    @classmethod
    def parse(cls, value: Any) -> "Intent":
        """Map untrusted intent text to an Intent, defaulting to general chat."""
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.GENERAL_CHAT


class FieldLabel(str, Enum):
    """
    Human-readable labels for required fields.

    The validator reports missing fields with these labels, in check order.
    The first label (together with the intent) selects the next question.
    """
    CUSTOMER_NAME = "customer name"
    SUPPLIER_NAME = "supplier name"
    PARTY_NAME = "party name"
    ITEM_DETAILS = "item details"
    GOODS_NAME = "product or goods name"
    INVENTORY_NAME = "product or inventory name"
    PRODUCT_NAME = "product name"
    QUANTITY = "quantity"
    SALE_PRICE = "price or amount"
    COST_PRICE = "cost price or amount"
    UNIT_PRICE = "unit price"
    SKU = "sku"
    PAYMENT_METHOD = "cash or credit"
    AMOUNT = "amount"
    MONTH = "month"
    YEAR = "year"
    EMPLOYEE_NAME = "employee name"
    SALARY_AMOUNT = "salary amount"
    SALARY_TYPE = "salary type"
    SALARY_PERIOD = "salary period"
    PO_NUMBER = "po number"


class MissingFieldStatus(str, Enum):
    """
    The single field being solicited next from the user.

    CRITICAL: A pending draft asks for exactly ONE field at a time.
    """
    WAITING_FOR_SUPPLIER = "waiting_for_supplier"
    WAITING_FOR_BILL_ITEM = "waiting_for_bill_item"
    WAITING_FOR_BILL_PRODUCT = "waiting_for_bill_product"
    WAITING_FOR_BILL_QUANTITY = "waiting_for_bill_quantity"
    WAITING_FOR_BILL_PRICE = "waiting_for_bill_price"
    WAITING_FOR_CUSTOMER = "waiting_for_customer"
    WAITING_FOR_INVOICE_ITEM = "waiting_for_invoice_item"
    WAITING_FOR_INVOICE_PRODUCT = "waiting_for_invoice_product"
    WAITING_FOR_INVOICE_QUANTITY = "waiting_for_invoice_quantity"
    WAITING_FOR_INVOICE_PRICE = "waiting_for_invoice_price"
    WAITING_FOR_SKU = "waiting_for_sku"
    WAITING_FOR_PAYMENT_METHOD = "waiting_for_payment_method"
    WAITING_FOR_PARTY = "waiting_for_party"
    WAITING_FOR_PAYROLL_MONTH = "waiting_for_payroll_month"
    WAITING_FOR_PAYROLL_YEAR = "waiting_for_payroll_year"
    WAITING_FOR_SALARY_EMPLOYEE = "waiting_for_salary_employee"
    WAITING_FOR_SALARY_AMOUNT = "waiting_for_salary_amount"
    WAITING_FOR_SALARY_TYPE = "waiting_for_salary_type"
    WAITING_FOR_SALARY_PERIOD = "waiting_for_salary_period"
    WAITING_FOR_PO_SUPPLIER = "waiting_for_po_supplier"
    WAITING_FOR_PO_ITEM = "waiting_for_po_item"
    WAITING_FOR_PO_PRODUCT = "waiting_for_po_product"
    WAITING_FOR_PO_QUANTITY = "waiting_for_po_quantity"
    WAITING_FOR_PO_PRICE = "waiting_for_po_price"
    WAITING_FOR_PO_SKU = "waiting_for_po_sku"
    WAITING_FOR_PO_NUMBER = "waiting_for_po_number"


# =============================================================================
# PAYLOAD BUILDING BLOCKS
# =============================================================================

class PayloadModel(BaseModel):
    """Base for models serialized into camelCase draft payloads."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)


class LineItem(PayloadModel):
    """
    One line of an invoice, bill or purchase order.

    Invoices and bills carry `price`; purchase orders carry `unit_price`
    and `line_total`.
    """
    product_name: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[Decimal] = Field(default=None, ge=0)
    price: Optional[Decimal] = Field(default=None, ge=0)
    unit_price: Optional[Decimal] = Field(default=None, ge=0)
    line_total: Optional[Decimal] = Field(default=None, ge=0)
    sku: Optional[str] = None
    account_code: Optional[str] = None


class JournalLine(PayloadModel):
    """A single debit or credit line of a journal entry."""
    account_code: str
    account_name: Optional[str] = None
    debit: Decimal = Field(default=Decimal("0"), ge=0)
    credit: Decimal = Field(default=Decimal("0"), ge=0)


# =============================================================================
# DRAFT
# =============================================================================

class Draft(BaseModel):
    """
    The engine's answer to one user message.

    INVARIANT: ready_to_execute=True implies every required field for the
    intent is present (and positive where numeric).

    `status` and `missing` are diagnostics: they are set when the message
    is a clarifying question.
    """
    model_config = ConfigDict(populate_by_name=True)

    intent: Intent = Intent.GENERAL_CHAT
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    ready_to_execute: bool = Field(default=False, alias="readyToExecute")
    data: dict[str, Any] = Field(default_factory=dict)
    message: str = ""
    status: Optional[MissingFieldStatus] = None
    missing: list[str] = Field(default_factory=list)

    @classmethod
    def chat(cls, message: str, confidence: Optional[float] = 1.0) -> "Draft":
        """A conversational reply that carries no transaction."""
        return cls(
            intent=Intent.GENERAL_CHAT,
            confidence=confidence,
            ready_to_execute=False,
            data={},
            message=message,
        )

    @classmethod
    def from_provider_payload(cls, payload: dict[str, Any]) -> "Draft":
        """
        Build a Draft from untrusted provider JSON.

        Unknown intents become general chat, a non-object `data` becomes
        empty and a bad confidence is dropped. Nothing here raises.
        """
        data = payload.get("data")
        confidence = payload.get("confidence")
        try:
            confidence = float(confidence) if confidence is not None else None
        except (TypeError, ValueError):
            confidence = None
        if confidence is not None and not 0.0 <= confidence <= 1.0:
            confidence = None
        return cls(
            intent=Intent.parse(payload.get("intent")),
            confidence=confidence,
            ready_to_execute=payload.get("readyToExecute") is True,
            data=dict(data) if isinstance(data, dict) else {},
            message=str(payload.get("message") or ""),
        )

    def to_response(self) -> dict[str, Any]:
        """Wire form returned to callers (amounts stay numbers)."""
        response: dict[str, Any] = {
            "intent": self.intent.value,
            "readyToExecute": self.ready_to_execute,
            "data": _jsonable(self.data),
            "message": self.message,
        }
        if self.confidence is not None:
            response["confidence"] = self.confidence
        if self.status is not None:
            response["status"] = self.status.value
        if self.missing:
            response["missing"] = list(self.missing)
        return response


def _jsonable(value: Any) -> Any:
    """Convert Decimals inside a payload to int/float for JSON encoders."""
    if isinstance(value, Decimal):
        return int(value) if value == value.to_integral_value() else float(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: _jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


class DraftSummary(BaseModel):
    """Running summary of the first line item of a pending draft."""
    item: Optional[str] = None
    quantity: Optional[Decimal] = None
    unit_price: Optional[Decimal] = None
    total: Optional[Decimal] = None


class PendingDraft(BaseModel):
    """
    An incomplete draft parked for one session, awaiting ONE answer.

    `status` is kept as plain text: a store may hand back a state written
    by another version of the engine, and the resolver must be able to
    reject it instead of failing to load it.
    """
    intent: Intent
    data: dict[str, Any] = Field(default_factory=dict)
    status: str
    missing: list[str] = Field(default_factory=list)
    summary: DraftSummary = Field(default_factory=DraftSummary)
    created_at: datetime = Field(default_factory=datetime.utcnow)


# =============================================================================
# SUBMISSION (hand-off to the external poster)
# =============================================================================

class PostingReceipt(BaseModel):
    """What the external poster reports after creating the records."""
    reference: str
    posted_at: datetime = Field(default_factory=datetime.utcnow)
    details: dict[str, Any] = Field(default_factory=dict)


class SubmissionResult(BaseModel):
    """Outcome of handing a ready draft to the poster."""
    accepted: bool
    intent: Intent
    reasons: list[str] = Field(default_factory=list)
    receipt: Optional[PostingReceipt] = None
    message: str = ""
