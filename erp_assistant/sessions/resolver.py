"""
Turn Resolver

Merges a follow-up answer into a pending draft, according to the single
field the draft was waiting for.

DESIGN DECISION: One handler per status, registered in a table. A status
without a handler (e.g. written by another engine version) is NOT guessed
at: resolution returns None and the caller treats the message as a fresh
request. The pending draft is lost in that case.

IMPORTANT: The resolver only merges. Re-validation of the merged draft is
the requirement validator's job, so a merged draft that is still
incomplete produces the next question, not a ready draft.
"""

import re
import time
from decimal import Decimal
from typing import Any, Callable, Optional

from erp_assistant.extraction.extractors import classify_payment_answer, to_decimal
from erp_assistant.models.draft import Draft, Intent, MissingFieldStatus, PendingDraft
from erp_assistant.validation.validator import first_item


EMPTY_ANSWER_MESSAGE = "Please provide the requested information."

_CANCEL_PHRASES = (
    "cancel transaction",
    "cancel po",
    "cancel purchase order",
    "never mind",
    "nevermind",
)
_AUTO_SKU_ANSWERS = {"auto", "autogen", "generate"}

Handler = Callable[[dict[str, Any], str], None]


def is_cancellation(text: Optional[str]) -> bool:
    """Exact "cancel", or any of the cancellation phrases."""
    lowered = (text or "").strip().lower()
    if lowered == "cancel":
        return True
    return any(phrase in lowered for phrase in _CANCEL_PHRASES)


def cancellation_message(pending: PendingDraft) -> str:
    if pending.intent == Intent.CREATE_PURCHASE_ORDER:
        return "Purchase Order draft cancelled."
    return "Pending transaction cancelled."


def format_number(value: Any) -> str:
    """500 rather than 500.00 for whole amounts."""
    number = to_decimal(value)
    if number is None:
        return "?"
    if number == number.to_integral_value():
        return str(number.quantize(Decimal(1)))
    return str(number.normalize())


def _update_first_item(data: dict[str, Any], **fields: Any) -> None:
    """Set fields on items[0], creating the first item when there is none."""
    items = list(data.get("items")) if isinstance(data.get("items"), list) else []
    base = dict(items[0]) if items and isinstance(items[0], dict) else {}
    base.update(fields)
    if items:
        items[0] = base
    else:
        items.append(base)
    data["items"] = items


class TurnResolver:
    """
    Applies one answer to one pending draft.

    Args:
        clock: Seconds since the epoch; used for generated SKUs.
        sku_prefix: Prefix of generated SKUs.
        currency: Currency shown in completion summaries.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.time,
        sku_prefix: str = "SKU",
        currency: str = "PKR",
    ):
        self._clock = clock
        self._sku_prefix = sku_prefix
        self._currency = currency

        S = MissingFieldStatus
        self._handlers: dict[str, Handler] = {
            S.WAITING_FOR_SUPPLIER.value: self._set_partner,
            S.WAITING_FOR_CUSTOMER.value: self._set_partner,
            S.WAITING_FOR_PARTY.value: self._set_partner,
            S.WAITING_FOR_PAYROLL_MONTH.value: self._setter("month"),
            S.WAITING_FOR_PAYROLL_YEAR.value: self._setter("year"),
            S.WAITING_FOR_SALARY_EMPLOYEE.value: self._setter("employeeName"),
            S.WAITING_FOR_SALARY_AMOUNT.value: self._set_salary_amount,
            S.WAITING_FOR_SALARY_TYPE.value: self._set_salary_type,
            S.WAITING_FOR_SALARY_PERIOD.value: self._setter("period"),
            S.WAITING_FOR_SKU.value: self._set_sku,
            S.WAITING_FOR_PO_SKU.value: self._set_sku,
            S.WAITING_FOR_PAYMENT_METHOD.value: self._set_payment_method,
            S.WAITING_FOR_BILL_PRODUCT.value: self._set_product,
            S.WAITING_FOR_BILL_ITEM.value: self._set_product,
            S.WAITING_FOR_INVOICE_PRODUCT.value: self._set_product,
            S.WAITING_FOR_INVOICE_ITEM.value: self._set_product,
            S.WAITING_FOR_PO_PRODUCT.value: self._set_product,
            S.WAITING_FOR_PO_ITEM.value: self._set_product,
            S.WAITING_FOR_BILL_QUANTITY.value: self._item_number("quantity"),
            S.WAITING_FOR_INVOICE_QUANTITY.value: self._item_number("quantity"),
            S.WAITING_FOR_PO_QUANTITY.value: self._item_number("quantity"),
            S.WAITING_FOR_BILL_PRICE.value: self._item_number("price"),
            S.WAITING_FOR_INVOICE_PRICE.value: self._item_number("price"),
            S.WAITING_FOR_PO_PRICE.value: self._item_number("unitPrice"),
            S.WAITING_FOR_PO_SUPPLIER.value: self._setter("supplierName"),
            S.WAITING_FOR_PO_NUMBER.value: self._set_po_number,
        }

    def can_resolve(self, status: str) -> bool:
        return status in self._handlers

    def resolve(self, pending: PendingDraft, answer: Optional[str]) -> Optional[Draft]:
        """
        Merge `answer` into the pending draft.

        Returns:
            The merged draft (ready_to_execute=True, to be re-validated),
            a general-chat prompt when the answer is empty, or None when
            the status is unknown.
        """
        answer = (answer or "").strip()
        if not answer:
            return Draft.chat(EMPTY_ANSWER_MESSAGE)

        handler = self._handlers.get(pending.status)
        if handler is None:
            return None

        data = dict(pending.data)
        if pending.status == MissingFieldStatus.WAITING_FOR_PAYMENT_METHOD.value:
            self._set_payment_method(data, answer, pending.intent)
        else:
            handler(data, answer)

        return Draft(
            intent=pending.intent,
            confidence=0.99,
            ready_to_execute=True,
            data=data,
            message=self.completion_message(pending.intent, data),
        )

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    @staticmethod
    def _setter(key: str) -> Handler:
        def handler(data: dict[str, Any], answer: str) -> None:
            data[key] = answer
        return handler

    @staticmethod
    def _item_number(key: str) -> Handler:
        """Numeric item field; an unparseable answer leaves the old value."""
        def handler(data: dict[str, Any], answer: str) -> None:
            number = to_decimal(answer)
            item = first_item(data) or {}
            _update_first_item(data, **{key: number if number is not None else item.get(key)})
        return handler

    @staticmethod
    def _set_partner(data: dict[str, Any], answer: str) -> None:
        data["partnerName"] = answer

    @staticmethod
    def _set_product(data: dict[str, Any], answer: str) -> None:
        _update_first_item(data, productName=answer)

    @staticmethod
    def _set_salary_amount(data: dict[str, Any], answer: str) -> None:
        number = to_decimal(answer)
        if number is not None:
            data["amount"] = number

    @staticmethod
    def _set_salary_type(data: dict[str, Any], answer: str) -> None:
        lowered = answer.lower()
        if "advance" in lowered:
            data["salaryType"] = "Advance"
        elif "month" in lowered:
            data["salaryType"] = "Monthly"
        else:
            data["salaryType"] = answer

    def _set_sku(self, data: dict[str, Any], answer: str) -> None:
        sku = answer
        if answer.lower() in _AUTO_SKU_ANSWERS:
            sku = f"{self._sku_prefix}-{int(self._clock() * 1000)}"
        _update_first_item(data, sku=sku)

    @staticmethod
    def _set_payment_method(
        data: dict[str, Any],
        answer: str,
        intent: Optional[Intent] = None,
    ) -> None:
        # Payments keep their settlement method under `method`
        key = "method" if intent in (Intent.RECEIVE_PAYMENT, Intent.PAY_BILL) else "paymentMethod"
        data[key] = classify_payment_answer(answer)

    @staticmethod
    def _set_po_number(data: dict[str, Any], answer: str) -> None:
        data["poNumber"] = re.sub(r"\s+", "-", answer.strip()).upper()

    # -------------------------------------------------------------------------
    # Completion summaries
    # -------------------------------------------------------------------------

    def completion_message(self, intent: Intent, data: dict[str, Any]) -> str:
        """Human-readable summary of a merged draft."""
        if intent == Intent.CREATE_PURCHASE_ORDER:
            return self._purchase_order_summary(data)
        if intent == Intent.CONVERT_PO_TO_BILL:
            return (
                "Purchase Order reference received. Ready to convert PO to Bill "
                "with inventory and accounting updates."
            )
        if intent in (Intent.CREATE_INVOICE, Intent.CREATE_BILL):
            item = first_item(data) or {}
            kind = "Sales invoice" if intent == Intent.CREATE_INVOICE else "Purchase bill"
            quantity = to_decimal(item.get("quantity"))
            price = to_decimal(item.get("price"))
            total = quantity * price if quantity is not None and price is not None else None
            return (
                f"{kind} draft completed\n"
                f"• Party: {data.get('partnerName') or 'Unknown'}\n"
                f"• Item: {item.get('productName') or item.get('description') or 'Item'}"
                f" | SKU: {item.get('sku') or 'N/A'}"
                f" Qty: {format_number(quantity)} × {format_number(price)}"
                f" = {format_number(total)} {self._currency}\n"
                f"• Payment: {data.get('paymentMethod') or 'N/A'}"
            )
        if intent == Intent.RUN_PAYROLL:
            return f"Payroll draft completed for {data.get('month')} {data.get('year')}."
        if intent == Intent.RECORD_SALARY_PAYMENT:
            return (
                f"Salary payment draft completed: {data.get('employeeName')} "
                f"{format_number(data.get('amount'))} {self._currency} "
                f"({data.get('salaryType')}, {data.get('paymentMethod')}) "
                f"for {data.get('period')}."
            )
        if intent in (Intent.RECEIVE_PAYMENT, Intent.PAY_BILL):
            direction = "from" if intent == Intent.RECEIVE_PAYMENT else "to"
            return (
                f"Payment draft completed: {format_number(data.get('amount'))} "
                f"{self._currency} {direction} {data.get('partnerName')} "
                f"via {data.get('method')}."
            )
        return "Transaction draft completed and ready to record."

    def _purchase_order_summary(self, data: dict[str, Any]) -> str:
        """Itemized PO summary; also refreshes line totals in `data`."""
        items = list(data.get("items")) if isinstance(data.get("items"), list) else []
        first = dict(items[0]) if items and isinstance(items[0], dict) else {}

        quantity = to_decimal(first.get("quantity"))
        unit_price = to_decimal(first.get("unitPrice"))
        line_total = None
        if quantity is not None and unit_price is not None:
            line_total = quantity * unit_price
            first["lineTotal"] = line_total
            items[0] = first
            data["items"] = items

        po_total = Decimal("0")
        for item in items:
            if not isinstance(item, dict):
                continue
            total = to_decimal(item.get("lineTotal"))
            if total is None:
                q, p = to_decimal(item.get("quantity")), to_decimal(item.get("unitPrice"))
                total = q * p if q is not None and p is not None else Decimal("0")
            po_total += total

        return (
            "Purchase Order Draft Completed\n"
            f"• Supplier: {data.get('supplierName') or 'Unknown Supplier'}\n"
            f"• Item: {first.get('productName') or first.get('description') or 'Item'}"
            f" | SKU: {first.get('sku') or 'N/A'}"
            f" Qty: {format_number(quantity)} × {format_number(unit_price)}"
            f" = {format_number(line_total)}\n"
            f"• PO Total: {format_number(po_total)} {self._currency}\n"
            "• Status: DRAFT (Pending Save)\n"
            "(No accounting or inventory entries will be posted until goods are received.)"
        )
