"""
Intent Classifier (rule-based drafting path)

Inspects a message for domain phrases and dispatches to the matching
extractor bundle, producing a candidate Draft.

DESIGN DECISION: This is the source of truth for drafting. The language
model path only proposes; whatever it proposes goes through the same
requirement validator as the drafts built here.

CRITICAL: Rule order matters because phrase categories overlap:
- greetings short-circuit before anything else
- goods received ("convert po to bill") is checked before purchase orders
- purchase orders are checked before generic purchases, and generic
  purchase detection explicitly excludes purchase-order phrasing
- expenses never match salary or payroll text
"""

import re
from datetime import date
from decimal import Decimal
from typing import Callable, NamedTuple, Optional

from erp_assistant.extraction.extractors import (
    extract_amount,
    extract_month,
    extract_party_name,
    extract_payment_method,
    extract_period,
    extract_po_number,
    extract_product_name,
    extract_salary_type,
    extract_settlement_method,
    extract_sku,
    extract_unit_price,
    extract_year,
    match_bare_amount,
    match_quantity,
    normalize_text,
    strip_period,
)
from erp_assistant.models.draft import Draft, Intent, JournalLine, LineItem


GREETING_MESSAGE = "Please enter a business transaction to record."

_GREETINGS = {"hi", "hello", "hey", "salam", "salaam"}
_HELP_PHRASES = ("kya haal", "help", "what can you do", "explain invoice", "explain bill")

CASH_ACCOUNT = ("101", "Cash")
CAPITAL_ACCOUNT = ("301", "Capital")
INVENTORY_ACCOUNT = "140"
SALES_ACCOUNT = "401"


def is_greeting(text: str) -> bool:
    """Greeting or help request that should never start a transaction."""
    normalized = normalize_text(text)
    if normalized.strip("!.? ") in _GREETINGS:
        return True
    return any(phrase in normalized for phrase in _HELP_PHRASES)


def _has(text: str, *patterns: str) -> bool:
    return any(re.search(pattern, text) for pattern in patterns)


class Rule(NamedTuple):
    """A named classification rule: a phrase test plus a draft builder."""
    name: str
    matches: Callable[[str], bool]
    build: Callable[[str, str], Optional[Draft]]


class IntentClassifier:
    """
    Ordered rule cascade turning a message into a candidate Draft.

    A builder may return None to let the cascade fall through to the next
    rule (e.g. "paid rent" without an amount is not an expense).
    """

    def __init__(
        self,
        currency: str = "PKR",
        today: Callable[[], date] = date.today,
    ):
        self._currency = currency
        self._today = today
        self.rules: list[Rule] = [
            Rule("goods_received", self._is_goods_received, self._build_goods_received),
            Rule("purchase_order", self._is_purchase_order, self._build_purchase_order),
            Rule("payroll", self._is_payroll, self._build_payroll),
            Rule("salary_payment", self._is_salary_payment, self._build_salary_payment),
            Rule("receive_payment", self._is_receive_payment, self._build_receive_payment),
            Rule("pay_bill", self._is_pay_bill, self._build_pay_bill),
            Rule("capital", self._is_capital, self._build_capital),
            Rule("expense", self._is_expense, self._build_expense),
            Rule("purchase", self._is_purchase, self._build_purchase),
            Rule("sale", self._is_sale, self._build_sale),
            Rule("journal", self._is_bare_journal, self._build_bare_journal),
            Rule("invoice", lambda t: _has(t, r"\binvoice\b"), self._build_bare_invoice),
            Rule("bill", lambda t: _has(t, r"\bbill\b"), self._build_bare_bill),
        ]

    def classify(self, text: str) -> Draft:
        """Classify one message. Never raises for any input text."""
        normalized = normalize_text(text)
        if not normalized or is_greeting(normalized):
            return Draft.chat(GREETING_MESSAGE)

        for rule in self.rules:
            if rule.matches(normalized):
                draft = rule.build(normalized, text.strip())
                if draft is not None:
                    return draft

        return Draft.chat(GREETING_MESSAGE, confidence=None)

    def _date(self) -> str:
        return self._today().isoformat()

    # -------------------------------------------------------------------------
    # Purchase orders and goods received
    # -------------------------------------------------------------------------

    @staticmethod
    def _is_goods_received(text: str) -> bool:
        return _has(
            text,
            r"\breceive goods\b", r"\bgoods received\b",
            r"\bconvert po to bill\b", r"\bconvert purchase order\b",
        )

    def _build_goods_received(self, text: str, raw: str) -> Draft:
        po_number = extract_po_number(text)
        return Draft(
            intent=Intent.CONVERT_PO_TO_BILL,
            confidence=0.9,
            ready_to_execute=po_number is not None,
            data={"poNumber": po_number} if po_number else {},
            message=(
                f"Goods received against {po_number}. Ready to convert Purchase Order "
                "to Bill with full accounting and inventory update."
                if po_number
                else "Please provide the Purchase Order number (e.g., PO-2025-0001) "
                "to convert it to a bill."
            ),
        )

    @staticmethod
    def _is_purchase_order(text: str) -> bool:
        return _has(
            text,
            r"\bpurchase order\b", r"^po\s", r"\bpo for\b", r"\bcreate po\b",
            r"\border goods\b", r"\bsend order to vendor\b",
        )

    def _build_purchase_order(self, text: str, raw: str) -> Draft:
        quantity = match_quantity(text)
        quantity = quantity if quantity is not None else Decimal("1")
        unit_price = extract_unit_price(text)
        supplier = extract_party_name(text, ("for", "to", "from", "supplier", "vendor"))
        product = extract_product_name(
            text,
            (r"\bpurchase order\b", r"\bcreate po\b", r"^po\b", r"\border goods\b",
             r"\bsend order to vendor\b"),
            fallback="Item",
            exclude=(supplier,) if supplier else (),
        )
        line_total = quantity * unit_price if unit_price is not None else None
        item = LineItem(
            product_name=product,
            description=raw,
            quantity=quantity,
            unit_price=unit_price,
            sku=extract_sku(raw),
            line_total=line_total,
        )

        if line_total is not None:
            message = (
                f"Purchase Order detected: {quantity} × {unit_price} = {line_total} "
                f"{self._currency} for {supplier or 'Unknown Supplier'}. No accounting "
                "or inventory entries will be posted until goods are received."
            )
        else:
            message = f"Purchase Order detected for {supplier or 'Unknown Supplier'}."

        return Draft(
            intent=Intent.CREATE_PURCHASE_ORDER,
            confidence=0.9,
            ready_to_execute=True,
            data={
                "supplierName": supplier,
                "date": self._date(),
                "expectedDeliveryDate": None,
                "items": [item.to_payload()],
                "currency": self._currency,
            },
            message=message,
        )

    # -------------------------------------------------------------------------
    # Payroll and salaries
    # -------------------------------------------------------------------------

    @staticmethod
    def _is_payroll(text: str) -> bool:
        return _has(text, r"\bpayroll\b")

    def _build_payroll(self, text: str, raw: str) -> Draft:
        data = {}
        month = extract_month(text)
        year = extract_year(text)
        if month:
            data["month"] = month
        if year:
            data["year"] = year
        period = " ".join(part for part in (month, year) if part)
        return Draft(
            intent=Intent.RUN_PAYROLL,
            confidence=0.85,
            ready_to_execute=True,
            data=data,
            message=f"Payroll run detected{' for ' + period if period else ''}.",
        )

    @staticmethod
    def _is_salary_payment(text: str) -> bool:
        return _has(text, r"\bsalar(?:y|ies)\b")

    def _build_salary_payment(self, text: str, raw: str) -> Draft:
        employee = extract_party_name(text, ("to", "employee"))
        amount = match_bare_amount(strip_period(text))
        data = {
            "employeeName": employee,
            "amount": amount,
            "salaryType": extract_salary_type(text),
            "paymentMethod": extract_settlement_method(text),
            "period": extract_period(text),
        }
        return Draft(
            intent=Intent.RECORD_SALARY_PAYMENT,
            confidence=0.85,
            ready_to_execute=True,
            data={key: value for key, value in data.items() if value is not None},
            message=f"Salary payment detected for {employee or 'Unknown Employee'}.",
        )

    # -------------------------------------------------------------------------
    # Payments
    # -------------------------------------------------------------------------

    @staticmethod
    def _is_receive_payment(text: str) -> bool:
        return _has(
            text,
            r"\breceived?\s+(?:a\s+)?payment\b", r"\bpayment\s+received\b",
            r"\bcollected\b", r"\bcustomer\s+paid\b",
        )

    def _build_receive_payment(self, text: str, raw: str) -> Draft:
        return self._build_payment(
            Intent.RECEIVE_PAYMENT, text, ("from", "customer"), "Payment received"
        )

    @staticmethod
    def _is_pay_bill(text: str) -> bool:
        return _has(
            text,
            r"\b(?:pay|paid|paying)\s+(?:the\s+)?(?:supplier|vendor)\b",
            r"\b(?:supplier|vendor)\s+payment\b",
            r"\b(?:pay|paid)\s+(?:the\s+)?bill\s+(?:of|to|for)\b",
        )

    def _build_pay_bill(self, text: str, raw: str) -> Draft:
        return self._build_payment(
            Intent.PAY_BILL, text, ("supplier", "vendor", "to", "of"), "Bill payment"
        )

    def _build_payment(
        self,
        intent: Intent,
        text: str,
        party_triggers: tuple[str, ...],
        label: str,
    ) -> Draft:
        party = extract_party_name(text, party_triggers)
        amount = match_bare_amount(text)
        data = {
            "partnerName": party,
            "amount": amount,
            "method": extract_settlement_method(text),
            "date": self._date(),
        }
        return Draft(
            intent=intent,
            confidence=0.85,
            ready_to_execute=True,
            data={key: value for key, value in data.items() if value is not None},
            message=f"{label} of {amount or 0} detected for {party or 'Unknown Party'}.",
        )

    # -------------------------------------------------------------------------
    # Fixed journal templates
    # -------------------------------------------------------------------------

    @staticmethod
    def _is_capital(text: str) -> bool:
        return _has(text, r"\binvest", r"\bcapital\b", r"\bstarted business\b", r"\bfunding\b")

    def _build_capital(self, text: str, raw: str) -> Draft:
        amount = match_bare_amount(text) or Decimal("0")
        if amount <= 0:
            return Draft(
                intent=Intent.CREATE_JOURNAL,
                confidence=0.8,
                ready_to_execute=False,
                data={},
                message="Please provide the amount invested in the business.",
            )

        entries = [
            JournalLine(account_code=CASH_ACCOUNT[0], account_name=CASH_ACCOUNT[1], debit=amount),
            JournalLine(account_code=CAPITAL_ACCOUNT[0], account_name=CAPITAL_ACCOUNT[1], credit=amount),
        ]
        return Draft(
            intent=Intent.CREATE_JOURNAL,
            confidence=0.95,
            ready_to_execute=True,
            data={
                "description": "Capital Investment",
                "date": self._date(),
                "entries": [entry.to_payload() for entry in entries],
            },
            message=(
                "Transaction Detected:\n"
                "• Type: Capital Investment\n"
                f"• Amount: {amount}\n"
                "• Mode (Cash / Credit): Cash\n"
                "• Party: Owner\n\n"
                "Accounting Entry:\n"
                f"• Debit: Cash (101) {amount}\n"
                f"• Credit: Capital (301) {amount}\n\n"
                "Inventory Update:\n"
                "• Stock In / Stock Out: None\n\n"
                "Status:\n"
                "Ready to record."
            ),
        )

    @staticmethod
    def _is_expense(text: str) -> bool:
        return (
            _has(text, r"\brent\b", r"\bexpenses?\b", r"\butilit(?:y|ies)\b", r"\bbills?\b")
            and not _has(text, r"\bsalar(?:y|ies)\b", r"\bpayroll\b")
        )

    def _build_expense(self, text: str, raw: str) -> Optional[Draft]:
        amount = match_bare_amount(text)
        if amount is None or amount <= 0:
            return None

        if _has(text, r"\brent\b"):
            code, name = "502", "Rent Expense"
        elif _has(text, r"\butilit(?:y|ies)\b", r"\belectric"):
            code, name = "503", "Utilities Expense"
        else:
            code, name = "506", "General Expense"

        entries = [
            JournalLine(account_code=code, account_name=name, debit=amount),
            JournalLine(account_code=CASH_ACCOUNT[0], account_name=CASH_ACCOUNT[1], credit=amount),
        ]
        return Draft(
            intent=Intent.CREATE_JOURNAL,
            confidence=0.9,
            ready_to_execute=True,
            data={
                "description": raw or "Expense Payment",
                "date": self._date(),
                "entries": [entry.to_payload() for entry in entries],
            },
            message=f"Expense payment of {amount} detected for {name}.",
        )

    # -------------------------------------------------------------------------
    # Purchases and sales
    # -------------------------------------------------------------------------

    @staticmethod
    def _is_purchase(text: str) -> bool:
        if _has(text, r"\bpurchase order\b", r"\bpo\b"):
            return False
        if _has(text, r"\bpurchased?\b", r"\bbuy\b", r"\bbought\b"):
            return True
        # "sold 5 units of stock" is a sale, not a stock purchase
        return _has(text, r"\binventory\b", r"\bstock\b") and not IntentClassifier._is_sale(text)

    def _build_purchase(self, text: str, raw: str) -> Optional[Draft]:
        quantity = match_quantity(text)
        unit_price = extract_unit_price(text)
        vendor = extract_party_name(text, ("from", "vendor", "supplier"))
        sku = extract_sku(raw)

        if unit_price is not None:
            price = unit_price
        elif quantity is None:
            # "bought chairs for 5000": the bare amount is the price of one lot
            price = match_bare_amount(text)
        else:
            price = None
        qty = quantity if quantity is not None else Decimal("1")

        if price is None and quantity is None and not vendor and not sku:
            return None

        item = LineItem(
            product_name=extract_product_name(
                text,
                (r"\bpurchased?\b", r"\bbuy\b", r"\bbought\b"),
                fallback="Inventory Item",
                exclude=(vendor,) if vendor else (),
            ),
            description=raw,
            quantity=qty,
            price=price,
            account_code=INVENTORY_ACCOUNT,
            sku=sku,
        )
        amount = qty * price if price is not None else None
        return Draft(
            intent=Intent.CREATE_BILL,
            confidence=0.9,
            ready_to_execute=True,
            data={
                "partnerName": vendor,
                "date": self._date(),
                "paymentMethod": extract_payment_method(text),
                "items": [item.to_payload()],
            },
            message=(
                f"Inventory purchase of {amount} detected for {vendor or 'Unknown Vendor'}."
                if amount is not None
                else f"Inventory purchase detected for {vendor or 'Unknown Vendor'}."
            ),
        )

    @staticmethod
    def _is_sale(text: str) -> bool:
        return _has(text, r"\bsold\b", r"\bsale\b", r"\bsell\b", r"\binvoice customer\b")

    def _build_sale(self, text: str, raw: str) -> Draft:
        quantity = match_quantity(text)
        unit_price = extract_unit_price(text)
        customer = extract_party_name(text, ("to", "customer"))
        qty = quantity if quantity is not None else Decimal("1")
        amount = extract_amount(text, quantity, unit_price) if unit_price is not None else None

        item = LineItem(
            product_name=extract_product_name(
                text,
                (r"\bsold\b", r"\bsale\b(?:\s+of\b)?", r"\bsell\b", r"\binvoice customer\b"),
                fallback="Service/Item",
                exclude=(customer,) if customer else (),
            ),
            description=raw,
            quantity=qty,
            price=unit_price,
            account_code=SALES_ACCOUNT,
            sku=extract_sku(raw),
        )
        return Draft(
            intent=Intent.CREATE_INVOICE,
            confidence=0.9,
            ready_to_execute=True,
            data={
                "partnerName": customer,
                "date": self._date(),
                "paymentMethod": extract_payment_method(text),
                "items": [item.to_payload()],
            },
            message=(
                f"Sale of {amount} detected for customer {customer or 'Unknown Customer'}."
                if amount
                else f"Sales transaction detected for customer {customer or 'Unknown Customer'}."
            ),
        )

    # -------------------------------------------------------------------------
    # Bare keywords
    # -------------------------------------------------------------------------

    @staticmethod
    def _is_bare_journal(text: str) -> bool:
        return _has(text, r"\bgj\b", r"\bjournal\b", r"\brecord\b")

    @staticmethod
    def _build_bare_journal(text: str, raw: str) -> Draft:
        return Draft(
            intent=Intent.CREATE_JOURNAL,
            confidence=0.6,
            ready_to_execute=False,
            data={},
            message="Please provide debit and credit lines including account codes and amounts.",
        )

    @staticmethod
    def _build_bare_invoice(text: str, raw: str) -> Draft:
        return Draft(
            intent=Intent.CREATE_INVOICE,
            confidence=0.6,
            ready_to_execute=False,
            data={},
            message="Please provide the customer name and item details to create the invoice.",
        )

    @staticmethod
    def _build_bare_bill(text: str, raw: str) -> Draft:
        return Draft(
            intent=Intent.CREATE_BILL,
            confidence=0.6,
            ready_to_execute=False,
            data={},
            message="Please provide the vendor name and item details to create the bill.",
        )
