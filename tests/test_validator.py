"""Tests for requirement validation and status mapping."""

import copy

import pytest
from decimal import Decimal

from erp_assistant.models.draft import Draft, FieldLabel, Intent, MissingFieldStatus
from erp_assistant.validation.validator import (
    GENERIC_MISSING_MESSAGE,
    PO_DELIVERY_NOTE,
    RequirementValidator,
    missing_fields,
    question_for,
    status_for,
    summarize,
)


def invoice_data(**overrides):
    data = {
        "partnerName": "Acme",
        "paymentMethod": "Cash",
        "items": [{"productName": "Widgets", "quantity": 10, "price": 100, "sku": "SKU-1"}],
    }
    data.update(overrides)
    return data


def po_data(**item_overrides):
    item = {"productName": "Steel", "quantity": 10, "unitPrice": 50, "sku": "ST-1"}
    item.update(item_overrides)
    return {"supplierName": "Acme", "items": [item]}


class TestMissingFields:
    """Tests for the per-intent requirement tables."""

    def test_complete_invoice(self):
        """Test a complete invoice has nothing missing."""
        assert missing_fields(Intent.CREATE_INVOICE, invoice_data()) == []

    def test_invoice_order_of_missing_fields(self):
        """Test labels come back in check order."""
        data = invoice_data(partnerName=None, paymentMethod="")
        data["items"][0]["sku"] = None
        assert missing_fields(Intent.CREATE_INVOICE, data) == [
            "customer name", "sku", "cash or credit",
        ]

    def test_bill_labels(self):
        """Test bills use supplier and cost labels."""
        data = {"items": [{"productName": "Steel", "quantity": 0, "price": None}]}
        assert missing_fields(Intent.CREATE_BILL, data) == [
            "supplier name", "quantity", "cost price or amount", "sku", "cash or credit",
        ]

    def test_empty_items(self):
        """Test missing items report item details."""
        missing = missing_fields(Intent.CREATE_INVOICE, {"partnerName": "Acme", "items": []})
        assert FieldLabel.ITEM_DETAILS.value in missing

    def test_description_counts_as_name_for_invoices(self):
        """Test invoices accept a description instead of a product name."""
        data = invoice_data()
        data["items"][0] = {"description": "Consulting", "quantity": 1, "price": 10, "sku": "S"}
        assert missing_fields(Intent.CREATE_INVOICE, data) == []

    def test_purchase_order_needs_product_name(self):
        """Test purchase orders do not accept a description as the name."""
        data = po_data(productName=None, description="steel rods")
        assert missing_fields(Intent.CREATE_PURCHASE_ORDER, data) == ["product name"]

    def test_numeric_strings_are_accepted(self):
        """Test numbers given as text."""
        data = po_data(quantity="10", unitPrice="50.5")
        assert missing_fields(Intent.CREATE_PURCHASE_ORDER, data) == []

    def test_wrong_types_count_as_missing(self):
        """Test malformed model output never raises."""
        assert missing_fields(Intent.CREATE_BILL, {"items": "steel"}) == [
            "supplier name", "item details", "cash or credit",
        ]
        assert missing_fields(Intent.RUN_PAYROLL, None) == ["month", "year"]

    def test_intents_without_table(self):
        """Test journals, leads and chat have no requirements."""
        assert missing_fields(Intent.CREATE_JOURNAL, {}) == []
        assert missing_fields(Intent.CREATE_LEAD, {}) == []
        assert missing_fields(Intent.GENERAL_CHAT, {}) == []

    def test_salary_and_payment_tables(self):
        """Test salary and payment labels."""
        assert missing_fields(Intent.RECORD_SALARY_PAYMENT, {}) == [
            "employee name", "salary amount", "salary type", "cash or credit", "salary period",
        ]
        assert missing_fields(Intent.PAY_BILL, {"partnerName": "Acme", "amount": -5}) == [
            "amount", "cash or credit",
        ]
        assert missing_fields(Intent.CONVERT_PO_TO_BILL, {}) == ["po number"]


class TestStatusMapping:
    """Tests for status lookup and question wording."""

    def test_payment_method_is_shared(self):
        """Test 'cash or credit' maps to the same status for every intent."""
        for intent in (Intent.CREATE_INVOICE, Intent.RECORD_SALARY_PAYMENT, Intent.PAY_BILL):
            assert status_for(intent, "cash or credit") == MissingFieldStatus.WAITING_FOR_PAYMENT_METHOD

    def test_intent_specific_status(self):
        """Test the same label maps per intent."""
        assert status_for(Intent.CREATE_BILL, "quantity") == MissingFieldStatus.WAITING_FOR_BILL_QUANTITY
        assert status_for(Intent.CREATE_INVOICE, "quantity") == MissingFieldStatus.WAITING_FOR_INVOICE_QUANTITY
        assert status_for(Intent.CREATE_PURCHASE_ORDER, "sku") == MissingFieldStatus.WAITING_FOR_PO_SKU
        assert status_for(Intent.CREATE_BILL, "sku") == MissingFieldStatus.WAITING_FOR_SKU

    def test_unmapped_combination(self):
        """Test payment amounts have no status."""
        assert status_for(Intent.RECEIVE_PAYMENT, "amount") is None
        assert status_for(Intent.CREATE_BILL, "not a label") is None

    def test_sku_question_names_product(self):
        """Test the SKU question quotes the product."""
        question = question_for(Intent.CREATE_BILL, "sku", {"items": [{"productName": "Steel"}]})
        assert question == 'SKU is missing for product "Steel". Please provide SKU.'

    def test_quantity_questions(self):
        """Test quantity wording per intent."""
        assert question_for(Intent.CREATE_BILL, "quantity", {}) == "Please specify quantity purchased."
        assert question_for(Intent.CREATE_INVOICE, "quantity", {}) == "Please specify quantity sold."

    def test_item_details_question_names_the_document(self):
        """Test the item question matches the document type."""
        assert "for the Sales Invoice." in question_for(Intent.CREATE_INVOICE, "item details", {})
        assert "for the Purchase Bill." in question_for(Intent.CREATE_BILL, "item details", {})
        assert "for the Purchase Order." in question_for(Intent.CREATE_PURCHASE_ORDER, "item details", {})

    def test_summarize(self):
        """Test the running summary of the first item."""
        summary = summarize(po_data())
        assert summary.item == "Steel"
        assert summary.total == Decimal("500")
        assert summarize({}).item is None


class TestRequirementValidator:
    """Tests for RequirementValidator.enforce."""

    @pytest.fixture
    def validator(self):
        return RequirementValidator()

    def test_complete_draft_is_ready(self, validator):
        """Test a complete draft is marked ready."""
        draft = Draft(intent=Intent.CREATE_INVOICE, data=invoice_data(), message="Sale")
        outcome = validator.enforce(draft)
        assert outcome.is_ready
        assert outcome.pending is None
        assert outcome.draft.data == invoice_data()

    def test_idempotent(self, validator):
        """Test validating a validated draft changes nothing."""
        draft = Draft(intent=Intent.CREATE_PURCHASE_ORDER, data=po_data(), message="PO")
        once = validator.enforce(draft).draft
        twice = validator.enforce(once).draft
        assert once == twice
        assert once.message.count(PO_DELIVERY_NOTE) == 1

    def test_model_readiness_is_overridden(self, validator):
        """Test an incomplete draft claiming readiness still gets a question."""
        draft = Draft(intent=Intent.CREATE_BILL, ready_to_execute=True, data={"partnerName": "Acme"})
        outcome = validator.enforce(draft)
        assert outcome.draft.ready_to_execute is False
        assert outcome.draft.intent == Intent.GENERAL_CHAT
        assert outcome.draft.data == {}
        assert outcome.status == MissingFieldStatus.WAITING_FOR_BILL_ITEM

    def test_incomplete_draft_is_parked(self, validator):
        """Test the first missing field drives the pending status."""
        data = po_data(sku=None)
        outcome = validator.enforce(Draft(intent=Intent.CREATE_PURCHASE_ORDER, data=data))
        assert outcome.pending is not None
        assert outcome.pending.status == "waiting_for_po_sku"
        assert outcome.pending.data == data
        assert outcome.pending.summary.total == Decimal("500")
        assert outcome.draft.status == MissingFieldStatus.WAITING_FOR_PO_SKU
        assert outcome.draft.missing == ["sku"]

    def test_only_first_missing_field_is_asked(self, validator):
        """Test all missing fields are kept but one question is asked."""
        outcome = validator.enforce(Draft(intent=Intent.CREATE_PURCHASE_ORDER, data={}))
        assert outcome.missing == ["supplier name", "item details"]
        assert outcome.draft.message == "Supplier name is missing. Please provide supplier name."

    def test_unmapped_field_is_discarded(self, validator):
        """Test a payment without amount is dropped with the generic message."""
        draft = Draft(intent=Intent.RECEIVE_PAYMENT, data={"partnerName": "Ali", "method": "Cash"})
        outcome = validator.enforce(draft)
        assert outcome.discarded is True
        assert outcome.pending is None
        assert outcome.draft.message == GENERIC_MISSING_MESSAGE

    def test_general_chat_passes_through(self, validator):
        """Test chat drafts are untouched."""
        draft = Draft.chat("hi")
        assert validator.enforce(draft).draft == draft

    def test_journal_keeps_own_readiness(self, validator):
        """Test intents without a table keep their readiness."""
        draft = Draft(intent=Intent.CREATE_JOURNAL, ready_to_execute=False, message="Need lines")
        outcome = validator.enforce(draft)
        assert outcome.draft.ready_to_execute is False
        assert outcome.draft.intent == Intent.CREATE_JOURNAL


def complete_data(intent):
    """A payload with every required field present for `intent`."""
    trade_item = {"productName": "Widgets", "quantity": 10, "price": 100, "sku": "SKU-1"}
    payloads = {
        Intent.CREATE_INVOICE: {"partnerName": "Acme", "paymentMethod": "Cash", "items": [trade_item]},
        Intent.CREATE_BILL: {"partnerName": "Acme", "paymentMethod": "Credit", "items": [trade_item]},
        Intent.RECEIVE_PAYMENT: {"partnerName": "Ali", "amount": 5000, "method": "Cash"},
        Intent.PAY_BILL: {"partnerName": "Ali", "amount": 5000, "method": "Bank"},
        Intent.RUN_PAYROLL: {"month": "January", "year": "2025"},
        Intent.RECORD_SALARY_PAYMENT: {
            "employeeName": "Ahmed",
            "amount": 50000,
            "salaryType": "Monthly",
            "paymentMethod": "Bank",
            "period": "January 2025",
        },
        Intent.CREATE_PURCHASE_ORDER: po_data(),
        Intent.CONVERT_PO_TO_BILL: {"poNumber": "PO-2025-0001"},
    }
    return copy.deepcopy(payloads[intent])


def without(data, path):
    """Remove a top-level key, or an `("items", key)` key of the first item."""
    if isinstance(path, tuple):
        del data[path[0]][0][path[1]]
    else:
        del data[path]
    return data


S = MissingFieldStatus

SINGLE_FIELD_CASES = [
    (Intent.CREATE_INVOICE, "partnerName", S.WAITING_FOR_CUSTOMER),
    (Intent.CREATE_INVOICE, "items", S.WAITING_FOR_INVOICE_ITEM),
    (Intent.CREATE_INVOICE, ("items", "productName"), S.WAITING_FOR_INVOICE_PRODUCT),
    (Intent.CREATE_INVOICE, ("items", "quantity"), S.WAITING_FOR_INVOICE_QUANTITY),
    (Intent.CREATE_INVOICE, ("items", "price"), S.WAITING_FOR_INVOICE_PRICE),
    (Intent.CREATE_INVOICE, ("items", "sku"), S.WAITING_FOR_SKU),
    (Intent.CREATE_INVOICE, "paymentMethod", S.WAITING_FOR_PAYMENT_METHOD),
    (Intent.CREATE_BILL, "partnerName", S.WAITING_FOR_SUPPLIER),
    (Intent.CREATE_BILL, "items", S.WAITING_FOR_BILL_ITEM),
    (Intent.CREATE_BILL, ("items", "productName"), S.WAITING_FOR_BILL_PRODUCT),
    (Intent.CREATE_BILL, ("items", "quantity"), S.WAITING_FOR_BILL_QUANTITY),
    (Intent.CREATE_BILL, ("items", "price"), S.WAITING_FOR_BILL_PRICE),
    (Intent.CREATE_BILL, ("items", "sku"), S.WAITING_FOR_SKU),
    (Intent.CREATE_BILL, "paymentMethod", S.WAITING_FOR_PAYMENT_METHOD),
    (Intent.RECEIVE_PAYMENT, "partnerName", S.WAITING_FOR_PARTY),
    (Intent.RECEIVE_PAYMENT, "method", S.WAITING_FOR_PAYMENT_METHOD),
    (Intent.PAY_BILL, "partnerName", S.WAITING_FOR_PARTY),
    (Intent.PAY_BILL, "method", S.WAITING_FOR_PAYMENT_METHOD),
    (Intent.RUN_PAYROLL, "month", S.WAITING_FOR_PAYROLL_MONTH),
    (Intent.RUN_PAYROLL, "year", S.WAITING_FOR_PAYROLL_YEAR),
    (Intent.RECORD_SALARY_PAYMENT, "employeeName", S.WAITING_FOR_SALARY_EMPLOYEE),
    (Intent.RECORD_SALARY_PAYMENT, "amount", S.WAITING_FOR_SALARY_AMOUNT),
    (Intent.RECORD_SALARY_PAYMENT, "salaryType", S.WAITING_FOR_SALARY_TYPE),
    (Intent.RECORD_SALARY_PAYMENT, "paymentMethod", S.WAITING_FOR_PAYMENT_METHOD),
    (Intent.RECORD_SALARY_PAYMENT, "period", S.WAITING_FOR_SALARY_PERIOD),
    (Intent.CREATE_PURCHASE_ORDER, "supplierName", S.WAITING_FOR_PO_SUPPLIER),
    (Intent.CREATE_PURCHASE_ORDER, "items", S.WAITING_FOR_PO_ITEM),
    (Intent.CREATE_PURCHASE_ORDER, ("items", "productName"), S.WAITING_FOR_PO_PRODUCT),
    (Intent.CREATE_PURCHASE_ORDER, ("items", "quantity"), S.WAITING_FOR_PO_QUANTITY),
    (Intent.CREATE_PURCHASE_ORDER, ("items", "unitPrice"), S.WAITING_FOR_PO_PRICE),
    (Intent.CREATE_PURCHASE_ORDER, ("items", "sku"), S.WAITING_FOR_PO_SKU),
    (Intent.CONVERT_PO_TO_BILL, "poNumber", S.WAITING_FOR_PO_NUMBER),
]


class TestSingleMissingField:
    """Tests that dropping one required field asks for exactly that field."""

    @pytest.mark.parametrize("intent", sorted({case[0] for case in SINGLE_FIELD_CASES}, key=lambda i: i.value))
    def test_complete_payload_is_ready(self, intent):
        """Test each complete payload needs no question."""
        outcome = RequirementValidator().enforce(Draft(intent=intent, data=complete_data(intent)))
        assert outcome.is_ready
        assert outcome.status is None

    @pytest.mark.parametrize("intent,path,expected", SINGLE_FIELD_CASES)
    def test_status_names_the_dropped_field(self, intent, path, expected):
        """Test the pending status matches the one removed field."""
        data = without(complete_data(intent), path)
        outcome = RequirementValidator().enforce(Draft(intent=intent, data=data))
        assert outcome.status == expected
        assert len(outcome.missing) == 1
        assert outcome.pending.status == expected.value

    @pytest.mark.parametrize("intent", [Intent.RECEIVE_PAYMENT, Intent.PAY_BILL])
    def test_payment_without_amount_is_discarded(self, intent):
        """Test the one unmapped single-field drop."""
        data = without(complete_data(intent), "amount")
        outcome = RequirementValidator().enforce(Draft(intent=intent, data=data))
        assert outcome.discarded is True
        assert outcome.status is None
