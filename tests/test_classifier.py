"""Tests for the rule-based intent classifier."""

import pytest
from datetime import date
from decimal import Decimal

from erp_assistant.extraction.classifier import GREETING_MESSAGE, IntentClassifier, is_greeting
from erp_assistant.models.draft import Intent


@pytest.fixture
def classifier():
    return IntentClassifier(today=lambda: date(2025, 1, 15))


class TestGreetings:
    """Tests for greeting and help detection."""

    @pytest.mark.parametrize("text", ["hi", "Hello!", "salam", "help", "what can you do?"])
    def test_greetings(self, text):
        """Test greetings and help requests."""
        assert is_greeting(text)

    def test_not_greeting(self):
        """Test transactions are not greetings."""
        assert not is_greeting("sold 10 chairs")

    def test_greeting_classifies_as_chat(self, classifier):
        """Test greetings never start a transaction."""
        draft = classifier.classify("hello")
        assert draft.intent == Intent.GENERAL_CHAT
        assert draft.message == GREETING_MESSAGE
        assert draft.ready_to_execute is False

    def test_empty_message(self, classifier):
        """Test empty input."""
        assert classifier.classify("   ").intent == Intent.GENERAL_CHAT

    def test_unmatched_message(self, classifier):
        """Test text without domain keywords falls back to general chat."""
        draft = classifier.classify("what is the weather like")
        assert draft.intent == Intent.GENERAL_CHAT
        assert draft.data == {}


class TestJournalTemplates:
    """Tests for capital and expense journals."""

    def test_capital_investment_in_lac(self, classifier):
        """Test 'invest 5 lac' becomes a balanced capital journal."""
        draft = classifier.classify("invest 5 lac")
        assert draft.intent == Intent.CREATE_JOURNAL
        assert draft.ready_to_execute is True
        debit, credit = draft.data["entries"]
        assert debit["accountCode"] == "101"
        assert debit["debit"] == Decimal("500000")
        assert credit["accountCode"] == "301"
        assert credit["credit"] == Decimal("500000")
        assert draft.data["date"] == "2025-01-15"

    def test_capital_without_amount(self, classifier):
        """Test capital without an amount asks for it."""
        draft = classifier.classify("i want to invest capital")
        assert draft.intent == Intent.CREATE_JOURNAL
        assert draft.ready_to_execute is False
        assert "amount invested" in draft.message

    def test_rent_expense(self, classifier):
        """Test rent debits 502 and credits cash."""
        draft = classifier.classify("rent 50000")
        assert draft.intent == Intent.CREATE_JOURNAL
        debit, credit = draft.data["entries"]
        assert (debit["accountCode"], debit["debit"]) == ("502", Decimal("50000"))
        assert (credit["accountCode"], credit["credit"]) == ("101", Decimal("50000"))

    def test_utility_expense(self, classifier):
        """Test electricity bills debit utilities."""
        draft = classifier.classify("paid electricity bill 3000")
        assert draft.data["entries"][0]["accountCode"] == "503"

    def test_general_expense(self, classifier):
        """Test other expenses debit general expense."""
        draft = classifier.classify("office expenses 1200")
        assert draft.data["entries"][0]["accountCode"] == "506"

    def test_bare_journal(self, classifier):
        """Test a bare journal request is not ready."""
        draft = classifier.classify("create journal entry")
        assert draft.intent == Intent.CREATE_JOURNAL
        assert draft.ready_to_execute is False


class TestTradeDocuments:
    """Tests for sales, purchases and purchase orders."""

    def test_sale(self, classifier):
        """Test a complete cash sale."""
        draft = classifier.classify("sold 10 widgets to Acme at 100 on cash sku SKU-1")
        assert draft.intent == Intent.CREATE_INVOICE
        assert draft.data["partnerName"] == "Acme"
        assert draft.data["paymentMethod"] == "Cash"
        item = draft.data["items"][0]
        assert item["productName"] == "Widgets"
        assert item["quantity"] == Decimal("10")
        assert item["price"] == Decimal("100")
        assert item["sku"] == "SKU-1"
        assert item["accountCode"] == "401"

    def test_sale_of_stock_is_not_purchase(self, classifier):
        """Test stock being sold is a sale."""
        draft = classifier.classify("sold 5 units of stock to ali")
        assert draft.intent == Intent.CREATE_INVOICE

    def test_purchase(self, classifier):
        """Test an inventory purchase becomes a bill."""
        draft = classifier.classify("bought 5 units of steel from acme at 200 on credit sku ST-1")
        assert draft.intent == Intent.CREATE_BILL
        assert draft.data["partnerName"] == "Acme"
        assert draft.data["paymentMethod"] == "Credit"
        item = draft.data["items"][0]
        assert item["productName"] == "Steel"
        assert item["quantity"] == Decimal("5")
        assert item["price"] == Decimal("200")
        assert item["sku"] == "ST-1"
        assert item["accountCode"] == "140"

    def test_purchase_lot_price(self, classifier):
        """Test a bare amount is the price when no quantity is stated."""
        draft = classifier.classify("bought chairs for 5000 from ikea")
        item = draft.data["items"][0]
        assert item["quantity"] == Decimal("1")
        assert item["price"] == Decimal("5000")
        assert item["productName"] == "Chairs"
        assert draft.data["partnerName"] == "Ikea"

    def test_purchase_order(self, classifier):
        """Test a purchase order carries unit price and line total."""
        draft = classifier.classify("purchase order for 10 units of steel at 50 from acme")
        assert draft.intent == Intent.CREATE_PURCHASE_ORDER
        assert draft.data["supplierName"] == "Acme"
        assert draft.data["expectedDeliveryDate"] is None
        item = draft.data["items"][0]
        assert item["productName"] == "Steel"
        assert item["unitPrice"] == Decimal("50")
        assert item["lineTotal"] == Decimal("500")

    def test_purchase_order_with_punctuation(self, classifier):
        """Test a colon after the trigger does not hide the count."""
        draft = classifier.classify("purchase order: 10 chairs @ 50 supplier Ali sku c1")
        assert draft.data["supplierName"] == "Ali"
        item = draft.data["items"][0]
        assert item["productName"] == "Chairs"
        assert item["quantity"] == Decimal("10")
        assert item["lineTotal"] == Decimal("500")

    def test_purchase_order_is_not_a_bill(self, classifier):
        """Test PO phrasing never reaches the purchase rule."""
        draft = classifier.classify("create po to buy 3 laptops")
        assert draft.intent == Intent.CREATE_PURCHASE_ORDER

    def test_goods_received(self, classifier):
        """Test goods received converts a purchase order."""
        draft = classifier.classify("goods received for po-2025-0001")
        assert draft.intent == Intent.CONVERT_PO_TO_BILL
        assert draft.data == {"poNumber": "PO-2025-0001"}

    def test_bare_invoice(self, classifier):
        """Test a bare invoice request has no data."""
        draft = classifier.classify("make an invoice")
        assert draft.intent == Intent.CREATE_INVOICE
        assert draft.data == {}
        assert draft.ready_to_execute is False


class TestPayrollAndPayments:
    """Tests for payroll, salary and payment phrasing."""

    def test_payroll(self, classifier):
        """Test payroll month and year."""
        draft = classifier.classify("run payroll for january 2025")
        assert draft.intent == Intent.RUN_PAYROLL
        assert draft.data == {"month": "January", "year": "2025"}

    def test_salary_payment(self, classifier):
        """Test a complete salary payment."""
        draft = classifier.classify("paid monthly salary 50000 to ali for january 2025 by bank")
        assert draft.intent == Intent.RECORD_SALARY_PAYMENT
        assert draft.data["employeeName"] == "Ali"
        assert draft.data["amount"] == Decimal("50000")
        assert draft.data["salaryType"] == "Monthly"
        assert draft.data["paymentMethod"] == "Bank"
        assert draft.data["period"] == "January 2025"

    def test_salary_employee_stops_at_as(self, classifier):
        """Test 'as salary' is not part of the employee name."""
        draft = classifier.classify("paid 5000 to Ahmed as salary")
        assert draft.intent == Intent.RECORD_SALARY_PAYMENT
        assert draft.data["employeeName"] == "Ahmed"
        assert draft.data["amount"] == Decimal("5000")

    def test_salary_is_not_expense(self, classifier):
        """Test salary text never becomes an expense journal."""
        draft = classifier.classify("salary expense 40000")
        assert draft.intent == Intent.RECORD_SALARY_PAYMENT

    def test_receive_payment(self, classifier):
        """Test money received from a customer."""
        draft = classifier.classify("received payment 5000 from ali khan by cash")
        assert draft.intent == Intent.RECEIVE_PAYMENT
        assert draft.data["partnerName"] == "Ali Khan"
        assert draft.data["amount"] == Decimal("5000")
        assert draft.data["method"] == "Cash"

    def test_pay_bill(self, classifier):
        """Test money paid to a supplier."""
        draft = classifier.classify("paid supplier acme 20000 via bank")
        assert draft.intent == Intent.PAY_BILL
        assert draft.data["partnerName"] == "Acme"
        assert draft.data["amount"] == Decimal("20000")
        assert draft.data["method"] == "Bank"
