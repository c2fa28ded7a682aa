"""Tests for the invoice draft model."""

from datetime import date

import pytest

from invoicewise.config import InvoiceDefaults
from invoicewise.models.invoice import Invoice, ItemSuggestion, LineItem


class TestNewInvoice:

    def test_defaults(self, invoice):
        assert invoice.from_address == "Your Company\n123 Main St\nAnytown, USA 12345"
        assert invoice.to_address == "Client Company\n456 Oak Ave\nOtherville, USA 54321"
        assert invoice.invoice_number == "001"
        assert invoice.notes == "Thank you for your business!"
        assert invoice.tax_rate == 8.0
        assert invoice.logo is None

    def test_dates(self, invoice):
        assert invoice.issue_date == date(2026, 10, 18)
        assert invoice.due_date == date(2026, 11, 17)

    def test_sample_line_items(self, invoice):
        assert invoice.line_items == [
            LineItem(id=1, quantity=1, description="Web Design Services", amount=1500.0),
            LineItem(id=2, quantity=10, description="Hosting (12 months)", amount=25.0),
        ]

    def test_custom_defaults(self):
        defaults = InvoiceDefaults(payment_terms_days=14, sample_items=[], tax_rate=0)
        invoice = Invoice.new(defaults, today=date(2026, 1, 1))
        assert invoice.due_date == date(2026, 1, 15)
        assert invoice.line_items == []
        assert invoice.tax_rate == 0


class TestLineItemOperations:

    def test_line_item_total(self):
        assert LineItem(id=1, quantity=10, amount=25).total == 250
        assert LineItem(id=1, quantity=None, amount=25).total == 0

    def test_add_line_item_uses_next_id(self, invoice):
        item = invoice.add_line_item()
        assert item == LineItem(id=3, quantity=1, description="", amount=0.0)
        assert invoice.line_items[-1] is item

    def test_add_after_removal_keeps_ids_unique(self, invoice):
        invoice.remove_line_item(1)
        item = invoice.add_line_item()
        assert item.id == 3
        assert [i.id for i in invoice.line_items] == [2, 3]

    def test_add_to_empty_invoice_starts_at_one(self):
        invoice = Invoice()
        assert invoice.add_line_item().id == 1

    def test_remove_unknown_id_is_noop(self, invoice):
        invoice.remove_line_item(99)
        assert len(invoice.line_items) == 2

    def test_update_line_item(self, invoice):
        updated = invoice.update_line_item(2, quantity=12, description="Hosting (1 year)")
        assert updated == LineItem(id=2, quantity=12, description="Hosting (1 year)", amount=25.0)
        assert invoice.get_line_item(2) == updated

    def test_update_unknown_id_returns_none(self, invoice):
        assert invoice.update_line_item(99, amount=1) is None

    def test_update_rejects_id_change(self, invoice):
        with pytest.raises(ValueError, match="id"):
            invoice.update_line_item(1, id=5)

    def test_apply_suggestion_keeps_quantity(self, invoice):
        suggestion = ItemSuggestion(description="Managed hosting, 12 months", amount=29.99)
        item = invoice.apply_suggestion(2, suggestion)
        assert item.description == "Managed hosting, 12 months"
        assert item.amount == 29.99
        assert item.quantity == 10

    def test_apply_suggestion_touches_only_target_row(self, invoice):
        invoice.apply_suggestion(1, ItemSuggestion(description="Logo design", amount=450.0))
        assert invoice.get_line_item(2).description == "Hosting (12 months)"

    def test_to_rows(self, invoice):
        rows = invoice.to_rows()
        assert rows[1] == {
            "Description": "Hosting (12 months)",
            "Quantity": 10,
            "Price": 25.0,
            "Total": 250.0,
        }


def test_item_suggestion_to_dict():
    assert ItemSuggestion("Hosting", 25.0).to_dict() == {"description": "Hosting", "amount": 25.0}
