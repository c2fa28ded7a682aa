"""
Data models for invoice drafts and line item suggestions.

The invoice lives only in the UI session: nothing here is persisted.
"""

from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Optional

from invoicewise.config import InvoiceDefaults


@dataclass
class ItemSuggestion:
    """A candidate description and amount for a line item."""
    description: str
    amount: float

    def to_dict(self) -> dict:
        return {"description": self.description, "amount": self.amount}


@dataclass
class SuggestionResult:
    """Outcome of parsing one model reply."""
    success: bool
    suggestions: list[ItemSuggestion] = field(default_factory=list)
    raw_response: Optional[str] = None
    provider_used: Optional[str] = None
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class LineItem:
    """A single invoice row."""
    id: int
    quantity: float = 1
    description: str = ""
    amount: float = 0.0

    @property
    def total(self) -> float:
        return (self.quantity or 0) * (self.amount or 0)


@dataclass
class Invoice:
    """
    Invoice draft as edited in the form.

    Dates are optional because the user can clear either picker.
    Tax rate is a percentage (8 means 8%).
    """
    from_address: str = ""
    to_address: str = ""
    invoice_number: str = ""
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    line_items: list[LineItem] = field(default_factory=list)
    notes: str = ""
    tax_rate: float = 0.0
    logo: Optional[str] = None  # data: URL

    @classmethod
    def new(cls, defaults: Optional[InvoiceDefaults] = None, today: Optional[date] = None) -> "Invoice":
        """Build the starting draft shown when the form first opens."""
        defaults = defaults or InvoiceDefaults()
        today = today or date.today()
        items = [
            LineItem(id=i, quantity=quantity, description=description, amount=amount)
            for i, (quantity, description, amount) in enumerate(defaults.sample_items, start=1)
        ]
        return cls(
            from_address=defaults.from_address,
            to_address=defaults.to_address,
            invoice_number=defaults.invoice_number,
            issue_date=today,
            due_date=today + timedelta(days=defaults.payment_terms_days),
            line_items=items,
            notes=defaults.notes,
            tax_rate=defaults.tax_rate,
        )

    def _next_id(self) -> int:
        if not self.line_items:
            return 1
        return max(item.id for item in self.line_items) + 1

    def get_line_item(self, item_id: int) -> Optional[LineItem]:
        for item in self.line_items:
            if item.id == item_id:
                return item
        return None

    def add_line_item(self) -> LineItem:
        """Append an empty row and return it."""
        item = LineItem(id=self._next_id(), quantity=1, description="", amount=0.0)
        self.line_items.append(item)
        return item

    def remove_line_item(self, item_id: int) -> None:
        self.line_items = [item for item in self.line_items if item.id != item_id]

    def update_line_item(self, item_id: int, **changes) -> Optional[LineItem]:
        """
        Replace fields on one row.

        Only ``quantity``, ``description`` and ``amount`` can change; the id is
        fixed. Returns the updated row, or None if the id is unknown.
        """
        unknown = set(changes) - {"quantity", "description", "amount"}
        if unknown:
            raise ValueError(f"Cannot update line item field(s): {', '.join(sorted(unknown))}")

        for index, item in enumerate(self.line_items):
            if item.id == item_id:
                updated = replace(item, **changes)
                self.line_items[index] = updated
                return updated
        return None

    def apply_suggestion(self, item_id: int, suggestion: ItemSuggestion) -> Optional[LineItem]:
        """Fill a row's description and amount from a suggestion, keeping its quantity."""
        return self.update_line_item(
            item_id,
            description=suggestion.description,
            amount=suggestion.amount,
        )

    def to_rows(self) -> list[dict]:
        """One dict per line item, for table previews."""
        return [
            {
                "Description": item.description,
                "Quantity": item.quantity,
                "Price": item.amount,
                "Total": item.total,
            }
            for item in self.line_items
        ]
