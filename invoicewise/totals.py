"""Invoice arithmetic and display formatting."""

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from invoicewise.models.invoice import LineItem


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: float
    tax_amount: float
    total: float


def calculate_totals(line_items: Iterable[LineItem], tax_rate: Optional[float]) -> InvoiceTotals:
    """
    Sum quantity x amount over all rows, then apply the tax percentage.

    Args:
        line_items: Invoice rows
        tax_rate: Tax as a percentage (8 means 8%); None counts as 0

    Returns:
        InvoiceTotals with subtotal, tax amount and grand total
    """
    subtotal = sum(item.total for item in line_items)
    tax_amount = subtotal * ((tax_rate or 0) / 100)
    return InvoiceTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        total=subtotal + tax_amount,
    )


def format_money(value: Optional[float]) -> str:
    return f"${(value or 0):.2f}"


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def format_date(value: Optional[date]) -> str:
    """Long form date, e.g. "October 18th, 2026"."""
    if value is None:
        return "Pick a date"
    return f"{value.strftime('%B')} {_ordinal(value.day)}, {value.year}"


def format_number(value: Optional[float]) -> str:
    """Quantities and rates without a trailing ".0" ("10", "2.5")."""
    value = value or 0
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"
