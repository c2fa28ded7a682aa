"""Data models for invoices and line item suggestions."""

from .invoice import Invoice, ItemSuggestion, LineItem, SuggestionResult

__all__ = ["Invoice", "ItemSuggestion", "LineItem", "SuggestionResult"]
