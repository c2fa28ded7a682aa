"""
InvoiceWise - Browser-based invoice creator.

This package provides functionality for:
- Building an invoice draft with live totals and tax
- LLM-powered line item suggestions from keywords
- Printable HTML output (PDF via the browser's print dialog)
"""

__version__ = "0.1.0"
__author__ = "InvoiceWise"
