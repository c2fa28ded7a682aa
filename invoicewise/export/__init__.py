"""Export module for rendering printable invoices."""

from .html import HtmlExporter

__all__ = ["HtmlExporter"]
