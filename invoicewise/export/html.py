"""
Printable invoice export.

Handles:
- Rendering the invoice to a standalone HTML page
- Print styling (A4/Letter friendly, no UI chrome)
- Optional auto-print so the browser's dialog can save it as PDF
"""

import logging
from pathlib import Path
from typing import Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from invoicewise.models.invoice import Invoice
from invoicewise.totals import calculate_totals, format_date, format_money, format_number

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent / "templates"


class HtmlExporter:
    """
    Renders invoices as printable HTML.

    Features:
    - Embedded logo (data URL), so the file is self-contained
    - Line item table with per-row totals
    - Subtotal, tax and total block
    - Print CSS; PDF output is left to the browser's print dialog
    """

    TEMPLATE_NAME = "invoice.html"

    def __init__(self, template_dir: Union[str, Path] = TEMPLATE_DIR):
        """Initialize the HTML exporter."""
        self.env = Environment(
            loader=FileSystemLoader(str(template_dir)),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["money"] = format_money
        self.env.filters["long_date"] = format_date
        self.env.filters["number"] = format_number

    def render(self, invoice: Invoice, auto_print: bool = False) -> str:
        """
        Render an invoice to HTML.

        Args:
            invoice: Invoice draft
            auto_print: Open the print dialog once the page loads

        Returns:
            Complete HTML document
        """
        template = self.env.get_template(self.TEMPLATE_NAME)
        return template.render(
            invoice=invoice,
            totals=calculate_totals(invoice.line_items, invoice.tax_rate),
            auto_print=auto_print,
        )

    def export(
        self,
        invoice: Invoice,
        file_path: Union[str, Path],
        auto_print: bool = False,
    ) -> Path:
        """
        Write the printable invoice to a file.

        Args:
            invoice: Invoice draft
            file_path: Destination; ".html" is appended if missing
            auto_print: Open the print dialog when the file is opened

        Returns:
            Path to the exported file
        """
        file_path = Path(file_path)

        # Ensure .html extension
        if file_path.suffix.lower() not in (".html", ".htm"):
            file_path = file_path.with_suffix(".html")

        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(self.render(invoice, auto_print=auto_print), encoding="utf-8")
        logger.info(f"Exported invoice {invoice.invoice_number or '(unnumbered)'} to {file_path}")

        return file_path


def export_invoice(invoice: Invoice, file_path: Union[str, Path]) -> Path:
    """
    Convenience function to export an invoice.

    Args:
        invoice: Invoice draft
        file_path: Path to HTML file

    Returns:
        Path to exported file
    """
    exporter = HtmlExporter()
    return exporter.export(invoice, file_path)
