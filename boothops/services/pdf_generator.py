"""
PDF rendering for signed contracts and invoices
Uses the reportlab canvas with a top-down text cursor
"""

import io
import logging
from datetime import datetime
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

logger = logging.getLogger(__name__)

MARGIN = 40
LINE_HEIGHT = 16
SIGNATURE_RESERVE = 120


def format_money(value) -> str:
    return f"${(value or 0):,.2f}"


def format_date(value) -> str:
    if not value:
        return ""
    if isinstance(value, str):
        return value[:10]
    return value.strftime("%B %d, %Y")


class PDFWriter:
    """Letter-size canvas where `y` counts down from the top margin"""

    def __init__(self, title: Optional[str] = None):
        self.buffer = io.BytesIO()
        self.canvas = canvas.Canvas(self.buffer, pagesize=letter)
        if title:
            self.canvas.setTitle(title)
        self.page_width, self.page_height = letter
        self.content_width = self.page_width - 2 * MARGIN
        self.y = MARGIN
        self.font = ("Helvetica", 12)

    def set_font(self, name: str, size: float) -> None:
        self.font = (name, size)
        self.canvas.setFont(name, size)

    def new_page(self) -> None:
        self.canvas.showPage()
        self.canvas.setFont(*self.font)
        self.y = MARGIN

    def ensure_space(self, reserve: float = 0) -> None:
        if self.y > self.page_height - MARGIN - reserve:
            self.new_page()

    def text(self, value: str, x: float = MARGIN, advance: float = LINE_HEIGHT) -> None:
        self.canvas.drawString(x, self.page_height - self.y, value)
        self.y += advance

    def right_text(self, value: str, x: float) -> None:
        self.canvas.drawRightString(x, self.page_height - self.y, value)

    def wrapped(self, value: str, reserve: float = 0, advance: float = LINE_HEIGHT) -> None:
        """Write a paragraph wrapped to the content width, breaking pages as needed"""
        name, size = self.font
        for line in simpleSplit(value or " ", name, size, self.content_width) or [" "]:
            self.ensure_space(reserve)
            self.text(line, advance=advance)

    def rule(self, width: float = 1) -> None:
        self.canvas.setLineWidth(width)
        y = self.page_height - self.y
        self.canvas.line(MARGIN, y, self.page_width - MARGIN, y)

    def output(self) -> bytes:
        self.canvas.save()
        return self.buffer.getvalue()


def draw_invoice(writer: PDFWriter, invoice: dict, company: dict) -> None:
    """Draw one invoice starting at the top of the current page"""
    right = writer.page_width - MARGIN

    writer.canvas.setFillColor(colors.HexColor("#1e293b"))
    writer.set_font("Helvetica-Bold", 20)
    writer.y = MARGIN + 10
    writer.text("INVOICE", advance=0)
    writer.set_font("Helvetica-Bold", 12)
    writer.right_text(company.get("name") or "Company", right)
    writer.y += 24

    writer.set_font("Helvetica", 10)
    for detail in (company.get("address"), company.get("phone"), company.get("email")):
        if detail:
            writer.right_text(detail, right)
            writer.y += 12

    writer.y = max(writer.y, MARGIN + 50)
    writer.text(f"Invoice #: {invoice.get('invoice_number') or 'N/A'}", advance=14)
    writer.text(f"Issue date: {format_date(invoice.get('issue_date'))}", advance=14)
    writer.text(f"Due date: {format_date(invoice.get('due_date'))}", advance=14)
    writer.text(f"Status: {(invoice.get('status') or 'draft').replace('_', ' ').title()}", advance=20)

    bill_to = [name for name in (invoice.get("account_name"), invoice.get("contact_name")) if name]
    if bill_to:
        writer.set_font("Helvetica-Bold", 10)
        writer.text("Bill To:", advance=14)
        writer.set_font("Helvetica", 10)
        for name in bill_to:
            writer.text(name, advance=14)
        writer.y += 6

    # Line items
    qty_x, price_x, total_x = right - 200, right - 100, right
    writer.set_font("Helvetica-Bold", 10)
    writer.text("Description", advance=0)
    writer.right_text("Qty", qty_x)
    writer.right_text("Unit Price", price_x)
    writer.right_text("Total", total_x)
    writer.y += 6
    writer.rule(0.5)
    writer.y += 14

    writer.set_font("Helvetica", 10)
    for item in invoice.get("line_items", []):
        writer.ensure_space(80)
        name = item.get("name") or "Item"
        label = simpleSplit(name, "Helvetica", 10, qty_x - MARGIN - 40) or [name]
        writer.text(label[0], advance=0)
        writer.right_text(f"{item.get('quantity') or 1:g}", qty_x)
        writer.right_text(format_money(item.get("unit_price")), price_x)
        writer.right_text(format_money(item.get("total")), total_x)
        writer.y += 14
        for extra in label[1:]:
            writer.text(extra, advance=14)

    writer.y += 4
    writer.rule(0.5)
    writer.y += 16

    totals = [("Subtotal", invoice.get("subtotal"))]
    if invoice.get("tax_amount"):
        totals.append((f"Tax ({invoice.get('tax_rate') or 0:g}%)", invoice.get("tax_amount")))
    totals.extend(
        [
            ("Total", invoice.get("total_amount")),
            ("Paid", invoice.get("paid_amount")),
            ("Balance Due", invoice.get("balance_amount")),
        ]
    )
    for label, amount in totals:
        writer.ensure_space(40)
        bold = label in ("Total", "Balance Due")
        writer.set_font("Helvetica-Bold" if bold else "Helvetica", 10)
        writer.right_text(label, price_x)
        writer.right_text(format_money(amount), total_x)
        writer.y += 14

    for heading, body in (("Notes", invoice.get("notes")), ("Terms", invoice.get("terms"))):
        if body:
            writer.y += 10
            writer.ensure_space(40)
            writer.set_font("Helvetica-Bold", 10)
            writer.text(heading, advance=14)
            writer.set_font("Helvetica", 9)
            writer.wrapped(body, advance=12)


def add_schedule_a(writer: PDFWriter, invoices: list[dict], company: dict) -> None:
    writer.new_page()
    writer.set_font("Helvetica-Bold", 18)
    writer.y = MARGIN + 20
    writer.text("Schedule A - Invoice(s)", advance=20)
    writer.set_font("Helvetica", 10)
    writer.text("The following invoice(s) are attached as part of this agreement.", advance=15)
    writer.text(f"Total invoices: {len(invoices)}")

    for invoice in invoices:
        writer.new_page()
        draw_invoice(writer, invoice, company)


def draw_signed_contract(
    writer: PDFWriter, content: str, signature: str, signed_at: datetime, client_ip: str, document_id: str
) -> None:
    """Contract body followed by the signature block"""
    writer.set_font("Helvetica", 12)

    for line in (content or "").split("\n"):
        writer.ensure_space(SIGNATURE_RESERVE)
        writer.wrapped(line, reserve=SIGNATURE_RESERVE)

    writer.ensure_space(SIGNATURE_RESERVE)
    writer.y += 30
    writer.set_font("Helvetica-Bold", 10)
    writer.text("SIGNED BY:", advance=20)

    writer.set_font("Times-Italic", 24)
    writer.text(signature, advance=10)
    writer.rule(1)
    writer.y += 15

    writer.set_font("Helvetica", 8)
    writer.text(f"Signed on: {signed_at.strftime('%B %d, %Y at %I:%M %p %Z').strip()}", advance=12)
    writer.text(f"IP Address: {client_ip}", advance=12)
    writer.text(f"Document ID: {document_id}", advance=12)


def render_signed_contract(
    content: str,
    signature: str,
    signed_at: datetime,
    client_ip: str,
    document_id: str,
    schedule_a: Optional[list[dict]] = None,
    company: Optional[dict] = None,
    title: Optional[str] = None,
) -> bytes:
    """
    Render the signed contract, with Schedule A invoice pages when given.

    A Schedule A that fails to draw is logged and the contract is rendered
    again without it.
    """
    if schedule_a:
        try:
            writer = PDFWriter(title=title)
            draw_signed_contract(writer, content, signature, signed_at, client_ip, document_id)
            add_schedule_a(writer, schedule_a, company or {})
            pdf_bytes = writer.output()
            logger.info(f"📎 Added Schedule A with {len(schedule_a)} invoice(s) to contract {document_id}")
            return pdf_bytes
        except Exception as e:
            logger.error(f"❌ Error drawing Schedule A for contract {document_id} (continuing without): {e}")

    writer = PDFWriter(title=title)
    draw_signed_contract(writer, content, signature, signed_at, client_ip, document_id)
    return writer.output()


def render_invoice(invoice: dict, company: dict) -> bytes:
    writer = PDFWriter(title=f"Invoice {invoice.get('invoice_number') or ''}".strip())
    draw_invoice(writer, invoice, company)
    return writer.output()
