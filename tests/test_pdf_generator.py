from datetime import datetime, timezone

from boothops.services import pdf_generator
from tests.conftest import pdf_page_count

SIGNED_AT = datetime(2026, 6, 1, 15, 30, tzinfo=timezone.utc)
COMPANY = {"name": "Snap Booths", "email": "hello@snapbooths.test", "phone": "555-0100"}


def _invoice(number: str, items: int = 1) -> dict:
    return {
        "invoice_number": number,
        "issue_date": "2026-05-01",
        "due_date": "2026-05-31",
        "status": "partially_paid",
        "account_name": "Harbor Hotel",
        "line_items": [
            {"name": f"Open Air Booth {n}", "quantity": 1, "unit_price": 250, "total": 250} for n in range(items)
        ],
        "subtotal": 250 * items,
        "tax_rate": 8.25,
        "tax_amount": 20.63,
        "total_amount": 250 * items + 20.63,
        "paid_amount": 100,
        "balance_amount": 250 * items - 79.37,
        "notes": "Thanks for booking with us.",
        "terms": "Balance due before the event.",
    }


def _signed(content: str = "Booth rental terms.", **kwargs) -> bytes:
    return pdf_generator.render_signed_contract(
        content, "Dana Client", SIGNED_AT, "203.0.113.7", "contract-1", title="Agreement", **kwargs
    )


def test_signed_contract_is_a_single_page():
    pdf = _signed()
    assert pdf.startswith(b"%PDF")
    assert pdf_page_count(pdf) == 1


def test_long_contract_breaks_across_pages():
    content = "\n".join(f"Clause {n}: the client agrees to the booth rental terms." for n in range(120))
    assert pdf_page_count(_signed(content)) > 2


def test_schedule_a_adds_a_cover_and_one_page_per_invoice():
    pdf = _signed(schedule_a=[_invoice("INV-0001"), _invoice("INV-0002")], company=COMPANY)
    assert pdf.startswith(b"%PDF")
    assert pdf_page_count(pdf) == 1 + 1 + 2


def test_schedule_a_failure_falls_back_to_contract_only(monkeypatch):
    def broken_invoice(writer, invoice, company):
        raise KeyError("line_items")

    monkeypatch.setattr(pdf_generator, "draw_invoice", broken_invoice)
    pdf = _signed(schedule_a=[_invoice("INV-0001")], company=COMPANY)
    assert pdf.startswith(b"%PDF")
    assert pdf_page_count(pdf) == 1


def test_render_invoice():
    pdf = pdf_generator.render_invoice(_invoice("INV-0042", items=3), COMPANY)
    assert pdf.startswith(b"%PDF")
    assert pdf_page_count(pdf) == 1


def test_invoice_with_many_line_items_continues_on_new_pages():
    pdf = pdf_generator.render_invoice(_invoice("INV-0043", items=80), COMPANY)
    assert pdf_page_count(pdf) > 1


def test_formatting_helpers():
    assert pdf_generator.format_money(1234.5) == "$1,234.50"
    assert pdf_generator.format_money(None) == "$0.00"
    assert pdf_generator.format_date("2026-05-01T00:00:00") == "2026-05-01"
    assert pdf_generator.format_date(SIGNED_AT) == "June 01, 2026"
    assert pdf_generator.format_date(None) == ""
