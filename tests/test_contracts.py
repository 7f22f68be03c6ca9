from datetime import datetime, timedelta, timezone

import pytest

from boothops.domain.contracts import service as contract_service
from boothops.models import Attachment, Contact
from boothops.models_event import Event
from boothops.models_invoice import Contract, Invoice, InvoiceLineItem
from boothops.services import pdf_generator
from tests.conftest import SUBDOMAIN, TENANT_ID, pdf_page_count


@pytest.fixture
def rendered(monkeypatch):
    """Capture PDF rendering and signed notifications instead of producing them"""
    calls = {"pdf": [], "emails": []}

    def fake_render(content, signature, signed_at, client_ip, contract_id, schedule_a=None, company=None, title=None):
        calls["pdf"].append({"signature": signature, "client_ip": client_ip, "schedule_a": schedule_a})
        return b"%PDF-signed"

    async def fake_notify(to, company_name, title, signed_by, signed_date, pdf_bytes=None):
        calls["emails"].append(to)

    monkeypatch.setattr(contract_service, "render_signed_contract", fake_render)
    monkeypatch.setattr(contract_service, "send_contract_signed_notification", fake_notify)
    return calls


def _event_with_invoice(db):
    event = Event(tenant_id=TENANT_ID, title="Lopez Quinceañera")
    db.add(event)
    db.flush()
    invoice = Invoice(
        tenant_id=TENANT_ID,
        invoice_number="INV-0001",
        event_id=event.id,
        status="sent",
        subtotal=500,
        total_amount=500,
        balance_amount=500,
    )
    invoice.line_items.append(
        InvoiceLineItem(tenant_id=TENANT_ID, item_type="package", name="Open Air Booth", unit_price=500, total=500)
    )
    db.add(invoice)
    db.commit()
    return event


def test_create_send_and_sign_contract(client, db, auth_headers, rendered):
    event = _event_with_invoice(db)
    contact = Contact(tenant_id=TENANT_ID, first_name="Luz", email="luz@example.com")
    db.add(contact)
    db.commit()

    created = client.post(
        "/api/contracts",
        json={
            "title": "Booth Rental Agreement",
            "content": "<p>Terms</p><script>alert(1)</script>",
            "event_id": event.id,
            "contact_id": contact.id,
            "include_invoice_attachment": True,
        },
        headers=auth_headers,
    )
    assert created.status_code == 200
    contract = created.json()
    assert contract["status"] == "draft"
    assert "<script>" not in contract["content"]

    sent = client.post(f"/api/contracts/{contract['id']}/send", headers=auth_headers).json()
    assert sent["status"] == "sent"
    attachment = db.query(Attachment).filter(Attachment.entity_id == event.id).one()
    assert f"[CONTRACT:{contract['id']}] [STATUS:sent]" in attachment.description

    signed = client.post(
        f"/api/contracts/{contract['id']}/sign",
        json={"signature": "Luz Lopez"},
        headers={**auth_headers, "X-Forwarded-For": "203.0.113.7, 10.0.0.1"},
    )
    assert signed.status_code == 200
    body = signed.json()
    assert body["message"] == "Contract signed successfully"
    assert body["contract"]["status"] == "signed"
    assert body["contract"]["ip_address"] == "203.0.113.7"

    schedule_a = rendered["pdf"][0]["schedule_a"]
    assert [doc["invoice_number"] for doc in schedule_a] == ["INV-0001"]
    assert rendered["emails"] == [["luz@example.com"]]

    db.expire_all()
    assert "[STATUS:signed]" in db.query(Attachment).filter(Attachment.entity_id == event.id).one().description

    pdf = client.get(f"/api/contracts/{contract['id']}/pdf", headers=auth_headers)
    assert pdf.status_code == 200
    assert pdf.content == b"%PDF-signed"
    assert pdf.headers["content-type"] == "application/pdf"

    again = client.post(f"/api/contracts/{contract['id']}/sign", json={"signature": "Luz"}, headers=auth_headers)
    assert again.status_code == 400
    assert again.json()["error"] == "Contract has already been signed"

    locked = client.patch(f"/api/contracts/{contract['id']}", json={"title": "Changed"}, headers=auth_headers)
    assert locked.status_code == 400


def test_signature_is_required(client, auth_headers, rendered):
    contract = client.post("/api/contracts", json={"title": "Agreement"}, headers=auth_headers).json()
    response = client.post(f"/api/contracts/{contract['id']}/sign", headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Signature is required"


def _public_contract(db, **overrides):
    fields = {
        "tenant_id": TENANT_ID,
        "title": "Photo Booth Agreement",
        "content": "<p>Agreed</p>",
        "status": "sent",
        "public_token": "a" * 64,
    }
    fields.update(overrides)
    contract = Contract(**fields)
    db.add(contract)
    db.commit()
    return contract


def test_public_view_marks_contract_viewed(client, db, rendered):
    contract = _public_contract(db)
    response = client.get(f"/api/public/{SUBDOMAIN}/contracts/{contract.public_token}")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "viewed"
    assert body["is_expired"] is False
    assert body["company"]["name"] == "Snap Booths"


def test_public_view_hides_drafts_and_bad_tokens(client, db):
    draft = _public_contract(db, status="draft")
    assert client.get(f"/api/public/{SUBDOMAIN}/contracts/{draft.public_token}").status_code == 404
    bad = client.get(f"/api/public/{SUBDOMAIN}/contracts/short-token")
    assert bad.status_code == 400
    assert bad.json()["error"] == "Invalid token format"
    assert client.get(f"/api/public/nobody/contracts/{'b' * 64}").status_code == 404


def test_public_sign_and_expiry(client, db, rendered):
    contract = _public_contract(db)
    signed = client.post(
        f"/api/public/{SUBDOMAIN}/contracts/{contract.public_token}/sign", json={"signature": "Dana Client"}
    )
    assert signed.status_code == 200
    assert rendered["pdf"][0]["schedule_a"] is None

    expired = _public_contract(
        db,
        public_token="c" * 64,
        expires_at=datetime.now(timezone.utc) - timedelta(days=1),
    )
    response = client.post(
        f"/api/public/{SUBDOMAIN}/contracts/{expired.public_token}/sign", json={"signature": "Late Signer"}
    )
    assert response.status_code == 410
    assert response.json()["error"] == "Contract has expired"


@pytest.fixture
def notified(monkeypatch):
    """Capture signed notifications while the real PDF renderer runs"""
    emails = []

    async def fake_notify(to, company_name, title, signed_by, signed_date, pdf_bytes=None):
        emails.append({"to": to, "pdf": pdf_bytes})

    monkeypatch.setattr(contract_service, "send_contract_signed_notification", fake_notify)
    return emails


def _contract_with_schedule_a(client, event, headers):
    payload = {"title": "Booth Rental Agreement", "content": "Terms", "event_id": event.id}
    return client.post("/api/contracts", json={**payload, "include_invoice_attachment": True}, headers=headers).json()


def test_signed_pdf_download_handles_non_latin_titles(client, db, auth_headers, rendered):
    contract = client.post("/api/contracts", json={"title": "Mariage Élodie 💍"}, headers=auth_headers).json()
    signed = client.post(f"/api/contracts/{contract['id']}/sign", json={"signature": "Élodie"}, headers=auth_headers)
    assert signed.status_code == 200

    pdf = client.get(f"/api/contracts/{contract['id']}/pdf", headers=auth_headers)
    assert pdf.status_code == 200
    disposition = pdf.headers["content-disposition"]
    assert 'filename="Mariage Elodie -signed.pdf"' in disposition
    assert "filename*=UTF-8''Mariage%20%C3%89lodie%20%F0%9F%92%8D-signed.pdf" in disposition


def test_signing_renders_a_real_pdf_with_schedule_a(client, db, auth_headers, notified):
    event = _event_with_invoice(db)
    contract = _contract_with_schedule_a(client, event, auth_headers)

    signed = client.post(f"/api/contracts/{contract['id']}/sign", json={"signature": "Luz Lopez"}, headers=auth_headers)
    assert signed.status_code == 200

    pdf = client.get(f"/api/contracts/{contract['id']}/pdf", headers=auth_headers)
    assert pdf.status_code == 200
    assert pdf.content.startswith(b"%PDF")
    assert pdf_page_count(pdf.content) == 3


def test_schedule_a_drawing_failure_still_signs(client, db, auth_headers, notified, monkeypatch):
    def broken_invoice(writer, invoice, company):
        raise ValueError("bad line item")

    monkeypatch.setattr(pdf_generator, "draw_invoice", broken_invoice)
    event = _event_with_invoice(db)
    contract = _contract_with_schedule_a(client, event, auth_headers)

    signed = client.post(f"/api/contracts/{contract['id']}/sign", json={"signature": "Luz Lopez"}, headers=auth_headers)
    assert signed.status_code == 200
    assert signed.json()["contract"]["status"] == "signed"

    pdf = client.get(f"/api/contracts/{contract['id']}/pdf", headers=auth_headers).content
    assert pdf.startswith(b"%PDF")
    assert pdf_page_count(pdf) == 1


def test_public_sign_rejects_drafts(client, db, rendered):
    draft = _public_contract(db, status="draft", public_token="d" * 64)
    response = client.post(f"/api/public/{SUBDOMAIN}/contracts/{draft.public_token}/sign", json={"signature": "Eager"})
    assert response.status_code == 404
    assert rendered["pdf"] == []

    db.expire_all()
    assert db.query(Contract).filter(Contract.id == draft.id).one().status == "draft"
