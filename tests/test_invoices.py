import pytest

from boothops.domain.invoices import service as invoice_service
from boothops.models_invoice import Payment
from boothops.services import stripe_client
from tests.conftest import SUBDOMAIN


def _invoice(client, headers, **fields):
    body = {
        "tax_rate": 10,
        "line_items": [
            {"item_type": "package", "name": "Classic Booth", "quantity": 1, "unit_price": 800},
            {"item_type": "add_on", "name": "Props", "quantity": 2, "unit_price": 50, "taxable": False},
            {"item_type": "discount", "name": "Loyalty", "quantity": 1, "unit_price": 100},
        ],
    }
    body.update(fields)
    response = client.post("/api/invoices", json=body, headers=headers)
    assert response.status_code == 200
    return response.json()


def test_totals_apply_discounts_and_taxable_lines(client, auth_headers):
    invoice = _invoice(client, auth_headers)
    assert invoice["invoice_number"] == "INV-0001"
    assert invoice["subtotal"] == 800
    assert invoice["tax_amount"] == 80
    assert invoice["total_amount"] == 880
    assert invoice["balance_amount"] == 880

    second = _invoice(client, auth_headers, line_items=[])
    assert second["invoice_number"] == "INV-0002"


def test_manual_payment_moves_status(client, auth_headers):
    invoice = _invoice(client, auth_headers)
    partial = client.post(
        f"/api/invoices/{invoice['id']}/payments", json={"amount": 300, "payment_method": "check"}, headers=auth_headers
    ).json()
    assert partial["status"] == "partially_paid"
    assert partial["balance_amount"] == 580

    too_much = client.post(f"/api/invoices/{invoice['id']}/payments", json={"amount": 1000}, headers=auth_headers)
    assert too_much.status_code == 400
    assert too_much.json()["error"] == "Payment amount must be between $0.01 and $580.00"

    paid = client.post(f"/api/invoices/{invoice['id']}/payments", json={"amount": 580}, headers=auth_headers).json()
    assert paid["status"] == "paid"


@pytest.fixture
def stripe(monkeypatch):
    """Stand-in for the Stripe REST calls"""
    state = {"created": [], "intent": None}

    async def fake_create(secret_key, amount, metadata, currency="usd"):
        state["created"].append({"key": secret_key, "amount": amount, "metadata": metadata})
        return {"id": "pi_123", "client_secret": "pi_123_secret"}

    async def fake_retrieve(secret_key, payment_intent_id):
        return state["intent"]

    monkeypatch.setattr(stripe_client, "create_payment_intent", fake_create)
    monkeypatch.setattr(stripe_client, "retrieve_payment_intent", fake_retrieve)
    return state


def _sent_invoice(client, headers):
    invoice = _invoice(client, headers)
    client.patch(f"/api/invoices/{invoice['id']}", json={"status": "sent"}, headers=headers)
    client.put("/api/settings/integrations.stripe.secretKey", json={"value": "sk_test_tenant"}, headers=headers)
    client.put("/api/settings/integrations.stripe.publishableKey", json={"value": "pk_test_tenant"}, headers=headers)
    return invoice


def test_public_invoice_payment_flow(client, db, auth_headers, stripe, monkeypatch):
    notified = []

    async def fake_notify(*args):
        notified.append(args)

    monkeypatch.setattr(invoice_service, "send_payment_received_notification", fake_notify)
    client.put("/api/settings/company.email", json={"value": "owner@snapbooths.test"}, headers=auth_headers)
    invoice = _sent_invoice(client, auth_headers)
    token = invoice["public_token"]

    view = client.get(f"/api/public/{SUBDOMAIN}/invoices/{token}").json()
    assert view["status"] == "viewed"
    assert view["can_pay"] is True

    intent = client.get(f"/api/public/{SUBDOMAIN}/invoices/{token}/pay", params={"amount": 200}).json()
    assert intent == {"clientSecret": "pi_123_secret", "publishableKey": "pk_test_tenant", "amount": 200}
    assert stripe["created"][0]["key"] == "sk_test_tenant"
    assert stripe["created"][0]["metadata"]["invoice_id"] == invoice["id"]

    stripe["intent"] = {"status": "succeeded", "amount": 20000, "metadata": {"invoice_id": invoice["id"]}}
    confirmed = client.post(f"/api/public/{SUBDOMAIN}/invoices/{token}/pay", json={"payment_intent_id": "pi_123"})
    assert confirmed.status_code == 200
    body = confirmed.json()
    assert body["invoice"]["paid_amount"] == 200
    assert body["invoice"]["status"] == "partially_paid"
    assert db.query(Payment).filter(Payment.reference_number == "pi_123").count() == 1
    assert notified

    duplicate = client.post(f"/api/public/{SUBDOMAIN}/invoices/{token}/pay", json={"payment_intent_id": "pi_123"})
    assert duplicate.status_code == 400
    assert duplicate.json()["error"] == "Payment has already been recorded"


def test_public_payment_rejects_bad_amounts_and_incomplete_intents(client, auth_headers, stripe):
    invoice = _sent_invoice(client, auth_headers)
    token = invoice["public_token"]

    over = client.get(f"/api/public/{SUBDOMAIN}/invoices/{token}/pay", params={"amount": 5000})
    assert over.status_code == 400

    stripe["intent"] = {"status": "requires_payment_method", "amount": 88000, "metadata": {}}
    pending = client.post(f"/api/public/{SUBDOMAIN}/invoices/{token}/pay", json={"payment_intent_id": "pi_999"})
    assert pending.status_code == 400
    assert pending.json() == {"error": "Payment not completed", "status": "requires_payment_method"}

    stripe["intent"] = {"status": "succeeded", "amount": 100, "metadata": {"invoice_id": "someone-else"}}
    foreign = client.post(f"/api/public/{SUBDOMAIN}/invoices/{token}/pay", json={"payment_intent_id": "pi_777"})
    assert foreign.status_code == 400
    assert foreign.json()["error"] == "Payment does not belong to this invoice"


def test_public_payment_requires_stripe_configuration(client, auth_headers):
    invoice = _invoice(client, auth_headers)
    client.patch(f"/api/invoices/{invoice['id']}", json={"status": "sent"}, headers=auth_headers)
    response = client.get(f"/api/public/{SUBDOMAIN}/invoices/{invoice['public_token']}/pay")
    assert response.status_code == 400
    assert response.json()["error"] == "Payment processing is not configured for this invoice"
