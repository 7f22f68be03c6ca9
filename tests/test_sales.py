from boothops.models import Account, Contact, Opportunity
from boothops.models_event import EventDesignItem
from boothops.models_invoice import Invoice, Quote, QuoteLineItem
from tests.conftest import TENANT_ID


def _lead(client, headers, **fields):
    response = client.post("/api/leads", json=fields, headers=headers)
    assert response.status_code == 200
    return response.json()


def test_company_lead_converts_to_account_and_contact(client, db, auth_headers):
    lead = _lead(client, auth_headers, first_name="Rae", last_name="Kim", company="Kim Events", email="rae@kim.test")
    response = client.post(f"/api/leads/{lead['id']}/convert", headers=auth_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Lead converted successfully"

    account = db.query(Account).filter(Account.id == body["account_id"]).one()
    assert account.name == "Kim Events"
    assert account.account_type == "company"
    contact = db.query(Contact).filter(Contact.id == body["contact_id"]).one()
    assert contact.email == "rae@kim.test"

    again = client.post(f"/api/leads/{lead['id']}/convert", headers=auth_headers)
    assert again.status_code == 400
    assert again.json()["error"] == "Lead has already been converted"


def test_personal_lead_becomes_individual_account_only(client, auth_headers):
    lead = _lead(client, auth_headers, first_name="Sky", last_name="Lee")
    body = client.post(
        f"/api/leads/{lead['id']}/convert", json={"account": {"name": "Sky & Jo Wedding"}}, headers=auth_headers
    ).json()
    assert body["contact_id"] is None
    fetched = client.get(f"/api/leads/{lead['id']}", headers=auth_headers).json()
    assert fetched["status"] == "converted"


def test_lead_requires_a_name(client, auth_headers):
    response = client.post("/api/leads", json={"email": "who@example.com"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "A name or company is required"


def test_opportunity_converts_lead_event_and_quote(client, db, auth_headers):
    lead = _lead(client, auth_headers, first_name="Ana", company="Northwind")
    created = client.post(
        "/api/opportunities",
        json={
            "name": "Northwind Holiday Party",
            "lead_id": lead["id"],
            "event_type": "corporate",
            "event_dates": [{"event_date": "2025-12-12", "start_time": "18:00"}, {"event_date": "2025-12-13"}],
        },
        headers=auth_headers,
    )
    assert created.status_code == 200
    opportunity = created.json()

    quote = Quote(
        tenant_id=TENANT_ID,
        quote_number="Q-1",
        opportunity_id=opportunity["id"],
        status="accepted",
        subtotal=1200,
        total_amount=1200,
    )
    quote.line_items.append(
        QuoteLineItem(tenant_id=TENANT_ID, item_type="package", name="360 Booth", unit_price=1200, total=1200)
    )
    db.add(quote)
    db.commit()

    response = client.post(f"/api/opportunities/{opportunity['id']}/convert-to-event", headers=auth_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Opportunity successfully converted to event with invoice"
    assert body["event"]["title"] == "Northwind Holiday Party"
    assert body["event"]["start_date"] == "2025-12-12"
    assert body["event"]["end_date"] == "2025-12-13"
    assert len(body["eventDates"]) == 2
    assert body["invoice"]["due_date"] == "2026-01-11"
    assert body["invoice"]["status"] == "draft"

    db.expire_all()
    converted = db.query(Opportunity).filter(Opportunity.id == opportunity["id"]).one()
    assert converted.is_converted
    assert converted.account_id is not None
    invoice = db.query(Invoice).filter(Invoice.id == body["invoice"]["id"]).one()
    assert [item.name for item in invoice.line_items] == ["360 Booth"]
    assert db.query(EventDesignItem).count() == 0

    again = client.post(f"/api/opportunities/{opportunity['id']}/convert-to-event", headers=auth_headers)
    assert again.status_code == 400


def test_opportunity_conversion_uses_overrides_and_request_dates(client, auth_headers):
    opportunity = client.post("/api/opportunities", json={"name": "Pop-up"}, headers=auth_headers).json()
    body = client.post(
        f"/api/opportunities/{opportunity['id']}/convert-to-event",
        json={"eventData": {"title": "Mall Pop-up"}, "eventDates": [{"event_date": "2025-07-04"}]},
        headers=auth_headers,
    ).json()
    assert body["event"]["title"] == "Mall Pop-up"
    assert body["event"]["start_date"] == "2025-07-04"
    assert body["invoice"] is None
