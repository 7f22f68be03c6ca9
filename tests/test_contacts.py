from boothops.email_templates import get_base_template
from boothops.models import Account
from tests.conftest import TENANT_ID


def _account(db, name="Acme Events"):
    account = Account(tenant_id=TENANT_ID, name=name)
    db.add(account)
    db.commit()
    return account


def test_create_contact_links_primary_account(client, db, auth_headers):
    account = _account(db)
    response = client.post(
        "/api/contacts",
        json={"first_name": "Jane", "last_name": "Doe", "email": " Jane@Example.com ", "account_id": account.id},
        headers=auth_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["email"] == "jane@example.com"
    assert body["account_name"] == "Acme Events"
    assert body["active_accounts"][0]["role"] == "Primary Contact"
    assert body["former_accounts"] == []


def test_duplicate_email_reports_existing_contact(client, auth_headers):
    first = client.post(
        "/api/contacts", json={"first_name": "Jane", "email": "jane@example.com"}, headers=auth_headers
    ).json()
    response = client.post(
        "/api/contacts", json={"first_name": "Janet", "email": "JANE@example.com"}, headers=auth_headers
    )
    assert response.status_code == 409
    body = response.json()
    assert body["error"] == "A contact with this email already exists"
    assert body["existingContact"]["id"] == first["id"]


def test_invalid_email_is_rejected(client, auth_headers):
    response = client.post("/api/contacts", json={"first_name": "Jo", "email": "not-an-email"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid email format"


def test_ending_account_link_moves_it_to_former(client, db, auth_headers):
    account = _account(db)
    other = _account(db, "Bright Lights LLC")
    contact = client.post(
        "/api/contacts", json={"first_name": "Max", "account_id": account.id}, headers=auth_headers
    ).json()

    linked = client.post(
        f"/api/contacts/{contact['id']}/accounts",
        json={"account_id": other.id, "role": "Planner", "is_primary": True},
        headers=auth_headers,
    ).json()
    assert linked["account_name"] == "Bright Lights LLC"

    link_id = next(a["junction_id"] for a in linked["active_accounts"] if a["id"] == account.id)
    ended = client.delete(f"/api/contacts/{contact['id']}/accounts/{link_id}", headers=auth_headers)
    assert ended.status_code == 200
    body = ended.json()
    assert [a["id"] for a in body["former_accounts"]] == [account.id]
    assert [a["id"] for a in body["active_accounts"]] == [other.id]

    again = client.delete(f"/api/contacts/{contact['id']}/accounts/{link_id}", headers=auth_headers)
    assert again.status_code == 400


def test_contact_not_found(client, auth_headers):
    response = client.get("/api/contacts/missing", headers=auth_headers)
    assert response.status_code == 404
    assert response.json() == {"error": "Contact not found"}


def test_settings_round_trip_hides_secrets(client, auth_headers, make_user):
    put = client.put("/api/settings/company.name", json={"value": "Snap Booths Co"}, headers=auth_headers)
    assert put.status_code == 200
    client.put("/api/settings/integrations.stripe.secretKey", json={"value": "sk_test_123"}, headers=auth_headers)

    assert client.get("/api/settings/company.name", headers=auth_headers).json()["value"] == "Snap Booths Co"
    listed = client.get("/api/settings", headers=auth_headers).json()["settings"]
    assert listed["integrations.stripe.secretKey"] == "********"
    assert client.get("/api/settings/integrations.stripe.secretKey", headers=auth_headers).status_code == 403

    _, member_headers = make_user()
    denied = client.put("/api/settings/company.name", json={"value": "Nope"}, headers=member_headers)
    assert denied.status_code == 403


def test_account_with_events_cannot_be_deleted(client, auth_headers):
    account = client.post("/api/accounts", json={"name": "Gala Group", "email": "Hi@Gala.test"}, headers=auth_headers)
    assert account.status_code == 200
    account_id = account.json()["id"]
    assert account.json()["email"] == "hi@gala.test"

    client.post(
        "/api/events",
        json={"title": "Gala", "account_id": account_id, "event_dates": [{"event_date": "2025-11-01"}]},
        headers=auth_headers,
    )
    detail = client.get(f"/api/accounts/{account_id}", headers=auth_headers).json()
    assert [e["title"] for e in detail["events"]] == ["Gala"]

    response = client.delete(f"/api/accounts/{account_id}", headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Account has events and cannot be deleted"


def test_account_names_are_stored_as_plain_text(client, auth_headers):
    plain = client.post("/api/accounts", json={"name": "Smith & Co"}, headers=auth_headers)
    assert plain.status_code == 200
    assert plain.json()["name"] == "Smith & Co"

    tagged = client.post("/api/accounts", json={"name": "<b>Bold</b> Co\x07"}, headers=auth_headers)
    assert tagged.json()["name"] == "Bold Co"


def test_email_layout_escapes_header_text():
    html = get_base_template(
        content_sections="<mj-text>Hi</mj-text>", title="Smith & Co", preview_text="<Recap> ready", company_name="Snap & Go"
    )
    assert "<mj-title>Smith &amp; Co</mj-title>" in html
    assert "&lt;Recap&gt; ready" in html
