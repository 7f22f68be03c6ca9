from datetime import date

from boothops.domain.event_forms.merge_fields import convert_response_value, group_responses_by_table
from boothops.models import Account, Contact, Location
from boothops.models_event import Event, EventDate, EventForm, EventFormTemplate
from tests.conftest import SUBDOMAIN, TENANT_ID

FIELDS = [
    {"id": "intro", "type": "section", "label": "About your event", "saveResponseTo": "events.title"},
    {"id": "guests", "type": "text", "label": "Guest count", "prePopulateFrom": "events.guest_count",
     "saveResponseTo": "events.guest_count"},
    {"id": "company", "type": "text", "label": "Company", "prePopulateFrom": "accounts.name",
     "saveResponseTo": "accounts.name"},
    {"id": "contact", "type": "text", "label": "Your first name", "prePopulateFrom": "contacts.first_name"},
    {"id": "venue", "type": "text", "label": "Venue", "prePopulateFrom": "locations.name",
     "saveResponseTo": "locations.contact_name"},
    {"id": "day", "type": "date", "label": "Date", "prePopulateFrom": "event_dates.event_date"},
    {"id": "start", "type": "time", "label": "Start", "saveResponseTo": "event_dates.start_time"},
    {"id": "props", "type": "multiselect", "label": "Props", "options": ["Hats", "Signs", "Boas"],
     "saveResponseTo": "events.event_notes"},
]


def _event(db, with_links=True, days=1):
    account = Account(tenant_id=TENANT_ID, name="Harbor Hotel")
    contact = Contact(tenant_id=TENANT_ID, first_name="Rosa", last_name="Diaz")
    venue = Location(tenant_id=TENANT_ID, name="Pier 9 Ballroom")
    db.add_all([account, contact, venue])
    db.flush()
    event = Event(
        tenant_id=TENANT_ID,
        title="Harbor Gala",
        guest_count=150,
        start_date=date(2026, 11, 7),
        account_id=account.id if with_links else None,
        primary_contact_id=contact.id if with_links else None,
    )
    db.add(event)
    db.flush()
    for offset in range(days):
        db.add(
            EventDate(
                tenant_id=TENANT_ID,
                event_id=event.id,
                event_date=date(2026, 11, 7 + offset),
                start_time="18:00",
                location_id=venue.id if with_links else None,
            )
        )
    db.commit()
    return event


def _sent_form(client, event, headers, fields=FIELDS):
    form = client.post(
        f"/api/events/{event.id}/forms", json={"name": "Client Questionnaire", "fields": fields}, headers=headers
    ).json()
    assert form["status"] == "draft"
    sent = client.put(f"/api/events/{event.id}/forms/{form['id']}", json={"status": "sent"}, headers=headers).json()
    assert sent["sent_at"] is not None
    return sent


def test_create_form_from_template(client, db, auth_headers):
    event = _event(db)
    template = EventFormTemplate(tenant_id=TENANT_ID, name="Logistics Questions", form_type="client", fields=FIELDS)
    db.add(template)
    db.commit()

    created = client.post(f"/api/events/{event.id}/forms", json={"template_id": template.id}, headers=auth_headers)
    assert created.status_code == 200
    body = created.json()
    assert body["name"] == "Logistics Questions"
    assert [f["id"] for f in body["fields"]] == [f["id"] for f in FIELDS]
    assert len(body["public_id"]) >= 8

    listed = client.get(f"/api/events/{event.id}/forms", headers=auth_headers).json()
    assert [f["id"] for f in listed] == [body["id"]]

    unnamed = client.post(f"/api/events/{event.id}/forms", json={"fields": []}, headers=auth_headers)
    assert unnamed.status_code == 400
    assert unnamed.json()["error"] == "Form name is required"


def test_draft_forms_are_not_public(client, db, auth_headers):
    event = _event(db)
    form = client.post(f"/api/events/{event.id}/forms", json={"name": "Draft"}, headers=auth_headers).json()

    hidden = client.get(f"/api/public/{SUBDOMAIN}/forms/{form['public_id']}")
    assert hidden.status_code == 404
    assert hidden.json()["error"] == "Form not available"
    rejected = client.post(f"/api/public/{SUBDOMAIN}/forms/{form['public_id']}", json={"responses": {"a": "b"}})
    assert rejected.status_code == 404

    short = client.get(f"/api/public/{SUBDOMAIN}/forms/abc")
    assert short.status_code == 400
    assert short.json()["error"] == "Invalid form ID"


def test_public_form_prefills_from_event_data(client, db, auth_headers):
    event = _event(db, days=2)
    form = _sent_form(client, event, auth_headers)

    response = client.get(f"/api/public/{SUBDOMAIN}/forms/{form['public_id']}")
    assert response.status_code == 200
    body = response.json()
    assert body["form"]["status"] == "viewed"
    assert body["event"]["title"] == "Harbor Gala"
    assert body["isMultiDay"] is True
    assert [d["location_name"] for d in body["eventDates"]] == ["Pier 9 Ballroom", "Pier 9 Ballroom"]
    assert body["prefilled"] == {
        "guests": "150",
        "company": "Harbor Hotel",
        "contact": "Rosa",
        "venue": "Pier 9 Ballroom",
        "day": "2026-11-07",
    }


def test_submission_saves_answers_back_to_the_event(client, db, auth_headers):
    event = _event(db)
    form = _sent_form(client, event, auth_headers)

    submitted = client.post(
        f"/api/public/{SUBDOMAIN}/forms/{form['public_id']}",
        json={
            "responses": {
                "intro": "ignored",
                "guests": "180",
                "company": "Harbor Hotel & Spa",
                "venue": "Marco at the dock",
                "start": "7pm",
                "props": ["Hats", "Boas"],
            }
        },
    )
    assert submitted.status_code == 200
    assert submitted.json() == {"success": True}

    db.expire_all()
    saved = db.query(Event).filter(Event.id == event.id).one()
    assert saved.title == "Harbor Gala"
    assert saved.guest_count == 180
    assert saved.event_notes == "Hats, Boas"
    assert db.query(Account).filter(Account.id == event.account_id).one().name == "Harbor Hotel & Spa"
    assert db.query(Location).filter(Location.name == "Pier 9 Ballroom").one().contact_name == "Marco at the dock"
    assert db.query(EventDate).filter(EventDate.event_id == event.id).one().start_time == "18:00"

    stored = db.query(EventForm).filter(EventForm.id == form["id"]).one()
    assert stored.status == "completed"
    assert stored.completed_at is not None
    assert "_submittedAt" in stored.responses

    again = client.post(f"/api/public/{SUBDOMAIN}/forms/{form['public_id']}", json={"responses": {"guests": "5"}})
    assert again.status_code == 400
    assert again.json()["error"] == "Form already submitted"


def test_submission_succeeds_when_linked_records_are_missing(client, db, auth_headers):
    event = _event(db, with_links=False)
    form = _sent_form(client, event, auth_headers)

    submitted = client.post(
        f"/api/public/{SUBDOMAIN}/forms/{form['public_id']}",
        json={"responses": {"company": "Nobody Inc", "guests": "40"}},
    )
    assert submitted.status_code == 200

    db.expire_all()
    assert db.query(Event).filter(Event.id == event.id).one().guest_count == 40
    assert db.query(Account).filter(Account.name == "Nobody Inc").count() == 0


def test_responses_are_required(client, db, auth_headers):
    event = _event(db)
    form = _sent_form(client, event, auth_headers)
    response = client.post(f"/api/public/{SUBDOMAIN}/forms/{form['public_id']}", json={})
    assert response.status_code == 400
    assert response.json()["error"] == "Responses are required"


def test_delete_form(client, db, auth_headers):
    event = _event(db)
    form = client.post(f"/api/events/{event.id}/forms", json={"name": "Extra"}, headers=auth_headers).json()
    assert client.delete(f"/api/events/{event.id}/forms/{form['id']}", headers=auth_headers).json() == {"success": True}
    assert client.get(f"/api/events/{event.id}/forms", headers=auth_headers).json() == []


def test_merge_field_catalog(client, auth_headers):
    categories = client.get("/api/event-forms/merge-fields", headers=auth_headers).json()["categories"]
    keys = {field["key"] for category in categories for field in category["fields"]}
    assert {"events.title", "accounts.billing_city", "locations.name", "event_dates.start_time"} <= keys


def test_response_value_conversion():
    assert convert_response_value("12", "number") == 12
    assert convert_response_value("12.5", "number") == 12.5
    assert convert_response_value("lots", "number") is None
    assert convert_response_value("2026-11-07", "date") == date(2026, 11, 7)
    assert convert_response_value("11/07/2026", "date") is None
    assert convert_response_value("18:30", "time") == "18:30"
    assert convert_response_value(["A", "", "B"], "text") == "A, B"
    assert convert_response_value("   ", "text") is None

    updates = group_responses_by_table(
        [{"id": "f1", "type": "text", "saveResponseTo": "nowhere.column"}, *FIELDS], {"f1": "x", "guests": "9"}
    )
    assert updates == {"events": {"guest_count": 9}}
