from datetime import date, datetime, timezone

import pytest

from boothops.domain.staff_forms import service as staff_form_service
from boothops.domain.staff_forms.service import date_label, recap_due_date
from boothops.models import Attachment
from boothops.models_event import Event, EventDate, EventFormTemplate, EventStaffAssignment, StaffForm, Task
from tests.conftest import SUBDOMAIN, TENANT_ID


def test_recap_due_date_prefers_the_date_end_time():
    event = Event(title="Gala", end_date=date(2025, 8, 3))
    event_date = EventDate(event_date=date(2025, 8, 2), end_time="22:30")
    assert recap_due_date(event, event_date) == datetime(2025, 8, 3, 22, 30, tzinfo=timezone.utc)


def test_recap_due_date_falls_back_to_event_end_then_now():
    assert recap_due_date(Event(title="Gala", end_date=date(2025, 8, 3)), None) == datetime(
        2025, 8, 4, tzinfo=timezone.utc
    )
    now = datetime(2025, 1, 1, 12, tzinfo=timezone.utc)
    assert recap_due_date(Event(title="Gala"), None, now=now) == datetime(2025, 1, 3, 12, tzinfo=timezone.utc)


def test_date_label():
    assert date_label(date(2025, 10, 3)) == "Oct 3"
    assert date_label(None) == ""


@pytest.fixture
def emails(monkeypatch):
    sent = []

    async def fake_request(to, company_name, staff_name, event_title, date_text, form_url):
        sent.append({"to": to, "url": form_url, "date": date_text})

    monkeypatch.setattr(staff_form_service, "send_staff_form_request", fake_request)
    return sent


@pytest.fixture
def crew_event(db, make_user):
    staff, _ = make_user(first_name="Jordan", department="operations")
    event = Event(tenant_id=TENANT_ID, title="Tech Expo")
    template = EventFormTemplate(
        tenant_id=TENANT_ID,
        name="Event Recap",
        fields=[{"name": "photos_taken", "type": "number", "label": "Photos taken"}],
    )
    db.add_all([event, template])
    db.flush()
    days = [
        EventDate(tenant_id=TENANT_ID, event_id=event.id, event_date=date(2025, 10, 3), end_time="18:00"),
        EventDate(tenant_id=TENANT_ID, event_id=event.id, event_date=date(2025, 10, 4), end_time="18:00"),
    ]
    assignment = EventStaffAssignment(tenant_id=TENANT_ID, event_id=event.id, user_id=staff.id)
    db.add_all(days + [assignment])
    db.commit()
    return {"event": event, "template": template, "assignment": assignment, "days": days, "staff": staff}


def _send(client, headers, crew_event):
    return client.post(
        "/api/staff-forms/send",
        json={
            "event_id": crew_event["event"].id,
            "template_id": crew_event["template"].id,
            "staff_assignment_ids": [crew_event["assignment"].id],
        },
        headers=headers,
    )


def test_send_creates_one_form_and_task_per_day(client, db, auth_headers, crew_event, emails):
    response = _send(client, auth_headers, crew_event)
    assert response.status_code == 200
    body = response.json()
    assert body["created"] == 2
    assert body["isMultiDay"] is True
    assert body["skipped"] == 0

    tasks = db.query(Task).filter(Task.entity_id == crew_event["event"].id).order_by(Task.title).all()
    assert [t.title for t in tasks] == ["Complete Post-Event Recap (Oct 3)", "Complete Post-Event Recap (Oct 4)"]
    assert all(t.task_type == "post_event" and t.assigned_to == crew_event["staff"].id for t in tasks)
    assert [e["date"] for e in emails] == ["Oct 3", "Oct 4"]
    assert emails[0]["url"].endswith(f"/{SUBDOMAIN}/staff-form/{body['forms'][0]['public_id']}")

    again = _send(client, auth_headers, crew_event).json()
    assert again["created"] == 0
    assert again["skipped"] == 2


def test_send_requires_fields(client, auth_headers):
    response = client.post("/api/staff-forms/send", json={"event_id": "x"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields: event_id, template_id, staff_assignment_ids"


def test_public_form_view_and_submit(client, db, auth_headers, crew_event, emails):
    sent = _send(client, auth_headers, crew_event).json()
    public_id = sent["forms"][0]["public_id"]

    view = client.get(f"/api/public/{SUBDOMAIN}/staff-forms/{public_id}")
    assert view.status_code == 200
    body = view.json()
    assert body["form"]["status"] == "viewed"
    assert body["eventDate"]["event_date"] == "2025-10-03"
    assert body["staff"]["name"] == "Jordan Staff"
    assert body["tenant"]["name"] == "Our Company"
    assert [d["event_date"] for d in body["otherDates"]] == ["2025-10-04"]
    assert body["otherDates"][0]["has_form"] is True

    missing = client.post(f"/api/public/{SUBDOMAIN}/staff-forms/{public_id}", json={})
    assert missing.status_code == 400
    assert missing.json()["error"] == "Responses are required"

    submitted = client.post(
        f"/api/public/{SUBDOMAIN}/staff-forms/{public_id}", json={"responses": {"photos_taken": 412}}
    )
    assert submitted.json() == {"success": True}

    form = db.query(StaffForm).filter(StaffForm.public_id == public_id).one()
    assert form.status == "completed"
    assert form.responses["photos_taken"] == 412
    assert "_submittedAt" in form.responses
    assert db.query(Task).filter(Task.id == form.task_id).one().status == "completed"

    twice = client.post(f"/api/public/{SUBDOMAIN}/staff-forms/{public_id}", json={"responses": {"x": 1}})
    assert twice.status_code == 400
    assert twice.json()["error"] == "Form already submitted"


def test_public_form_rejects_short_ids(client):
    response = client.get(f"/api/public/{SUBDOMAIN}/staff-forms/abc")
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid form ID"


def test_upload_stores_file_and_is_rate_limited(client, db, auth_headers, crew_event, emails, monkeypatch):
    uploaded = []
    monkeypatch.setattr(staff_form_service.storage, "upload_bytes", lambda key, content, ctype: uploaded.append(key))
    public_id = _send(client, auth_headers, crew_event).json()["forms"][0]["public_id"]
    url = f"/api/public/{SUBDOMAIN}/staff-forms/{public_id}/upload"

    bad_type = client.post(url, files={"file": ("notes.txt", b"hello", "text/plain")})
    assert bad_type.status_code == 400

    ok = client.post(url, files={"file": ("booth.jpg", b"\xff\xd8jpeg-bytes", "image/jpeg")})
    assert ok.status_code == 200
    assert ok.json()["attachment"]["entity_type"] == "staff_form"
    assert uploaded[0].endswith(".jpg")
    assert db.query(Attachment).filter(Attachment.entity_type == "staff_form").count() == 1

    for _ in range(8):
        client.post(url, files={"file": ("booth.jpg", b"\xff\xd8jpeg-bytes", "image/jpeg")})
    limited = client.post(url, files={"file": ("booth.jpg", b"\xff\xd8jpeg-bytes", "image/jpeg")})
    assert limited.status_code == 429
    assert limited.json()["error"] == "Too many requests"
    assert "Retry-After" in limited.headers


def test_send_ignores_dates_and_assignments_from_other_events(client, db, auth_headers, crew_event, emails, make_user):
    outsider, _ = make_user(first_name="Riley")
    other_event = Event(tenant_id=TENANT_ID, title="Other Expo")
    db.add(other_event)
    db.flush()
    foreign_date = EventDate(tenant_id=TENANT_ID, event_id=other_event.id, event_date=date(2025, 12, 1))
    foreign_assignment = EventStaffAssignment(tenant_id=TENANT_ID, event_id=other_event.id, user_id=outsider.id)
    db.add_all([foreign_date, foreign_assignment])
    db.commit()

    response = client.post(
        "/api/staff-forms/send",
        json={
            "event_id": crew_event["event"].id,
            "template_id": crew_event["template"].id,
            "staff_assignment_ids": [crew_event["assignment"].id, foreign_assignment.id],
            "event_date_ids": [crew_event["days"][0].id, foreign_date.id],
        },
        headers=auth_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert body["created"] == 1
    assert body["isMultiDay"] is False

    forms = db.query(StaffForm).filter(StaffForm.event_id == crew_event["event"].id).all()
    assert [f.staff_assignment_id for f in forms] == [crew_event["assignment"].id]
    assert db.query(Task).filter(Task.assigned_to == outsider.id).count() == 0
    assert db.query(StaffForm).filter(StaffForm.event_date_id == foreign_date.id).count() == 0
