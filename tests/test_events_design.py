from datetime import date, timedelta

from boothops.models import Location
from boothops.models_event import DesignItemType, EventDesignItem, StaffRole, Task
from boothops.models_invoice import Invoice, InvoiceLineItem
from tests.conftest import SUBDOMAIN, TENANT_ID


def _iso(days_from_today: int) -> str:
    return (date.today() + timedelta(days=days_from_today)).isoformat()


def test_create_event_adds_auto_design_items(client, db, auth_headers):
    db.add(
        DesignItemType(
            tenant_id=TENANT_ID,
            name="Print Template",
            type="physical",
            default_design_days=5,
            default_production_days=3,
            default_shipping_days=2,
            is_auto_added=True,
        )
    )
    db.commit()

    response = client.post(
        "/api/events",
        json={
            "title": "Harbor Gala",
            "event_dates": [{"event_date": _iso(40)}, {"event_date": _iso(41)}],
        },
        headers=auth_headers,
    )
    assert response.status_code == 200
    event = response.json()
    assert event["start_date"] == _iso(40)
    assert event["end_date"] == _iso(41)

    item = db.query(EventDesignItem).filter(EventDesignItem.event_id == event["id"]).one()
    assert item.design_deadline == date.today() + timedelta(days=35)
    assert item.design_start_date == date.today() + timedelta(days=30)
    task = db.query(Task).filter(Task.id == item.task_id).one()
    assert task.title == "Design: Print Template"
    assert task.department == "design"


def test_create_event_requires_a_date(client, auth_headers):
    response = client.post("/api/events", json={"title": "No Dates"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "At least one event date is required"


def test_design_dashboard_buckets_by_event_distance(client, auth_headers):
    soon = client.post(
        "/api/events", json={"title": "Soon", "event_dates": [{"event_date": _iso(5)}]}, headers=auth_headers
    ).json()
    later = client.post(
        "/api/events", json={"title": "Later", "event_dates": [{"event_date": _iso(60)}]}, headers=auth_headers
    ).json()
    for event in (soon, later):
        created = client.post(
            f"/api/events/{event['id']}/design-items",
            json={"custom_name": "Welcome Sign", "custom_type": "digital"},
            headers=auth_headers,
        )
        assert created.status_code == 200

    body = client.get("/api/design/dashboard", headers=auth_headers).json()
    assert body["stats"]["total"] == 2
    assert body["stats"]["missedDeadline"] == 1
    assert body["stats"]["onTime"] == 1
    assert body["categories"]["missedDeadline"][0]["event"]["title"] == "Soon"


def test_staff_brief_is_public_once_enabled(client, db, auth_headers, make_user):
    venue = Location(tenant_id=TENANT_ID, name="Pier 9", address_line1="9 Harbor Way", city="Oakland", state="CA")
    manager_role = StaffRole(tenant_id=TENANT_ID, name="Event Manager", type="operations")
    designer_role = StaffRole(tenant_id=TENANT_ID, name="Graphic Designer", type="design")
    db.add_all([venue, manager_role, designer_role])
    db.commit()

    event = client.post(
        "/api/events",
        json={"title": "Pier Party", "event_dates": [{"event_date": _iso(10), "location_id": venue.id}]},
        headers=auth_headers,
    ).json()
    manager, _ = make_user(first_name="Morgan")
    designer, _ = make_user(first_name="Drew")
    for user, role in ((manager, manager_role), (designer, designer_role)):
        assigned = client.post(
            f"/api/events/{event['id']}/staff",
            json={"user_id": user.id, "staff_role_id": role.id},
            headers=auth_headers,
        )
        assert assigned.status_code == 200

    invoice = Invoice(tenant_id=TENANT_ID, invoice_number="INV-0009", event_id=event["id"], status="sent")
    invoice.line_items.append(InvoiceLineItem(tenant_id=TENANT_ID, item_type="package", name="Glam Booth"))
    invoice.line_items.append(InvoiceLineItem(tenant_id=TENANT_ID, item_type="add_on", name="Guest Book", sort_order=1))
    db.add(invoice)
    db.commit()

    toggled = client.post(f"/api/events/{event['id']}/staff-brief", json={"enabled": False}, headers=auth_headers)
    assert toggled.json()["staff_brief_token"] is None
    token = client.post(
        f"/api/events/{event['id']}/staff-brief", json={"enabled": True}, headers=auth_headers
    ).json()["staff_brief_token"]

    brief = client.get(f"/api/public/{SUBDOMAIN}/brief/{token}")
    assert brief.status_code == 200
    body = brief.json()
    assert body["event"]["title"] == "Pier Party"
    assert body["venue"]["name"] == "Pier 9"
    assert body["venue"]["googleMapsUrl"].startswith("https://www.google.com/maps/search/?api=1&query=9%20Harbor%20Way")
    assert body["package"]["name"] == "Glam Booth"
    assert body["addOns"] == [{"name": "Guest Book"}]
    assert [s["name"] for s in body["staff"]] == ["Morgan Staff"]
    assert body["staff"][0]["isManager"] is True

    client.post(f"/api/events/{event['id']}/staff-brief", json={"enabled": False}, headers=auth_headers)
    disabled = client.get(f"/api/public/{SUBDOMAIN}/brief/{token}")
    assert disabled.status_code == 403
    assert disabled.json()["error"] == "Staff brief access disabled for this event"


def test_staff_brief_rejects_malformed_tokens(client):
    response = client.get(f"/api/public/{SUBDOMAIN}/brief/not-a-token")
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid staff brief token"


def test_assigning_a_designer_stamps_the_design_task(client, db, auth_headers, make_user):
    designer, _ = make_user(first_name="Dana", department="design", department_role="member")
    event = client.post(
        "/api/events", json={"title": "Spring Social", "event_dates": [{"event_date": _iso(30)}]}, headers=auth_headers
    ).json()

    assigned = client.post(
        f"/api/events/{event['id']}/design-items",
        json={"custom_name": "Photo Strip", "custom_type": "physical", "assigned_designer_id": designer.id},
        headers=auth_headers,
    ).json()["designItem"]
    unassigned = client.post(
        f"/api/events/{event['id']}/design-items",
        json={"custom_name": "Backdrop", "custom_type": "physical"},
        headers=auth_headers,
    ).json()["designItem"]

    task = db.query(Task).filter(Task.id == assigned["task_id"]).one()
    assert task.assigned_to == designer.id
    assert task.assigned_at is not None
    assert db.query(Task).filter(Task.id == unassigned["task_id"]).one().assigned_at is None
