from datetime import date

import pytest

from boothops.domain.inventory.service import check_availability
from boothops.models import PhysicalAddress
from boothops.models_event import Event, EventDate, EventStaffAssignment
from boothops.models_inventory import InventoryItem, ProductGroup, ProductGroupItem
from tests.conftest import TENANT_ID


def _item(**overrides):
    row = {
        "assigned_to_name": None,
        "assignment_type": None,
        "expected_return_date": None,
        "event_id": None,
    }
    row.update(overrides)
    return row


def test_long_term_assignment_is_never_available():
    ok, reason = check_availability(
        _item(assignment_type="long_term_staff", assigned_to_name="Pat Lee"), date(2025, 5, 1), date(2025, 5, 3)
    )
    assert not ok
    assert reason == "Assigned to Pat Lee (long-term)"


def test_checkout_returning_inside_window_marks_available_from():
    row = _item(assignment_type="event_checkout", expected_return_date=date(2025, 5, 2))
    ok, reason = check_availability(row, date(2025, 5, 1), date(2025, 5, 10))
    assert not ok
    assert reason == "Returns 5/2/2025 (assigned)"
    assert row["returns_during_period"] is True
    assert row["available_from"] == date(2025, 5, 2)


def test_checkout_returning_before_window_is_available():
    row = _item(assignment_type="event_checkout", expected_return_date=date(2025, 4, 30))
    assert check_availability(row, date(2025, 5, 1), date(2025, 5, 10)) == (True, "")


@pytest.fixture
def stocked(db):
    """Warehouse, one event with a rostered operator, and a mix of holders"""
    warehouse = PhysicalAddress(tenant_id=TENANT_ID, location_name="Main Warehouse")
    event = Event(tenant_id=TENANT_ID, title="Spring Fair", start_date=date(2025, 5, 3))
    db.add_all([warehouse, event])
    db.flush()
    db.add(EventDate(tenant_id=TENANT_ID, event_id=event.id, event_date=date(2025, 5, 3)))
    db.commit()
    return {"warehouse": warehouse, "event": event}


def test_availability_endpoint_splits_items(client, db, auth_headers, stocked):
    event = stocked["event"]
    free = InventoryItem(
        tenant_id=TENANT_ID,
        item_name="Camera A",
        assigned_to_type="physical_address",
        assigned_to_id=stocked["warehouse"].id,
    )
    booked = InventoryItem(tenant_id=TENANT_ID, item_name="Printer B", event_id=event.id)
    db.add_all([free, booked])
    db.commit()

    response = client.get(
        "/api/inventory-items/availability",
        params={"start_date": "2025-05-01", "end_date": "2025-05-05"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    body = response.json()
    assert [i["item_name"] for i in body["available"]] == ["Camera A"]
    assert body["available"][0]["location"] == "Main Warehouse"
    assert body["unavailable"][0]["unavailable_reason"] == "Booked for Spring Fair on 5/3/2025"
    assert body["summary"]["total"] == 2


def test_availability_requires_both_dates(client, auth_headers):
    response = client.get("/api/inventory-items/availability", params={"start_date": "2025-05-01"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "start_date and end_date are required"


def test_item_assignment_validation(client, auth_headers):
    response = client.post(
        "/api/inventory-items",
        json={"item_name": "Backdrop", "assigned_to_type": "spaceship", "assigned_to_id": "x"},
        headers=auth_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid assigned_to_type: spaceship"


def test_event_inventory_lists_items_reachable_by_the_crew(client, db, auth_headers, make_user, stocked):
    event = stocked["event"]
    crew, _ = make_user(first_name="Robin")
    outsider, _ = make_user(first_name="Quinn")
    db.add(EventStaffAssignment(tenant_id=TENANT_ID, event_id=event.id, user_id=crew.id))

    kit = ProductGroup(
        tenant_id=TENANT_ID,
        group_name="Mirror Booth Kit",
        assigned_to_type="physical_address",
        assigned_to_id=stocked["warehouse"].id,
    )
    db.add(kit)
    db.flush()
    items = {
        "crew": InventoryItem(tenant_id=TENANT_ID, item_name="Ring Light", assigned_to_type="user", assigned_to_id=crew.id),
        "outsider": InventoryItem(
            tenant_id=TENANT_ID, item_name="Tripod", assigned_to_type="user", assigned_to_id=outsider.id
        ),
        "loose": InventoryItem(tenant_id=TENANT_ID, item_name="Props Bin"),
        "kit": InventoryItem(tenant_id=TENANT_ID, item_name="Mirror", assigned_to_type="product_group", assigned_to_id=kit.id),
    }
    db.add_all(items.values())
    db.flush()
    db.add(ProductGroupItem(tenant_id=TENANT_ID, product_group_id=kit.id, inventory_item_id=items["kit"].id))
    db.commit()

    body = client.get(
        f"/api/events/{event.id}/inventory", params={"include_available": "true"}, headers=auth_headers
    ).json()
    names = {i["item_name"] for i in body["available"]}
    assert names == {"Ring Light", "Props Bin", "Mirror"}
    assert [g["group_name"] for g in body["available_product_groups"]] == ["Mirror Booth Kit"]

    searched = client.get(
        f"/api/events/{event.id}/inventory",
        params={"include_available": "true", "search": "ring"},
        headers=auth_headers,
    ).json()
    assert [i["item_name"] for i in searched["available"]] == ["Ring Light"]
    assert searched["available_product_groups"] == []


def test_checkout_and_release_from_event(client, db, auth_headers, stocked):
    event = stocked["event"]
    kit = ProductGroup(tenant_id=TENANT_ID, group_name="Audio Kit")
    speaker = InventoryItem(tenant_id=TENANT_ID, item_name="Speaker")
    mic = InventoryItem(tenant_id=TENANT_ID, item_name="Mic")
    db.add_all([kit, speaker, mic])
    db.flush()
    db.add(ProductGroupItem(tenant_id=TENANT_ID, product_group_id=kit.id, inventory_item_id=mic.id))
    db.commit()

    assigned = client.post(
        f"/api/events/{event.id}/inventory",
        json={"inventory_item_ids": [speaker.id, mic.id], "product_group_ids": [kit.id]},
        headers=auth_headers,
    ).json()
    assert assigned["assigned_count"] == 2
    assert {i["expected_return_date"] for i in assigned["items"]} == {"2025-05-08"}

    listing = client.get(f"/api/events/{event.id}/inventory", headers=auth_headers).json()
    assert listing["total_assigned"] == 2

    blocked = client.delete(f"/api/inventory-items/{speaker.id}", headers=auth_headers)
    assert blocked.status_code == 400

    released = client.delete(
        f"/api/events/{event.id}/inventory", params={"item_ids": f"{speaker.id},{mic.id}"}, headers=auth_headers
    ).json()
    assert released == {"success": True, "removed_count": 2}


def test_checkout_requires_items(client, auth_headers, stocked):
    response = client.post(f"/api/events/{stocked['event'].id}/inventory", json={}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "inventory_item_ids or product_group_ids array is required"
