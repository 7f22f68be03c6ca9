from datetime import date

from boothops.models_event import Event, EventDate, EventStaffAssignment
from tests.conftest import SUBDOMAIN, TENANT_ID


def test_login_returns_session_token(client, admin):
    staff, _ = admin
    response = client.post("/api/auth/login", json={"email": staff.email, "password": "correct-horse"})
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["tenant_subdomain"] == SUBDOMAIN

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == staff.email


def test_login_rejects_wrong_password(client, admin):
    staff, _ = admin
    response = client.post("/api/auth/login", json={"email": staff.email, "password": "nope"})
    assert response.status_code == 401
    assert response.json() == {"error": "Invalid email or password"}


def test_requests_without_token_are_unauthorized(client):
    response = client.get("/api/users")
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthorized"


def test_tenant_mismatch_is_forbidden(client, auth_headers):
    response = client.get("/api/users", headers={**auth_headers, "X-Tenant": "otherbooths"})
    assert response.status_code == 403

    same = client.get("/api/users", headers={**auth_headers, "X-Tenant": SUBDOMAIN})
    assert same.status_code == 200


def test_available_users_report_conflicts(client, db, auth_headers, make_user):
    busy, _ = make_user(department="operations", first_name="Bea")
    free, _ = make_user(department="operations", first_name="Cal")

    target = Event(tenant_id=TENANT_ID, title="Smith Wedding")
    other = Event(tenant_id=TENANT_ID, title="Corporate Gala")
    db.add_all([target, other])
    db.flush()
    db.add_all(
        [
            EventDate(tenant_id=TENANT_ID, event_id=target.id, event_date=date(2025, 9, 6)),
            EventDate(tenant_id=TENANT_ID, event_id=other.id, event_date=date(2025, 9, 6)),
            EventStaffAssignment(tenant_id=TENANT_ID, event_id=other.id, user_id=busy.id),
        ]
    )
    db.commit()

    response = client.get(
        "/api/users/available",
        params={"event_id": target.id, "department": "operations"},
        headers=auth_headers,
    )
    assert response.status_code == 200
    by_id = {u["id"]: u for u in response.json()}
    assert by_id[free.id]["is_available"] is True
    assert by_id[busy.id]["is_available"] is False
    assert by_id[busy.id]["conflicts"][0]["event_title"] == "Corporate Gala"


def test_available_users_requires_department(client, auth_headers):
    response = client.get("/api/users/available", params={"event_id": "x"}, headers=auth_headers)
    assert response.status_code == 400
    assert response.json()["error"] == "department is required"


def test_non_admin_cannot_update_someone_else(client, admin, make_user):
    staff, _ = admin
    _, member_headers = make_user()
    response = client.patch(f"/api/users/{staff.id}", json={"phone": "555"}, headers=member_headers)
    assert response.status_code == 403
