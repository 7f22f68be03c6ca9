from datetime import date, datetime, timedelta, timezone

from boothops.domain.tasks.service import can_access_department


def test_department_access_rules():
    assert can_access_department(None, None, "design", system_role="admin")
    assert can_access_department("sales", "manager", "design")
    assert can_access_department("design", "member", "design")
    assert not can_access_department("sales", "supervisor", "design")


def _due(days: int) -> str:
    return datetime.combine(date.today() + timedelta(days=days), datetime.min.time(), tzinfo=timezone.utc).isoformat()


def test_dashboard_counts_by_urgency(client, auth_headers):
    for title, days in (("Late", -2), ("Today", 0), ("This week", 3), ("This month", 20)):
        created = client.post(
            "/api/tasks",
            json={"title": title, "task_type": "operations", "department": "operations", "due_date": _due(days)},
            headers=auth_headers,
        )
        assert created.status_code == 200

    body = client.get("/api/tasks/dashboard", params={"department": "operations"}, headers=auth_headers).json()
    stats = body["stats"]
    assert stats["total"] == 4
    assert (stats["overdue"], stats["due_today"], stats["due_this_week"], stats["due_this_month"]) == (1, 1, 1, 1)
    assert {t["title"]: t["urgency"] for t in body["tasks"]}["Late"] == "overdue"


def test_members_only_see_their_department(client, make_user):
    _, headers = make_user(department="sales", department_role="member")
    denied = client.get("/api/tasks/dashboard", params={"department": "design"}, headers=headers)
    assert denied.status_code == 403
    assert denied.json()["error"] == "Unauthorized"
    assert "design department dashboard" in denied.json()["message"]

    allowed = client.get("/api/tasks/dashboard", params={"department": "sales"}, headers=headers)
    assert allowed.status_code == 200


def test_completing_a_task_stamps_completion(client, auth_headers):
    task = client.post("/api/tasks", json={"title": "Pack props"}, headers=auth_headers).json()
    done = client.patch(f"/api/tasks/{task['id']}", json={"status": "completed"}, headers=auth_headers).json()
    assert done["status"] == "completed"
    assert done["completed_at"] is not None

    reopened = client.patch(f"/api/tasks/{task['id']}", json={"status": "pending"}, headers=auth_headers).json()
    assert reopened["completed_at"] is None


def test_invalid_task_type_is_rejected(client, auth_headers):
    response = client.get("/api/tasks/by-type/party", headers=auth_headers)
    assert response.status_code == 400


def test_reassigning_a_task_stamps_assignment_time(client, auth_headers, make_user):
    crew, _ = make_user(first_name="Casey")
    task = client.post("/api/tasks", json={"title": "Load van"}, headers=auth_headers).json()
    assert task["assigned_at"] is None

    assigned = client.patch(f"/api/tasks/{task['id']}", json={"assigned_to": crew.id}, headers=auth_headers).json()
    assert assigned["assigned_to"] == crew.id
    assert assigned["assigned_at"] is not None

    cleared = client.patch(f"/api/tasks/{task['id']}", json={"assigned_to": None}, headers=auth_headers).json()
    assert cleared["assigned_at"] is None
