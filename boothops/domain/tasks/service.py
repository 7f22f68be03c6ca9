"""Task service - Department dashboards and task updates"""

import logging
from datetime import date, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import ADMIN_ROLES
from ...models_event import Event, Task
from ...utils.dates import as_utc, utcnow
from ...utils.sanitization import sanitize_string
from ...utils.serialization import row_to_dict
from ..deadlines import task_urgency
from ..design.service import user_summary
from .repository import TaskRepository
from .schemas import TaskCreate, TaskUpdate

logger = logging.getLogger(__name__)

DEPARTMENTS = {"sales", "design", "operations", "customer_success", "accounting", "admin", "event_staff"}
TASK_TYPES = {"general", "design", "operations", "sales", "admin", "project", "misc", "post_event"}
TASK_STATUSES = {"pending", "in_progress", "completed", "approved", "cancelled"}
PRIORITIES = ("low", "medium", "high", "urgent")


def can_access_department(
    user_department: Optional[str],
    department_role: Optional[str],
    target_department: str,
    system_role: Optional[str] = None,
) -> bool:
    """Admins and department managers see every department; everyone else only their own"""
    if system_role in ADMIN_ROLES:
        return True
    if department_role == "manager":
        return True
    if department_role in ("supervisor", "member") and user_department == target_department:
        return True
    return False


def task_with_urgency(task: Task, today: date) -> dict:
    due = task.due_date.date() if task.due_date else None
    payload = row_to_dict(task)
    payload["urgency"] = task_urgency(due, today)
    payload["days_until_due"] = (due - today).days if due else None
    payload["assigned_user"] = user_summary(task.assignee)
    return payload


def dashboard_stats(tasks: list[dict], today: date) -> dict:
    one_week = today + timedelta(days=7)
    one_month = today + timedelta(days=30)
    week_ago = utcnow() - timedelta(days=7)

    counts = {"overdue": 0, "due_today": 0, "due_this_week": 0, "due_this_month": 0}
    by_status = {status: 0 for status in ("pending", "in_progress", "completed", "cancelled")}
    by_priority = {priority: 0 for priority in PRIORITIES}
    by_assignee: dict[str, int] = {}
    completed_recently = 0

    for task in tasks:
        if task["status"] in by_status:
            by_status[task["status"]] += 1
        if task["priority"] in by_priority:
            by_priority[task["priority"]] += 1
        if task["assigned_to"]:
            by_assignee[task["assigned_to"]] = by_assignee.get(task["assigned_to"], 0) + 1
        if task["status"] == "completed" and task["completed_at"] and as_utc(task["completed_at"]) >= week_ago:
            completed_recently += 1

        if task["status"] not in ("pending", "in_progress") or not task["due_date"]:
            continue
        due = task["due_date"].date()
        if due < today:
            counts["overdue"] += 1
        elif due == today:
            counts["due_today"] += 1
        elif due < one_week:
            counts["due_this_week"] += 1
        elif due < one_month:
            counts["due_this_month"] += 1

    return {
        "total": len(tasks),
        **counts,
        "completed_last_7_days": completed_recently,
        **by_status,
        "by_priority": by_priority,
        "by_assignee": [{"user_id": uid, "count": count} for uid, count in by_assignee.items()],
    }


class TaskService:
    """Service layer for task business logic"""

    def __init__(self, db: Session, tenant_id: str, user_id: Optional[str] = None, system_role: Optional[str] = None):
        self.db = db
        self.tenant_id = tenant_id
        self.user_id = user_id
        self.system_role = system_role
        self.repo = TaskRepository()

    def get_task(self, task_id: str) -> Task:
        task = self.repo.get_task(self.db, self.tenant_id, task_id)
        if not task:
            raise HTTPException(status_code=404, detail="Task not found")
        return task

    def dashboard(self, department: Optional[str], assigned_to: Optional[str] = None, today: Optional[date] = None) -> dict:
        if not department:
            raise HTTPException(status_code=400, detail="Department is required")

        user = self.repo.get_user(self.db, self.tenant_id, self.user_id)
        user_department = user.department if user else None
        department_role = (user.department_role if user else None) or "member"
        if not can_access_department(user_department, department_role, department, self.system_role):
            logger.warning(f"🔒 User {self.user_id} denied access to the {department} dashboard")
            raise HTTPException(
                status_code=403,
                detail={
                    "error": "Unauthorized",
                    "message": f"You do not have permission to access the {department} department dashboard",
                },
            )

        today = today or date.today()
        tasks = self.repo.department_tasks(self.db, self.tenant_id, department, assigned_to)

        event_ids = {t.entity_id for t in tasks if t.entity_type == "event" and t.entity_id}
        events = {}
        if event_ids:
            for event in self.db.query(Event).filter(Event.tenant_id == self.tenant_id, Event.id.in_(event_ids)):
                events[event.id] = {
                    "id": event.id,
                    "title": event.title,
                    "event_dates": [{"event_date": d.event_date} for d in event.dates],
                }

        enriched = []
        for task in tasks:
            payload = task_with_urgency(task, today)
            if task.entity_type == "event" and task.entity_id in events:
                payload["event"] = events[task.entity_id]
            enriched.append(payload)

        return {"tasks": enriched, "stats": dashboard_stats(enriched, today)}

    def tasks_by_type(self, task_type: str, **filters) -> list[dict]:
        if task_type not in TASK_TYPES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid task type. Valid types: {', '.join(sorted(TASK_TYPES))}",
            )
        today = date.today()
        return [
            task_with_urgency(task, today)
            for task in self.repo.tasks_by_type(self.db, self.tenant_id, task_type, **filters)
        ]

    def create_task(self, data: TaskCreate) -> Task:
        if data.task_type not in TASK_TYPES:
            raise HTTPException(status_code=400, detail=f"Invalid task type: {data.task_type}")
        if data.department and data.department not in DEPARTMENTS:
            raise HTTPException(status_code=400, detail=f"Invalid department: {data.department}")
        if data.priority not in PRIORITIES:
            raise HTTPException(status_code=400, detail=f"Invalid priority: {data.priority}")

        fields = data.model_dump()
        fields["title"] = sanitize_string(fields["title"])
        fields["description"] = sanitize_string(fields["description"])
        if not fields["title"]:
            raise HTTPException(status_code=400, detail="Title is required")
        task = Task(tenant_id=self.tenant_id, created_by=self.user_id, status="pending", **fields)
        if task.assigned_to:
            task.assigned_at = utcnow()
        self.db.add(task)
        self.db.commit()
        self.db.refresh(task)
        logger.info(f"✅ Created task {task.id} ({task.task_type})")
        return task

    def update_task(self, task_id: str, data: TaskUpdate) -> Task:
        task = self.get_task(task_id)
        updates = data.model_dump(exclude_unset=True)
        if "status" in updates and updates["status"] not in TASK_STATUSES:
            raise HTTPException(status_code=400, detail=f"Invalid status: {updates['status']}")
        if "priority" in updates and updates["priority"] not in PRIORITIES:
            raise HTTPException(status_code=400, detail=f"Invalid priority: {updates['priority']}")
        for key in ("title", "description"):
            if key in updates:
                updates[key] = sanitize_string(updates[key])

        if "status" in updates:
            if updates["status"] in ("completed", "approved") and not task.completed_at:
                task.completed_at = utcnow()
            elif updates["status"] in ("pending", "in_progress"):
                task.completed_at = None

        if "assigned_to" in updates and updates["assigned_to"] != task.assigned_to:
            task.assigned_at = utcnow() if updates["assigned_to"] else None

        for key, value in updates.items():
            setattr(task, key, value)
        self.db.commit()
        self.db.refresh(task)
        return task
