"""Task repository - Database operations for the unified task table"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import User
from ...models_event import Task

ACTIVE_STATUSES = ("pending", "in_progress")
CLOSED_STATUSES = ("completed", "approved", "cancelled")


class TaskRepository:
    """Repository for task database operations"""

    @staticmethod
    def get_task(db: Session, tenant_id: str, task_id: str) -> Optional[Task]:
        return db.query(Task).filter(Task.id == task_id, Task.tenant_id == tenant_id).first()

    @staticmethod
    def department_tasks(
        db: Session, tenant_id: str, department: str, assigned_to: Optional[str] = None
    ) -> list[Task]:
        query = (
            db.query(Task)
            .options(joinedload(Task.assignee))
            .filter(
                Task.tenant_id == tenant_id,
                Task.department == department,
                Task.status.in_(ACTIVE_STATUSES),
            )
        )
        if assigned_to:
            query = query.filter(Task.assigned_to == assigned_to)
        return query.order_by(Task.due_date.is_(None), Task.due_date.asc()).all()

    @staticmethod
    def tasks_by_type(
        db: Session,
        tenant_id: str,
        task_type: str,
        status: Optional[str] = None,
        assigned_to: Optional[str] = None,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        include_completed: bool = False,
    ) -> list[Task]:
        query = db.query(Task).filter(Task.tenant_id == tenant_id, Task.task_type == task_type)
        if status:
            query = query.filter(Task.status == status)
        elif not include_completed:
            query = query.filter(Task.status.notin_(CLOSED_STATUSES))
        if assigned_to:
            query = query.filter(Task.assigned_to == assigned_to)
        if entity_type:
            query = query.filter(Task.entity_type == entity_type)
        if entity_id:
            query = query.filter(Task.entity_id == entity_id)
        return query.order_by(Task.due_date.is_(None), Task.due_date.asc()).all()

    @staticmethod
    def get_user(db: Session, tenant_id: str, user_id: Optional[str]) -> Optional[User]:
        if not user_id:
            return None
        return db.query(User).filter(User.id == user_id, User.tenant_id == tenant_id).first()
