"""Design repository - Database operations for design types, items and design tasks"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models_event import DesignItemType, Event, EventDesignItem, Task


class DesignRepository:
    """Repository for design database operations"""

    @staticmethod
    def list_types(db: Session, tenant_id: str, include_inactive: bool = True) -> list[DesignItemType]:
        query = db.query(DesignItemType).filter(DesignItemType.tenant_id == tenant_id)
        if not include_inactive:
            query = query.filter(DesignItemType.is_active.is_(True))
        return query.order_by(DesignItemType.sort_order, DesignItemType.name).all()

    @staticmethod
    def get_type(db: Session, tenant_id: str, type_id: str) -> Optional[DesignItemType]:
        return (
            db.query(DesignItemType)
            .filter(DesignItemType.id == type_id, DesignItemType.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def auto_added_types(db: Session, tenant_id: str) -> list[DesignItemType]:
        return (
            db.query(DesignItemType)
            .filter(
                DesignItemType.tenant_id == tenant_id,
                DesignItemType.is_auto_added.is_(True),
                DesignItemType.is_active.is_(True),
            )
            .order_by(DesignItemType.sort_order)
            .all()
        )

    @staticmethod
    def find_event_item(
        db: Session, tenant_id: str, event_id: str, type_id: str
    ) -> Optional[EventDesignItem]:
        return (
            db.query(EventDesignItem)
            .filter(
                EventDesignItem.tenant_id == tenant_id,
                EventDesignItem.event_id == event_id,
                EventDesignItem.design_item_type_id == type_id,
            )
            .first()
        )

    @staticmethod
    def design_tasks(
        db: Session,
        tenant_id: str,
        designer_id: Optional[str] = None,
        status: Optional[str] = None,
        event_id: Optional[str] = None,
    ) -> list[Task]:
        query = (
            db.query(Task)
            .options(
                joinedload(Task.assignee),
                joinedload(Task.template),
                joinedload(Task.design_item_type),
            )
            .filter(Task.tenant_id == tenant_id, Task.task_type == "design")
        )
        if designer_id:
            query = query.filter(Task.assigned_to == designer_id)
        if status:
            query = query.filter(Task.status == status)
        if event_id:
            query = query.filter(Task.entity_type == "event", Task.entity_id == event_id)
        # nulls last on every backend
        return query.order_by(Task.design_deadline.is_(None), Task.design_deadline.asc()).all()

    @staticmethod
    def events_by_id(db: Session, tenant_id: str, event_ids: set[str]) -> dict[str, Event]:
        if not event_ids:
            return {}
        events = (
            db.query(Event)
            .options(joinedload(Event.dates))
            .filter(Event.tenant_id == tenant_id, Event.id.in_(event_ids))
            .all()
        )
        return {event.id: event for event in events}
