"""Design service - Design item creation, deadlines and the design dashboard"""

import logging
from datetime import date, datetime, time, timedelta, timezone
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import User
from ...models_event import DesignItemType, Event, EventDesignItem, Task
from ...utils.dates import as_utc, utcnow
from ...utils.sanitization import sanitize_fields, sanitize_string
from ...utils.serialization import row_to_dict
from ..deadlines import (
    COMPLETED_STATUSES,
    PHYSICAL,
    DeadlineThresholds,
    classify_deadline,
    days_until,
    design_deadlines,
    task_priority_for_deadline,
)
from .repository import DesignRepository
from .schemas import DesignItemCreate, DesignItemTypeCreate, DesignItemTypeUpdate

logger = logging.getLogger(__name__)

ITEM_TYPES = {"digital", PHYSICAL}
RECENT_COMPLETION_DAYS = 7


def event_reference_date(event: Optional[Event]) -> Optional[date]:
    """Earliest scheduled date of the event, else its start date"""
    if not event:
        return None
    dates = [d.event_date for d in event.dates if d.event_date]
    if dates:
        return min(dates)
    return event.start_date


def user_summary(user: Optional[User]) -> Optional[dict]:
    if not user:
        return None
    return {
        "id": user.id,
        "first_name": user.first_name,
        "last_name": user.last_name,
        "email": user.email,
        "department": user.department,
    }


def _as_due_datetime(day: date) -> datetime:
    return datetime.combine(day, time.min, tzinfo=timezone.utc)


def _create_design_task(
    db: Session,
    tenant_id: str,
    event: Event,
    item: EventDesignItem,
    name: str,
    notes: Optional[str],
    created_by: Optional[str],
    today: date,
) -> Task:
    deadline = item.design_deadline
    task = Task(
        tenant_id=tenant_id,
        title=f"Design: {name}",
        description=notes
        or f"Complete {name} for this event. Due by {deadline.strftime('%m/%d/%Y')}",
        task_type="design",
        department="design",
        entity_type="event",
        entity_id=event.id,
        assigned_to=item.assigned_designer_id,
        assigned_at=utcnow() if item.assigned_designer_id else None,
        created_by=created_by,
        status="pending",
        priority=task_priority_for_deadline((deadline - today).days),
        due_date=_as_due_datetime(deadline),
        design_start_date=item.design_start_date,
        design_deadline=deadline,
        design_item_type_id=item.design_item_type_id,
    )
    db.add(task)
    db.flush()
    item.task_id = task.id
    return task


def create_design_item_for_event(
    db: Session,
    tenant_id: str,
    event: Event,
    item_type: DesignItemType,
    event_date: Optional[date] = None,
    custom_design_days: Optional[int] = None,
    assigned_designer_id: Optional[str] = None,
    notes: Optional[str] = None,
    created_by: Optional[str] = None,
    today: Optional[date] = None,
) -> tuple[EventDesignItem, bool]:
    """
    Create the design item and its design task for one configured type.

    Returns (item, created). An existing item for the same event and type
    is returned untouched.
    """
    existing = DesignRepository.find_event_item(db, tenant_id, event.id, item_type.id)
    if existing:
        logger.debug(f"Design item for type {item_type.id} already exists on event {event.id}")
        return existing, False

    reference = event_date or event_reference_date(event)
    if not reference:
        raise HTTPException(status_code=400, detail="Event has no date to schedule design work against")

    design_days = custom_design_days or item_type.default_design_days
    start, deadline = design_deadlines(
        reference,
        item_type.type,
        design_days,
        item_type.default_production_days,
        item_type.default_shipping_days,
    )
    item = EventDesignItem(
        tenant_id=tenant_id,
        event_id=event.id,
        design_item_type_id=item_type.id,
        item_name=item_type.name,
        description=item_type.description,
        quantity=1,
        status="pending",
        design_start_date=start,
        design_deadline=deadline,
        custom_design_days=custom_design_days,
        assigned_designer_id=assigned_designer_id,
        notes=sanitize_string(notes),
    )
    db.add(item)
    db.flush()
    _create_design_task(db, tenant_id, event, item, item_type.name, item.notes, created_by, today or date.today())
    db.commit()
    db.refresh(item)
    logger.info(f"🎨 Added design item '{item.item_name}' to event {event.id}")
    return item, True


def create_custom_design_item(
    db: Session,
    tenant_id: str,
    event: Event,
    data: DesignItemCreate,
    created_by: Optional[str] = None,
    today: Optional[date] = None,
) -> EventDesignItem:
    name = sanitize_string(data.custom_name)
    if not name:
        raise HTTPException(status_code=400, detail="custom_name is required for custom design items")
    reference = data.event_date or event_reference_date(event)
    if not reference:
        raise HTTPException(status_code=400, detail="Event has no date to schedule design work against")

    design_days = data.custom_design_days or 7
    start, deadline = design_deadlines(
        reference,
        data.custom_type,
        design_days,
        data.custom_production_days or 0,
        data.custom_shipping_days or 0,
    )
    item = EventDesignItem(
        tenant_id=tenant_id,
        event_id=event.id,
        item_name=name,
        status="pending",
        design_start_date=start,
        design_deadline=deadline,
        custom_design_days=design_days,
        assigned_designer_id=data.assigned_designer_id,
        notes=sanitize_string(data.notes),
    )
    db.add(item)
    db.flush()
    _create_design_task(db, tenant_id, event, item, name, item.notes, created_by, today or date.today())
    db.commit()
    db.refresh(item)
    logger.info(f"🎨 Added custom design item '{name}' to event {event.id}")
    return item


def add_auto_design_items(
    db: Session, tenant_id: str, event: Event, created_by: Optional[str] = None
) -> list[EventDesignItem]:
    """Create design items for every active auto-added design type"""
    if not event_reference_date(event):
        return []

    items = []
    for item_type in DesignRepository.auto_added_types(db, tenant_id):
        item, created = create_design_item_for_event(db, tenant_id, event, item_type, created_by=created_by)
        if created:
            items.append(item)
    if items:
        logger.info(f"🎨 Auto-added {len(items)} design items to event {event.id}")
    return items


def design_task_payload(task: Task) -> dict:
    payload = row_to_dict(task)
    payload.update(
        {
            "item_name": task.title,
            "assigned_designer": user_summary(task.assignee),
            "assigned_designer_id": task.assigned_to,
            "design_item_type": row_to_dict(task.design_item_type),
            "event_id": task.entity_id if task.entity_type == "event" else None,
        }
    )
    return payload


def _thresholds(task: Task) -> DeadlineThresholds:
    source = task.template or task.design_item_type
    if not source:
        return DeadlineThresholds()
    return DeadlineThresholds(
        due=source.days_before_event,
        urgent=source.urgent_threshold_days,
        missed=source.missed_deadline_days,
    )


class DesignService:
    """Service layer for design settings and the design dashboard"""

    def __init__(self, db: Session, tenant_id: str):
        self.db = db
        self.tenant_id = tenant_id
        self.repo = DesignRepository()

    # ------------------------------------------------------------------
    # Design item types
    # ------------------------------------------------------------------

    def list_types(self, include_inactive: bool = True) -> list[DesignItemType]:
        return self.repo.list_types(self.db, self.tenant_id, include_inactive)

    def get_type(self, type_id: str) -> DesignItemType:
        item_type = self.repo.get_type(self.db, self.tenant_id, type_id)
        if not item_type:
            raise HTTPException(status_code=404, detail="Design item type not found")
        return item_type

    def _validate(self, fields: dict) -> dict:
        if "type" in fields and fields["type"] not in ITEM_TYPES:
            raise HTTPException(status_code=400, detail="Type must be digital or physical")
        for key in ("default_design_days", "default_production_days", "default_shipping_days"):
            if fields.get(key) is not None and fields[key] < 0:
                raise HTTPException(status_code=400, detail=f"{key} cannot be negative")
        return sanitize_fields(fields, ["name", "description", "category"])

    def create_type(self, data: DesignItemTypeCreate) -> DesignItemType:
        item_type = DesignItemType(tenant_id=self.tenant_id, **self._validate(data.model_dump()))
        self.db.add(item_type)
        self.db.commit()
        self.db.refresh(item_type)
        logger.info(f"✅ Created design item type {item_type.id}")
        return item_type

    def update_type(self, type_id: str, data: DesignItemTypeUpdate) -> DesignItemType:
        item_type = self.get_type(type_id)
        for key, value in self._validate(data.model_dump(exclude_unset=True)).items():
            setattr(item_type, key, value)
        self.db.commit()
        self.db.refresh(item_type)
        return item_type

    def delete_type(self, type_id: str) -> dict:
        """Types referenced by design items are deactivated rather than removed"""
        item_type = self.get_type(type_id)
        in_use = (
            self.db.query(EventDesignItem.id)
            .filter(EventDesignItem.design_item_type_id == item_type.id)
            .first()
        )
        if in_use:
            item_type.is_active = False
            self.db.commit()
            return {"success": True, "deactivated": True}
        self.db.delete(item_type)
        self.db.commit()
        return {"success": True, "deactivated": False}

    # ------------------------------------------------------------------
    # Event design items
    # ------------------------------------------------------------------

    def event_design_items(self, event_id: str) -> dict:
        tasks = self.repo.design_tasks(self.db, self.tenant_id, event_id=event_id)
        return {"designItems": [design_task_payload(task) for task in tasks]}

    def add_event_design_item(
        self, event: Event, data: DesignItemCreate, created_by: Optional[str] = None
    ) -> dict:
        if data.design_item_type_id:
            item_type = self.get_type(data.design_item_type_id)
            item, created = create_design_item_for_event(
                self.db,
                self.tenant_id,
                event,
                item_type,
                event_date=data.event_date,
                custom_design_days=data.custom_design_days,
                assigned_designer_id=data.assigned_designer_id,
                notes=data.notes,
                created_by=created_by,
            )
            return {"designItem": row_to_dict(item), "created": created}

        item = create_custom_design_item(self.db, self.tenant_id, event, data, created_by)
        return {"designItem": row_to_dict(item), "created": True}

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def dashboard(
        self,
        designer_id: Optional[str] = None,
        status: Optional[str] = None,
        today: Optional[date] = None,
    ) -> dict:
        today = today or date.today()
        tasks = self.repo.design_tasks(self.db, self.tenant_id, designer_id=designer_id, status=status)
        events = self.repo.events_by_id(
            self.db,
            self.tenant_id,
            {t.entity_id for t in tasks if t.entity_type == "event" and t.entity_id},
        )

        items = []
        for task in tasks:
            event = events.get(task.entity_id) if task.entity_type == "event" else None
            reference = event_reference_date(event)
            if reference is None:
                reference = task.design_deadline or (task.due_date.date() if task.due_date else None)

            days = days_until(reference, today)
            payload = design_task_payload(task)
            payload["calculated_status"] = classify_deadline(days, task.status, _thresholds(task))
            payload["days_until_event"] = days
            payload["event"] = (
                {
                    "id": event.id,
                    "title": event.title,
                    "start_date": event.start_date,
                    "event_dates": [{"event_date": d.event_date} for d in event.dates],
                    "account_id": event.account_id,
                }
                if event
                else None
            )
            payload["_is_physical"] = bool(task.design_item_type and task.design_item_type.type == PHYSICAL)
            items.append(payload)

        def bucket(name: str) -> list[dict]:
            return [
                i for i in items
                if i["calculated_status"] == name and i["status"] not in COMPLETED_STATUSES
            ]

        missed = bucket("missed_deadline")
        urgent = bucket("urgent")
        due_soon = bucket("due_soon")
        on_time = bucket("on_time")
        completed = [i for i in items if i["status"] in COMPLETED_STATUSES]
        physical = [i for i in items if i["_is_physical"] and i["status"] not in COMPLETED_STATUSES]

        cutoff = utcnow() - timedelta(days=RECENT_COMPLETION_DAYS)
        recent = sorted(
            (i for i in completed if i["completed_at"] and as_utc(i["completed_at"]) >= cutoff),
            key=lambda i: as_utc(i["completed_at"]),
            reverse=True,
        )

        for item in items:
            item.pop("_is_physical")

        return {
            "items": items,
            "stats": {
                "total": len(items),
                "missedDeadline": len(missed),
                "urgent": len(urgent),
                "dueSoon": len(due_soon),
                "onTime": len(on_time),
                "completed": len(completed),
                "recentCompletions": len(recent),
                "physicalItems": len(physical),
            },
            "categories": {
                "missedDeadline": missed,
                "urgent": urgent,
                "dueSoon": due_soon,
                "onTime": on_time,
                "completed": recent[:10],
            },
        }
