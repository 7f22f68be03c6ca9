"""Event service - Business logic for events, dates and staffing"""

import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models_event import Event, EventStaffAssignment
from ...security_utils import generate_public_token
from ...utils.sanitization import sanitize_fields
from ...utils.serialization import row_to_dict
from ..deadlines import days_until, event_priority_level
from ..design.service import add_auto_design_items, event_reference_date
from .repository import EventRepository
from .schemas import EventCreate, EventDateInput, EventUpdate, StaffAssignmentCreate

logger = logging.getLogger(__name__)

EVENT_STATUSES = {"scheduled", "confirmed", "in_progress", "completed", "cancelled"}
TEXT_FIELDS = [
    "title",
    "description",
    "location",
    "event_planner_name",
    "onsite_contact_name",
    "load_in_notes",
    "parking_notes",
    "dress_code",
    "event_notes",
]


def date_span(dates: list[EventDateInput]) -> tuple[Optional[date], Optional[date]]:
    """Start is the earliest date; end is the latest only for multi-day events"""
    days = sorted(d.event_date for d in dates)
    if not days:
        return None, None
    return days[0], days[-1] if len(days) > 1 else None


def event_summary(event: Event, today: date, account_name=None, contact_name=None) -> dict:
    payload = row_to_dict(event, exclude=("staff_brief_token",))
    days = days_until(event_reference_date(event), today)
    payload.update(
        {
            "account_name": account_name,
            "contact_name": contact_name,
            "event_dates": [row_to_dict(d) for d in event.dates],
            "days_until_event": days,
            "priority_level": event_priority_level(days),
        }
    )
    return payload


def assignment_payload(assignment: EventStaffAssignment) -> dict:
    user = assignment.user
    role = assignment.staff_role
    return {
        "id": assignment.id,
        "user_id": assignment.user_id,
        "event_date_id": assignment.event_date_id,
        "staff_role_id": assignment.staff_role_id,
        "name": user.full_name if user else "Unknown",
        "email": user.email if user else None,
        "role": role.name if role else assignment.role,
        "role_type": role.type if role else None,
        "notes": assignment.notes,
        "is_event_day": bool(assignment.event_date_id),
    }


class EventService:
    """Service layer for event business logic"""

    def __init__(self, db: Session, tenant_id: str, user_id: Optional[str] = None):
        self.db = db
        self.tenant_id = tenant_id
        self.user_id = user_id
        self.repo = EventRepository()

    def get_event(self, event_id: str) -> Event:
        event = self.repo.get_event(self.db, self.tenant_id, event_id)
        if not event:
            raise HTTPException(status_code=404, detail="Event not found")
        return event

    def list_events(self, today: Optional[date] = None, **filters) -> list[dict]:
        today = today or date.today()
        events = self.repo.list_events(self.db, self.tenant_id, **filters)
        accounts, contacts = self.repo.names_for(self.db, self.tenant_id, events)
        return [
            event_summary(e, today, accounts.get(e.account_id), contacts.get(e.contact_id))
            for e in events
        ]

    def event_detail(self, event_id: str) -> dict:
        event = self.get_event(event_id)
        accounts, contacts = self.repo.names_for(self.db, self.tenant_id, [event])
        payload = event_summary(
            event, date.today(), accounts.get(event.account_id), contacts.get(event.contact_id)
        )
        payload["staff_brief_token"] = event.staff_brief_token
        payload["staff"] = [
            assignment_payload(a) for a in self.repo.staff_assignments(self.db, self.tenant_id, event.id)
        ]
        return payload

    def create_event(self, data: EventCreate) -> dict:
        if not data.title or not data.title.strip():
            raise HTTPException(status_code=400, detail="Title is required")
        if not data.event_dates:
            raise HTTPException(status_code=400, detail="At least one event date is required")
        if data.status and data.status not in EVENT_STATUSES:
            raise HTTPException(status_code=400, detail=f"Invalid status: {data.status}")

        first, last = date_span(data.event_dates)
        fields = sanitize_fields(data.model_dump(exclude={"event_dates"}), TEXT_FIELDS)
        fields["start_date"] = data.start_date or first
        fields["end_date"] = data.end_date or last
        fields["status"] = data.status or "scheduled"
        fields["event_type"] = data.event_type or "other"

        event = Event(tenant_id=self.tenant_id, **fields)
        self.db.add(event)
        self.repo.add_dates(self.db, self.tenant_id, event, [d.model_dump() for d in data.event_dates])
        self.db.commit()
        self.db.refresh(event)
        logger.info(f"✅ Created event {event.id} with {len(event.dates)} date(s)")

        try:
            add_auto_design_items(self.db, self.tenant_id, event, created_by=self.user_id)
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Failed to auto-add design items for event {event.id}: {e}")

        return self.event_detail(event.id)

    def update_event(self, event_id: str, data: EventUpdate) -> dict:
        event = self.get_event(event_id)
        updates = data.model_dump(exclude_unset=True, exclude={"event_dates"})
        if "status" in updates and updates["status"] not in EVENT_STATUSES:
            raise HTTPException(status_code=400, detail=f"Invalid status: {updates['status']}")
        if "title" in updates and not (updates["title"] or "").strip():
            raise HTTPException(status_code=400, detail="Title is required")

        for key, value in sanitize_fields(updates, TEXT_FIELDS).items():
            setattr(event, key, value)

        if data.event_dates is not None:
            if not data.event_dates:
                raise HTTPException(status_code=400, detail="At least one event date is required")
            event.dates.clear()
            self.repo.add_dates(self.db, self.tenant_id, event, [d.model_dump() for d in data.event_dates])
            event.start_date, event.end_date = date_span(data.event_dates)

        self.db.commit()
        return self.event_detail(event.id)

    def delete_event(self, event_id: str) -> dict:
        event = self.get_event(event_id)
        self.db.delete(event)
        self.db.commit()
        logger.info(f"🗑️ Deleted event {event_id}")
        return {"success": True}

    # ------------------------------------------------------------------
    # Staffing
    # ------------------------------------------------------------------

    def list_staff(self, event_id: str) -> list[dict]:
        event = self.get_event(event_id)
        return [assignment_payload(a) for a in self.repo.staff_assignments(self.db, self.tenant_id, event.id)]

    def assign_staff(self, event_id: str, data: StaffAssignmentCreate) -> dict:
        event = self.get_event(event_id)
        if not self.repo.get_user(self.db, self.tenant_id, data.user_id):
            raise HTTPException(status_code=404, detail="User not found")
        if data.staff_role_id and not self.repo.get_staff_role(self.db, self.tenant_id, data.staff_role_id):
            raise HTTPException(status_code=404, detail="Staff role not found")
        if data.event_date_id and data.event_date_id not in {d.id for d in event.dates}:
            raise HTTPException(status_code=400, detail="Date does not belong to this event")

        for existing in self.repo.staff_assignments(self.db, self.tenant_id, event.id):
            if (
                existing.user_id == data.user_id
                and existing.staff_role_id == data.staff_role_id
                and existing.event_date_id == data.event_date_id
            ):
                raise HTTPException(status_code=409, detail="Staff member is already assigned to this role")

        assignment = EventStaffAssignment(
            tenant_id=self.tenant_id,
            event_id=event.id,
            **sanitize_fields(data.model_dump(), ["role", "notes"]),
        )
        self.db.add(assignment)
        self.db.commit()
        self.db.refresh(assignment)
        logger.info(f"👥 Assigned user {data.user_id} to event {event.id}")
        return assignment_payload(assignment)

    def remove_staff(self, event_id: str, assignment_id: str) -> dict:
        assignment = self.repo.get_assignment(self.db, self.tenant_id, event_id, assignment_id)
        if not assignment:
            raise HTTPException(status_code=404, detail="Staff assignment not found")
        self.db.delete(assignment)
        self.db.commit()
        return {"success": True}

    def set_staff_brief(self, event_id: str, enabled: bool, regenerate: bool = False) -> dict:
        """Turn the public staff brief link on or off, minting a token on first use"""
        event = self.get_event(event_id)
        if enabled and (regenerate or not event.staff_brief_token):
            event.staff_brief_token = generate_public_token()
        event.staff_brief_enabled = enabled
        self.db.commit()
        return {
            "staff_brief_enabled": event.staff_brief_enabled,
            "staff_brief_token": event.staff_brief_token,
        }
