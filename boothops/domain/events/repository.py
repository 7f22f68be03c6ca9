"""Event repository - Database operations for events, dates and staff assignments"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Account, Contact, User
from ...models_event import Event, EventDate, EventStaffAssignment, StaffRole


class EventRepository:
    """Repository for event database operations"""

    @staticmethod
    def list_events(
        db: Session,
        tenant_id: str,
        status: Optional[str] = None,
        event_type: Optional[str] = None,
        account_id: Optional[str] = None,
    ) -> list[Event]:
        query = (
            db.query(Event)
            .options(joinedload(Event.dates))
            .filter(Event.tenant_id == tenant_id)
        )
        if status:
            query = query.filter(Event.status == status)
        if event_type:
            query = query.filter(Event.event_type == event_type)
        if account_id:
            query = query.filter(Event.account_id == account_id)
        return query.order_by(Event.start_date.asc()).all()

    @staticmethod
    def get_event(db: Session, tenant_id: str, event_id: str) -> Optional[Event]:
        return (
            db.query(Event)
            .options(joinedload(Event.dates))
            .filter(Event.id == event_id, Event.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def get_by_brief_token(db: Session, tenant_id: str, token: str) -> Optional[Event]:
        return (
            db.query(Event)
            .options(joinedload(Event.dates))
            .filter(Event.staff_brief_token == token, Event.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def add_dates(db: Session, tenant_id: str, event: Event, dates: list[dict]) -> None:
        for values in dates:
            event.dates.append(EventDate(tenant_id=tenant_id, status="scheduled", **values))

    @staticmethod
    def names_for(db: Session, tenant_id: str, events: list[Event]) -> tuple[dict, dict]:
        """Account and contact display names keyed by id"""
        account_ids = {e.account_id for e in events if e.account_id}
        contact_ids = {e.contact_id for e in events if e.contact_id}
        accounts = {}
        contacts = {}
        if account_ids:
            accounts = {
                a.id: a.name
                for a in db.query(Account).filter(Account.tenant_id == tenant_id, Account.id.in_(account_ids))
            }
        if contact_ids:
            contacts = {
                c.id: c.full_name
                for c in db.query(Contact).filter(Contact.tenant_id == tenant_id, Contact.id.in_(contact_ids))
            }
        return accounts, contacts

    @staticmethod
    def staff_assignments(db: Session, tenant_id: str, event_id: str) -> list[EventStaffAssignment]:
        return (
            db.query(EventStaffAssignment)
            .options(
                joinedload(EventStaffAssignment.user),
                joinedload(EventStaffAssignment.staff_role),
            )
            .filter(
                EventStaffAssignment.tenant_id == tenant_id,
                EventStaffAssignment.event_id == event_id,
            )
            .order_by(EventStaffAssignment.created_at.asc())
            .all()
        )

    @staticmethod
    def get_assignment(
        db: Session, tenant_id: str, event_id: str, assignment_id: str
    ) -> Optional[EventStaffAssignment]:
        return (
            db.query(EventStaffAssignment)
            .filter(
                EventStaffAssignment.id == assignment_id,
                EventStaffAssignment.event_id == event_id,
                EventStaffAssignment.tenant_id == tenant_id,
            )
            .first()
        )

    @staticmethod
    def get_user(db: Session, tenant_id: str, user_id: str) -> Optional[User]:
        return db.query(User).filter(User.id == user_id, User.tenant_id == tenant_id).first()

    @staticmethod
    def get_staff_role(db: Session, tenant_id: str, role_id: str) -> Optional[StaffRole]:
        return (
            db.query(StaffRole)
            .filter(StaffRole.id == role_id, StaffRole.tenant_id == tenant_id)
            .first()
        )
