"""Staff brief service - Read-only event summary for on-site staff"""

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Account, Contact, Location
from ...models_event import Event, EventStaffAssignment
from ...models_invoice import Invoice, InvoiceLineItem
from ...security_utils import is_valid_public_token
from ..events.repository import EventRepository
from ..settings.repository import SettingsRepository

logger = logging.getLogger(__name__)

MAPS_SEARCH_URL = "https://www.google.com/maps/search/?api=1&query="
EXCLUDED_ROLE_WORDS = ("graphic", "designer")


def venue_from_location(location: Location) -> dict:
    parts = [
        location.address_line1,
        location.address_line2,
        location.city,
        location.state,
        location.postal_code,
    ]
    address = ", ".join(p for p in parts if p) or None
    return {
        "name": location.name or None,
        "address": address,
        "googleMapsUrl": f"{MAPS_SEARCH_URL}{quote(address, safe='')}" if address else None,
    }


def contact_card(contact: Optional[Contact]) -> Optional[dict]:
    if not contact:
        return None
    return {"name": contact.full_name, "email": contact.email, "phone": contact.phone}


def brief_staff(assignments: list[EventStaffAssignment]) -> list[dict]:
    """Event crew without designers, one entry per name and role, managers first"""
    seen = set()
    staff = []
    for assignment in assignments:
        role = assignment.staff_role
        role_name = role.name if role else assignment.role
        lowered = (role_name or "").lower()
        if any(word in lowered for word in EXCLUDED_ROLE_WORDS):
            continue

        user = assignment.user
        name = user.full_name if user else "Unknown"
        key = (name, role_name or "")
        if key in seen:
            continue
        seen.add(key)
        staff.append(
            {
                "name": name,
                "role": role_name,
                "phone": user.phone if user else None,
                "isManager": bool(role and role.type == "operations") or "manager" in lowered,
            }
        )
    staff.sort(key=lambda s: (not s["isManager"], s["name"]))
    return staff


class StaffBriefService:
    """Assemble the public staff brief for an event"""

    def __init__(self, db: Session, tenant_id: str):
        self.db = db
        self.tenant_id = tenant_id

    def _contact(self, contact_id: Optional[str]) -> Optional[Contact]:
        if not contact_id:
            return None
        return (
            self.db.query(Contact)
            .filter(Contact.id == contact_id, Contact.tenant_id == self.tenant_id)
            .first()
        )

    def _location(self, location_id: Optional[str]) -> Optional[Location]:
        if not location_id:
            return None
        return (
            self.db.query(Location)
            .filter(Location.id == location_id, Location.tenant_id == self.tenant_id)
            .first()
        )

    def _planner(self, event: Event) -> Optional[dict]:
        planner = self._contact(event.event_planner_id)
        if planner:
            account = (
                self.db.query(Account).filter(Account.id == planner.account_id).first()
                if planner.account_id
                else None
            )
            card = contact_card(planner)
            card["company"] = account.name if account else None
            return card
        if event.event_planner_name:
            return {
                "name": event.event_planner_name,
                "phone": event.event_planner_phone,
                "email": event.event_planner_email,
                "company": None,
            }
        return None

    def _package_and_add_ons(self, event: Event) -> tuple[Optional[dict], list[dict]]:
        items = (
            self.db.query(InvoiceLineItem)
            .join(Invoice, Invoice.id == InvoiceLineItem.invoice_id)
            .filter(
                Invoice.tenant_id == self.tenant_id,
                Invoice.event_id == event.id,
                Invoice.status != "draft",
                InvoiceLineItem.item_type != "discount",
            )
            .order_by(Invoice.created_at.asc(), InvoiceLineItem.sort_order.asc())
            .all()
        )
        packages = [i for i in items if i.item_type == "package"]
        package = {"name": packages[0].name, "description": packages[0].description} if packages else None
        add_ons = [{"name": i.name} for i in items if i.item_type in ("add_on", "custom")]
        return package, add_ons

    def get_brief(self, token: str) -> dict:
        if not is_valid_public_token(token):
            raise HTTPException(status_code=400, detail="Invalid staff brief token")

        event = EventRepository.get_by_brief_token(self.db, self.tenant_id, token)
        if not event:
            logger.warning(f"⚠️ No event found for staff brief token {token[:8]}...")
            raise HTTPException(status_code=404, detail="Event not found")
        if not event.staff_brief_enabled:
            raise HTTPException(status_code=403, detail="Staff brief access disabled for this event")

        account = (
            self.db.query(Account).filter(Account.id == event.account_id).first()
            if event.account_id
            else None
        )
        primary_contact = contact_card(self._contact(event.primary_contact_id) or self._contact(event.contact_id))

        venue, venue_contact = None, {"name": None, "phone": None, "email": None}
        dates = []
        for event_date in sorted(event.dates, key=lambda d: d.event_date):
            location = self._location(event_date.location_id)
            if venue is None and location:
                venue = venue_from_location(location)
                venue_contact = {
                    "name": location.contact_name,
                    "phone": location.contact_phone,
                    "email": location.contact_email,
                }
            dates.append(
                {
                    "id": event_date.id,
                    "date": event_date.event_date,
                    "setup_time": event_date.setup_time,
                    "start_time": event_date.start_time,
                    "end_time": event_date.end_time,
                    "notes": event_date.notes,
                }
            )
        if venue is None:
            location = self._location(event.location_id)
            if location:
                venue = venue_from_location(location)
        if venue is None and event.location:
            venue = {"name": event.location, "address": None, "googleMapsUrl": None}

        package, add_ons = self._package_and_add_ons(event)
        assignments = (
            self.db.query(EventStaffAssignment)
            .filter(
                EventStaffAssignment.tenant_id == self.tenant_id,
                EventStaffAssignment.event_id == event.id,
            )
            .order_by(EventStaffAssignment.created_at.asc())
            .all()
        )

        return {
            "event": {
                "id": event.id,
                "title": event.title,
                "event_type": event.event_type,
                "status": event.status,
            },
            "customer": {
                "name": (account.name if account else None) or (primary_contact or {}).get("name"),
                "companyName": account.name if account else None,
                "contactName": (primary_contact or {}).get("name"),
            },
            "dates": dates,
            "venue": venue,
            "venueContact": venue_contact,
            "onsiteContact": {
                "name": event.onsite_contact_name,
                "phone": event.onsite_contact_phone,
                "email": event.onsite_contact_email,
            },
            "eventPlanner": self._planner(event),
            "arrivalInstructions": event.load_in_notes,
            "dressCode": event.dress_code,
            "package": package,
            "addOns": add_ons,
            "eventNotes": event.description,
            "staff": brief_staff(assignments),
            "tenant": {
                "id": self.tenant_id,
                "logoUrl": SettingsRepository.get_value(self.db, self.tenant_id, "appearance.logoUrl"),
            },
        }
