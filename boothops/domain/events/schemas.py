"""Event domain schemas - Pydantic models for validation"""

from datetime import date
from typing import Optional

from pydantic import BaseModel


class EventDateInput(BaseModel):
    event_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    setup_time: Optional[str] = None
    location_id: Optional[str] = None
    notes: Optional[str] = None


class EventCreate(BaseModel):
    title: str
    description: Optional[str] = None
    event_type: Optional[str] = None
    status: Optional[str] = None
    account_id: Optional[str] = None
    contact_id: Optional[str] = None
    primary_contact_id: Optional[str] = None
    opportunity_id: Optional[str] = None
    location: Optional[str] = None
    location_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    guest_count: Optional[int] = None
    event_dates: list[EventDateInput] = []


class EventUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    event_type: Optional[str] = None
    status: Optional[str] = None
    account_id: Optional[str] = None
    contact_id: Optional[str] = None
    primary_contact_id: Optional[str] = None
    location: Optional[str] = None
    location_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    guest_count: Optional[int] = None
    event_planner_id: Optional[str] = None
    event_planner_name: Optional[str] = None
    event_planner_phone: Optional[str] = None
    event_planner_email: Optional[str] = None
    onsite_contact_name: Optional[str] = None
    onsite_contact_phone: Optional[str] = None
    onsite_contact_email: Optional[str] = None
    load_in_notes: Optional[str] = None
    parking_notes: Optional[str] = None
    dress_code: Optional[str] = None
    event_notes: Optional[str] = None
    event_dates: Optional[list[EventDateInput]] = None  # replaces all dates when given


class StaffAssignmentCreate(BaseModel):
    user_id: str
    staff_role_id: Optional[str] = None
    event_date_id: Optional[str] = None
    role: Optional[str] = None
    notes: Optional[str] = None


class StaffBriefToggle(BaseModel):
    enabled: bool = True
    regenerate: bool = False
