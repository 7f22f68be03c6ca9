"""Opportunity domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field


class OpportunityDateInput(BaseModel):
    event_date: date
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    setup_time: Optional[str] = None
    location_id: Optional[str] = None
    notes: Optional[str] = None


class OpportunityCreate(BaseModel):
    name: str
    description: Optional[str] = None
    lead_id: Optional[str] = None
    account_id: Optional[str] = None
    contact_id: Optional[str] = None
    owner_id: Optional[str] = None
    stage: str = "prospecting"
    amount: Optional[float] = None
    probability: Optional[int] = None
    expected_close_date: Optional[date] = None
    event_type: Optional[str] = None
    date_type: Optional[str] = None
    guest_count: Optional[int] = None
    mailing_address_line1: Optional[str] = None
    mailing_address_line2: Optional[str] = None
    mailing_city: Optional[str] = None
    mailing_state: Optional[str] = None
    mailing_postal_code: Optional[str] = None
    event_dates: list[OpportunityDateInput] = []


class OpportunityUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    account_id: Optional[str] = None
    contact_id: Optional[str] = None
    owner_id: Optional[str] = None
    stage: Optional[str] = None
    amount: Optional[float] = None
    probability: Optional[int] = None
    expected_close_date: Optional[date] = None
    event_type: Optional[str] = None
    date_type: Optional[str] = None
    guest_count: Optional[int] = None
    mailing_address_line1: Optional[str] = None
    mailing_address_line2: Optional[str] = None
    mailing_city: Optional[str] = None
    mailing_state: Optional[str] = None
    mailing_postal_code: Optional[str] = None
    event_dates: Optional[list[OpportunityDateInput]] = None  # replaces all dates when given


class EventOverrides(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    event_type: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    location: Optional[str] = None
    status: Optional[str] = None


class ConvertToEvent(BaseModel):
    event_data: Optional[EventOverrides] = Field(None, alias="eventData")
    event_dates: Optional[list[OpportunityDateInput]] = Field(None, alias="eventDates")

    class Config:
        populate_by_name = True


class OpportunityDateResponse(BaseModel):
    id: str
    event_date: date
    start_time: Optional[str]
    end_time: Optional[str]
    setup_time: Optional[str]
    location_id: Optional[str]
    notes: Optional[str]

    class Config:
        from_attributes = True


class OpportunityResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    lead_id: Optional[str]
    account_id: Optional[str]
    contact_id: Optional[str]
    owner_id: Optional[str]
    stage: str
    amount: Optional[float]
    probability: Optional[int]
    expected_close_date: Optional[date]
    event_type: Optional[str]
    date_type: Optional[str]
    guest_count: Optional[int]
    is_converted: bool
    converted_event_id: Optional[str]
    converted_at: Optional[datetime]
    created_at: Optional[datetime]
    event_dates: list[OpportunityDateResponse] = Field([], validation_alias="dates")

    class Config:
        from_attributes = True
