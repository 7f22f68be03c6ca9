"""Contact domain schemas - Pydantic models for validation"""

from datetime import date
from typing import Optional

from pydantic import BaseModel


class ContactCreate(BaseModel):
    first_name: str
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    job_title: Optional[str] = None
    account_id: Optional[str] = None
    role: Optional[str] = None  # role at account_id, defaults to Primary Contact
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None


class ContactUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    job_title: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None


class ContactAccountLink(BaseModel):
    account_id: str
    role: Optional[str] = None
    is_primary: bool = False
    start_date: Optional[date] = None
