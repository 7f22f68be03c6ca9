"""Event form schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel


class EventFormCreate(BaseModel):
    name: Optional[str] = None
    template_id: Optional[str] = None
    fields: list[dict[str, Any]] = []


class EventFormUpdate(BaseModel):
    name: Optional[str] = None
    fields: Optional[list[dict[str, Any]]] = None
    status: Optional[str] = None


class EventFormSubmit(BaseModel):
    responses: Optional[dict[str, Any]] = None


class EventFormResponse(BaseModel):
    id: str
    event_id: str
    template_id: Optional[str]
    public_id: str
    name: str
    fields: Optional[list[dict[str, Any]]]
    responses: Optional[dict[str, Any]]
    status: str
    sent_at: Optional[datetime]
    viewed_at: Optional[datetime]
    completed_at: Optional[datetime]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
