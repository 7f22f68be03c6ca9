"""Staff form schemas - Pydantic models for validation"""

from typing import Any, Optional

from pydantic import BaseModel


class FormTemplateCreate(BaseModel):
    name: str
    description: Optional[str] = None
    form_type: str = "staff_recap"
    fields: list[dict[str, Any]] = []


class StaffFormSend(BaseModel):
    event_id: Optional[str] = None
    template_id: Optional[str] = None
    staff_assignment_ids: list[str] = []
    event_date_ids: list[str] = []


class StaffFormSubmit(BaseModel):
    responses: Optional[dict[str, Any]] = None
