"""Task domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class TaskCreate(BaseModel):
    title: str
    description: Optional[str] = None
    task_type: str = "general"
    department: Optional[str] = None
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    assigned_to: Optional[str] = None
    priority: str = "medium"
    due_date: Optional[datetime] = None
    template_id: Optional[str] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    assigned_to: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    due_date: Optional[datetime] = None
    design_deadline: Optional[date] = None


class TaskResponse(BaseModel):
    id: str
    title: str
    description: Optional[str]
    task_type: str
    department: Optional[str]
    entity_type: Optional[str]
    entity_id: Optional[str]
    assigned_to: Optional[str]
    assigned_at: Optional[datetime] = None
    created_by: Optional[str]
    status: str
    priority: str
    due_date: Optional[datetime]
    design_start_date: Optional[date]
    design_deadline: Optional[date]
    completed_at: Optional[datetime]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
