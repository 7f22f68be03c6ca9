"""Design domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel


class DesignItemTypeCreate(BaseModel):
    name: str
    description: Optional[str] = None
    type: str = "digital"
    category: Optional[str] = None
    default_design_days: int = 7
    default_production_days: int = 0
    default_shipping_days: int = 0
    client_approval_buffer_days: Optional[int] = None
    days_before_event: Optional[int] = None
    urgent_threshold_days: Optional[int] = None
    missed_deadline_days: Optional[int] = None
    is_auto_added: bool = False
    is_active: bool = True
    sort_order: int = 0


class DesignItemTypeUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    category: Optional[str] = None
    default_design_days: Optional[int] = None
    default_production_days: Optional[int] = None
    default_shipping_days: Optional[int] = None
    client_approval_buffer_days: Optional[int] = None
    days_before_event: Optional[int] = None
    urgent_threshold_days: Optional[int] = None
    missed_deadline_days: Optional[int] = None
    is_auto_added: Optional[bool] = None
    is_active: Optional[bool] = None
    sort_order: Optional[int] = None


class DesignItemTypeResponse(BaseModel):
    id: str
    name: str
    description: Optional[str]
    type: str
    category: Optional[str]
    default_design_days: int
    default_production_days: int
    default_shipping_days: int
    client_approval_buffer_days: Optional[int]
    days_before_event: Optional[int]
    urgent_threshold_days: Optional[int]
    missed_deadline_days: Optional[int]
    is_auto_added: bool
    is_active: bool
    sort_order: int
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class DesignItemCreate(BaseModel):
    """Either a configured design type or a one-off custom item"""

    design_item_type_id: Optional[str] = None
    custom_name: Optional[str] = None
    custom_type: Optional[str] = None  # digital, physical
    event_date: Optional[date] = None
    custom_design_days: Optional[int] = None
    custom_production_days: Optional[int] = None
    custom_shipping_days: Optional[int] = None
    assigned_designer_id: Optional[str] = None
    notes: Optional[str] = None
