"""Inventory domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

ASSIGNEE_TYPES = {"user", "physical_address", "product_group"}
ASSIGNMENT_TYPES = {"long_term_staff", "event_checkout"}


class InventoryItemCreate(BaseModel):
    item_name: str
    item_category: Optional[str] = None
    model: Optional[str] = None
    manufacturer: Optional[str] = None
    serial_number: Optional[str] = None
    tracking_type: str = "serial_number"
    total_quantity: Optional[int] = None
    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = None
    status: str = "available"
    assigned_to_type: Optional[str] = None
    assigned_to_id: Optional[str] = None
    assignment_type: Optional[str] = None
    expected_return_date: Optional[date] = None
    assignment_notes: Optional[str] = None
    notes: Optional[str] = None


class InventoryItemUpdate(BaseModel):
    item_name: Optional[str] = None
    item_category: Optional[str] = None
    model: Optional[str] = None
    manufacturer: Optional[str] = None
    serial_number: Optional[str] = None
    tracking_type: Optional[str] = None
    total_quantity: Optional[int] = None
    purchase_date: Optional[date] = None
    purchase_price: Optional[float] = None
    status: Optional[str] = None
    assigned_to_type: Optional[str] = None
    assigned_to_id: Optional[str] = None
    assignment_type: Optional[str] = None
    expected_return_date: Optional[date] = None
    assignment_notes: Optional[str] = None
    notes: Optional[str] = None


class InventoryItemResponse(BaseModel):
    id: str
    item_name: str
    item_category: Optional[str]
    model: Optional[str]
    manufacturer: Optional[str]
    serial_number: Optional[str]
    tracking_type: str
    total_quantity: Optional[int]
    status: str
    assigned_to_type: Optional[str]
    assigned_to_id: Optional[str]
    assignment_type: Optional[str]
    event_id: Optional[str]
    expected_return_date: Optional[date]
    assignment_notes: Optional[str]
    notes: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class ProductGroupCreate(BaseModel):
    group_name: str
    description: Optional[str] = None
    assigned_to_type: Optional[str] = None
    assigned_to_id: Optional[str] = None
    inventory_item_ids: list[str] = []


class EventInventoryAssign(BaseModel):
    inventory_item_ids: list[str] = []
    product_group_ids: list[str] = []
    expected_return_date: Optional[date] = None
