"""Invoice domain schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel

LINE_ITEM_TYPES = {"package", "add_on", "custom", "discount"}


class LineItemCreate(BaseModel):
    item_type: str = "custom"
    name: str
    description: Optional[str] = None
    quantity: float = 1
    unit_price: float = 0
    taxable: bool = True
    sort_order: Optional[int] = None


class LineItemUpdate(BaseModel):
    item_type: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    quantity: Optional[float] = None
    unit_price: Optional[float] = None
    taxable: Optional[bool] = None
    sort_order: Optional[int] = None


class InvoiceCreate(BaseModel):
    event_id: Optional[str] = None
    opportunity_id: Optional[str] = None
    account_id: Optional[str] = None
    contact_id: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    tax_rate: float = 0
    notes: Optional[str] = None
    terms: Optional[str] = None
    line_items: list[LineItemCreate] = []


class InvoiceUpdate(BaseModel):
    account_id: Optional[str] = None
    contact_id: Optional[str] = None
    issue_date: Optional[date] = None
    due_date: Optional[date] = None
    status: Optional[str] = None
    tax_rate: Optional[float] = None
    notes: Optional[str] = None
    terms: Optional[str] = None


class ManualPayment(BaseModel):
    amount: float
    payment_method: str = "check"
    reference_number: Optional[str] = None
    notes: Optional[str] = None


class PublicPaymentConfirm(BaseModel):
    payment_intent_id: Optional[str] = None


class LineItemResponse(BaseModel):
    id: str
    item_type: str
    name: str
    description: Optional[str]
    quantity: float
    unit_price: float
    total: float
    taxable: bool
    sort_order: int

    class Config:
        from_attributes = True


class InvoiceResponse(BaseModel):
    id: str
    invoice_number: str
    event_id: Optional[str]
    opportunity_id: Optional[str]
    account_id: Optional[str]
    contact_id: Optional[str]
    issue_date: Optional[date]
    due_date: Optional[date]
    status: str
    subtotal: float
    tax_rate: float
    tax_amount: float
    total_amount: float
    paid_amount: float
    balance_amount: float
    public_token: Optional[str]
    notes: Optional[str]
    terms: Optional[str]
    created_at: Optional[datetime]
    line_items: list[LineItemResponse] = []

    class Config:
        from_attributes = True
