"""Contract domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class ContractCreate(BaseModel):
    title: str
    content: Optional[str] = None
    contract_number: Optional[str] = None
    event_id: Optional[str] = None
    account_id: Optional[str] = None
    contact_id: Optional[str] = None
    opportunity_id: Optional[str] = None
    expires_at: Optional[datetime] = None
    include_invoice_attachment: bool = False


class ContractUpdate(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
    contract_number: Optional[str] = None
    event_id: Optional[str] = None
    expires_at: Optional[datetime] = None
    include_invoice_attachment: Optional[bool] = None


class ContractSign(BaseModel):
    signature: Optional[str] = None


class ContractResponse(BaseModel):
    id: str
    contract_number: Optional[str]
    title: str
    content: Optional[str]
    event_id: Optional[str]
    account_id: Optional[str]
    contact_id: Optional[str]
    opportunity_id: Optional[str]
    status: str
    public_token: Optional[str]
    expires_at: Optional[datetime]
    include_invoice_attachment: bool
    sent_at: Optional[datetime]
    viewed_at: Optional[datetime]
    signed_at: Optional[datetime]
    signed_by: Optional[str]
    ip_address: Optional[str]
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
