import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel
from sqlalchemy import or_

from ..auth import TenantContext, get_tenant_context
from ..models import Account, ContactAccount
from ..models_event import Event
from ..shared.validators import validate_email
from ..utils.sanitization import sanitize_fields

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/accounts", tags=["Accounts"])

TEXT_FIELDS = ["name", "billing_address_line1", "billing_address_line2", "billing_city", "notes"]


class AccountCreate(BaseModel):
    name: str
    account_type: str = "company"
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    billing_address_line1: Optional[str] = None
    billing_address_line2: Optional[str] = None
    billing_city: Optional[str] = None
    billing_state: Optional[str] = None
    billing_zip_code: Optional[str] = None
    notes: Optional[str] = None


class AccountUpdate(BaseModel):
    name: Optional[str] = None
    account_type: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    website: Optional[str] = None
    billing_address_line1: Optional[str] = None
    billing_address_line2: Optional[str] = None
    billing_city: Optional[str] = None
    billing_state: Optional[str] = None
    billing_zip_code: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[str] = None


class AccountResponse(BaseModel):
    id: str
    name: str
    account_type: str
    email: Optional[str]
    phone: Optional[str]
    website: Optional[str]
    billing_address_line1: Optional[str]
    billing_address_line2: Optional[str]
    billing_city: Optional[str]
    billing_state: Optional[str]
    billing_zip_code: Optional[str]
    notes: Optional[str]
    status: str
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


def _get_account(ctx: TenantContext, account_id: str) -> Account:
    account = (
        ctx.db.query(Account)
        .filter(Account.id == account_id, Account.tenant_id == ctx.tenant_id)
        .first()
    )
    if not account:
        raise HTTPException(status_code=404, detail="Account not found")
    return account


def _clean(values: dict) -> dict:
    if values.get("email"):
        try:
            values["email"] = validate_email(values["email"])
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    return sanitize_fields(values, TEXT_FIELDS)


@router.get("", response_model=list[AccountResponse])
async def list_accounts(
    search: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    ctx: TenantContext = Depends(get_tenant_context),
):
    query = ctx.db.query(Account).filter(Account.tenant_id == ctx.tenant_id)
    if status:
        query = query.filter(Account.status == status)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Account.name.ilike(pattern), Account.email.ilike(pattern)))
    return query.order_by(Account.name).all()


@router.post("", response_model=AccountResponse)
async def create_account(data: AccountCreate, ctx: TenantContext = Depends(get_tenant_context)):
    values = _clean(data.model_dump())
    if not values.get("name"):
        raise HTTPException(status_code=400, detail="Account name is required")

    account = Account(tenant_id=ctx.tenant_id, **values)
    ctx.db.add(account)
    ctx.db.commit()
    ctx.db.refresh(account)
    logger.info(f"✅ Created account {account.id} for tenant {ctx.tenant_id}")
    return account


@router.get("/{account_id}")
async def get_account(account_id: str, ctx: TenantContext = Depends(get_tenant_context)):
    account = _get_account(ctx, account_id)
    links = (
        ctx.db.query(ContactAccount)
        .filter(ContactAccount.account_id == account.id, ContactAccount.tenant_id == ctx.tenant_id)
        .all()
    )
    events = (
        ctx.db.query(Event)
        .filter(Event.account_id == account.id, Event.tenant_id == ctx.tenant_id)
        .order_by(Event.start_date.desc())
        .all()
    )

    payload = AccountResponse.model_validate(account).model_dump()
    payload["contacts"] = [
        {
            "id": link.contact.id,
            "name": link.contact.full_name,
            "email": link.contact.email,
            "role": link.role,
            "is_primary": link.is_primary,
            "is_active": link.end_date is None,
        }
        for link in links
        if link.contact
    ]
    payload["events"] = [
        {"id": e.id, "title": e.title, "start_date": e.start_date, "status": e.status}
        for e in events
    ]
    return payload


@router.patch("/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: str, data: AccountUpdate, ctx: TenantContext = Depends(get_tenant_context)
):
    account = _get_account(ctx, account_id)
    for key, value in _clean(data.model_dump(exclude_unset=True)).items():
        setattr(account, key, value)
    ctx.db.commit()
    ctx.db.refresh(account)
    return account


@router.delete("/{account_id}")
async def delete_account(account_id: str, ctx: TenantContext = Depends(get_tenant_context)):
    account = _get_account(ctx, account_id)
    has_events = (
        ctx.db.query(Event.id)
        .filter(Event.account_id == account.id, Event.tenant_id == ctx.tenant_id)
        .first()
    )
    if has_events:
        raise HTTPException(status_code=400, detail="Account has events and cannot be deleted")

    ctx.db.query(ContactAccount).filter(ContactAccount.account_id == account.id).delete()
    ctx.db.delete(account)
    ctx.db.commit()
    return {"success": True}
