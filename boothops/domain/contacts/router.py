"""Contact router - FastAPI endpoints for contacts"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...auth import TenantContext, get_tenant_context
from .schemas import ContactAccountLink, ContactCreate, ContactUpdate
from .service import ContactService, contact_payload

router = APIRouter(prefix="/api/contacts", tags=["Contacts"])


def get_contact_service(ctx: TenantContext = Depends(get_tenant_context)) -> ContactService:
    """Dependency injection for ContactService"""
    return ContactService(ctx.db, ctx.tenant_id)


@router.get("")
async def list_contacts(
    account_id: Optional[str] = Query(None, description="Only contacts currently at this account"),
    service: ContactService = Depends(get_contact_service),
):
    return service.list_contacts(account_id)


@router.post("")
async def create_contact(data: ContactCreate, service: ContactService = Depends(get_contact_service)):
    return service.create_contact(data)


@router.get("/{contact_id}")
async def get_contact(contact_id: str, service: ContactService = Depends(get_contact_service)):
    return contact_payload(service.get_contact(contact_id))


@router.patch("/{contact_id}")
async def update_contact(
    contact_id: str, data: ContactUpdate, service: ContactService = Depends(get_contact_service)
):
    return service.update_contact(contact_id, data)


@router.delete("/{contact_id}")
async def delete_contact(contact_id: str, service: ContactService = Depends(get_contact_service)):
    return service.delete_contact(contact_id)


@router.post("/{contact_id}/accounts")
async def link_account(
    contact_id: str,
    data: ContactAccountLink,
    service: ContactService = Depends(get_contact_service),
):
    return service.link_account(contact_id, data)


@router.delete("/{contact_id}/accounts/{link_id}")
async def end_account_link(
    contact_id: str, link_id: str, service: ContactService = Depends(get_contact_service)
):
    return service.end_account_link(contact_id, link_id)
