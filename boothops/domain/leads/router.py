"""Lead router - FastAPI endpoints for leads"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...auth import TenantContext, get_tenant_context
from .schemas import LeadConvert, LeadCreate, LeadResponse, LeadUpdate
from .service import LeadService

router = APIRouter(prefix="/api/leads", tags=["Leads"])


def get_lead_service(ctx: TenantContext = Depends(get_tenant_context)) -> LeadService:
    """Dependency injection for LeadService"""
    return LeadService(ctx.db, ctx.tenant_id)


@router.get("", response_model=list[LeadResponse])
async def list_leads(
    status: Optional[str] = Query(None),
    search: Optional[str] = Query(None),
    include_converted: bool = Query(False),
    service: LeadService = Depends(get_lead_service),
):
    return service.list_leads(status=status, search=search, include_converted=include_converted)


@router.post("", response_model=LeadResponse)
async def create_lead(data: LeadCreate, service: LeadService = Depends(get_lead_service)):
    return service.create_lead(data)


@router.get("/{lead_id}", response_model=LeadResponse)
async def get_lead(lead_id: str, service: LeadService = Depends(get_lead_service)):
    return service.get_lead(lead_id)


@router.patch("/{lead_id}", response_model=LeadResponse)
async def update_lead(lead_id: str, data: LeadUpdate, service: LeadService = Depends(get_lead_service)):
    return service.update_lead(lead_id, data)


@router.delete("/{lead_id}")
async def delete_lead(lead_id: str, service: LeadService = Depends(get_lead_service)):
    return service.delete_lead(lead_id)


@router.post("/{lead_id}/convert")
async def convert_lead(
    lead_id: str,
    data: Optional[LeadConvert] = None,
    service: LeadService = Depends(get_lead_service),
):
    return service.convert(lead_id, data)
