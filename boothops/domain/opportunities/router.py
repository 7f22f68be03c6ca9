"""Opportunity router - FastAPI endpoints for opportunities"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...auth import TenantContext, get_tenant_context
from .schemas import ConvertToEvent, OpportunityCreate, OpportunityResponse, OpportunityUpdate
from .service import OpportunityService

router = APIRouter(prefix="/api/opportunities", tags=["Opportunities"])


def get_opportunity_service(ctx: TenantContext = Depends(get_tenant_context)) -> OpportunityService:
    """Dependency injection for OpportunityService"""
    return OpportunityService(ctx.db, ctx.tenant_id, ctx.user_id)


@router.get("", response_model=list[OpportunityResponse])
async def list_opportunities(
    stage: Optional[str] = Query(None),
    include_converted: bool = Query(True),
    service: OpportunityService = Depends(get_opportunity_service),
):
    return service.list_opportunities(stage, include_converted)


@router.post("", response_model=OpportunityResponse)
async def create_opportunity(
    data: OpportunityCreate, service: OpportunityService = Depends(get_opportunity_service)
):
    return service.create_opportunity(data)


@router.get("/{opportunity_id}", response_model=OpportunityResponse)
async def get_opportunity(opportunity_id: str, service: OpportunityService = Depends(get_opportunity_service)):
    return service.get_opportunity(opportunity_id)


@router.patch("/{opportunity_id}", response_model=OpportunityResponse)
async def update_opportunity(
    opportunity_id: str,
    data: OpportunityUpdate,
    service: OpportunityService = Depends(get_opportunity_service),
):
    return service.update_opportunity(opportunity_id, data)


@router.delete("/{opportunity_id}")
async def delete_opportunity(
    opportunity_id: str, service: OpportunityService = Depends(get_opportunity_service)
):
    return service.delete_opportunity(opportunity_id)


@router.post("/{opportunity_id}/convert-to-event")
async def convert_to_event(
    opportunity_id: str,
    data: Optional[ConvertToEvent] = None,
    service: OpportunityService = Depends(get_opportunity_service),
):
    return service.convert_to_event(opportunity_id, data)
