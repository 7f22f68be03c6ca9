"""Event router - FastAPI endpoints for events"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...auth import TenantContext, get_tenant_context
from ..design.schemas import DesignItemCreate
from ..design.service import DesignService
from .schemas import EventCreate, EventUpdate, StaffAssignmentCreate, StaffBriefToggle
from .service import EventService

router = APIRouter(prefix="/api/events", tags=["Events"])


def get_event_service(ctx: TenantContext = Depends(get_tenant_context)) -> EventService:
    """Dependency injection for EventService"""
    return EventService(ctx.db, ctx.tenant_id, ctx.user_id)


@router.get("")
async def list_events(
    status: Optional[str] = Query(None),
    type: Optional[str] = Query(None, description="Event type"),
    account_id: Optional[str] = Query(None),
    service: EventService = Depends(get_event_service),
):
    return service.list_events(status=status, event_type=type, account_id=account_id)


@router.post("")
async def create_event(data: EventCreate, service: EventService = Depends(get_event_service)):
    return service.create_event(data)


@router.get("/{event_id}")
async def get_event(event_id: str, service: EventService = Depends(get_event_service)):
    return service.event_detail(event_id)


@router.patch("/{event_id}")
async def update_event(event_id: str, data: EventUpdate, service: EventService = Depends(get_event_service)):
    return service.update_event(event_id, data)


@router.delete("/{event_id}")
async def delete_event(event_id: str, service: EventService = Depends(get_event_service)):
    return service.delete_event(event_id)


@router.get("/{event_id}/staff")
async def list_event_staff(event_id: str, service: EventService = Depends(get_event_service)):
    return service.list_staff(event_id)


@router.post("/{event_id}/staff")
async def assign_event_staff(
    event_id: str, data: StaffAssignmentCreate, service: EventService = Depends(get_event_service)
):
    return service.assign_staff(event_id, data)


@router.delete("/{event_id}/staff/{assignment_id}")
async def remove_event_staff(
    event_id: str, assignment_id: str, service: EventService = Depends(get_event_service)
):
    return service.remove_staff(event_id, assignment_id)


@router.post("/{event_id}/staff-brief")
async def toggle_staff_brief(
    event_id: str, data: StaffBriefToggle, service: EventService = Depends(get_event_service)
):
    return service.set_staff_brief(event_id, data.enabled, data.regenerate)


@router.get("/{event_id}/design-items")
async def list_event_design_items(event_id: str, ctx: TenantContext = Depends(get_tenant_context)):
    event = EventService(ctx.db, ctx.tenant_id).get_event(event_id)
    return DesignService(ctx.db, ctx.tenant_id).event_design_items(event.id)


@router.post("/{event_id}/design-items")
async def add_event_design_item(
    event_id: str, data: DesignItemCreate, ctx: TenantContext = Depends(get_tenant_context)
):
    event = EventService(ctx.db, ctx.tenant_id).get_event(event_id)
    return DesignService(ctx.db, ctx.tenant_id).add_event_design_item(event, data, created_by=ctx.user_id)
