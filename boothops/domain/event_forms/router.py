"""Event form router - Client questionnaires and their public pages"""

from typing import Optional

from fastapi import APIRouter, Depends

from ...auth import TenantContext, get_public_tenant_context, get_tenant_context
from ..events.service import EventService
from .merge_fields import merge_field_catalog
from .schemas import EventFormCreate, EventFormResponse, EventFormSubmit, EventFormUpdate
from .service import EventFormService

router = APIRouter(prefix="/api/events/{event_id}/forms", tags=["Event Forms"])
merge_fields_router = APIRouter(prefix="/api/event-forms", tags=["Event Forms"])
public_router = APIRouter(prefix="/api/public/{tenant}/forms", tags=["Public Event Forms"])


def get_event_form_service(ctx: TenantContext = Depends(get_tenant_context)) -> EventFormService:
    """Dependency injection for EventFormService"""
    return EventFormService(ctx.db, ctx.tenant_id, ctx.user_id)


def get_public_event_form_service(
    ctx: TenantContext = Depends(get_public_tenant_context),
) -> EventFormService:
    return EventFormService(ctx.db, ctx.tenant_id)


@merge_fields_router.get("/merge-fields")
async def list_merge_fields(_: TenantContext = Depends(get_tenant_context)):
    return {"categories": merge_field_catalog()}


@router.get("", response_model=list[EventFormResponse])
async def list_event_forms(
    event_id: str,
    ctx: TenantContext = Depends(get_tenant_context),
    service: EventFormService = Depends(get_event_form_service),
):
    event = EventService(ctx.db, ctx.tenant_id).get_event(event_id)
    return service.list_forms(event)


@router.post("", response_model=EventFormResponse)
async def create_event_form(
    event_id: str,
    data: EventFormCreate,
    ctx: TenantContext = Depends(get_tenant_context),
    service: EventFormService = Depends(get_event_form_service),
):
    event = EventService(ctx.db, ctx.tenant_id).get_event(event_id)
    return service.create_form(event, data)


@router.put("/{form_id}", response_model=EventFormResponse)
async def update_event_form(
    event_id: str,
    form_id: str,
    data: EventFormUpdate,
    ctx: TenantContext = Depends(get_tenant_context),
    service: EventFormService = Depends(get_event_form_service),
):
    event = EventService(ctx.db, ctx.tenant_id).get_event(event_id)
    return service.update_form(event, form_id, data)


@router.delete("/{form_id}")
async def delete_event_form(
    event_id: str,
    form_id: str,
    ctx: TenantContext = Depends(get_tenant_context),
    service: EventFormService = Depends(get_event_form_service),
):
    event = EventService(ctx.db, ctx.tenant_id).get_event(event_id)
    return service.delete_form(event, form_id)


# ----------------------------------------------------------------------
# Public endpoints
# ----------------------------------------------------------------------


@public_router.get("/{public_id}")
async def get_public_event_form(
    public_id: str, service: EventFormService = Depends(get_public_event_form_service)
):
    return service.view_public_form(public_id)


@public_router.post("/{public_id}")
async def submit_public_event_form(
    public_id: str,
    data: Optional[EventFormSubmit] = None,
    service: EventFormService = Depends(get_public_event_form_service),
):
    return service.submit_public_form(public_id, data.responses if data else None)
