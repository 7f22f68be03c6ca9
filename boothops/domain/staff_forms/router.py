"""Staff form router - Sending recap forms and the public form pages"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile

from ...auth import TenantContext, get_public_tenant_context, get_tenant_context
from ...config import UPLOAD_RATE_LIMIT, UPLOAD_RATE_WINDOW_SECONDS
from ...rate_limiter import create_rate_limiter
from .schemas import FormTemplateCreate, StaffFormSend, StaffFormSubmit
from .service import StaffFormService

router = APIRouter(prefix="/api/staff-forms", tags=["Staff Forms"])
public_router = APIRouter(prefix="/api/public/{tenant}/staff-forms", tags=["Public Staff Forms"])

upload_rate_limit = create_rate_limiter(
    limit=UPLOAD_RATE_LIMIT, window_seconds=UPLOAD_RATE_WINDOW_SECONDS, key_prefix="staff_form_upload"
)


def get_staff_form_service(ctx: TenantContext = Depends(get_tenant_context)) -> StaffFormService:
    """Dependency injection for StaffFormService"""
    return StaffFormService(ctx.db, ctx.tenant_id, ctx.tenant.name, ctx.tenant.subdomain, ctx.user_id)


def get_public_staff_form_service(
    ctx: TenantContext = Depends(get_public_tenant_context),
) -> StaffFormService:
    return StaffFormService(ctx.db, ctx.tenant_id, ctx.tenant.name, ctx.tenant.subdomain)


@router.get("/templates")
async def list_form_templates(service: StaffFormService = Depends(get_staff_form_service)):
    return [
        {"id": t.id, "name": t.name, "description": t.description, "form_type": t.form_type, "fields": t.fields}
        for t in service.list_templates()
    ]


@router.post("/templates")
async def create_form_template(
    data: FormTemplateCreate, service: StaffFormService = Depends(get_staff_form_service)
):
    template = service.create_template(data)
    return {"id": template.id, "name": template.name, "fields": template.fields}


@router.get("")
async def list_staff_forms(
    event_id: str = Query(...), service: StaffFormService = Depends(get_staff_form_service)
):
    return service.list_event_forms(event_id)


@router.post("/send")
async def send_staff_forms(data: StaffFormSend, service: StaffFormService = Depends(get_staff_form_service)):
    return await service.send_forms(data)


# ----------------------------------------------------------------------
# Public endpoints
# ----------------------------------------------------------------------


@public_router.get("/{public_id}")
async def get_public_staff_form(
    public_id: str, service: StaffFormService = Depends(get_public_staff_form_service)
):
    return service.view_public_form(public_id)


@public_router.post("/{public_id}")
async def submit_public_staff_form(
    public_id: str,
    data: Optional[StaffFormSubmit] = None,
    service: StaffFormService = Depends(get_public_staff_form_service),
):
    return service.submit_public_form(public_id, data.responses if data else None)


@public_router.post("/{public_id}/upload")
async def upload_staff_form_file(
    public_id: str,
    file: UploadFile = File(...),
    _: None = Depends(upload_rate_limit),
    service: StaffFormService = Depends(get_public_staff_form_service),
):
    return await service.upload_attachment(public_id, file)
