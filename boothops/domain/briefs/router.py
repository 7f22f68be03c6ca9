"""Staff brief router - Public event brief for on-site staff"""

from fastapi import APIRouter, Depends

from ...auth import TenantContext, get_public_tenant_context
from .service import StaffBriefService

router = APIRouter(prefix="/api/public/{tenant}/brief", tags=["Public Staff Brief"])


@router.get("/{token}")
async def get_staff_brief(token: str, ctx: TenantContext = Depends(get_public_tenant_context)):
    return StaffBriefService(ctx.db, ctx.tenant_id).get_brief(token)
