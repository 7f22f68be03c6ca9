"""Tenant settings router"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from ...auth import TenantContext, get_tenant_context
from .repository import SettingsRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/settings", tags=["Settings"])

# Secrets are write-only through the API
SECRET_KEYS = {"integrations.stripe.secretKey"}


class SettingValue(BaseModel):
    value: Any = None


def _require_admin(ctx: TenantContext) -> None:
    if not ctx.is_admin:
        raise HTTPException(status_code=403, detail="Only administrators can change settings")


@router.get("")
async def list_settings(
    prefix: Optional[str] = Query(None, description="Only keys under this dotted prefix"),
    ctx: TenantContext = Depends(get_tenant_context),
):
    settings = SettingsRepository.get_all(ctx.db, ctx.tenant_id, prefix)
    for key in SECRET_KEYS & settings.keys():
        settings[key] = "********" if settings[key] else None
    return {"settings": settings}


@router.get("/{key}")
async def get_setting(key: str, ctx: TenantContext = Depends(get_tenant_context)):
    if key in SECRET_KEYS:
        raise HTTPException(status_code=403, detail="This setting cannot be read")
    value = SettingsRepository.get_value(ctx.db, ctx.tenant_id, key)
    if value is None:
        raise HTTPException(status_code=404, detail="Setting not found")
    return {"key": key, "value": value}


@router.put("/{key}")
async def put_setting(
    key: str, data: SettingValue, ctx: TenantContext = Depends(get_tenant_context)
):
    _require_admin(ctx)
    SettingsRepository.upsert(ctx.db, ctx.tenant_id, key, data.value)
    logger.info(f"⚙️ Tenant {ctx.tenant_id} updated setting {key}")
    return {"key": key, "success": True}


@router.delete("/{key}")
async def delete_setting(key: str, ctx: TenantContext = Depends(get_tenant_context)):
    _require_admin(ctx)
    if not SettingsRepository.delete(ctx.db, ctx.tenant_id, key):
        raise HTTPException(status_code=404, detail="Setting not found")
    return {"success": True}
