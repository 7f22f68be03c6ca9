import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import ROOT_DOMAIN
from .data_sources import data_source_manager
from .database import get_app_db
from .models_app import AppUser, Tenant
from .security_utils import decode_session_token

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

ADMIN_ROLES = {"admin", "tenant_admin"}


@dataclass
class TenantContext:
    """Per-request handle on the tenant's data database"""

    db: Session
    tenant: Tenant
    tenant_id: str  # tenant id as used inside the data database
    app_user: Optional[AppUser] = None

    @property
    def user_id(self) -> Optional[str]:
        if not self.app_user:
            return None
        return self.app_user.data_user_id or self.app_user.id

    @property
    def is_admin(self) -> bool:
        return bool(self.app_user and self.app_user.role in ADMIN_ROLES)


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    app_db: Session = Depends(get_app_db),
) -> AppUser:
    """Resolve the logged-in application user from the bearer session token"""
    if not credentials or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Unauthorized")

    claims = decode_session_token(credentials.credentials)
    if not claims or not claims.get("sub"):
        raise HTTPException(status_code=401, detail="Unauthorized")

    user = app_db.query(AppUser).filter(AppUser.id == claims["sub"]).first()
    if not user or not user.is_active:
        logger.warning(f"⚠️ Session for unknown or inactive user {claims.get('sub')}")
        raise HTTPException(status_code=401, detail="Unauthorized")
    if claims.get("tenant_id") != user.tenant_id:
        raise HTTPException(status_code=401, detail="Unauthorized")
    return user


def requested_subdomain(request: Request) -> Optional[str]:
    """Tenant named by the X-Tenant header or by the Host subdomain, if any"""
    header = request.headers.get("x-tenant")
    if header:
        return header.strip().lower()

    host = request.headers.get("host", "").split(":")[0].lower()
    suffix = f".{ROOT_DOMAIN}"
    if host.endswith(suffix):
        subdomain = host[: -len(suffix)]
        if subdomain and subdomain not in ("www", "api"):
            return subdomain
    return None


def get_tenant_context(
    request: Request,
    user: AppUser = Depends(get_current_user),
    app_db: Session = Depends(get_app_db),
):
    tenant = user.tenant
    if not tenant or not tenant.is_active:
        raise HTTPException(status_code=403, detail="Tenant is not active")

    subdomain = requested_subdomain(request)
    if subdomain and subdomain != tenant.subdomain:
        logger.warning(
            f"⚠️ User {user.id} of tenant {tenant.subdomain} attempted access to {subdomain}"
        )
        raise HTTPException(status_code=403, detail="Access to this tenant is not allowed")

    db, config = data_source_manager.open_session(app_db, tenant.id)
    try:
        yield TenantContext(db=db, tenant=tenant, tenant_id=config.data_tenant_id, app_user=user)
    finally:
        db.close()


def get_public_tenant_context(tenant: str, app_db: Session = Depends(get_app_db)):
    """Tenant context for unauthenticated token endpoints, resolved from the path subdomain"""
    record = (
        app_db.query(Tenant)
        .filter(Tenant.subdomain == tenant.lower(), Tenant.is_active.is_(True))
        .first()
    )
    if not record:
        raise HTTPException(status_code=404, detail="Tenant not found")

    db, config = data_source_manager.open_session(app_db, record.id)
    try:
        yield TenantContext(db=db, tenant=record, tenant_id=config.data_tenant_id)
    finally:
        db.close()
