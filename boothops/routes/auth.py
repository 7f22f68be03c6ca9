import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..auth import get_current_user
from ..database import get_app_db
from ..models_app import AppUser
from ..security_utils import create_session_token, verify_password
from ..utils.dates import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])


class LoginRequest(BaseModel):
    email: str
    password: str
    tenant: Optional[str] = None  # subdomain the user is signing in to


class SessionUser(BaseModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: str
    tenant_id: str
    tenant_subdomain: str
    tenant_name: str


def _session_user(user: AppUser) -> SessionUser:
    return SessionUser(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
        tenant_id=user.tenant_id,
        tenant_subdomain=user.tenant.subdomain,
        tenant_name=user.tenant.name,
    )


@router.post("/login")
async def login(data: LoginRequest, app_db: Session = Depends(get_app_db)):
    user = (
        app_db.query(AppUser)
        .filter(func.lower(AppUser.email) == data.email.strip().lower())
        .first()
    )
    if not user or not user.is_active or not verify_password(data.password, user.password_hash):
        logger.warning(f"🔒 Failed login attempt for {data.email}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.tenant or not user.tenant.is_active:
        raise HTTPException(status_code=403, detail="Tenant is not active")
    if data.tenant and data.tenant.lower() != user.tenant.subdomain:
        logger.warning(f"🔒 {user.email} tried to sign in to tenant {data.tenant}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    user.last_login_at = utcnow()
    app_db.commit()

    token = create_session_token(user.id, user.tenant_id, user.role)
    logger.info(f"✅ User {user.id} signed in to tenant {user.tenant.subdomain}")
    return {"access_token": token, "token_type": "bearer", "user": _session_user(user)}


@router.get("/me", response_model=SessionUser)
async def me(user: AppUser = Depends(get_current_user)):
    return _session_user(user)
