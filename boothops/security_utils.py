"""
Security utilities
Password hashing, session tokens, public capability tokens and HTML cleaning
"""

import logging
import secrets
import string
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import bleach
from jose import JWTError
from jose import jwt as jose_jwt
from passlib.context import CryptContext

from .config import SECRET_KEY, SESSION_TOKEN_EXPIRE_HOURS

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

PUBLIC_ID_ALPHABET = string.ascii_letters + string.digits + "_-"
PUBLIC_ID_LENGTH = 11

ALLOWED_TAGS = ["p", "br", "strong", "em", "u", "ul", "ol", "li", "h1", "h2", "h3", "a"]
ALLOWED_ATTRIBUTES = {"a": ["href", "title"]}


# ============================================================================
# PASSWORD SECURITY
# ============================================================================


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except Exception as e:
        logger.error(f"Password verification error: {e}")
        return False


# ============================================================================
# SESSION TOKENS
# ============================================================================


def create_session_token(
    user_id: str, tenant_id: str, role: str, expires_delta: Optional[timedelta] = None
) -> str:
    """Create a signed session JWT carrying the application user and tenant"""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(hours=SESSION_TOKEN_EXPIRE_HOURS)
    )
    claims = {"sub": user_id, "tenant_id": tenant_id, "role": role, "exp": expire}
    return jose_jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def decode_session_token(token: str) -> Optional[dict[str, Any]]:
    """Return the token claims, or None when the token is invalid or expired"""
    try:
        return jose_jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"⚠️ Session token rejected: {e}")
        return None


# ============================================================================
# PUBLIC CAPABILITY TOKENS
# ============================================================================


def generate_public_token() -> str:
    """64-character hex token for unauthenticated contract/invoice/brief links"""
    return secrets.token_hex(32)


def is_valid_public_token(token: Optional[str]) -> bool:
    return bool(token) and len(token) == 64


def generate_public_id(length: int = PUBLIC_ID_LENGTH) -> str:
    """Short URL-safe id for staff form links"""
    return "".join(secrets.choice(PUBLIC_ID_ALPHABET) for _ in range(length))


# ============================================================================
# INPUT SANITIZATION
# ============================================================================


def sanitize_html(value: Optional[str]) -> Optional[str]:
    """Keep basic formatting tags in rich text (contract bodies, notes) and strip the rest"""
    if value is None:
        return None
    return bleach.clean(value, tags=ALLOWED_TAGS, attributes=ALLOWED_ATTRIBUTES, strip=True)

