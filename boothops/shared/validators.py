"""Shared validation and request-parsing helpers"""

import re
from datetime import date, datetime
from typing import Optional

from fastapi import HTTPException, Request

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Returns:
        Lowercase, stripped email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()
    if not EMAIL_PATTERN.match(email):
        raise ValueError("Invalid email format")
    return email


def parse_date_param(value: Optional[str], field: str) -> date:
    """Parse a required YYYY-MM-DD query parameter, raising 400 when missing or malformed"""
    if not value:
        raise HTTPException(status_code=400, detail=f"{field} is required")
    try:
        return datetime.strptime(value[:10], "%Y-%m-%d").date()
    except ValueError:
        raise HTTPException(status_code=400, detail=f"{field} must be a date in YYYY-MM-DD format")


def parse_id_list(value: Optional[str]) -> list[str]:
    """Split a comma separated id list, dropping blanks"""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def get_client_ip(request: Request) -> str:
    """Client IP as reported by the proxy chain (first X-Forwarded-For hop, then X-Real-IP)"""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first_hop = forwarded.split(",")[0].strip()
        if first_hop:
            return first_hop
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    return "unknown"
