"""Application database models - tenants and the accounts that log into them"""

import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import AppBase


def generate_uuid():
    return str(uuid.uuid4())


class Tenant(AppBase):
    __tablename__ = "tenants"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    name = Column(String(255), nullable=False)
    subdomain = Column(String(100), unique=True, index=True, nullable=False)
    # Connection URL of the tenant's data database, Fernet-encrypted when a key is configured
    data_source_url = Column(Text, nullable=True)
    # Tenant identifier used inside the data database (tenant_id column of business tables)
    tenant_id_in_data_source = Column(String(36), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    users = relationship("AppUser", back_populates="tenant")


class AppUser(AppBase):
    __tablename__ = "app_users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), ForeignKey("tenants.id"), nullable=False, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    role = Column(String(50), default="user", nullable=False)  # admin, tenant_admin, user
    is_active = Column(Boolean, default=True, nullable=False)
    # Matching staff row in the tenant data database
    data_user_id = Column(String(36), nullable=True)
    last_login_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    tenant = relationship("Tenant", back_populates="users")
