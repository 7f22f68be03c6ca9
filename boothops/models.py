import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import TenantBase


def generate_uuid():
    return str(uuid.uuid4())


class User(TenantBase):
    """Staff member as stored in the tenant data database"""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(50), nullable=True)
    role = Column(String(50), default="user", nullable=False)  # admin, tenant_admin, user
    department = Column(String(50), nullable=True)  # design, operations, sales, accounting...
    department_role = Column(String(50), nullable=True)  # manager, supervisor, member
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class Account(TenantBase):
    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    account_type = Column(String(50), default="company", nullable=False)  # company, individual
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    website = Column(String(255), nullable=True)
    billing_address_line1 = Column(String(255), nullable=True)
    billing_address_line2 = Column(String(255), nullable=True)
    billing_city = Column(String(100), nullable=True)
    billing_state = Column(String(50), nullable=True)
    billing_zip_code = Column(String(20), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(50), default="active", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Contact(TenantBase):
    __tablename__ = "contacts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    # Legacy single-account link; contact_accounts is the source of truth
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True, index=True)
    phone = Column(String(50), nullable=True)
    job_title = Column(String(100), nullable=True)
    address_line1 = Column(String(255), nullable=True)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True)
    zip_code = Column(String(20), nullable=True)
    notes = Column(Text, nullable=True)
    status = Column(String(50), default="active", nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    account_links = relationship(
        "ContactAccount", back_populates="contact", cascade="all, delete-orphan"
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip()


class ContactAccount(TenantBase):
    """Many-to-many link between contacts and accounts with relationship history"""

    __tablename__ = "contact_accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    contact_id = Column(String(36), ForeignKey("contacts.id"), nullable=False, index=True)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=False, index=True)
    role = Column(String(100), nullable=True)
    is_primary = Column(Boolean, default=False, nullable=False)
    start_date = Column(Date, nullable=True)
    end_date = Column(Date, nullable=True)  # NULL while the relationship is active
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    contact = relationship("Contact", back_populates="account_links")
    account = relationship("Account")


class Lead(TenantBase):
    __tablename__ = "leads"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    company = Column(String(255), nullable=True)
    lead_type = Column(String(50), default="personal", nullable=False)  # personal, company
    source = Column(String(100), nullable=True)
    status = Column(String(50), default="new", nullable=False)
    address_line1 = Column(String(255), nullable=True)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True)
    zip_code = Column(String(20), nullable=True)
    notes = Column(Text, nullable=True)
    is_converted = Column(Boolean, default=False, nullable=False)
    converted_account_id = Column(String(36), nullable=True)
    converted_contact_id = Column(String(36), nullable=True)
    converted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Opportunity(TenantBase):
    __tablename__ = "opportunities"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    lead_id = Column(String(36), ForeignKey("leads.id"), nullable=True)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=True)
    contact_id = Column(String(36), ForeignKey("contacts.id"), nullable=True)
    owner_id = Column(String(36), nullable=True)
    stage = Column(String(50), default="prospecting", nullable=False)
    amount = Column(Float, nullable=True)
    probability = Column(Integer, nullable=True)
    expected_close_date = Column(Date, nullable=True)
    event_type = Column(String(100), nullable=True)
    date_type = Column(String(50), nullable=True)  # single_day, multiple_days
    guest_count = Column(Integer, nullable=True)
    mailing_address_line1 = Column(String(255), nullable=True)
    mailing_address_line2 = Column(String(255), nullable=True)
    mailing_city = Column(String(100), nullable=True)
    mailing_state = Column(String(50), nullable=True)
    mailing_postal_code = Column(String(20), nullable=True)
    is_converted = Column(Boolean, default=False, nullable=False)
    converted_event_id = Column(String(36), nullable=True)
    converted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    dates = relationship(
        "OpportunityDate",
        back_populates="opportunity",
        cascade="all, delete-orphan",
        order_by="OpportunityDate.event_date",
    )


class OpportunityDate(TenantBase):
    __tablename__ = "opportunity_dates"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    opportunity_id = Column(String(36), ForeignKey("opportunities.id"), nullable=False, index=True)
    event_date = Column(Date, nullable=False)
    start_time = Column(String(10), nullable=True)  # HH:MM
    end_time = Column(String(10), nullable=True)
    setup_time = Column(String(10), nullable=True)
    location_id = Column(String(36), ForeignKey("locations.id"), nullable=True)
    notes = Column(Text, nullable=True)

    opportunity = relationship("Opportunity", back_populates="dates")


class Location(TenantBase):
    """Event venue"""

    __tablename__ = "locations"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    address_line1 = Column(String(255), nullable=True)
    address_line2 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True)
    postal_code = Column(String(20), nullable=True)
    country = Column(String(100), nullable=True)
    contact_name = Column(String(255), nullable=True)
    contact_phone = Column(String(50), nullable=True)
    contact_email = Column(String(255), nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class PhysicalAddress(TenantBase):
    """Warehouse or storage location that can hold inventory"""

    __tablename__ = "physical_addresses"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    location_name = Column(String(255), nullable=False)
    address_line1 = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True)
    postal_code = Column(String(20), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


class TenantSetting(TenantBase):
    __tablename__ = "tenant_settings"
    __table_args__ = (UniqueConstraint("tenant_id", "setting_key", name="uq_tenant_setting_key"),)

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    setting_key = Column(String(255), nullable=False)  # dotted, e.g. appearance.logoUrl
    setting_value = Column(JSON, nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())


class Attachment(TenantBase):
    __tablename__ = "attachments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    entity_type = Column(String(50), nullable=False)  # event, staff_form, contract...
    entity_id = Column(String(36), nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    file_key = Column(String(500), nullable=True)  # R2 object key
    file_type = Column(String(100), nullable=True)
    file_size = Column(Integer, nullable=True)
    # Free text; contract attachments carry [CONTRACT:<id>] and [STATUS:<status>] tags
    description = Column(Text, nullable=True)
    uploaded_by = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
