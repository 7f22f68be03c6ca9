import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    LargeBinary,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import TenantBase


def generate_uuid():
    return str(uuid.uuid4())


class Invoice(TenantBase):
    __tablename__ = "invoices"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    invoice_number = Column(String(50), nullable=False, index=True)  # INV-0001
    event_id = Column(String(36), ForeignKey("events.id"), nullable=True, index=True)
    opportunity_id = Column(String(36), ForeignKey("opportunities.id"), nullable=True)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=True)
    contact_id = Column(String(36), ForeignKey("contacts.id"), nullable=True)
    quote_id = Column(String(36), ForeignKey("quotes.id"), nullable=True)
    issue_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)
    # draft, sent, viewed, partially_paid, paid, overdue, cancelled
    status = Column(String(50), default="draft", nullable=False)
    subtotal = Column(Float, default=0, nullable=False)
    tax_rate = Column(Float, default=0, nullable=False)  # percent
    tax_amount = Column(Float, default=0, nullable=False)
    total_amount = Column(Float, default=0, nullable=False)
    paid_amount = Column(Float, default=0, nullable=False)
    balance_amount = Column(Float, default=0, nullable=False)
    public_token = Column(String(64), unique=True, index=True, nullable=True)
    notes = Column(Text, nullable=True)
    terms = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    line_items = relationship(
        "InvoiceLineItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceLineItem.sort_order",
    )
    payments = relationship("Payment", back_populates="invoice", cascade="all, delete-orphan")


class InvoiceLineItem(TenantBase):
    __tablename__ = "invoice_line_items"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    invoice_id = Column(String(36), ForeignKey("invoices.id"), nullable=False, index=True)
    item_type = Column(String(50), default="custom", nullable=False)  # package, add_on, custom, discount
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    quantity = Column(Float, default=1, nullable=False)
    unit_price = Column(Float, default=0, nullable=False)
    total = Column(Float, default=0, nullable=False)
    taxable = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)

    invoice = relationship("Invoice", back_populates="line_items")


class Payment(TenantBase):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    invoice_id = Column(String(36), ForeignKey("invoices.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    payment_date = Column(DateTime(timezone=True), server_default=func.now())
    payment_method = Column(String(50), nullable=True)  # stripe, cash, check...
    status = Column(String(50), default="completed", nullable=False)
    reference_number = Column(String(255), nullable=True, index=True)
    notes = Column(Text, nullable=True)

    invoice = relationship("Invoice", back_populates="payments")


class Quote(TenantBase):
    __tablename__ = "quotes"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    quote_number = Column(String(50), nullable=True)
    opportunity_id = Column(String(36), ForeignKey("opportunities.id"), nullable=True, index=True)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=True)
    contact_id = Column(String(36), ForeignKey("contacts.id"), nullable=True)
    status = Column(String(50), default="draft", nullable=False)  # draft, sent, accepted, declined
    subtotal = Column(Float, default=0, nullable=False)
    tax_rate = Column(Float, default=0, nullable=False)
    tax_amount = Column(Float, default=0, nullable=False)
    total_amount = Column(Float, default=0, nullable=False)
    notes = Column(Text, nullable=True)
    terms = Column(Text, nullable=True)
    accepted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    line_items = relationship(
        "QuoteLineItem",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="QuoteLineItem.sort_order",
    )


class QuoteLineItem(TenantBase):
    __tablename__ = "quote_line_items"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    quote_id = Column(String(36), ForeignKey("quotes.id"), nullable=False, index=True)
    item_type = Column(String(50), default="custom", nullable=False)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    quantity = Column(Float, default=1, nullable=False)
    unit_price = Column(Float, default=0, nullable=False)
    total = Column(Float, default=0, nullable=False)
    taxable = Column(Boolean, default=True, nullable=False)
    sort_order = Column(Integer, default=0, nullable=False)

    quote = relationship("Quote", back_populates="line_items")


class Contract(TenantBase):
    __tablename__ = "contracts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    contract_number = Column(String(50), nullable=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=True, index=True)
    account_id = Column(String(36), ForeignKey("accounts.id"), nullable=True)
    contact_id = Column(String(36), ForeignKey("contacts.id"), nullable=True)
    opportunity_id = Column(String(36), ForeignKey("opportunities.id"), nullable=True)
    status = Column(String(50), default="draft", nullable=False)  # draft, sent, viewed, signed
    public_token = Column(String(64), unique=True, index=True, nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    include_invoice_attachment = Column(Boolean, default=False, nullable=False)
    sent_at = Column(DateTime(timezone=True), nullable=True)
    viewed_at = Column(DateTime(timezone=True), nullable=True)

    signed_at = Column(DateTime(timezone=True), nullable=True)
    signed_by = Column(String(255), nullable=True)
    signature_data = Column(Text, nullable=True)
    ip_address = Column(String(100), nullable=True)
    signature_user_agent = Column(Text, nullable=True)
    signed_pdf = Column(LargeBinary, nullable=True)

    created_by = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
