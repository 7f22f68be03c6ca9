import uuid

from sqlalchemy import (
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


class InventoryItem(TenantBase):
    __tablename__ = "inventory_items"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    item_name = Column(String(255), nullable=False)
    item_category = Column(String(100), nullable=True)
    model = Column(String(255), nullable=True)
    manufacturer = Column(String(255), nullable=True)
    serial_number = Column(String(255), nullable=True)
    tracking_type = Column(String(50), default="serial_number", nullable=False)  # or total_quantity
    total_quantity = Column(Integer, nullable=True)
    purchase_date = Column(Date, nullable=True)
    purchase_price = Column(Float, nullable=True)
    status = Column(String(50), default="available", nullable=False)

    # Who or what holds the item: user, physical_address or product_group
    assigned_to_type = Column(String(50), nullable=True)
    assigned_to_id = Column(String(36), nullable=True, index=True)
    # long_term_staff, event_checkout or NULL
    assignment_type = Column(String(50), nullable=True)
    event_id = Column(String(36), ForeignKey("events.id"), nullable=True, index=True)
    expected_return_date = Column(Date, nullable=True)
    assignment_notes = Column(Text, nullable=True)

    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class ProductGroup(TenantBase):
    """A kit of inventory items that is assigned and checked out together"""

    __tablename__ = "product_groups"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    group_name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    assigned_to_type = Column(String(50), nullable=True)  # user, physical_address
    assigned_to_id = Column(String(36), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    items = relationship(
        "ProductGroupItem", back_populates="product_group", cascade="all, delete-orphan"
    )


class ProductGroupItem(TenantBase):
    __tablename__ = "product_group_items"
    __table_args__ = (
        UniqueConstraint("product_group_id", "inventory_item_id", name="uq_product_group_item"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    tenant_id = Column(String(36), nullable=False, index=True)
    product_group_id = Column(String(36), ForeignKey("product_groups.id"), nullable=False)
    inventory_item_id = Column(String(36), ForeignKey("inventory_items.id"), nullable=False)

    product_group = relationship("ProductGroup", back_populates="items")
    inventory_item = relationship("InventoryItem")
