"""Inventory repository - Database operations for inventory items and product groups"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import PhysicalAddress, User
from ...models_event import Event, EventStaffAssignment
from ...models_inventory import InventoryItem, ProductGroup, ProductGroupItem


class InventoryRepository:
    """Repository for inventory database operations"""

    @staticmethod
    def list_items(
        db: Session,
        tenant_id: str,
        category: Optional[str] = None,
        item_ids: Optional[list[str]] = None,
        event_id: Optional[str] = None,
        unassigned_to_event: bool = False,
    ) -> list[InventoryItem]:
        query = db.query(InventoryItem).filter(InventoryItem.tenant_id == tenant_id)
        if category:
            query = query.filter(InventoryItem.item_category == category)
        if item_ids:
            query = query.filter(InventoryItem.id.in_(item_ids))
        if event_id:
            query = query.filter(InventoryItem.event_id == event_id)
        if unassigned_to_event:
            query = query.filter(InventoryItem.event_id.is_(None))
        return query.order_by(InventoryItem.item_name.asc()).all()

    @staticmethod
    def get_item(db: Session, tenant_id: str, item_id: str) -> Optional[InventoryItem]:
        return (
            db.query(InventoryItem)
            .filter(InventoryItem.id == item_id, InventoryItem.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def list_groups(db: Session, tenant_id: str) -> list[ProductGroup]:
        return (
            db.query(ProductGroup)
            .options(joinedload(ProductGroup.items))
            .filter(ProductGroup.tenant_id == tenant_id)
            .order_by(ProductGroup.group_name.asc())
            .all()
        )

    @staticmethod
    def group_item_ids(db: Session, tenant_id: str, group_ids: list[str]) -> list[str]:
        if not group_ids:
            return []
        rows = (
            db.query(ProductGroupItem.inventory_item_id)
            .filter(
                ProductGroupItem.tenant_id == tenant_id,
                ProductGroupItem.product_group_id.in_(group_ids),
            )
            .all()
        )
        return [row[0] for row in rows]

    @staticmethod
    def roster_user_ids(db: Session, tenant_id: str, event_id: str) -> set[str]:
        rows = (
            db.query(EventStaffAssignment.user_id)
            .filter(
                EventStaffAssignment.tenant_id == tenant_id,
                EventStaffAssignment.event_id == event_id,
            )
            .all()
        )
        return {row[0] for row in rows}

    @staticmethod
    def assignee_names(db: Session, tenant_id: str, holders: list) -> dict[tuple[str, str], str]:
        """Display names for (assigned_to_type, assigned_to_id) pairs"""
        wanted: dict[str, set[str]] = {}
        for holder in holders:
            if holder.assigned_to_type and holder.assigned_to_id:
                wanted.setdefault(holder.assigned_to_type, set()).add(holder.assigned_to_id)

        names = {}
        if wanted.get("user"):
            for user in db.query(User).filter(User.tenant_id == tenant_id, User.id.in_(wanted["user"])):
                names[("user", user.id)] = user.full_name
        if wanted.get("physical_address"):
            for address in db.query(PhysicalAddress).filter(
                PhysicalAddress.tenant_id == tenant_id, PhysicalAddress.id.in_(wanted["physical_address"])
            ):
                names[("physical_address", address.id)] = address.location_name
        if wanted.get("product_group"):
            for group in db.query(ProductGroup).filter(
                ProductGroup.tenant_id == tenant_id, ProductGroup.id.in_(wanted["product_group"])
            ):
                names[("product_group", group.id)] = group.group_name
        return names

    @staticmethod
    def events_by_id(db: Session, tenant_id: str, event_ids: set[str]) -> dict[str, Event]:
        if not event_ids:
            return {}
        events = (
            db.query(Event)
            .options(joinedload(Event.dates))
            .filter(Event.tenant_id == tenant_id, Event.id.in_(event_ids))
            .all()
        )
        return {event.id: event for event in events}
