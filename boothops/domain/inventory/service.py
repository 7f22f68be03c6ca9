"""Inventory service - Item management, availability and event checkout"""

import logging
from datetime import date, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models_event import Event
from ...models_inventory import InventoryItem, ProductGroup, ProductGroupItem
from ...utils.sanitization import sanitize_fields
from ...utils.serialization import row_to_dict
from .repository import InventoryRepository
from .schemas import (
    ASSIGNEE_TYPES,
    ASSIGNMENT_TYPES,
    EventInventoryAssign,
    InventoryItemCreate,
    InventoryItemUpdate,
    ProductGroupCreate,
)

logger = logging.getLogger(__name__)

CHECKOUT_RETURN_DAYS = 5
TEXT_FIELDS = ["item_name", "item_category", "model", "manufacturer", "serial_number", "assignment_notes", "notes"]
UNKNOWN_NAMES = {
    "user": "Unknown User",
    "physical_address": "Unknown Location",
    "product_group": "Unknown Group",
}


def short_date(value: date) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def event_dates_of(event: Event) -> list[date]:
    dates = [d.event_date for d in event.dates if d.event_date]
    if not dates and event.start_date:
        dates = [event.start_date]
    return sorted(dates)


def check_availability(
    item: dict, start: date, end: date, event: Optional[Event] = None
) -> tuple[bool, str]:
    """
    Decide whether an item can be booked between `start` and `end`.

    `item` is the item row as a dict; `returns_during_period` and
    `available_from` are added to it when a checkout ends inside the window.
    """
    holder = item.get("assigned_to_name")
    if item["assignment_type"] == "long_term_staff":
        return False, f"Assigned to {holder} (long-term)"

    if item["assignment_type"] == "event_checkout" and item["expected_return_date"]:
        returns = item["expected_return_date"]
        if returns > start:
            if returns <= end:
                item["returns_during_period"] = True
                item["available_from"] = returns
            return False, f"Returns {short_date(returns)} ({holder or 'assigned'})"
        return True, ""

    if item["event_id"] and event:
        for day in event_dates_of(event):
            if start <= day <= end:
                return False, f"Booked for {event.title} on {short_date(day)}"
    return True, ""


class InventoryService:
    """Service layer for inventory business logic"""

    def __init__(self, db: Session, tenant_id: str):
        self.db = db
        self.tenant_id = tenant_id
        self.repo = InventoryRepository()

    def _with_names(self, holders: list) -> list[dict]:
        names = self.repo.assignee_names(self.db, self.tenant_id, holders)
        rows = []
        for holder in holders:
            row = row_to_dict(holder)
            if holder.assigned_to_type and holder.assigned_to_id:
                row["assigned_to_name"] = names.get(
                    (holder.assigned_to_type, holder.assigned_to_id),
                    UNKNOWN_NAMES.get(holder.assigned_to_type),
                )
            rows.append(row)
        return rows

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    def list_items(self, category: Optional[str] = None) -> list[dict]:
        return self._with_names(self.repo.list_items(self.db, self.tenant_id, category=category))

    def get_item(self, item_id: str) -> InventoryItem:
        item = self.repo.get_item(self.db, self.tenant_id, item_id)
        if not item:
            raise HTTPException(status_code=404, detail="Inventory item not found")
        return item

    def _validate_assignment(self, fields: dict) -> dict:
        if fields.get("assigned_to_type") and fields["assigned_to_type"] not in ASSIGNEE_TYPES:
            raise HTTPException(status_code=400, detail=f"Invalid assigned_to_type: {fields['assigned_to_type']}")
        if fields.get("assignment_type") and fields["assignment_type"] not in ASSIGNMENT_TYPES:
            raise HTTPException(status_code=400, detail=f"Invalid assignment_type: {fields['assignment_type']}")
        if fields.get("assigned_to_type") and not fields.get("assigned_to_id"):
            raise HTTPException(status_code=400, detail="assigned_to_id is required with assigned_to_type")
        return sanitize_fields(fields, TEXT_FIELDS)

    def create_item(self, data: InventoryItemCreate) -> InventoryItem:
        item = InventoryItem(tenant_id=self.tenant_id, **self._validate_assignment(data.model_dump()))
        if not item.item_name:
            raise HTTPException(status_code=400, detail="Item name is required")
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        logger.info(f"📦 Created inventory item {item.id}")
        return item

    def update_item(self, item_id: str, data: InventoryItemUpdate) -> InventoryItem:
        item = self.get_item(item_id)
        updates = data.model_dump(exclude_unset=True)
        merged = {
            "assigned_to_type": updates.get("assigned_to_type", item.assigned_to_type),
            "assigned_to_id": updates.get("assigned_to_id", item.assigned_to_id),
            "assignment_type": updates.get("assignment_type", item.assignment_type),
        }
        self._validate_assignment(merged)
        for key, value in sanitize_fields(updates, TEXT_FIELDS).items():
            setattr(item, key, value)
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete_item(self, item_id: str) -> dict:
        item = self.get_item(item_id)
        if item.event_id:
            raise HTTPException(status_code=400, detail="Item is checked out to an event")
        self.db.query(ProductGroupItem).filter(ProductGroupItem.inventory_item_id == item.id).delete()
        self.db.delete(item)
        self.db.commit()
        return {"success": True}

    # ------------------------------------------------------------------
    # Product groups
    # ------------------------------------------------------------------

    def list_groups(self) -> list[dict]:
        groups = self.repo.list_groups(self.db, self.tenant_id)
        rows = self._with_names(groups)
        for row, group in zip(rows, groups):
            row["inventory_item_ids"] = [link.inventory_item_id for link in group.items]
        return rows

    def create_group(self, data: ProductGroupCreate) -> dict:
        fields = self._validate_assignment(data.model_dump(exclude={"inventory_item_ids"}))
        fields = sanitize_fields(fields, ["group_name", "description"])
        if fields.get("assigned_to_type") == "product_group":
            raise HTTPException(status_code=400, detail="Product groups cannot hold other groups")

        group = ProductGroup(tenant_id=self.tenant_id, **fields)
        self.db.add(group)
        self.db.flush()
        for item_id in dict.fromkeys(data.inventory_item_ids):
            item = self.get_item(item_id)
            group.items.append(ProductGroupItem(tenant_id=self.tenant_id, inventory_item_id=item.id))
            item.assigned_to_type = "product_group"
            item.assigned_to_id = group.id
        self.db.commit()
        self.db.refresh(group)
        logger.info(f"📦 Created product group {group.id} with {len(group.items)} item(s)")
        row = row_to_dict(group)
        row["inventory_item_ids"] = [link.inventory_item_id for link in group.items]
        return row

    # ------------------------------------------------------------------
    # Availability
    # ------------------------------------------------------------------

    def availability(
        self,
        start: date,
        end: date,
        category: Optional[str] = None,
        item_ids: Optional[list[str]] = None,
    ) -> dict:
        if end < start:
            raise HTTPException(status_code=400, detail="end_date must not be before start_date")

        items = self.repo.list_items(self.db, self.tenant_id, category=category, item_ids=item_ids)
        events = self.repo.events_by_id(self.db, self.tenant_id, {i.event_id for i in items if i.event_id})

        available, unavailable = [], []
        for row in self._with_names(items):
            event = events.get(row["event_id"]) if row["event_id"] else None
            if event:
                row["event_name"] = event.title
                dates = event_dates_of(event)
                row["event_date"] = dates[0] if dates else None

            is_available, reason = check_availability(row, start, end, event)
            if is_available:
                row["availability_status"] = "available"
                row["location"] = row.get("assigned_to_name") or "Unassigned"
                available.append(row)
            else:
                row["availability_status"] = "unavailable"
                row["unavailable_reason"] = reason
                unavailable.append(row)

        return {
            "available": available,
            "unavailable": unavailable,
            "summary": {
                "total": len(items),
                "available": len(available),
                "unavailable": len(unavailable),
                "start_date": start,
                "end_date": end,
            },
        }

    # ------------------------------------------------------------------
    # Event checkout
    # ------------------------------------------------------------------

    def _get_event(self, event_id: str) -> Event:
        event = (
            self.db.query(Event)
            .filter(Event.id == event_id, Event.tenant_id == self.tenant_id)
            .first()
        )
        if not event:
            raise HTTPException(status_code=404, detail="Event not found")
        return event

    def event_inventory(
        self, event_id: str, include_available: bool = False, search: Optional[str] = None
    ) -> dict:
        event = self._get_event(event_id)
        assigned = self.repo.list_items(self.db, self.tenant_id, event_id=event.id)

        available: list[InventoryItem] = []
        groups: list[ProductGroup] = []
        if include_available:
            roster = self.repo.roster_user_ids(self.db, self.tenant_id, event.id)

            def held_for_event(holder) -> bool:
                if holder.assigned_to_type == "physical_address":
                    return True
                return holder.assigned_to_type == "user" and holder.assigned_to_id in roster

            all_groups = self.repo.list_groups(self.db, self.tenant_id)
            group_map = {g.id: g for g in all_groups}

            for item in self.repo.list_items(self.db, self.tenant_id, unassigned_to_event=True):
                if not item.assigned_to_id or held_for_event(item):
                    available.append(item)
                elif item.assigned_to_type == "product_group":
                    group = group_map.get(item.assigned_to_id)
                    if group and held_for_event(group):
                        available.append(item)

            groups = [g for g in all_groups if held_for_event(g)]

            if search:
                needle = search.strip().lower()
                available = [
                    i for i in available
                    if needle in (i.item_name or "").lower()
                    or needle in (i.item_category or "").lower()
                    or needle in (i.serial_number or "").lower()
                ]
                groups = [
                    g for g in groups
                    if needle in (g.group_name or "").lower() or needle in (g.description or "").lower()
                ]

        assigned_rows = self._with_names(assigned)
        group_rows = self._with_names(groups)
        for row, group in zip(group_rows, groups):
            row["inventory_item_ids"] = [link.inventory_item_id for link in group.items]

        by_staff: dict[str, dict] = {}
        for row in assigned_rows:
            if row["assigned_to_type"] == "user" and row["assigned_to_id"]:
                entry = by_staff.setdefault(
                    row["assigned_to_id"],
                    {"staff_id": row["assigned_to_id"], "staff_name": row.get("assigned_to_name"), "items": []},
                )
                entry["items"].append(row)

        available_rows = self._with_names(available)
        return {
            "event": {"id": event.id, "title": event.title, "start_date": event.start_date},
            "assigned": assigned_rows,
            "available": available_rows,
            "available_product_groups": group_rows,
            "total_assigned": len(assigned_rows),
            "total_available": len(available_rows),
            "total_available_groups": len(group_rows),
            "by_staff": list(by_staff.values()),
        }

    def assign_to_event(self, event_id: str, data: EventInventoryAssign) -> dict:
        item_ids = list(data.inventory_item_ids)
        item_ids += self.repo.group_item_ids(self.db, self.tenant_id, data.product_group_ids)
        item_ids = list(dict.fromkeys(item_ids))
        if not item_ids:
            raise HTTPException(
                status_code=400, detail="inventory_item_ids or product_group_ids array is required"
            )

        event = self._get_event(event_id)
        return_date = data.expected_return_date
        if not return_date:
            return_date = (event.start_date or date.today()) + timedelta(days=CHECKOUT_RETURN_DAYS)

        items = self.repo.list_items(self.db, self.tenant_id, item_ids=item_ids)
        for item in items:
            item.event_id = event.id
            item.assignment_type = "event_checkout"
            item.expected_return_date = return_date
        self.db.commit()
        logger.info(f"📦 Checked out {len(items)} item(s) to event {event.id}")

        return {
            "success": True,
            "assigned_count": len(items),
            "items": [row_to_dict(item) for item in items],
        }

    def release_from_event(self, event_id: str, item_ids: list[str]) -> dict:
        if not item_ids:
            raise HTTPException(status_code=400, detail="item_ids parameter is required")

        items = [
            item
            for item in self.repo.list_items(self.db, self.tenant_id, item_ids=item_ids)
            if item.event_id == event_id
        ]
        for item in items:
            item.event_id = None
            item.assignment_type = None
            item.expected_return_date = None
        self.db.commit()
        logger.info(f"📦 Released {len(items)} item(s) from event {event_id}")
        return {"success": True, "removed_count": len(items)}
