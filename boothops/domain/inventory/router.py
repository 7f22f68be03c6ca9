"""Inventory router - FastAPI endpoints for items, product groups and event checkout"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from ...auth import TenantContext, get_tenant_context
from ...shared.validators import parse_date_param, parse_id_list
from .schemas import (
    EventInventoryAssign,
    InventoryItemCreate,
    InventoryItemResponse,
    InventoryItemUpdate,
    ProductGroupCreate,
)
from .service import InventoryService

router = APIRouter(prefix="/api/inventory-items", tags=["Inventory"])
groups_router = APIRouter(prefix="/api/product-groups", tags=["Inventory"])
event_router = APIRouter(prefix="/api/events/{event_id}/inventory", tags=["Inventory"])


def get_inventory_service(ctx: TenantContext = Depends(get_tenant_context)) -> InventoryService:
    """Dependency injection for InventoryService"""
    return InventoryService(ctx.db, ctx.tenant_id)


@router.get("")
async def list_items(
    category: Optional[str] = Query(None),
    service: InventoryService = Depends(get_inventory_service),
):
    return service.list_items(category)


@router.get("/availability")
async def item_availability(
    start_date: Optional[str] = Query(None),
    end_date: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    item_ids: Optional[str] = Query(None, description="Comma separated item ids"),
    service: InventoryService = Depends(get_inventory_service),
):
    if not start_date or not end_date:
        raise HTTPException(status_code=400, detail="start_date and end_date are required")
    return service.availability(
        parse_date_param(start_date, "start_date"),
        parse_date_param(end_date, "end_date"),
        category=category,
        item_ids=parse_id_list(item_ids) or None,
    )


@router.post("", response_model=InventoryItemResponse)
async def create_item(data: InventoryItemCreate, service: InventoryService = Depends(get_inventory_service)):
    return service.create_item(data)


@router.get("/{item_id}", response_model=InventoryItemResponse)
async def get_item(item_id: str, service: InventoryService = Depends(get_inventory_service)):
    return service.get_item(item_id)


@router.patch("/{item_id}", response_model=InventoryItemResponse)
async def update_item(
    item_id: str, data: InventoryItemUpdate, service: InventoryService = Depends(get_inventory_service)
):
    return service.update_item(item_id, data)


@router.delete("/{item_id}")
async def delete_item(item_id: str, service: InventoryService = Depends(get_inventory_service)):
    return service.delete_item(item_id)


@groups_router.get("")
async def list_product_groups(service: InventoryService = Depends(get_inventory_service)):
    return service.list_groups()


@groups_router.post("")
async def create_product_group(
    data: ProductGroupCreate, service: InventoryService = Depends(get_inventory_service)
):
    return service.create_group(data)


@event_router.get("")
async def event_inventory(
    event_id: str,
    include_available: bool = Query(False),
    search: Optional[str] = Query(None),
    service: InventoryService = Depends(get_inventory_service),
):
    return service.event_inventory(event_id, include_available, search)


@event_router.post("")
async def assign_event_inventory(
    event_id: str,
    data: EventInventoryAssign,
    service: InventoryService = Depends(get_inventory_service),
):
    return service.assign_to_event(event_id, data)


@event_router.delete("")
async def release_event_inventory(
    event_id: str,
    item_ids: Optional[str] = Query(None, description="Comma separated item ids"),
    service: InventoryService = Depends(get_inventory_service),
):
    return service.release_from_event(event_id, parse_id_list(item_ids))
