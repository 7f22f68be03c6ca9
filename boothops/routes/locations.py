import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..auth import TenantContext, get_tenant_context
from ..models import Location, PhysicalAddress
from ..utils.serialization import row_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Locations"])


class LocationCreate(BaseModel):
    name: str
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    notes: Optional[str] = None


class LocationUpdate(BaseModel):
    name: Optional[str] = None
    address_line1: Optional[str] = None
    address_line2: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    notes: Optional[str] = None


class PhysicalAddressCreate(BaseModel):
    location_name: str
    address_line1: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None


@router.get("/locations")
async def list_locations(ctx: TenantContext = Depends(get_tenant_context)):
    locations = (
        ctx.db.query(Location)
        .filter(Location.tenant_id == ctx.tenant_id)
        .order_by(Location.name)
        .all()
    )
    return [row_to_dict(location) for location in locations]


@router.post("/locations")
async def create_location(data: LocationCreate, ctx: TenantContext = Depends(get_tenant_context)):
    location = Location(tenant_id=ctx.tenant_id, **data.model_dump())
    ctx.db.add(location)
    ctx.db.commit()
    ctx.db.refresh(location)
    return row_to_dict(location)


@router.patch("/locations/{location_id}")
async def update_location(
    location_id: str, data: LocationUpdate, ctx: TenantContext = Depends(get_tenant_context)
):
    location = (
        ctx.db.query(Location)
        .filter(Location.id == location_id, Location.tenant_id == ctx.tenant_id)
        .first()
    )
    if not location:
        raise HTTPException(status_code=404, detail="Location not found")
    for key, value in data.model_dump(exclude_unset=True).items():
        setattr(location, key, value)
    ctx.db.commit()
    ctx.db.refresh(location)
    return row_to_dict(location)


@router.get("/physical-addresses")
async def list_physical_addresses(ctx: TenantContext = Depends(get_tenant_context)):
    addresses = (
        ctx.db.query(PhysicalAddress)
        .filter(PhysicalAddress.tenant_id == ctx.tenant_id)
        .order_by(PhysicalAddress.location_name)
        .all()
    )
    return [row_to_dict(address) for address in addresses]


@router.post("/physical-addresses")
async def create_physical_address(
    data: PhysicalAddressCreate, ctx: TenantContext = Depends(get_tenant_context)
):
    address = PhysicalAddress(tenant_id=ctx.tenant_id, **data.model_dump())
    ctx.db.add(address)
    ctx.db.commit()
    ctx.db.refresh(address)
    return row_to_dict(address)
