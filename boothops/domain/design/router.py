"""Design router - Design dashboard and design settings"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...auth import TenantContext, get_tenant_context
from .schemas import DesignItemTypeCreate, DesignItemTypeResponse, DesignItemTypeUpdate
from .service import DesignService

router = APIRouter(prefix="/api/design", tags=["Design"])


def get_design_service(ctx: TenantContext = Depends(get_tenant_context)) -> DesignService:
    """Dependency injection for DesignService"""
    return DesignService(ctx.db, ctx.tenant_id)


@router.get("/dashboard")
async def design_dashboard(
    designer_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    service: DesignService = Depends(get_design_service),
):
    return service.dashboard(designer_id=designer_id, status=status)


@router.get("/item-types", response_model=list[DesignItemTypeResponse])
async def list_design_item_types(
    include_inactive: bool = Query(True),
    service: DesignService = Depends(get_design_service),
):
    return service.list_types(include_inactive)


@router.post("/item-types", response_model=DesignItemTypeResponse)
async def create_design_item_type(
    data: DesignItemTypeCreate, service: DesignService = Depends(get_design_service)
):
    return service.create_type(data)


@router.patch("/item-types/{type_id}", response_model=DesignItemTypeResponse)
async def update_design_item_type(
    type_id: str, data: DesignItemTypeUpdate, service: DesignService = Depends(get_design_service)
):
    return service.update_type(type_id, data)


@router.delete("/item-types/{type_id}")
async def delete_design_item_type(type_id: str, service: DesignService = Depends(get_design_service)):
    return service.delete_type(type_id)
