"""Contract router - FastAPI endpoints for contracts, staff and public signing"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from ...auth import TenantContext, get_public_tenant_context, get_tenant_context
from ...shared.responses import pdf_response
from ...shared.validators import get_client_ip
from .schemas import ContractCreate, ContractResponse, ContractSign, ContractUpdate
from .service import ContractService

router = APIRouter(prefix="/api/contracts", tags=["Contracts"])
public_router = APIRouter(prefix="/api/public/{tenant}/contracts", tags=["Public Contracts"])


def get_contract_service(ctx: TenantContext = Depends(get_tenant_context)) -> ContractService:
    """Dependency injection for ContractService"""
    return ContractService(ctx.db, ctx.tenant_id, ctx.tenant.name, ctx.user_id)


def get_public_contract_service(
    ctx: TenantContext = Depends(get_public_tenant_context),
) -> ContractService:
    return ContractService(ctx.db, ctx.tenant_id, ctx.tenant.name)


def _user_agent(request: Request) -> str:
    return request.headers.get("user-agent") or "unknown"


@router.get("", response_model=list[ContractResponse])
async def list_contracts(
    event_id: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    service: ContractService = Depends(get_contract_service),
):
    return service.list_contracts(event_id=event_id, status=status)


@router.post("", response_model=ContractResponse)
async def create_contract(data: ContractCreate, service: ContractService = Depends(get_contract_service)):
    return service.create_contract(data)


@router.get("/{contract_id}", response_model=ContractResponse)
async def get_contract(contract_id: str, service: ContractService = Depends(get_contract_service)):
    return service.get_contract(contract_id)


@router.patch("/{contract_id}", response_model=ContractResponse)
async def update_contract(
    contract_id: str, data: ContractUpdate, service: ContractService = Depends(get_contract_service)
):
    return service.update_contract(contract_id, data)


@router.delete("/{contract_id}")
async def delete_contract(contract_id: str, service: ContractService = Depends(get_contract_service)):
    return service.delete_contract(contract_id)


@router.post("/{contract_id}/send", response_model=ContractResponse)
async def send_contract(contract_id: str, service: ContractService = Depends(get_contract_service)):
    return service.mark_sent(contract_id)


@router.post("/{contract_id}/sign")
async def sign_contract(
    contract_id: str,
    request: Request,
    data: Optional[ContractSign] = None,
    service: ContractService = Depends(get_contract_service),
):
    return await service.sign_by_id(
        contract_id, data.signature if data else None, get_client_ip(request), _user_agent(request)
    )


@router.get("/{contract_id}/pdf")
async def download_signed_contract(contract_id: str, service: ContractService = Depends(get_contract_service)):
    pdf_bytes, filename = service.signed_pdf(contract_id)
    return pdf_response(pdf_bytes, filename)


# ----------------------------------------------------------------------
# Public (token) endpoints
# ----------------------------------------------------------------------


@public_router.get("/{token}")
async def get_public_contract(token: str, service: ContractService = Depends(get_public_contract_service)):
    return service.view_public_contract(token)


@public_router.post("/{token}/sign")
async def sign_public_contract(
    token: str,
    request: Request,
    data: Optional[ContractSign] = None,
    service: ContractService = Depends(get_public_contract_service),
):
    return await service.sign_by_token(
        token, data.signature if data else None, get_client_ip(request), _user_agent(request)
    )
