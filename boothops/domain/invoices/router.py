"""Invoice router - FastAPI endpoints for invoices, staff and public"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from ...auth import TenantContext, get_public_tenant_context, get_tenant_context
from ...shared.responses import pdf_response
from .repository import InvoiceRepository
from .schemas import (
    InvoiceCreate,
    InvoiceResponse,
    InvoiceUpdate,
    LineItemCreate,
    LineItemUpdate,
    ManualPayment,
    PublicPaymentConfirm,
)
from .service import InvoiceService

router = APIRouter(prefix="/api/invoices", tags=["Invoices"])
public_router = APIRouter(prefix="/api/public/{tenant}/invoices", tags=["Public Invoices"])


def get_invoice_service(ctx: TenantContext = Depends(get_tenant_context)) -> InvoiceService:
    """Dependency injection for InvoiceService"""
    return InvoiceService(ctx.db, ctx.tenant_id, ctx.tenant.name)


def get_public_invoice_service(
    ctx: TenantContext = Depends(get_public_tenant_context),
) -> InvoiceService:
    return InvoiceService(ctx.db, ctx.tenant_id, ctx.tenant.name)


@router.get("", response_model=list[InvoiceResponse])
async def list_invoices(
    status: Optional[str] = Query(None),
    event_id: Optional[str] = Query(None),
    account_id: Optional[str] = Query(None),
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.list_invoices(status=status, event_id=event_id, account_id=account_id)


@router.post("", response_model=InvoiceResponse)
async def create_invoice(data: InvoiceCreate, service: InvoiceService = Depends(get_invoice_service)):
    return service.create_invoice(data)


@router.get("/{invoice_id}", response_model=InvoiceResponse)
async def get_invoice(invoice_id: str, service: InvoiceService = Depends(get_invoice_service)):
    return service.get_invoice(invoice_id)


@router.patch("/{invoice_id}", response_model=InvoiceResponse)
async def update_invoice(
    invoice_id: str, data: InvoiceUpdate, service: InvoiceService = Depends(get_invoice_service)
):
    return service.update_invoice(invoice_id, data)


@router.delete("/{invoice_id}")
async def delete_invoice(invoice_id: str, service: InvoiceService = Depends(get_invoice_service)):
    return service.delete_invoice(invoice_id)


@router.post("/{invoice_id}/line-items", response_model=InvoiceResponse)
async def add_line_item(
    invoice_id: str, data: LineItemCreate, service: InvoiceService = Depends(get_invoice_service)
):
    return service.add_line_item(invoice_id, data)


@router.patch("/{invoice_id}/line-items/{line_item_id}", response_model=InvoiceResponse)
async def update_line_item(
    invoice_id: str,
    line_item_id: str,
    data: LineItemUpdate,
    service: InvoiceService = Depends(get_invoice_service),
):
    return service.update_line_item(invoice_id, line_item_id, data)


@router.delete("/{invoice_id}/line-items/{line_item_id}", response_model=InvoiceResponse)
async def delete_line_item(
    invoice_id: str, line_item_id: str, service: InvoiceService = Depends(get_invoice_service)
):
    return service.delete_line_item(invoice_id, line_item_id)


@router.get("/{invoice_id}/payments")
async def list_payments(invoice_id: str, service: InvoiceService = Depends(get_invoice_service)):
    invoice = service.get_invoice(invoice_id)
    return [
        {
            "id": p.id,
            "amount": p.amount,
            "payment_date": p.payment_date,
            "payment_method": p.payment_method,
            "status": p.status,
            "reference_number": p.reference_number,
            "notes": p.notes,
        }
        for p in InvoiceRepository.list_payments(service.db, invoice.id)
    ]


@router.post("/{invoice_id}/payments", response_model=InvoiceResponse)
async def record_payment(
    invoice_id: str, data: ManualPayment, service: InvoiceService = Depends(get_invoice_service)
):
    return service.record_manual_payment(invoice_id, data)


@router.get("/{invoice_id}/pdf")
async def download_invoice_pdf(invoice_id: str, service: InvoiceService = Depends(get_invoice_service)):
    pdf_bytes, filename = service.render_pdf(invoice_id)
    return pdf_response(pdf_bytes, filename)


# ----------------------------------------------------------------------
# Public (token) endpoints
# ----------------------------------------------------------------------


@public_router.get("/{token}")
async def get_public_invoice(token: str, service: InvoiceService = Depends(get_public_invoice_service)):
    return service.view_public_invoice(token)


@public_router.get("/{token}/pay")
async def create_public_payment(
    token: str,
    amount: Optional[float] = Query(None, description="Partial amount in dollars"),
    service: InvoiceService = Depends(get_public_invoice_service),
):
    return await service.create_payment_intent(token, amount)


@public_router.post("/{token}/pay")
async def confirm_public_payment(
    token: str,
    data: Optional[PublicPaymentConfirm] = None,
    service: InvoiceService = Depends(get_public_invoice_service),
):
    return await service.confirm_payment(token, data.payment_intent_id if data else None)
