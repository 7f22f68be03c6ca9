"""Invoice repository - Database operations for invoices, line items and payments"""

import re
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models_invoice import Invoice, InvoiceLineItem, Payment

INVOICE_NUMBER_PATTERN = re.compile(r"^INV-(\d+)$")


class InvoiceRepository:
    """Repository for invoice database operations"""

    @staticmethod
    def list_invoices(
        db: Session,
        tenant_id: str,
        status: Optional[str] = None,
        event_id: Optional[str] = None,
        account_id: Optional[str] = None,
    ) -> list[Invoice]:
        query = db.query(Invoice).filter(Invoice.tenant_id == tenant_id)
        if status:
            query = query.filter(Invoice.status == status)
        if event_id:
            query = query.filter(Invoice.event_id == event_id)
        if account_id:
            query = query.filter(Invoice.account_id == account_id)
        return query.order_by(Invoice.created_at.desc()).all()

    @staticmethod
    def get_invoice(db: Session, tenant_id: str, invoice_id: str) -> Optional[Invoice]:
        return (
            db.query(Invoice)
            .options(joinedload(Invoice.line_items))
            .filter(Invoice.id == invoice_id, Invoice.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def get_by_token(db: Session, tenant_id: str, token: str) -> Optional[Invoice]:
        return (
            db.query(Invoice)
            .options(joinedload(Invoice.line_items))
            .filter(Invoice.public_token == token, Invoice.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def invoices_for_event(db: Session, tenant_id: str, event_id: str) -> list[Invoice]:
        return (
            db.query(Invoice)
            .options(joinedload(Invoice.line_items))
            .filter(Invoice.tenant_id == tenant_id, Invoice.event_id == event_id)
            .order_by(Invoice.created_at.asc())
            .all()
        )

    @staticmethod
    def next_invoice_number(db: Session, tenant_id: str) -> str:
        """Next INV-NNNN number after the highest one issued for the tenant"""
        numbers = db.query(Invoice.invoice_number).filter(Invoice.tenant_id == tenant_id).all()
        highest = 0
        for (number,) in numbers:
            match = INVOICE_NUMBER_PATTERN.match(number or "")
            if match:
                highest = max(highest, int(match.group(1)))
        return f"INV-{highest + 1:04d}"

    @staticmethod
    def get_line_item(db: Session, invoice: Invoice, line_item_id: str) -> Optional[InvoiceLineItem]:
        return (
            db.query(InvoiceLineItem)
            .filter(InvoiceLineItem.id == line_item_id, InvoiceLineItem.invoice_id == invoice.id)
            .first()
        )

    @staticmethod
    def find_payment_by_reference(db: Session, invoice_id: str, reference: str) -> Optional[Payment]:
        return (
            db.query(Payment)
            .filter(Payment.invoice_id == invoice_id, Payment.reference_number == reference)
            .first()
        )

    @staticmethod
    def list_payments(db: Session, invoice_id: str) -> list[Payment]:
        return (
            db.query(Payment)
            .filter(Payment.invoice_id == invoice_id)
            .order_by(Payment.payment_date.desc())
            .all()
        )
