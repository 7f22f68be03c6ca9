"""Invoice service - Business logic for invoices, totals and payments"""

import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...email_service import send_payment_received_notification
from ...models import Account, Contact
from ...models_invoice import Invoice, InvoiceLineItem, Payment
from ...security_utils import generate_public_token, is_valid_public_token
from ...services import stripe_client
from ...services.pdf_generator import format_money, render_invoice
from ...utils.sanitization import sanitize_string
from ..settings.repository import SettingsRepository
from .repository import InvoiceRepository
from .schemas import (
    LINE_ITEM_TYPES,
    InvoiceCreate,
    InvoiceUpdate,
    LineItemCreate,
    LineItemUpdate,
    ManualPayment,
)

logger = logging.getLogger(__name__)

LOCKED_STATUSES = {"paid", "cancelled"}
INVOICE_STATUSES = {"draft", "sent", "viewed", "partially_paid", "paid", "overdue", "cancelled"}


def recalculate_totals(invoice: Invoice) -> None:
    """Discount lines reduce the subtotal; tax applies to taxable non-discount lines"""
    charges = 0.0
    discounts = 0.0
    taxable_base = 0.0
    for item in invoice.line_items:
        item.total = round((item.quantity or 0) * (item.unit_price or 0), 2)
        if item.item_type == "discount":
            discounts += abs(item.total)
        else:
            charges += item.total
            if item.taxable:
                taxable_base += item.total

    invoice.subtotal = round(charges - discounts, 2)
    invoice.tax_amount = round(taxable_base * (invoice.tax_rate or 0) / 100, 2)
    invoice.total_amount = round(invoice.subtotal + invoice.tax_amount, 2)
    invoice.balance_amount = round(invoice.total_amount - (invoice.paid_amount or 0), 2)


def apply_payment(invoice: Invoice, amount: float) -> None:
    invoice.paid_amount = round((invoice.paid_amount or 0) + amount, 2)
    invoice.balance_amount = round((invoice.total_amount or 0) - invoice.paid_amount, 2)
    if invoice.balance_amount <= 0:
        invoice.status = "paid"
    elif invoice.status in ("draft", "sent", "viewed", "overdue"):
        invoice.status = "partially_paid"


class InvoiceService:
    """Service layer for invoice business logic"""

    def __init__(self, db: Session, tenant_id: str, tenant_name: str = ""):
        self.db = db
        self.tenant_id = tenant_id
        self.tenant_name = tenant_name
        self.repo = InvoiceRepository()

    # ------------------------------------------------------------------
    # CRUD
    # ------------------------------------------------------------------

    def list_invoices(self, **filters) -> list[Invoice]:
        return self.repo.list_invoices(self.db, self.tenant_id, **filters)

    def get_invoice(self, invoice_id: str) -> Invoice:
        invoice = self.repo.get_invoice(self.db, self.tenant_id, invoice_id)
        if not invoice:
            raise HTTPException(status_code=404, detail="Invoice not found")
        return invoice

    def _line_item(self, data: LineItemCreate, sort_order: int) -> InvoiceLineItem:
        if data.item_type not in LINE_ITEM_TYPES:
            raise HTTPException(status_code=400, detail=f"Invalid line item type: {data.item_type}")
        if data.quantity < 0:
            raise HTTPException(status_code=400, detail="Quantity cannot be negative")
        return InvoiceLineItem(
            tenant_id=self.tenant_id,
            item_type=data.item_type,
            name=sanitize_string(data.name) or "Item",
            description=sanitize_string(data.description),
            quantity=data.quantity,
            unit_price=data.unit_price,
            taxable=data.taxable and data.item_type != "discount",
            sort_order=sort_order if data.sort_order is None else data.sort_order,
        )

    def create_invoice(self, data: InvoiceCreate) -> Invoice:
        invoice = Invoice(
            tenant_id=self.tenant_id,
            invoice_number=self.repo.next_invoice_number(self.db, self.tenant_id),
            event_id=data.event_id,
            opportunity_id=data.opportunity_id,
            account_id=data.account_id,
            contact_id=data.contact_id,
            issue_date=data.issue_date or date.today(),
            due_date=data.due_date,
            status="draft",
            tax_rate=data.tax_rate or 0,
            paid_amount=0,
            public_token=generate_public_token(),
            notes=sanitize_string(data.notes),
            terms=sanitize_string(data.terms),
        )
        for index, item in enumerate(data.line_items):
            invoice.line_items.append(self._line_item(item, index))
        recalculate_totals(invoice)

        self.db.add(invoice)
        self.db.commit()
        self.db.refresh(invoice)
        logger.info(f"✅ Created invoice {invoice.invoice_number} for tenant {self.tenant_id}")
        return invoice

    def update_invoice(self, invoice_id: str, data: InvoiceUpdate) -> Invoice:
        invoice = self.get_invoice(invoice_id)
        updates = data.model_dump(exclude_unset=True)
        if "status" in updates and updates["status"] not in INVOICE_STATUSES:
            raise HTTPException(status_code=400, detail=f"Invalid status: {updates['status']}")
        for key in ("notes", "terms"):
            if key in updates:
                updates[key] = sanitize_string(updates[key])
        for key, value in updates.items():
            setattr(invoice, key, value)
        if "tax_rate" in updates:
            recalculate_totals(invoice)
        self.db.commit()
        self.db.refresh(invoice)
        return invoice

    def delete_invoice(self, invoice_id: str) -> dict:
        invoice = self.get_invoice(invoice_id)
        if invoice.paid_amount:
            raise HTTPException(status_code=400, detail="Invoices with payments cannot be deleted")
        self.db.delete(invoice)
        self.db.commit()
        return {"success": True}

    def _editable(self, invoice_id: str) -> Invoice:
        invoice = self.get_invoice(invoice_id)
        if invoice.status in LOCKED_STATUSES:
            raise HTTPException(status_code=400, detail=f"Cannot modify a {invoice.status} invoice")
        return invoice

    def add_line_item(self, invoice_id: str, data: LineItemCreate) -> Invoice:
        invoice = self._editable(invoice_id)
        invoice.line_items.append(self._line_item(data, len(invoice.line_items)))
        recalculate_totals(invoice)
        self.db.commit()
        self.db.refresh(invoice)
        return invoice

    def update_line_item(self, invoice_id: str, line_item_id: str, data: LineItemUpdate) -> Invoice:
        invoice = self._editable(invoice_id)
        item = self.repo.get_line_item(self.db, invoice, line_item_id)
        if not item:
            raise HTTPException(status_code=404, detail="Line item not found")

        updates = data.model_dump(exclude_unset=True)
        if "item_type" in updates and updates["item_type"] not in LINE_ITEM_TYPES:
            raise HTTPException(status_code=400, detail=f"Invalid line item type: {updates['item_type']}")
        for key in ("name", "description"):
            if key in updates:
                updates[key] = sanitize_string(updates[key])
        for key, value in updates.items():
            setattr(item, key, value)
        if item.item_type == "discount":
            item.taxable = False

        recalculate_totals(invoice)
        self.db.commit()
        self.db.refresh(invoice)
        return invoice

    def delete_line_item(self, invoice_id: str, line_item_id: str) -> Invoice:
        invoice = self._editable(invoice_id)
        item = self.repo.get_line_item(self.db, invoice, line_item_id)
        if not item:
            raise HTTPException(status_code=404, detail="Line item not found")
        invoice.line_items.remove(item)
        recalculate_totals(invoice)
        self.db.commit()
        self.db.refresh(invoice)
        return invoice

    def record_manual_payment(self, invoice_id: str, data: ManualPayment) -> Invoice:
        invoice = self.get_invoice(invoice_id)
        if invoice.status == "cancelled":
            raise HTTPException(status_code=400, detail="Invoice is cancelled")
        if data.amount <= 0 or data.amount > (invoice.balance_amount or 0):
            raise HTTPException(
                status_code=400,
                detail=f"Payment amount must be between $0.01 and ${invoice.balance_amount:.2f}",
            )

        self.db.add(
            Payment(
                tenant_id=self.tenant_id,
                invoice_id=invoice.id,
                amount=data.amount,
                payment_method=data.payment_method,
                status="completed",
                reference_number=data.reference_number,
                notes=sanitize_string(data.notes),
            )
        )
        apply_payment(invoice, data.amount)
        self.db.commit()
        self.db.refresh(invoice)
        logger.info(f"💰 Recorded {data.amount:.2f} payment on invoice {invoice.invoice_number}")
        return invoice

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def document_data(self, invoice: Invoice) -> dict:
        """Plain dict consumed by the PDF renderer"""
        account = (
            self.db.query(Account).filter(Account.id == invoice.account_id).first()
            if invoice.account_id
            else None
        )
        contact = (
            self.db.query(Contact).filter(Contact.id == invoice.contact_id).first()
            if invoice.contact_id
            else None
        )
        return {
            "id": invoice.id,
            "invoice_number": invoice.invoice_number or "N/A",
            "account_name": account.name if account else None,
            "contact_name": contact.full_name if contact else None,
            "issue_date": invoice.issue_date or invoice.created_at,
            "due_date": invoice.due_date or invoice.issue_date or invoice.created_at,
            "status": invoice.status or "draft",
            "subtotal": invoice.subtotal or 0,
            "tax_rate": invoice.tax_rate or 0,
            "tax_amount": invoice.tax_amount or 0,
            "total_amount": invoice.total_amount or 0,
            "paid_amount": invoice.paid_amount or 0,
            "balance_amount": (invoice.total_amount or 0) - (invoice.paid_amount or 0),
            "notes": invoice.notes,
            "terms": invoice.terms,
            "line_items": [
                {
                    "name": item.name or item.description or "Item",
                    "description": item.description,
                    "quantity": item.quantity or 1,
                    "unit_price": item.unit_price or 0,
                    "total": item.total
                    if item.total is not None
                    else (item.quantity or 1) * (item.unit_price or 0),
                    "taxable": item.taxable,
                }
                for item in invoice.line_items
            ],
        }

    def company_info(self) -> dict:
        return SettingsRepository.company_info(self.db, self.tenant_id, self.tenant_name)

    def render_pdf(self, invoice_id: str) -> tuple[bytes, str]:
        invoice = self.get_invoice(invoice_id)
        pdf_bytes = render_invoice(self.document_data(invoice), self.company_info())
        return pdf_bytes, f"{invoice.invoice_number}.pdf"

    # ------------------------------------------------------------------
    # Public token access
    # ------------------------------------------------------------------

    def get_public_invoice(self, token: str) -> Invoice:
        if not is_valid_public_token(token):
            raise HTTPException(status_code=400, detail="Invalid token format")
        invoice = self.repo.get_by_token(self.db, self.tenant_id, token)
        if not invoice:
            raise HTTPException(status_code=404, detail="Invoice not found")
        return invoice

    def view_public_invoice(self, token: str) -> dict:
        invoice = self.get_public_invoice(token)
        if invoice.status == "draft":
            raise HTTPException(status_code=404, detail="Invoice not found")
        if invoice.status == "sent":
            invoice.status = "viewed"
            self.db.commit()
            self.db.refresh(invoice)

        payload = self.document_data(invoice)
        payload["company"] = self.company_info()
        payload["can_pay"] = invoice.status not in LOCKED_STATUSES and (invoice.balance_amount or 0) > 0
        return payload

    def stripe_keys(self) -> tuple[Optional[str], Optional[str]]:
        from ...config import STRIPE_PUBLISHABLE_KEY, STRIPE_SECRET_KEY

        secret = SettingsRepository.get_value(
            self.db, self.tenant_id, "integrations.stripe.secretKey", STRIPE_SECRET_KEY
        )
        publishable = SettingsRepository.get_value(
            self.db, self.tenant_id, "integrations.stripe.publishableKey", STRIPE_PUBLISHABLE_KEY
        )
        return secret, publishable

    async def create_payment_intent(self, token: str, amount: Optional[float]) -> dict:
        invoice = self.get_public_invoice(token)
        if invoice.status == "paid":
            raise HTTPException(status_code=400, detail="Invoice is already paid")
        if invoice.status == "cancelled":
            raise HTTPException(status_code=400, detail="Invoice is cancelled")

        remaining = invoice.balance_amount if invoice.balance_amount is not None else invoice.total_amount
        if amount is not None:
            if amount <= 0 or amount > remaining:
                raise HTTPException(
                    status_code=400,
                    detail=f"Payment amount must be between $0.01 and ${remaining:.2f}",
                )
            payment_amount = amount
        else:
            payment_amount = remaining
        if payment_amount <= 0:
            raise HTTPException(status_code=400, detail="No balance remaining to pay")

        secret_key, publishable_key = self.stripe_keys()
        if not secret_key:
            raise HTTPException(
                status_code=400, detail="Payment processing is not configured for this invoice"
            )

        try:
            intent = await stripe_client.create_payment_intent(
                secret_key,
                payment_amount,
                metadata={
                    "invoice_id": invoice.id,
                    "invoice_number": invoice.invoice_number,
                    "tenant_id": self.tenant_id,
                    "public_payment": "true",
                },
            )
        except stripe_client.StripeError as e:
            raise HTTPException(status_code=502, detail=f"Failed to create payment intent: {e}")

        return {
            "clientSecret": intent.get("client_secret"),
            "publishableKey": publishable_key,
            "amount": payment_amount,
        }

    async def confirm_payment(self, token: str, payment_intent_id: Optional[str]) -> dict:
        invoice = self.get_public_invoice(token)
        if not payment_intent_id:
            raise HTTPException(status_code=400, detail="Payment intent ID is required")

        secret_key, _ = self.stripe_keys()
        if not secret_key:
            raise HTTPException(status_code=400, detail="Payment processing is not configured")

        if self.repo.find_payment_by_reference(self.db, invoice.id, payment_intent_id):
            raise HTTPException(status_code=400, detail="Payment has already been recorded")

        try:
            intent = await stripe_client.retrieve_payment_intent(secret_key, payment_intent_id)
        except stripe_client.StripeError as e:
            raise HTTPException(status_code=502, detail=f"Failed to verify payment: {e}")

        if intent.get("status") != "succeeded":
            raise HTTPException(
                status_code=400,
                detail={"error": "Payment not completed", "status": intent.get("status")},
            )
        intent_invoice = (intent.get("metadata") or {}).get("invoice_id")
        if intent_invoice and intent_invoice != invoice.id:
            logger.warning(f"⚠️ Payment intent {payment_intent_id} belongs to invoice {intent_invoice}")
            raise HTTPException(status_code=400, detail="Payment does not belong to this invoice")

        amount = (intent.get("amount") or 0) / 100
        self.db.add(
            Payment(
                tenant_id=self.tenant_id,
                invoice_id=invoice.id,
                amount=amount,
                payment_method="stripe",
                status="completed",
                reference_number=payment_intent_id,
                notes="Payment via public invoice link",
            )
        )
        apply_payment(invoice, amount)
        self.db.commit()
        self.db.refresh(invoice)
        logger.info(f"💳 Stripe payment {payment_intent_id} applied to invoice {invoice.invoice_number}")

        company = self.company_info()
        if company.get("email"):
            try:
                await send_payment_received_notification(
                    company["email"],
                    company["name"],
                    invoice.invoice_number,
                    format_money(amount),
                    format_money(invoice.balance_amount),
                )
            except Exception as e:
                logger.warning(f"⚠️ Failed to send payment notification: {e}")

        return {
            "success": True,
            "invoice": {
                "id": invoice.id,
                "invoice_number": invoice.invoice_number,
                "paid_amount": invoice.paid_amount,
                "balance_amount": invoice.balance_amount,
                "status": invoice.status,
            },
            "payment": {
                "amount": amount,
                "payment_intent_id": payment_intent_id,
                "status": "completed",
            },
        }
