"""Opportunity service - Business logic for opportunities and event conversion"""

import logging
from datetime import date, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session, joinedload

from ...models import Lead, Opportunity, OpportunityDate
from ...models_event import Event, EventDate
from ...models_invoice import Invoice, InvoiceLineItem, Quote
from ...security_utils import generate_public_token
from ...utils.dates import utcnow
from ...utils.sanitization import sanitize_fields
from ...utils.serialization import row_to_dict
from ..invoices.repository import InvoiceRepository
from ..leads.service import convert_lead
from .schemas import ConvertToEvent, OpportunityCreate, OpportunityUpdate

logger = logging.getLogger(__name__)

STAGES = {"prospecting", "qualification", "proposal", "negotiation", "closed_won", "closed_lost"}
TEXT_FIELDS = ["name", "description", "mailing_address_line1", "mailing_address_line2", "mailing_city"]
INVOICE_DUE_DAYS = 30


class OpportunityService:
    """Service layer for opportunity business logic"""

    def __init__(self, db: Session, tenant_id: str, user_id: Optional[str] = None):
        self.db = db
        self.tenant_id = tenant_id
        self.user_id = user_id

    def _query(self):
        return (
            self.db.query(Opportunity)
            .options(joinedload(Opportunity.dates))
            .filter(Opportunity.tenant_id == self.tenant_id)
        )

    def list_opportunities(
        self, stage: Optional[str] = None, include_converted: bool = True
    ) -> list[Opportunity]:
        query = self._query()
        if stage:
            query = query.filter(Opportunity.stage == stage)
        if not include_converted:
            query = query.filter(Opportunity.is_converted.is_(False))
        return query.order_by(Opportunity.created_at.desc()).all()

    def get_opportunity(self, opportunity_id: str) -> Opportunity:
        opportunity = self._query().filter(Opportunity.id == opportunity_id).first()
        if not opportunity:
            raise HTTPException(status_code=404, detail="Opportunity not found")
        return opportunity

    def _set_dates(self, opportunity: Opportunity, dates) -> None:
        opportunity.dates.clear()
        for values in dates:
            opportunity.dates.append(OpportunityDate(tenant_id=self.tenant_id, **values.model_dump()))

    def create_opportunity(self, data: OpportunityCreate) -> Opportunity:
        if data.stage not in STAGES:
            raise HTTPException(status_code=400, detail=f"Invalid stage: {data.stage}")
        if data.lead_id:
            lead = (
                self.db.query(Lead)
                .filter(Lead.id == data.lead_id, Lead.tenant_id == self.tenant_id)
                .first()
            )
            if not lead:
                raise HTTPException(status_code=404, detail="Lead not found")

        fields = sanitize_fields(data.model_dump(exclude={"event_dates"}), TEXT_FIELDS)
        if not fields["name"]:
            raise HTTPException(status_code=400, detail="Name is required")
        if data.event_dates and not fields.get("date_type"):
            fields["date_type"] = "multiple_days" if len(data.event_dates) > 1 else "single_day"

        opportunity = Opportunity(tenant_id=self.tenant_id, **fields)
        self._set_dates(opportunity, data.event_dates)
        self.db.add(opportunity)
        self.db.commit()
        self.db.refresh(opportunity)
        logger.info(f"✅ Created opportunity {opportunity.id} for tenant {self.tenant_id}")
        return opportunity

    def update_opportunity(self, opportunity_id: str, data: OpportunityUpdate) -> Opportunity:
        opportunity = self.get_opportunity(opportunity_id)
        updates = data.model_dump(exclude_unset=True, exclude={"event_dates"})
        if "stage" in updates and updates["stage"] not in STAGES:
            raise HTTPException(status_code=400, detail=f"Invalid stage: {updates['stage']}")
        for key, value in sanitize_fields(updates, TEXT_FIELDS).items():
            setattr(opportunity, key, value)
        if data.event_dates is not None:
            self._set_dates(opportunity, data.event_dates)
        self.db.commit()
        self.db.refresh(opportunity)
        return opportunity

    def delete_opportunity(self, opportunity_id: str) -> dict:
        opportunity = self.get_opportunity(opportunity_id)
        if opportunity.is_converted:
            raise HTTPException(status_code=400, detail="Converted opportunities cannot be deleted")
        self.db.delete(opportunity)
        self.db.commit()
        return {"success": True}

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def _invoice_from_quote(self, opportunity: Opportunity, event: Event) -> Optional[Invoice]:
        quote = (
            self.db.query(Quote)
            .filter(
                Quote.tenant_id == self.tenant_id,
                Quote.opportunity_id == opportunity.id,
                Quote.status == "accepted",
            )
            .order_by(Quote.created_at.desc())
            .first()
        )
        if not quote:
            return None

        due_date = (event.start_date or date.today()) + timedelta(days=INVOICE_DUE_DAYS)
        invoice = Invoice(
            tenant_id=self.tenant_id,
            invoice_number=InvoiceRepository.next_invoice_number(self.db, self.tenant_id),
            account_id=opportunity.account_id,
            contact_id=opportunity.contact_id,
            opportunity_id=opportunity.id,
            event_id=event.id,
            quote_id=quote.id,
            issue_date=date.today(),
            due_date=due_date,
            status="draft",
            subtotal=quote.subtotal,
            tax_rate=quote.tax_rate,
            tax_amount=quote.tax_amount,
            total_amount=quote.total_amount,
            paid_amount=0,
            balance_amount=quote.total_amount,
            public_token=generate_public_token(),
            notes=quote.notes,
            terms=quote.terms,
        )
        for item in quote.line_items:
            invoice.line_items.append(
                InvoiceLineItem(
                    tenant_id=self.tenant_id,
                    item_type=item.item_type,
                    name=item.name,
                    description=item.description,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total=item.total,
                    taxable=item.taxable,
                    sort_order=item.sort_order,
                )
            )
        self.db.add(invoice)
        self.db.commit()
        self.db.refresh(invoice)
        logger.info(f"🧾 Created invoice {invoice.invoice_number} from quote {quote.id}")
        return invoice

    def convert_to_event(self, opportunity_id: str, data: Optional[ConvertToEvent] = None) -> dict:
        """
        Create an event (and a draft invoice from the accepted quote) from an opportunity.

        Steps are committed one after another without a surrounding transaction.
        """
        data = data or ConvertToEvent()
        overrides = data.event_data
        opportunity = self.get_opportunity(opportunity_id)
        if opportunity.is_converted:
            raise HTTPException(status_code=400, detail="Opportunity has already been converted")

        if opportunity.lead_id and not opportunity.account_id:
            lead = (
                self.db.query(Lead)
                .filter(Lead.id == opportunity.lead_id, Lead.tenant_id == self.tenant_id)
                .first()
            )
            if not lead:
                raise HTTPException(status_code=404, detail="Lead not found for conversion")
            result = convert_lead(self.db, self.tenant_id, lead)
            opportunity.account_id = result.account.id
            if result.contact:
                opportunity.contact_id = result.contact.id
            self.db.commit()

        source_dates = [row_to_dict(d) for d in opportunity.dates] or [
            d.model_dump() for d in (data.event_dates or [])
        ]
        days = sorted(d["event_date"] for d in source_dates)
        start_date = days[0] if days else date.today()
        end_date = days[-1] if len(days) > 1 else None

        event = Event(
            tenant_id=self.tenant_id,
            account_id=opportunity.account_id,
            contact_id=opportunity.contact_id,
            opportunity_id=opportunity.id,
            title=(overrides and overrides.title) or opportunity.name,
            description=(overrides and overrides.description) or opportunity.description,
            event_type=(overrides and overrides.event_type) or opportunity.event_type or "corporate",
            start_date=(overrides and overrides.start_date) or start_date,
            end_date=(overrides and overrides.end_date) or end_date,
            location=overrides.location if overrides else None,
            guest_count=opportunity.guest_count,
            status=(overrides and overrides.status) or "scheduled",
        )
        self.db.add(event)
        self.db.commit()
        self.db.refresh(event)

        for values in source_dates:
            self.db.add(
                EventDate(
                    tenant_id=self.tenant_id,
                    event_id=event.id,
                    event_date=values["event_date"],
                    start_time=values.get("start_time"),
                    end_time=values.get("end_time"),
                    setup_time=values.get("setup_time"),
                    location_id=values.get("location_id"),
                    notes=values.get("notes"),
                    status="scheduled",
                )
            )
        self.db.commit()
        self.db.refresh(event)

        opportunity.is_converted = True
        opportunity.converted_at = utcnow()
        opportunity.converted_event_id = event.id
        self.db.commit()
        logger.info(f"✅ Converted opportunity {opportunity.id} to event {event.id}")

        invoice = self._invoice_from_quote(opportunity, event)

        return {
            "success": True,
            "event": row_to_dict(event),
            "eventDates": [row_to_dict(d) for d in event.dates],
            "invoice": row_to_dict(invoice) if invoice else None,
            "opportunity": row_to_dict(opportunity),
            "message": "Opportunity successfully converted to event" + (" with invoice" if invoice else ""),
        }
