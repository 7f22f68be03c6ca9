"""Lead service - Business logic for leads and lead conversion"""

import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Account, Contact, ContactAccount, Lead
from ...shared.validators import validate_email
from ...utils.dates import utcnow
from ...utils.sanitization import sanitize_fields
from .repository import LeadRepository
from .schemas import LeadConvert, LeadCreate, LeadUpdate

logger = logging.getLogger(__name__)

TEXT_FIELDS = ["first_name", "last_name", "company", "source", "address_line1", "address_line2", "city", "notes"]
LEAD_TYPES = {"personal", "company"}


@dataclass
class LeadConversion:
    account: Account
    contact: Optional[Contact]
    opportunity_ids: list[str]


def convert_lead(
    db: Session,
    tenant_id: str,
    lead: Lead,
    options: Optional[LeadConvert] = None,
) -> LeadConversion:
    """
    Turn a lead into an account and, for company leads, a contact.

    Each record is committed on its own. A failure part way leaves the
    earlier records in place.
    """
    options = options or LeadConvert()
    person_name = f"{lead.first_name or ''} {lead.last_name or ''}".strip()
    account_fields = options.account.model_dump(exclude_none=True) if options.account else {}

    account = Account(
        tenant_id=tenant_id,
        name=account_fields.get("name") or lead.company or person_name or "Unnamed account",
        account_type="company" if lead.company else "individual",
        email=account_fields.get("email", lead.email),
        phone=account_fields.get("phone", lead.phone),
        website=account_fields.get("website"),
        billing_address_line1=lead.address_line1,
        billing_address_line2=lead.address_line2,
        billing_city=lead.city,
        billing_state=lead.state,
        billing_zip_code=lead.zip_code,
        notes=f"Converted from lead: {person_name or lead.company}",
        status="active",
    )
    db.add(account)
    db.commit()
    db.refresh(account)
    logger.info(f"✅ Created account {account.id} from lead {lead.id}")

    create_contact = options.create_contact
    if create_contact is None:
        # An individual lead is the account itself
        create_contact = bool(lead.company) or options.contact is not None

    contact = None
    if create_contact:
        contact_fields = options.contact.model_dump(exclude_none=True) if options.contact else {}
        contact = Contact(
            tenant_id=tenant_id,
            account_id=account.id,
            first_name=contact_fields.get("first_name", lead.first_name),
            last_name=contact_fields.get("last_name", lead.last_name),
            email=contact_fields.get("email", lead.email),
            phone=contact_fields.get("phone", lead.phone),
            job_title=contact_fields.get("job_title"),
            address_line1=lead.address_line1,
            address_line2=lead.address_line2,
            city=lead.city,
            state=lead.state,
            zip_code=lead.zip_code,
            status="active",
        )
        db.add(contact)
        db.commit()
        db.refresh(contact)

        db.add(
            ContactAccount(
                tenant_id=tenant_id,
                contact_id=contact.id,
                account_id=account.id,
                role="Primary Contact",
                is_primary=True,
                start_date=date.today(),
            )
        )
        db.commit()
        logger.info(f"✅ Created contact {contact.id} from lead {lead.id}")

    lead.is_converted = True
    lead.status = "converted"
    lead.converted_account_id = account.id
    lead.converted_contact_id = contact.id if contact else None
    lead.converted_at = utcnow()
    db.commit()

    opportunity_ids = []
    for opportunity in LeadRepository.opportunities_for_lead(db, tenant_id, lead.id):
        if opportunity.account_id:
            continue
        opportunity.account_id = account.id
        if contact:
            opportunity.contact_id = contact.id
        opportunity_ids.append(opportunity.id)
    if opportunity_ids:
        db.commit()

    return LeadConversion(account=account, contact=contact, opportunity_ids=opportunity_ids)


class LeadService:
    """Service layer for lead business logic"""

    def __init__(self, db: Session, tenant_id: str):
        self.db = db
        self.tenant_id = tenant_id
        self.repo = LeadRepository()

    def list_leads(self, **filters) -> list[Lead]:
        return self.repo.list_leads(self.db, self.tenant_id, **filters)

    def get_lead(self, lead_id: str) -> Lead:
        lead = self.repo.get_lead(self.db, self.tenant_id, lead_id)
        if not lead:
            raise HTTPException(status_code=404, detail="Lead not found")
        return lead

    def _clean(self, fields: dict) -> dict:
        if "email" in fields:
            try:
                fields["email"] = validate_email(fields["email"]) or None
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
        if "lead_type" in fields and fields["lead_type"] not in LEAD_TYPES:
            raise HTTPException(status_code=400, detail=f"Invalid lead type: {fields['lead_type']}")
        return sanitize_fields(fields, TEXT_FIELDS)

    def create_lead(self, data: LeadCreate) -> Lead:
        if not (data.first_name or data.last_name or data.company):
            raise HTTPException(status_code=400, detail="A name or company is required")
        fields = self._clean(data.model_dump())
        fields["status"] = fields.get("status") or "new"
        lead = self.repo.create_lead(self.db, self.tenant_id, **fields)
        logger.info(f"✅ Created lead {lead.id} for tenant {self.tenant_id}")
        return lead

    def update_lead(self, lead_id: str, data: LeadUpdate) -> Lead:
        lead = self.get_lead(lead_id)
        return self.repo.update(self.db, lead, **self._clean(data.model_dump(exclude_unset=True)))

    def delete_lead(self, lead_id: str) -> dict:
        lead = self.get_lead(lead_id)
        if self.repo.opportunities_for_lead(self.db, self.tenant_id, lead.id):
            raise HTTPException(status_code=400, detail="Lead has opportunities and cannot be deleted")
        self.repo.delete(self.db, lead)
        return {"success": True}

    def convert(self, lead_id: str, options: Optional[LeadConvert] = None) -> dict:
        lead = self.get_lead(lead_id)
        if lead.is_converted:
            raise HTTPException(status_code=400, detail="Lead has already been converted")

        result = convert_lead(self.db, self.tenant_id, lead, options)
        return {
            "success": True,
            "account_id": result.account.id,
            "contact_id": result.contact.id if result.contact else None,
            "updated_opportunities": result.opportunity_ids,
            "message": "Lead converted successfully",
        }
