"""Lead repository - Database operations for leads"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Lead, Opportunity


class LeadRepository:
    """Repository for lead database operations"""

    @staticmethod
    def list_leads(
        db: Session,
        tenant_id: str,
        status: Optional[str] = None,
        search: Optional[str] = None,
        include_converted: bool = False,
    ) -> list[Lead]:
        query = db.query(Lead).filter(Lead.tenant_id == tenant_id)
        if status:
            query = query.filter(Lead.status == status)
        if not include_converted:
            query = query.filter(Lead.is_converted.is_(False))
        if search:
            pattern = f"%{search.strip()}%"
            query = query.filter(
                or_(
                    Lead.first_name.ilike(pattern),
                    Lead.last_name.ilike(pattern),
                    Lead.email.ilike(pattern),
                    Lead.company.ilike(pattern),
                )
            )
        return query.order_by(Lead.created_at.desc()).all()

    @staticmethod
    def get_lead(db: Session, tenant_id: str, lead_id: str) -> Optional[Lead]:
        return db.query(Lead).filter(Lead.id == lead_id, Lead.tenant_id == tenant_id).first()

    @staticmethod
    def create_lead(db: Session, tenant_id: str, **lead_data) -> Lead:
        lead = Lead(tenant_id=tenant_id, **lead_data)
        db.add(lead)
        db.commit()
        db.refresh(lead)
        return lead

    @staticmethod
    def update(db: Session, lead: Lead, **updates) -> Lead:
        for key, value in updates.items():
            setattr(lead, key, value)
        db.commit()
        db.refresh(lead)
        return lead

    @staticmethod
    def delete(db: Session, lead: Lead) -> None:
        db.delete(lead)
        db.commit()

    @staticmethod
    def opportunities_for_lead(db: Session, tenant_id: str, lead_id: str) -> list[Opportunity]:
        return (
            db.query(Opportunity)
            .filter(Opportunity.tenant_id == tenant_id, Opportunity.lead_id == lead_id)
            .all()
        )
