"""Contract repository - Database operations for contracts"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Attachment, Contact
from ...models_invoice import Contract


class ContractRepository:
    """Repository for contract database operations"""

    @staticmethod
    def list_contracts(
        db: Session, tenant_id: str, event_id: Optional[str] = None, status: Optional[str] = None
    ) -> list[Contract]:
        query = db.query(Contract).filter(Contract.tenant_id == tenant_id)
        if event_id:
            query = query.filter(Contract.event_id == event_id)
        if status:
            query = query.filter(Contract.status == status)
        return query.order_by(Contract.created_at.desc()).all()

    @staticmethod
    def get_contract(db: Session, tenant_id: str, contract_id: str) -> Optional[Contract]:
        return (
            db.query(Contract)
            .filter(Contract.id == contract_id, Contract.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def get_by_token(db: Session, tenant_id: str, token: str) -> Optional[Contract]:
        return (
            db.query(Contract)
            .filter(Contract.public_token == token, Contract.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def event_attachment(db: Session, tenant_id: str, event_id: str, contract_id: str) -> Optional[Attachment]:
        """Event attachment entry whose description carries the [CONTRACT:id] tag"""
        return (
            db.query(Attachment)
            .filter(
                Attachment.tenant_id == tenant_id,
                Attachment.entity_type == "event",
                Attachment.entity_id == event_id,
                Attachment.description.like(f"%[CONTRACT:{contract_id}]%"),
            )
            .first()
        )

    @staticmethod
    def get_contact(db: Session, tenant_id: str, contact_id: Optional[str]) -> Optional[Contact]:
        if not contact_id:
            return None
        return db.query(Contact).filter(Contact.id == contact_id, Contact.tenant_id == tenant_id).first()
