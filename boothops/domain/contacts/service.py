"""Contact service - Business logic for contacts and contact/account relationships"""

import logging
from datetime import date
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...models import Contact, ContactAccount
from ...shared.validators import validate_email
from ...utils.sanitization import sanitize_fields
from ...utils.serialization import row_to_dict
from .repository import ContactRepository
from .schemas import ContactAccountLink, ContactCreate, ContactUpdate

logger = logging.getLogger(__name__)

TEXT_FIELDS = ["first_name", "last_name", "job_title", "address_line1", "address_line2", "city", "notes"]


def _link_payload(link: ContactAccount) -> dict:
    account = link.account
    return {
        "id": account.id if account else link.account_id,
        "name": account.name if account else None,
        "account_type": account.account_type if account else None,
        "role": link.role,
        "is_primary": link.is_primary,
        "start_date": link.start_date,
        "end_date": link.end_date,
        "junction_id": link.id,
    }


def contact_payload(contact: Contact) -> dict:
    """Contact row plus its account relationships split into active and former"""
    links = sorted(contact.account_links, key=lambda link: link.start_date or date.min)
    all_accounts = [_link_payload(link) for link in links]
    active = [a for a in all_accounts if not a["end_date"]]
    primary = next((a for a in active if a["is_primary"]), active[0] if active else None)

    payload = row_to_dict(contact)
    payload.update(
        {
            "account_name": primary["name"] if primary else None,
            "all_accounts": all_accounts,
            "active_accounts": active,
            "former_accounts": [a for a in all_accounts if a["end_date"]],
        }
    )
    return payload


class ContactService:
    """Service layer for contact business logic"""

    def __init__(self, db: Session, tenant_id: str):
        self.db = db
        self.tenant_id = tenant_id
        self.repo = ContactRepository()

    def list_contacts(self, account_id: Optional[str] = None) -> list[dict]:
        contacts = self.repo.list_contacts(self.db, self.tenant_id, account_id)
        return [contact_payload(c) for c in contacts]

    def get_contact(self, contact_id: str) -> Contact:
        contact = self.repo.get_contact(self.db, self.tenant_id, contact_id)
        if not contact:
            raise HTTPException(status_code=404, detail="Contact not found")
        return contact

    def _normalized_email(self, email: Optional[str]) -> Optional[str]:
        try:
            return validate_email(email) or None
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

    def _raise_if_duplicate(self, email: Optional[str], exclude_id: Optional[str] = None) -> None:
        if not email:
            return
        existing = self.repo.find_by_email(self.db, self.tenant_id, email)
        if existing and existing.id != exclude_id:
            raise HTTPException(
                status_code=409,
                detail={
                    "error": "A contact with this email already exists",
                    "existingContact": {
                        "id": existing.id,
                        "name": existing.full_name,
                        "email": existing.email,
                    },
                },
            )

    def create_contact(self, data: ContactCreate) -> dict:
        email = self._normalized_email(data.email)
        self._raise_if_duplicate(email)

        if data.account_id and not self.repo.get_account(self.db, self.tenant_id, data.account_id):
            raise HTTPException(status_code=404, detail="Account not found")

        fields = data.model_dump(exclude={"role"})
        fields["email"] = email
        fields["status"] = data.status or "active"
        contact = self.repo.create_contact(
            self.db, self.tenant_id, **sanitize_fields(fields, TEXT_FIELDS)
        )

        if data.account_id:
            try:
                self.repo.create_link(
                    self.db,
                    self.tenant_id,
                    contact_id=contact.id,
                    account_id=data.account_id,
                    role=data.role or "Primary Contact",
                    is_primary=True,
                    start_date=date.today(),
                )
            except Exception as e:
                # The contact itself was created; the junction row is supplementary
                self.db.rollback()
                logger.error(f"❌ Failed to link contact {contact.id} to account {data.account_id}: {e}")

        logger.info(f"✅ Created contact {contact.id} for tenant {self.tenant_id}")
        self.db.refresh(contact)
        return contact_payload(contact)

    def update_contact(self, contact_id: str, data: ContactUpdate) -> dict:
        contact = self.get_contact(contact_id)
        updates = data.model_dump(exclude_unset=True)
        if "email" in updates:
            updates["email"] = self._normalized_email(updates["email"])
            self._raise_if_duplicate(updates["email"], exclude_id=contact.id)
        contact = self.repo.update(self.db, contact, **sanitize_fields(updates, TEXT_FIELDS))
        return contact_payload(contact)

    def delete_contact(self, contact_id: str) -> dict:
        contact = self.get_contact(contact_id)
        self.repo.delete_contact(self.db, contact)
        return {"success": True}

    def link_account(self, contact_id: str, data: ContactAccountLink) -> dict:
        contact = self.get_contact(contact_id)
        if not self.repo.get_account(self.db, self.tenant_id, data.account_id):
            raise HTTPException(status_code=404, detail="Account not found")

        if any(
            link.account_id == data.account_id and not link.end_date
            for link in contact.account_links
        ):
            raise HTTPException(status_code=400, detail="Contact is already linked to this account")

        if data.is_primary:
            for link in contact.account_links:
                link.is_primary = False

        self.repo.create_link(
            self.db,
            self.tenant_id,
            contact_id=contact.id,
            account_id=data.account_id,
            role=data.role,
            is_primary=data.is_primary,
            start_date=data.start_date or date.today(),
        )
        self.db.refresh(contact)
        return contact_payload(contact)

    def end_account_link(self, contact_id: str, link_id: str) -> dict:
        """Move an account relationship to the contact's former accounts"""
        contact = self.get_contact(contact_id)
        link = self.repo.get_link(self.db, self.tenant_id, contact.id, link_id)
        if not link:
            raise HTTPException(status_code=404, detail="Account relationship not found")
        if link.end_date:
            raise HTTPException(status_code=400, detail="Account relationship has already ended")

        self.repo.update(self.db, link, end_date=date.today(), is_primary=False)
        self.db.refresh(contact)
        return contact_payload(contact)
