"""Contact repository - Database operations for contacts and their account links"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from ...models import Account, Contact, ContactAccount


class ContactRepository:
    """Repository for contact database operations"""

    @staticmethod
    def list_contacts(
        db: Session, tenant_id: str, account_id: Optional[str] = None
    ) -> list[Contact]:
        query = (
            db.query(Contact)
            .options(joinedload(Contact.account_links).joinedload(ContactAccount.account))
            .filter(Contact.tenant_id == tenant_id)
        )
        if account_id:
            # Only contacts with an active relationship to the account
            query = query.filter(
                Contact.account_links.any(
                    (ContactAccount.account_id == account_id) & ContactAccount.end_date.is_(None)
                )
            )
        return query.order_by(Contact.created_at.desc()).all()

    @staticmethod
    def get_contact(db: Session, tenant_id: str, contact_id: str) -> Optional[Contact]:
        return (
            db.query(Contact)
            .filter(Contact.id == contact_id, Contact.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def find_by_email(db: Session, tenant_id: str, email: str) -> Optional[Contact]:
        return (
            db.query(Contact)
            .filter(
                Contact.tenant_id == tenant_id,
                func.lower(Contact.email) == email.strip().lower(),
            )
            .first()
        )

    @staticmethod
    def get_account(db: Session, tenant_id: str, account_id: str) -> Optional[Account]:
        return (
            db.query(Account)
            .filter(Account.id == account_id, Account.tenant_id == tenant_id)
            .first()
        )

    @staticmethod
    def create_contact(db: Session, tenant_id: str, **contact_data) -> Contact:
        contact = Contact(tenant_id=tenant_id, **contact_data)
        db.add(contact)
        db.commit()
        db.refresh(contact)
        return contact

    @staticmethod
    def create_link(db: Session, tenant_id: str, **link_data) -> ContactAccount:
        link = ContactAccount(tenant_id=tenant_id, **link_data)
        db.add(link)
        db.commit()
        db.refresh(link)
        return link

    @staticmethod
    def get_link(db: Session, tenant_id: str, contact_id: str, link_id: str) -> Optional[ContactAccount]:
        return (
            db.query(ContactAccount)
            .filter(
                ContactAccount.id == link_id,
                ContactAccount.contact_id == contact_id,
                ContactAccount.tenant_id == tenant_id,
            )
            .first()
        )

    @staticmethod
    def update(db: Session, obj, **updates):
        for key, value in updates.items():
            if hasattr(obj, key):
                setattr(obj, key, value)
        db.commit()
        db.refresh(obj)
        return obj

    @staticmethod
    def delete_contact(db: Session, contact: Contact) -> None:
        db.delete(contact)
        db.commit()
