"""Contract service - Contract lifecycle, e-signature and signed PDF assembly"""

import logging
import re
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...email_service import send_contract_signed_notification
from ...models import Attachment
from ...models_invoice import Contract
from ...security_utils import generate_public_token, is_valid_public_token, sanitize_html
from ...services.pdf_generator import render_signed_contract
from ...utils.dates import as_utc, utcnow
from ...utils.sanitization import sanitize_string
from ..invoices.repository import InvoiceRepository
from ..invoices.service import InvoiceService
from .repository import ContractRepository
from .schemas import ContractCreate, ContractUpdate

logger = logging.getLogger(__name__)

STATUS_TAG = re.compile(r"\[STATUS:[^\]]+\]")


def contract_payload(contract: Contract) -> dict:
    return {
        "id": contract.id,
        "contract_number": contract.contract_number,
        "title": contract.title,
        "content": contract.content,
        "event_id": contract.event_id,
        "account_id": contract.account_id,
        "contact_id": contract.contact_id,
        "status": contract.status,
        "expires_at": contract.expires_at,
        "include_invoice_attachment": contract.include_invoice_attachment,
        "sent_at": contract.sent_at,
        "viewed_at": contract.viewed_at,
        "signed_at": contract.signed_at,
        "signed_by": contract.signed_by,
        "ip_address": contract.ip_address,
        "created_at": contract.created_at,
    }


class ContractService:
    """Service layer for contract business logic"""

    def __init__(self, db: Session, tenant_id: str, tenant_name: str = "", user_id: Optional[str] = None):
        self.db = db
        self.tenant_id = tenant_id
        self.tenant_name = tenant_name
        self.user_id = user_id
        self.repo = ContractRepository()

    def list_contracts(self, event_id: Optional[str] = None, status: Optional[str] = None) -> list[Contract]:
        return self.repo.list_contracts(self.db, self.tenant_id, event_id=event_id, status=status)

    def get_contract(self, contract_id: str) -> Contract:
        contract = self.repo.get_contract(self.db, self.tenant_id, contract_id)
        if not contract:
            raise HTTPException(status_code=404, detail="Contract not found")
        return contract

    def create_contract(self, data: ContractCreate) -> Contract:
        title = sanitize_string(data.title)
        if not title:
            raise HTTPException(status_code=400, detail="Title is required")

        fields = data.model_dump()
        fields["title"] = title
        fields["content"] = sanitize_html(data.content)
        contract = Contract(
            tenant_id=self.tenant_id,
            public_token=generate_public_token(),
            status="draft",
            created_by=self.user_id,
            **fields,
        )
        self.db.add(contract)
        self.db.commit()
        self.db.refresh(contract)
        logger.info(f"📝 Created contract {contract.id} for tenant {self.tenant_id}")
        return contract

    def update_contract(self, contract_id: str, data: ContractUpdate) -> Contract:
        contract = self.get_contract(contract_id)
        if contract.status == "signed":
            raise HTTPException(status_code=400, detail="Signed contracts cannot be edited")

        updates = data.model_dump(exclude_unset=True)
        if "title" in updates:
            updates["title"] = sanitize_string(updates["title"])
            if not updates["title"]:
                raise HTTPException(status_code=400, detail="Title is required")
        if "content" in updates:
            updates["content"] = sanitize_html(updates["content"])
        for key, value in updates.items():
            setattr(contract, key, value)
        self.db.commit()
        self.db.refresh(contract)
        return contract

    def delete_contract(self, contract_id: str) -> dict:
        contract = self.get_contract(contract_id)
        if contract.status == "signed":
            raise HTTPException(status_code=400, detail="Signed contracts cannot be deleted")
        self.db.delete(contract)
        self.db.commit()
        return {"success": True}

    def mark_sent(self, contract_id: str) -> Contract:
        """Mark a contract as sent and file it on its event as an attachment entry"""
        contract = self.get_contract(contract_id)
        if contract.status == "signed":
            raise HTTPException(status_code=400, detail="Contract has already been signed")
        if not contract.public_token:
            contract.public_token = generate_public_token()
        contract.status = "sent"
        contract.sent_at = utcnow()

        if contract.event_id:
            attachment = self.repo.event_attachment(self.db, self.tenant_id, contract.event_id, contract.id)
            if attachment:
                attachment.description = STATUS_TAG.sub("[STATUS:sent]", attachment.description or "")
            else:
                self.db.add(
                    Attachment(
                        tenant_id=self.tenant_id,
                        entity_type="event",
                        entity_id=contract.event_id,
                        file_name=f"{contract.title}.pdf",
                        file_type="application/pdf",
                        description=f"Contract: {contract.title} [CONTRACT:{contract.id}] [STATUS:sent]",
                        uploaded_by=self.user_id,
                    )
                )
        self.db.commit()
        self.db.refresh(contract)
        logger.info(f"📧 Contract {contract.id} marked as sent")
        return contract

    # ------------------------------------------------------------------
    # Public token access
    # ------------------------------------------------------------------

    def get_public_contract(self, token: str) -> Contract:
        if not is_valid_public_token(token):
            raise HTTPException(status_code=400, detail="Invalid token format")
        contract = self.repo.get_by_token(self.db, self.tenant_id, token)
        if not contract or contract.status == "draft":
            raise HTTPException(status_code=404, detail="Contract not found")
        return contract

    def view_public_contract(self, token: str) -> dict:
        contract = self.get_public_contract(token)
        if contract.status == "sent":
            contract.status = "viewed"
            contract.viewed_at = utcnow()
            self.db.commit()
            self.db.refresh(contract)

        payload = contract_payload(contract)
        payload["company"] = InvoiceService(self.db, self.tenant_id, self.tenant_name).company_info()
        expires_at = as_utc(contract.expires_at)
        payload["is_expired"] = bool(expires_at and expires_at < utcnow())
        return payload

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def _schedule_a(self, contract: Contract) -> tuple[list[dict], dict]:
        invoices = InvoiceService(self.db, self.tenant_id, self.tenant_name)
        documents = [
            invoices.document_data(invoice)
            for invoice in InvoiceRepository.invoices_for_event(self.db, self.tenant_id, contract.event_id)
        ]
        return documents, invoices.company_info()

    def _mark_attachment_signed(self, contract: Contract) -> None:
        try:
            attachment = self.repo.event_attachment(self.db, self.tenant_id, contract.event_id, contract.id)
            if not attachment:
                logger.debug(f"No attachment entry found for contract {contract.id}")
                return
            attachment.description = STATUS_TAG.sub("[STATUS:signed]", attachment.description or "")
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"❌ Error updating attachment entry for contract {contract.id}: {e}")

    async def sign(
        self, contract: Contract, signature: Optional[str], client_ip: str, user_agent: str
    ) -> dict:
        """
        Sign a contract and store the rendered PDF.

        Schedule A invoices are appended when the contract asks for them and
        is tied to an event; failing to build them never blocks the signature.
        """
        if not signature or not signature.strip():
            raise HTTPException(status_code=400, detail="Signature is required")
        if contract.status == "signed":
            raise HTTPException(status_code=400, detail="Contract has already been signed")
        expires_at = as_utc(contract.expires_at)
        signed_at = utcnow()
        if expires_at and expires_at < signed_at:
            raise HTTPException(status_code=410, detail="Contract has expired")

        signature = signature.strip()
        schedule_a, company = None, None
        if contract.include_invoice_attachment and contract.event_id:
            try:
                schedule_a, company = self._schedule_a(contract)
                if not schedule_a:
                    logger.debug(f"Schedule A: no invoices for event {contract.event_id}")
            except Exception as e:
                logger.error(f"❌ Error adding Schedule A invoices (continuing without): {e}")
                schedule_a = None

        pdf_bytes = render_signed_contract(
            contract.content or "",
            signature,
            signed_at,
            client_ip,
            contract.id,
            schedule_a=schedule_a,
            company=company,
            title=contract.title,
        )

        contract.status = "signed"
        contract.signature_data = signature
        contract.signed_by = signature
        contract.signed_at = signed_at
        contract.ip_address = client_ip
        contract.signature_user_agent = user_agent
        contract.signed_pdf = pdf_bytes
        self.db.commit()
        self.db.refresh(contract)
        logger.info(f"✍️ Contract {contract.id} signed from {client_ip}")

        if contract.event_id:
            self._mark_attachment_signed(contract)

        await self._notify_signed(contract, pdf_bytes)

        return {
            "success": True,
            "contract": contract_payload(contract),
            "message": "Contract signed successfully",
        }

    async def _notify_signed(self, contract: Contract, pdf_bytes: bytes) -> None:
        company = InvoiceService(self.db, self.tenant_id, self.tenant_name).company_info()
        recipients = [company.get("email")]
        contact = self.repo.get_contact(self.db, self.tenant_id, contract.contact_id)
        if contact and contact.email:
            recipients.append(contact.email)
        recipients = [r for r in dict.fromkeys(recipients) if r]
        if not recipients:
            return
        try:
            await send_contract_signed_notification(
                recipients,
                company["name"],
                contract.title,
                contract.signed_by,
                contract.signed_at.strftime("%B %d, %Y"),
                pdf_bytes=pdf_bytes,
            )
        except Exception as e:
            logger.warning(f"⚠️ Failed to send contract signed notification: {e}")

    async def sign_by_id(self, contract_id: str, signature: Optional[str], client_ip: str, user_agent: str) -> dict:
        if not signature or not signature.strip():
            raise HTTPException(status_code=400, detail="Signature is required")
        return await self.sign(self.get_contract(contract_id), signature, client_ip, user_agent)

    async def sign_by_token(self, token: str, signature: Optional[str], client_ip: str, user_agent: str) -> dict:
        if not signature or not signature.strip():
            raise HTTPException(status_code=400, detail="Signature is required")
        return await self.sign(self.get_public_contract(token), signature, client_ip, user_agent)

    def signed_pdf(self, contract_id: str) -> tuple[bytes, str]:
        contract = self.get_contract(contract_id)
        if contract.status != "signed" or not contract.signed_pdf:
            raise HTTPException(status_code=404, detail="Signed PDF not available")
        return contract.signed_pdf, f"{contract.title or 'contract'}-signed.pdf"
