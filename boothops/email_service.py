"""
Email Service
Sends tenant notifications through Resend, rendering MJML templates to HTML
"""

import base64
import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .email_templates import (
    contract_signed_template,
    payment_received_template,
    staff_form_request_template,
)

logger = logging.getLogger(__name__)

if RESEND_API_KEY:
    resend.api_key = RESEND_API_KEY


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    result = mjml_to_html(mjml_content)
    # Depending on the mjml release this is a dict or an object with .html/.errors
    if isinstance(result, dict):
        if result.get("errors"):
            logger.warning(f"MJML compilation warnings: {result['errors']}")
        return result.get("html", "")
    errors = getattr(result, "errors", None)
    if errors:
        logger.warning(f"MJML compilation warnings: {errors}")
    return getattr(result, "html", None) or str(result)


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
    attachments: Optional[list[dict]] = None,
) -> dict:
    """
    Send an email via Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (compiled to HTML before sending)
        from_address: Optional custom from address
        attachments: Optional list of {"filename", "content"} dicts, content as bytes

    Returns:
        Resend response dict
    """
    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise RuntimeError("Email service not configured")

    recipients = [to] if isinstance(to, str) else to
    email_data = {
        "from": from_address or EMAIL_FROM_ADDRESS,
        "to": recipients,
        "subject": subject,
        "html": compile_mjml_to_html(mjml_content),
    }
    if attachments:
        email_data["attachments"] = [
            {
                "filename": attachment["filename"],
                "content": base64.b64encode(attachment["content"]).decode(),
            }
            for attachment in attachments
        ]

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(email_data)
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise RuntimeError(f"Failed to send email: {e}") from e


async def send_contract_signed_notification(
    to: Union[str, list[str]],
    company_name: str,
    contract_title: str,
    signer: str,
    signed_on: str,
    pdf_bytes: Optional[bytes] = None,
) -> dict:
    attachments = None
    if pdf_bytes:
        attachments = [{"filename": f"{contract_title}.pdf", "content": pdf_bytes}]
    return await send_email(
        to=to,
        subject=f"Contract signed: {contract_title}",
        mjml_content=contract_signed_template(company_name, contract_title, signer, signed_on),
        attachments=attachments,
    )


async def send_staff_form_request(
    to: str, company_name: str, staff_name: str, event_title: str, date_label: str, form_url: str
) -> dict:
    return await send_email(
        to=to,
        subject=f"Post-event recap: {event_title}",
        mjml_content=staff_form_request_template(
            company_name, staff_name, event_title, date_label, form_url
        ),
    )


async def send_payment_received_notification(
    to: str, company_name: str, invoice_number: str, amount: str, balance: str
) -> dict:
    return await send_email(
        to=to,
        subject=f"Payment received: {invoice_number}",
        mjml_content=payment_received_template(company_name, invoice_number, amount, balance),
    )
