"""
MJML email templates for tenant notifications
"""

from html import escape
from typing import Optional

THEME = {
    "primary": "#7c3aed",
    "background": "#f8fafc",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    company_name: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
) -> str:
    """Base MJML wrapper shared by every email"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button href="{cta_url}" background-color="{THEME['primary']}" color="#ffffff"
              font-weight="600" border-radius="8px" padding="18px 40px" font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{escape(title)}</mj-title>
        <mj-preview>{escape(preview_text)}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <mj-section background-color="#ffffff" padding="24px 20px">
          <mj-column>
            <mj-text font-size="20px" font-weight="700" color="{THEME['text_primary']}">
              {escape(company_name)}
            </mj-text>
          </mj-column>
        </mj-section>
        <mj-section background-color="#ffffff" padding="0 20px 20px">
          <mj-column>
            {content_sections}
          </mj-column>
        </mj-section>
        {cta_section}
        <mj-section padding="16px 20px">
          <mj-column>
            <mj-text align="center" font-size="12px" color="{THEME['text_muted']}">
              Sent by {escape(company_name)}
            </mj-text>
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def contract_signed_template(company_name: str, contract_title: str, signer: str, signed_on: str) -> str:
    content = f"""
    <mj-text font-size="22px" font-weight="700" color="{THEME['text_primary']}">Contract signed</mj-text>
    <mj-text><strong>{escape(contract_title)}</strong> was signed by {escape(signer)} on {signed_on}.</mj-text>
    <mj-text>The signed PDF is attached to the contract record.</mj-text>
    """
    return get_base_template(
        title="Contract signed",
        preview_text=f"{contract_title} has been signed",
        content_sections=content,
        company_name=company_name,
    )


def staff_form_request_template(
    company_name: str, staff_name: str, event_title: str, date_label: str, form_url: str
) -> str:
    content = f"""
    <mj-text font-size="22px" font-weight="700" color="{THEME['text_primary']}">Post-event recap</mj-text>
    <mj-text>Hi {escape(staff_name or 'there')},</mj-text>
    <mj-text>Please complete the recap form for <strong>{escape(event_title)}</strong>{date_label}.</mj-text>
    """
    return get_base_template(
        title="Post-event recap",
        preview_text=f"Recap form for {event_title}",
        content_sections=content,
        company_name=company_name,
        cta_url=form_url,
        cta_label="Open recap form",
    )


def payment_received_template(company_name: str, invoice_number: str, amount: str, balance: str) -> str:
    content = f"""
    <mj-text font-size="22px" font-weight="700" color="{THEME['text_primary']}">Payment received</mj-text>
    <mj-text>A payment of <strong>{amount}</strong> was received for invoice {escape(invoice_number)}.</mj-text>
    <mj-text>Remaining balance: {balance}</mj-text>
    """
    return get_base_template(
        title="Payment received",
        preview_text=f"Payment received for {invoice_number}",
        content_sections=content,
        company_name=company_name,
    )
