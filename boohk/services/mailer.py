"""
Outbound email via Resend.

Used to deliver quotations, cost estimates and proposals to clients,
with the generated PDF attached.
"""
import base64
import html
import logging
import os
import re
from typing import List, Optional, Union

import resend

logger = logging.getLogger(__name__)

RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "Boohk <noreply@boohk.ph>")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class EmailServiceError(Exception):
    """Raised when email is unconfigured or the provider rejects a send."""


def is_valid_email(address: Optional[str]) -> bool:
    return bool(address) and bool(EMAIL_PATTERN.match(address.strip()))


def is_configured() -> bool:
    return bool(RESEND_API_KEY)


def text_to_html(body: str) -> str:
    """Render a plain-text message as simple HTML paragraphs."""
    paragraphs = [p.strip() for p in (body or "").split("\n\n") if p.strip()]
    return "".join(
        f"<p>{html.escape(p).replace(chr(10), '<br>')}</p>" for p in paragraphs
    )


def pdf_attachment(filename: str, pdf_bytes: bytes) -> dict:
    return {"filename": filename, "content": base64.b64encode(pdf_bytes).decode("ascii")}


def send_email(
    to: Union[str, List[str]],
    subject: str,
    html_content: str,
    cc: Optional[List[str]] = None,
    reply_to: Optional[str] = None,
    attachments: Optional[List[dict]] = None,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend.

    Args:
        to: Recipient email(s)
        subject: Email subject line
        html_content: HTML body
        cc: Optional CC recipients
        reply_to: Optional reply-to address (usually the sales user)
        attachments: Optional list of {"filename", "content"} dicts

    Returns:
        Send response dict (contains the message id)

    Raises:
        EmailServiceError: If Resend is not configured or the send fails
    """
    if not is_configured():
        logger.error("No email service configured - RESEND_API_KEY missing")
        raise EmailServiceError("Email service not configured")

    recipients = [to] if isinstance(to, str) else list(to)
    email_data = {
        "from": from_address or EMAIL_FROM_ADDRESS,
        "to": recipients,
        "subject": subject,
        "html": html_content,
    }
    if cc:
        email_data["cc"] = cc
    if reply_to:
        email_data["reply_to"] = reply_to
    if attachments:
        email_data["attachments"] = [
            {"filename": a["filename"], "content": a["content"]} for a in attachments
        ]

    resend.api_key = RESEND_API_KEY
    try:
        logger.info(f"Sending email via Resend to: {recipients}")
        response = resend.Emails.send(email_data)
    except Exception as e:
        logger.error(f"Email send error to {recipients}: {e}")
        raise EmailServiceError(f"Failed to send email: {e}") from e

    logger.info(f"Email sent successfully via Resend: {response}")
    return response
