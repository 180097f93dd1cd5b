"""
Email Service using Resend
Templates are MJML compiled to HTML before sending
"""

import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .email_templates import (
    email_verification_template,
    new_lead_notification_template,
    password_reset_template,
    trip_invitation_template,
)

logger = logging.getLogger(__name__)


class EmailNotConfiguredError(Exception):
    """Raised when no email provider is configured"""


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        if getattr(result, "errors", None):
            logger.warning(f"MJML compilation warnings: {result.errors}")
        return getattr(result, "html", str(result))
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict

    Raises:
        EmailNotConfiguredError: RESEND_API_KEY is not set
    """
    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise EmailNotConfiguredError("Email service not configured")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to
    resend.api_key = RESEND_API_KEY

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(
            {
                "from": from_address or EMAIL_FROM_ADDRESS,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e


# ============================================
# Pre-built Email Templates for Common Events
# ============================================


async def send_verification_email(to: str, user_name: str, verify_link: str) -> dict:
    return await send_email(
        to=to,
        subject="Verify your email - WanderPlan",
        mjml_content=email_verification_template(user_name, verify_link),
    )


async def send_password_reset_email(to: str, reset_link: str) -> dict:
    """Send password reset email"""
    return await send_email(
        to=to,
        subject="Reset Your Password - WanderPlan",
        mjml_content=password_reset_template(reset_link),
    )


async def send_trip_invitation_email(
    to: str, inviter_name: str, trip_name: str, role: str, message: Optional[str] = None
) -> dict:
    """Tell an invited user about a pending trip invitation"""
    return await send_email(
        to=to,
        subject=f"{inviter_name} invited you to {trip_name}",
        mjml_content=trip_invitation_template(inviter_name, trip_name, role, message),
    )


async def send_new_lead_notification(
    to: str, page_title: str, lead_name: str, lead_email: str, message: Optional[str] = None
) -> dict:
    return await send_email(
        to=to,
        subject=f"New lead: {lead_name}",
        mjml_content=new_lead_notification_template(page_title, lead_name, lead_email, message),
    )
