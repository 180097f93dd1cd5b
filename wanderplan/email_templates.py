"""
MJML Email Templates
All email templates using MJML for responsive, cross-client compatibility
"""

import html
from typing import Optional

from .config import FRONTEND_URL

# App theme colors - Sky/Slate color scheme
THEME = {
    "primary": "#0ea5e9",
    "primary_dark": "#0284c7",
    "background": "#f8fafc",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
}


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
    is_user_email: bool = False,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section padding="20px 0">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    footer_notice = ""
    if is_user_email:
        footer_notice = """
        <mj-text align="center" font-size="12px" color="#94a3b8" padding="12px 0 0 0">
          You're receiving this because you have a WanderPlan account.
        </mj-text>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <!-- Main Content -->
        <mj-section background-color="#ffffff" padding="40px 40px 48px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <!-- Footer -->
        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              WanderPlan - plan trips together
            </mj-text>
            {footer_notice}
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def email_verification_template(user_name: str, verify_link: str) -> str:
    """Email address verification MJML template"""
    content = f"""
    <mj-text>
      Hi {html.escape(user_name)},
    </mj-text>

    <mj-text>
      Please confirm your email address to finish setting up your WanderPlan account.
      This link expires in 24 hours.
    </mj-text>
    """

    return get_base_template(
        title="Verify your email",
        preview_text="Confirm your email address",
        content_sections=content,
        cta_url=verify_link,
        cta_label="Verify Email",
        is_user_email=True,
    )


def password_reset_template(reset_link: str) -> str:
    """Password reset MJML template"""
    content = f"""
    <mj-text>
      We received a request to reset your password.
    </mj-text>

    <mj-text color="{THEME['text_muted']}">
      This link expires in 1 hour. If you didn't request a reset, you can ignore this email.
    </mj-text>
    """

    return get_base_template(
        title="Reset Your Password",
        preview_text="Reset your WanderPlan password",
        content_sections=content,
        cta_url=reset_link,
        cta_label="Reset Password",
        is_user_email=True,
    )


def trip_invitation_template(
    inviter_name: str, trip_name: str, role: str, message: Optional[str] = None
) -> str:
    """Trip collaboration invitation MJML template"""
    personal_note = ""
    if message:
        personal_note = f"""
    <mj-text color="{THEME['text_muted']}" font-style="italic">
      "{html.escape(message)}"
    </mj-text>
    """

    content = f"""
    <mj-text>
      {html.escape(inviter_name)} invited you to collaborate on
      <strong>{html.escape(trip_name)}</strong> as {role.lower()}.
    </mj-text>
    {personal_note}
    """

    return get_base_template(
        title="You're invited to a trip",
        preview_text=f"{inviter_name} invited you to {trip_name}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/invitations",
        cta_label="View Invitation",
        is_user_email=True,
    )


def new_lead_notification_template(
    page_title: str, lead_name: str, lead_email: str, message: Optional[str] = None
) -> str:
    """Notify a landing page owner about a new lead"""
    message_block = ""
    if message:
        message_block = f"""
    <mj-text color="{THEME['text_muted']}">
      {html.escape(message)}
    </mj-text>
    """

    content = f"""
    <mj-text>
      <strong>{html.escape(lead_name)}</strong> ({html.escape(lead_email)}) submitted the form on
      <strong>{html.escape(page_title)}</strong>.
    </mj-text>
    {message_block}
    """

    return get_base_template(
        title="New lead captured",
        preview_text=f"New lead from {page_title}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/crm/leads",
        cta_label="View Leads",
        is_user_email=True,
    )
