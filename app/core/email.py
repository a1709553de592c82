import logging
from urllib.parse import urlencode

import resend

from app.core.constants import JinjaCompiledEmailTemplatesEnv
from app.core.settings import get_settings

logger = logging.getLogger(__name__)


def _render_template(template_name: str, **context: str) -> str:
    """Render a pre-compiled email template.

    Templates are pre-compiled with CSS inlined and HTML minified.
    Run `python scripts/compile_emails.py` after modifying source templates.

    Args:
        template_name: Name of the template file
        **context: Template variables

    Returns:
        Rendered HTML
    """
    template = JinjaCompiledEmailTemplatesEnv.get_template(template_name)
    return template.render(**context)


def init_resend() -> None:
    """Initialize Resend with API key if available."""
    settings = get_settings()
    if not settings.resend_api_key:
        return
    resend.api_key = settings.resend_api_key


def build_reset_url(token: str) -> str:
    """Frontend URL where the user picks a new password."""
    settings = get_settings()
    query = urlencode({"token": token})
    return f"{settings.client_url.rstrip('/')}/auth/reset-password?{query}"


def send_password_reset_email(to_email: str, token: str) -> None:
    """Send password reset email via Resend.

    Skipped with a warning when no Resend API key is configured.

    Args:
        to_email: Recipient email address
        token: Raw reset token (only its digest is stored)
    """
    settings = get_settings()
    if not settings.resend_api_key:
        logger.warning("RESEND_API_KEY not set, password reset email not sent")
        return

    from_email = f"noreply@{settings.app_domain}"
    reset_url = build_reset_url(token)
    html_content = _render_template(
        "password-reset.html",
        reset_url=reset_url,
        expiry_hours=str(settings.password_reset_expiry_hours),
    )

    resend.Emails.send(
        {
            "from": from_email,
            "to": to_email,
            "subject": "User Admin Panel - Reset Your Password",
            "html": html_content,
        }
    )
