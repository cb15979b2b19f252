"""Outgoing mail.

Messages go out through an HTTP mail API (Mailgun-style form post with basic
auth ``api:<key>``). Without MAIL_API_URL nothing is sent and a warning is
logged, which is the normal setup for local development.
"""

import html
import logging
from typing import Protocol

import httpx

from storefinder.errors import MailDeliveryError
from storefinder.settings import get_settings

logger = logging.getLogger("uvicorn.error")


class Recipient(Protocol):
    name: str
    email: str


class Mailer:
    """Client for the transactional mail API."""

    def __init__(self, api_url: str = "", api_key: str = "", sender: str = "", timeout: float = 10.0):
        self.api_url = api_url
        self.api_key = api_key
        self.sender = sender
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_url)

    async def send(self, *, to: str, subject: str, text: str, html_body: str) -> None:
        """Send one message.

        Raises:
            MailDeliveryError: the mail API rejected the message or was unreachable.
        """
        if not self.configured:
            logger.warning(f"Mail API not configured, not sending '{subject}' to {to}")
            return

        data = {
            "from": self.sender,
            "to": to,
            "subject": subject,
            "text": text,
            "html": html_body,
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(self.api_url, data=data, auth=("api", self.api_key))
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Mail API error sending '{subject}' to {to}: {e}")
            raise MailDeliveryError(f"Could not send '{subject}' email") from e

        logger.info(f"Mail '{subject}' sent to {to}")

    async def send_password_reset(self, user: Recipient, reset_url: str) -> None:
        text, html_body = render_password_reset(user.name, reset_url)
        await self.send(to=user.email, subject="Password Reset", text=text, html_body=html_body)


def render_password_reset(name: str, reset_url: str) -> tuple[str, str]:
    """Plain-text and HTML bodies for the reset e-mail."""
    text = (
        f"Hello {name},\n\n"
        "You have requested a password reset. Visit the link below to choose a new password.\n"
        "The link is valid for one hour.\n\n"
        f"{reset_url}\n\n"
        "If you didn't request this email, please ignore it.\n"
    )
    safe_url = html.escape(reset_url, quote=True)
    html_body = (
        f"<p>Hello {html.escape(name)},</p>"
        "<p>You have requested a password reset. The link below is valid for one hour.</p>"
        f'<p><a href="{safe_url}">Reset my password</a></p>'
        "<p>If you didn't request this email, please ignore it.</p>"
    )
    return text, html_body


def get_mailer() -> Mailer:
    settings = get_settings()
    return Mailer(
        api_url=settings.mail_api_url,
        api_key=settings.mail_api_key,
        sender=settings.mail_from,
    )
