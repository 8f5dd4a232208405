"""Recipient Notifications — one fire-and-forget email per allowed recipient.

Invariants:
    - Runs after the creating request has returned (FastAPI BackgroundTasks)
    - Never raises: a failed notification must not affect the created message
"""

import asyncio
import logging

from vanish.config import Settings
from vanish.core.repository_protocols import MailSender
from vanish.infrastructure.mail_sender import EmailJSMailSender

logger = logging.getLogger(__name__)

NOTIFICATION_TEXT = "You have received a secure message."


def build_mail_sender(settings: Settings) -> MailSender | None:
    """Configured sender, or None when notifications are disabled."""
    if not settings.mail_enabled:
        return None
    return EmailJSMailSender(
        api_url=settings.emailjs_api_url,
        service_id=settings.emailjs_service_id,
        template_id=settings.emailjs_template_id,
        user_id=settings.emailjs_user_id,
        timeout_seconds=settings.mail_timeout_seconds,
    )


async def notify_recipients(
    sender: MailSender | None,
    recipients: list[str],
    link: str,
    from_name: str,
) -> None:
    if sender is None or not recipients:
        return
    params = {"from_name": from_name, "message": NOTIFICATION_TEXT, "link": link}
    await asyncio.gather(*(sender.send(to, params) for to in recipients))
    logger.info(f"Notified {len(recipients)} recipient(s)")
