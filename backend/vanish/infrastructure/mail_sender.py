"""EmailJS Mail Sender — fire-and-forget recipient notifications over HTTP.

Invariants:
    - send() never raises on delivery failure: errors are logged and dropped
    - One POST per recipient; the recipient address is never logged
    - Bounded by timeout_seconds (httpx client timeout)

Design Decisions:
    - httpx.AsyncClient per call: notifications are rare, no pool to manage
    - Only transport/HTTP errors are swallowed; programming errors propagate
"""

import logging

import httpx

logger = logging.getLogger(__name__)


class EmailJSMailSender:
    """Sends template emails through the EmailJS REST API."""

    def __init__(
        self,
        api_url: str,
        service_id: str,
        template_id: str,
        user_id: str,
        timeout_seconds: float = 10.0,
    ):
        self.api_url = api_url
        self.service_id = service_id
        self.template_id = template_id
        self.user_id = user_id
        self.timeout_seconds = timeout_seconds

    async def send(self, to: str, template_params: dict[str, str]) -> None:
        payload = {
            "service_id": self.service_id,
            "template_id": self.template_id,
            "user_id": self.user_id,
            "template_params": {"to_email": to, **template_params},
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(self.api_url, json=payload)
                response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(
                f"Notification delivery failed: {type(e).__name__}",
                extra={"operation": "mail_send"},
            )
