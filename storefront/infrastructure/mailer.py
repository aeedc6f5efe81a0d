"""Mailer — Mailgun-compatible message sending over the shared ApiClient.

Invariants:
    - A message needs a recipient, a subject and at least one body (text or html)
    - Validation failures raise before any network call
"""

import logging

from storefront.core.errors import ValidationError
from storefront.infrastructure.http_client import ApiClient

logger = logging.getLogger(__name__)


async def send_message(
    client: ApiClient,
    *,
    sender: str,
    to: str,
    subject: str,
    text: str = "",
    html: str = "",
) -> dict:
    """Send one message; returns the provider's response body."""
    if not to:
        raise ValidationError("A recipient for the message must be supplied", "to")
    if not subject:
        raise ValidationError("A subject for the message must be supplied", "subject")
    if not text and not html:
        raise ValidationError("A body for the message must be supplied", "text")

    data = {"from": sender, "to": to, "subject": subject}
    if text:
        data["text"] = text
    if html:
        data["html"] = html
    result = await client.post_form("/messages", data)
    logger.info("Message sent", extra={"email": to, "service": client.service})
    return result


class MailgunNotifier:
    """Binds send_message to one client and sender (Notifier protocol)."""

    def __init__(self, client: ApiClient, sender: str):
        self._client = client
        self._sender = sender

    async def send_message(
        self, *, to: str, subject: str, text: str, html: str,
    ) -> dict:
        return await send_message(
            self._client, sender=self._sender,
            to=to, subject=subject, text=text, html=html,
        )
