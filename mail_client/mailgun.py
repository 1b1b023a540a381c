"""Mailgun transport - sends one message per call."""

from loguru import logger

from app.errors import ConfigurationError
from mail_client.base import BaseClient
from mail_client.schemas import MailgunMessage, MailgunResponse
from settings import (
    MAIL_API_BASE_URL,
    MAIL_API_TIMEOUT,
    MAILGUN_API_KEY,
    MAILGUN_DOMAIN,
    MAILGUN_FROM_EMAIL,
)


class MailgunTransport(BaseClient):
    """Mail transport over the Mailgun HTTP API."""

    def __init__(
        self,
        api_key: str | None = MAILGUN_API_KEY,
        domain: str | None = MAILGUN_DOMAIN,
        sender: str | None = MAILGUN_FROM_EMAIL,
        base_url: str = MAIL_API_BASE_URL,
        timeout: float = MAIL_API_TIMEOUT,
        http_transport=None,
    ):
        if not api_key or not domain:
            raise ConfigurationError("MAILGUN_API_KEY and MAILGUN_DOMAIN must be set")
        super().__init__(base_url, timeout=timeout, auth=("api", api_key), http_transport=http_transport)
        self._domain = domain
        self._sender = sender or f"noreply@{domain}"

    async def send(self, to: str, subject: str, html: str, text: str) -> bool:
        """POST /{domain}/messages. True when Mailgun queued the message."""
        message = MailgunMessage(sender=self._sender, to=to, subject=subject, html=html, text=text)
        body = await self._post(f"/{self._domain}/messages", message.form())
        response = MailgunResponse(**body)
        logger.debug("Mailgun accepted {}: {}", to, response.id)
        return response.id is not None
