"""Mail API client package."""

from mail_client.base import BaseClient, TransportError
from mail_client.mailgun import MailgunTransport
from mail_client.schemas import MailgunMessage, MailgunResponse

__all__ = [
    # Base
    "BaseClient",
    "TransportError",
    # Clients
    "MailgunTransport",
    # Schemas
    "MailgunMessage",
    "MailgunResponse",
]
