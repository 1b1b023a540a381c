"""Recipient resolution - who gets voting emails, and whether their address is usable."""

import re
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta

from loguru import logger

from app.errors import ConfigurationError
from app.models.common import utc_now
from app.models.members import EmailRecipient, NotificationKind
from app.models.voting import Voter
from app.repositories.members import MemberRepository

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PLACEHOLDER_DOMAINS = frozenset({"example.com", "test.com", "localhost"})
BOUNCE_TYPES = ("hard", "soft", "complaint")


def validate_email_address(email: str | None) -> str | None:
    """None if the address is usable, otherwise the reason it is not."""
    if not email:
        return "Email is required"
    if not EMAIL_RE.match(email):
        return "Invalid email format"
    if email.rsplit("@", 1)[1].lower() in PLACEHOLDER_DOMAINS:
        return "Invalid email domain"
    return None


@dataclass
class InvalidRecipient:
    recipient: EmailRecipient
    reason: str


def validate_recipients(
    recipients: Iterable[EmailRecipient],
) -> tuple[list[EmailRecipient], list[InvalidRecipient]]:
    valid, invalid = [], []
    for r in recipients:
        reason = validate_email_address(r.email)
        if reason is None:
            valid.append(r)
        else:
            invalid.append(InvalidRecipient(r, reason))
    return valid, invalid


def should_receive(recipient: EmailRecipient, kind: NotificationKind) -> bool:
    """Account switches first, then the per-kind opt-in and digest setting."""
    if not recipient.is_active or not recipient.email_notifications_enabled:
        return False
    if kind.is_voting and not recipient.voting_email_notifications:
        return False
    return recipient.preferences.allows(kind)


class MemberRecipientResolver:
    """Recipient resolver backed by the member table."""

    def __init__(self, repo: MemberRepository):
        self._repo = repo

    def get_eligible_recipients(self) -> list[EmailRecipient]:
        recipients = self._repo.list_board_members(notifications_only=True)
        logger.debug("Eligible recipients: {}", len(recipients))
        return recipients

    def should_receive(self, recipient: EmailRecipient, kind: NotificationKind) -> bool:
        return should_receive(recipient, kind)

    def get_board_members(self) -> list[Voter]:
        """All eligible voters, whether or not they take email."""
        return [
            Voter(id=m.id, full_name=m.name, email=m.email, position=m.position)
            for m in self._repo.list_board_members()
        ]

    def handle_bounce(self, recipient_id: str, bounce_type: str, reason: str) -> bool:
        """Record a bounce; a hard bounce switches the member's email off."""
        if bounce_type not in BOUNCE_TYPES:
            raise ConfigurationError(f"Unknown bounce type: {bounce_type}")
        hard = bounce_type == "hard"
        found = self._repo.record_bounce(recipient_id, reason, disable=hard)
        if not found:
            logger.warning("Bounce for unknown recipient {}", recipient_id)
        elif hard:
            logger.warning("Disabled email for {} after hard bounce: {}", recipient_id, reason)
        else:
            logger.info("Recorded {} bounce for {}: {}", bounce_type, recipient_id, reason)
        return found

    def system_email_stats(self, days: int = 30, now: datetime | None = None) -> dict:
        stats = self._repo.email_stats((now or utc_now()) - timedelta(days=days))
        total = stats["total_recipients"]
        stats["delivery_rate"] = (
            round((total - stats["recent_bounces"]) / total * 100, 2) if total else 100.0
        )
        return stats
