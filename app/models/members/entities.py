"""Member domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from app.models.common import BaseEntity


class MemberRole(StrEnum):
    ADMIN = "admin"
    BOARD_MEMBER = "board_member"


class DigestFrequency(StrEnum):
    IMMEDIATE = "immediate"
    DAILY = "daily"
    WEEKLY = "weekly"
    DISABLED = "disabled"


class NotificationKind(StrEnum):
    VOTING_SUMMARY = "voting_summary"
    VOTING_REMINDER = "voting_reminder"
    SYSTEM_NOTIFICATION = "system_notification"

    @property
    def is_voting(self) -> bool:
        return self in (NotificationKind.VOTING_SUMMARY, NotificationKind.VOTING_REMINDER)


@dataclass
class EmailPreferences(BaseEntity):
    """Per-member opt-ins."""

    voting_summaries: bool = True
    voting_reminders: bool = True
    system_notifications: bool = True
    digest_frequency: DigestFrequency = DigestFrequency.IMMEDIATE
    preferred_format: str = "html"

    def allows(self, kind: NotificationKind) -> bool:
        if self.digest_frequency == DigestFrequency.DISABLED:
            return False
        flags = {
            NotificationKind.VOTING_SUMMARY: self.voting_summaries,
            NotificationKind.VOTING_REMINDER: self.voting_reminders,
            NotificationKind.SYSTEM_NOTIFICATION: self.system_notifications,
        }
        return flags.get(kind, False)


@dataclass
class EmailRecipient(BaseEntity):
    """A member as seen by the notification pipeline."""

    id: str
    name: str
    email: str
    role: MemberRole = MemberRole.BOARD_MEMBER
    position: str | None = None
    is_active: bool = True
    email_notifications_enabled: bool = True
    voting_email_notifications: bool = True
    preferences: EmailPreferences = field(default_factory=EmailPreferences)
    last_email_sent: datetime | None = None
