"""Member models - board members and their notification preferences."""

from app.models.members.entities import (
    DigestFrequency,
    EmailPreferences,
    EmailRecipient,
    MemberRole,
    NotificationKind,
)
from app.models.members.member import MEMBER_DDL, MEMBER_INDEXES

__all__ = [
    "MEMBER_DDL",
    "MEMBER_INDEXES",
    "MemberRole",
    "DigestFrequency",
    "NotificationKind",
    "EmailPreferences",
    "EmailRecipient",
]
