"""Models package - DDL and entities for all domains."""

from app.models.common import BaseEntity
from app.models.members import (
    MEMBER_DDL,
    MEMBER_INDEXES,
    DigestFrequency,
    EmailPreferences,
    EmailRecipient,
    MemberRole,
    NotificationKind,
)
from app.models.notification import (
    DELIVERY_LOG_DDL,
    DELIVERY_LOG_INDEXES,
    BulkDeliveryOptions,
    BulkDeliveryReport,
    DeliveryResult,
    EmailTemplate,
    VotingSummary,
)
from app.models.voting import (
    DECISION_DDL,
    DECISION_INDEXES,
    VOTE_DDL,
    VOTE_INDEXES,
    AdvancedStatistics,
    CompletionReason,
    CompletionStatus,
    Decision,
    DecisionKind,
    DecisionStatus,
    VoteRecord,
    Voter,
    VoteValue,
    VotingConfiguration,
)

ALL_DDL = [
    # Members
    MEMBER_DDL,
    # Voting
    DECISION_DDL,
    VOTE_DDL,
    # Notification
    DELIVERY_LOG_DDL,
    # Indexes
    *MEMBER_INDEXES,
    *DECISION_INDEXES,
    *VOTE_INDEXES,
    *DELIVERY_LOG_INDEXES,
]

__all__ = [
    # Common
    "BaseEntity",
    # Members
    "MEMBER_DDL",
    "MemberRole",
    "DigestFrequency",
    "NotificationKind",
    "EmailPreferences",
    "EmailRecipient",
    # Voting
    "DECISION_DDL",
    "VOTE_DDL",
    "Decision",
    "DecisionKind",
    "DecisionStatus",
    "VoteRecord",
    "Voter",
    "VoteValue",
    "VotingConfiguration",
    "AdvancedStatistics",
    "CompletionReason",
    "CompletionStatus",
    # Notification
    "DELIVERY_LOG_DDL",
    "EmailTemplate",
    "BulkDeliveryOptions",
    "DeliveryResult",
    "BulkDeliveryReport",
    "VotingSummary",
    # All DDL
    "ALL_DDL",
]
