"""Notification entities - templates, delivery results and reports."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from app.models.common import BaseEntity
from app.models.members import EmailRecipient, NotificationKind
from app.models.voting import AdvancedStatistics, Decision, VoteRecord, Voter, VotingTimeline
from settings import BATCH_DELAY, BATCH_SIZE, MAX_CONCURRENT, RETRY_ATTEMPTS, RETRY_DELAY, SEND_TIMEOUT


@dataclass
class EmailTemplate(BaseEntity):
    """Rendered message, may still contain {{placeholders}}."""

    subject: str
    html: str
    text: str


class BulkDeliveryOptions(BaseModel):
    """Knobs for one bulk send."""

    max_concurrent: int = Field(default=MAX_CONCURRENT, ge=1)
    retry_attempts: int = Field(default=RETRY_ATTEMPTS, ge=1)
    retry_delay: float = Field(default=RETRY_DELAY, ge=0)
    batch_size: int = Field(default=BATCH_SIZE, ge=1)
    batch_delay: float = Field(default=BATCH_DELAY, ge=0)
    respect_preferences: bool = True
    track_delivery: bool = True
    send_timeout: float = Field(default=SEND_TIMEOUT, gt=0)
    notification_kind: NotificationKind = NotificationKind.VOTING_SUMMARY


@dataclass
class DeliveryResult(BaseEntity):
    """Outcome of delivering to one recipient."""

    recipient: EmailRecipient
    success: bool
    error: str | None = None
    attempts: int = 0
    delivery_time_ms: int | None = None
    sent_at: datetime | None = None

    @property
    def recipient_id(self) -> str:
        return self.recipient.id

    @property
    def email(self) -> str:
        return self.recipient.email


@dataclass
class BulkDeliveryReport(BaseEntity):
    """Aggregate of one bulk send."""

    total_recipients: int = 0
    filtered_out: int = 0
    successful: int = 0
    failed: int = 0
    results: list[DeliveryResult] = field(default_factory=list)
    total_time_ms: int = 0
    average_delivery_time_ms: float = 0.0
    bounce_rate: float = 0.0
    aborted: bool = False

    @property
    def success_ratio(self) -> float:
        if self.total_recipients == 0:
            return 0.0
        return self.successful / self.total_recipients

    @property
    def failed_results(self) -> list[DeliveryResult]:
        return [r for r in self.results if not r.success]

    def summary(self) -> dict[str, Any]:
        """Compact form for log lines."""
        return {
            "total_recipients": self.total_recipients,
            "filtered_out": self.filtered_out,
            "successful": self.successful,
            "failed": self.failed,
            "success_ratio": round(self.success_ratio, 2),
            "total_time_ms": self.total_time_ms,
            "aborted": self.aborted,
        }


@dataclass
class VotingSummary(BaseEntity):
    """Everything the summary email is built from."""

    decision: Decision
    votes: list[VoteRecord]
    statistics: AdvancedStatistics
    non_voters: list[Voter] = field(default_factory=list)
    timeline: VotingTimeline | None = None
