"""Boundary protocols - what the voting core needs from storage, rendering and delivery.

The repositories, the summary renderer and the mail client satisfy these
structurally; tests substitute in-memory fakes.
"""

from datetime import datetime
from typing import Protocol

from app.models.members import EmailRecipient, NotificationKind
from app.models.notification import BulkDeliveryReport, DeliveryResult, EmailTemplate, VotingSummary
from app.models.voting import AdvancedStatistics, Decision, DecisionStatus, VoteRecord, Voter


class DecisionStore(Protocol):
    def get_decision(self, decision_id: str) -> Decision | None: ...
    def get_votes(self, decision_id: str) -> list[VoteRecord]: ...
    def update_decision_status(
        self,
        decision_id: str,
        expected: DecisionStatus,
        new: DecisionStatus,
        completed_at: datetime | None = None,
    ) -> bool: ...
    def list_expired_voting_decisions(self, now: datetime) -> list[str]: ...
    def list_upcoming_deadlines(self, now: datetime, hours: float = 24) -> list[Decision]: ...
    def count_eligible_voters(self) -> int: ...


class RecipientResolver(Protocol):
    def get_eligible_recipients(self) -> list[EmailRecipient]: ...
    def should_receive(self, recipient: EmailRecipient, kind: NotificationKind) -> bool: ...


class Renderer(Protocol):
    def render(self, summary: VotingSummary, recipient_name: str = "{{recipient_name}}") -> EmailTemplate: ...
    def personalize(self, summary: VotingSummary, recipient: EmailRecipient) -> dict[str, str]: ...


class Transport(Protocol):
    """Sends one message. Returns False or raises on failure."""

    async def send(self, to: str, subject: str, html: str, text: str) -> bool: ...


class DeliveryRecorder(Protocol):
    def record_batch(
        self,
        results: list[DeliveryResult],
        kind: NotificationKind,
        decision_id: str | None = None,
    ) -> int: ...


class DeliveryHistory(Protocol):
    def last_success_at(self, decision_id: str, kind: NotificationKind) -> datetime | None: ...


class Notifier(Protocol):
    async def notify(
        self,
        decision: Decision,
        votes: list[VoteRecord],
        statistics: AdvancedStatistics,
    ) -> BulkDeliveryReport: ...


class BallotStore(DecisionStore, Protocol):
    def upsert_vote(
        self,
        decision_id: str,
        voter_id: str,
        vote: str,
        comment: str | None = None,
        voted_at: datetime | None = None,
    ) -> None: ...


class BoardDirectory(RecipientResolver, Protocol):
    """Resolver that can also list every eligible voter."""

    def get_board_members(self) -> list[Voter]: ...
