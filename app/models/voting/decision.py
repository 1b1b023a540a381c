"""Decision (resolution or minutes item) model."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from app.models.common import BaseEntity

DECISION_DDL = """
CREATE TABLE IF NOT EXISTS decision (
    id VARCHAR PRIMARY KEY,
    kind VARCHAR NOT NULL,
    title VARCHAR NOT NULL,
    status VARCHAR NOT NULL,
    voting_deadline TIMESTAMP,
    total_eligible_voters INTEGER,
    minimum_quorum DOUBLE NOT NULL,
    approval_threshold DOUBLE NOT NULL,
    created_at TIMESTAMP NOT NULL,
    updated_at TIMESTAMP NOT NULL,
    completed_at TIMESTAMP
)
"""

DECISION_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_decision_status ON decision(status)",
]


class DecisionKind(StrEnum):
    """What is being voted on."""

    RESOLUTION = "resolution"
    MINUTES = "minutes"


class DecisionStatus(StrEnum):
    """Decision lifecycle states."""

    DRAFT = "draft"
    PUBLISHED = "published"
    VOTING = "voting"
    APPROVED = "approved"
    REJECTED = "rejected"
    PASSED = "passed"
    FAILED = "failed"
    CANCELLED = "cancelled"


# (passed, failed) terminal pair per kind
TERMINAL_STATUSES = {
    DecisionKind.RESOLUTION: (DecisionStatus.APPROVED, DecisionStatus.REJECTED),
    DecisionKind.MINUTES: (DecisionStatus.PASSED, DecisionStatus.FAILED),
}


@dataclass
class Decision(BaseEntity):
    """A votable item."""

    id: str
    kind: DecisionKind
    title: str
    status: DecisionStatus
    minimum_quorum: float
    approval_threshold: float
    voting_deadline: datetime | None = None
    total_eligible_voters: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def is_voting(self) -> bool:
        return self.status == DecisionStatus.VOTING

    def terminal_status(self, passed: bool) -> DecisionStatus:
        """Status to write when voting ends with the given outcome."""
        approved, rejected = TERMINAL_STATUSES[self.kind]
        return approved if passed else rejected

    def deadline_passed(self, now: datetime) -> bool:
        return self.voting_deadline is not None and now >= self.voting_deadline
