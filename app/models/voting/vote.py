"""Vote (one member's ballot on one decision) model."""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum

from app.models.common import BaseEntity

VOTE_DDL = """
CREATE TABLE IF NOT EXISTS vote (
    id VARCHAR PRIMARY KEY,
    decision_id VARCHAR NOT NULL,
    voter_id VARCHAR NOT NULL,
    vote VARCHAR NOT NULL,
    comment VARCHAR,
    voted_at TIMESTAMP NOT NULL
)
"""

VOTE_INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_vote_decision ON vote(decision_id)",
]


class VoteValue(StrEnum):
    """Canonical vote values."""

    APPROVE = "approve"
    REJECT = "reject"
    ABSTAIN = "abstain"


@dataclass
class Voter(BaseEntity):
    """Identity of the member who cast a vote."""

    id: str
    full_name: str
    email: str
    position: str | None = None


@dataclass
class VoteRecord(BaseEntity):
    """One member's vote. `vote` holds the raw stored value (legacy synonyms allowed)."""

    vote: str
    voter: Voter
    comment: str | None = None
    voted_at: datetime | None = None

    @property
    def has_comment(self) -> bool:
        return bool(self.comment and self.comment.strip())


def vote_id(decision_id: str, voter_id: str) -> str:
    """One row per (decision, voter); re-voting replaces it."""
    return f"{decision_id}_{voter_id}"
