"""Voting domain entities - configuration and computed results."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field

from app.models.common import BaseEntity


class VotingConfiguration(BaseModel):
    """Rules a vote is judged by. Out-of-range values fail validation."""

    total_eligible_voters: int = Field(ge=0)
    minimum_quorum: float = Field(ge=0, le=100)
    approval_threshold: float = Field(ge=0, le=100)
    abstentions_count_toward_quorum: bool = True


@dataclass
class QuorumStatus(BaseEntity):
    """Quorum check result."""

    met: bool
    required: int
    actual: int
    percentage: float
    shortfall: int | None = None


class MarginType(StrEnum):
    VICTORY = "victory"
    DEFEAT = "defeat"
    TIE = "tie"


@dataclass
class VotingMargin(BaseEntity):
    """Difference between approve and reject votes."""

    absolute_margin: int
    percentage_margin: float
    margin_type: MarginType
    description: str


@dataclass
class CommentAnalysis(BaseEntity):
    """Comment participation and content signals."""

    total_comments: int
    comments_by_vote_type: dict[str, int]
    average_comment_length: int
    has_concerns: bool
    concern_keywords: list[str]
    participation_with_comments: float


class ConsensusLevel(StrEnum):
    HIGH = "high"
    MODERATE = "moderate"
    LOW = "low"
    POLARIZED = "polarized"


@dataclass
class AdvancedStatistics(BaseEntity):
    """Full statistics and outcome for one decision's votes."""

    total_votes: int
    total_eligible_voters: int
    approve_votes: int
    reject_votes: int
    abstain_votes: int

    participation_rate: float
    approval_percentage: float
    rejection_percentage: float
    abstention_percentage: float

    is_unanimous: bool
    unanimous_type: str | None
    quorum_status: QuorumStatus
    voting_margin: VotingMargin
    comment_analysis: CommentAnalysis

    passed: bool
    passed_reason: str

    engagement_score: int
    consensus_level: ConsensusLevel


class VotingPattern(StrEnum):
    EARLY = "early"
    STEADY = "steady"
    LAST_MINUTE = "last-minute"
    UNKNOWN = "unknown"


@dataclass
class VotingTimeline(BaseEntity):
    """When votes arrived relative to the voting period."""

    voting_pattern: VotingPattern
    voting_duration_hours: float | None = None
    last_minute_votes: int | None = None


class CompletionReason(StrEnum):
    ALL_VOTED = "all_voted"
    DEADLINE_EXPIRED = "deadline_expired"
    MANUAL_COMPLETION = "manual_completion"
    NOT_COMPLETE = "not_complete"


@dataclass
class CompletionStatus(BaseEntity):
    """Result of one completion check. Never persisted; the decision status is."""

    is_complete: bool
    reason: CompletionReason
    total_votes: int
    total_eligible_voters: int
    participation_rate: float
    deadline_expired: bool
    completed_at: datetime | None = None
    transitioned: bool = False
    final_status: str | None = None
    decision_id: str | None = field(default=None)
