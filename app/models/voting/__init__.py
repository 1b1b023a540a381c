"""Voting domain models - decisions, votes, and computed results."""

from app.models.voting.decision import (
    DECISION_DDL,
    DECISION_INDEXES,
    TERMINAL_STATUSES,
    Decision,
    DecisionKind,
    DecisionStatus,
)
from app.models.voting.entities import (
    AdvancedStatistics,
    CommentAnalysis,
    CompletionReason,
    CompletionStatus,
    ConsensusLevel,
    MarginType,
    QuorumStatus,
    VotingConfiguration,
    VotingMargin,
    VotingPattern,
    VotingTimeline,
)
from app.models.voting.vote import VOTE_DDL, VOTE_INDEXES, VoteRecord, Voter, VoteValue, vote_id

__all__ = [
    "DECISION_DDL",
    "DECISION_INDEXES",
    "VOTE_DDL",
    "VOTE_INDEXES",
    "TERMINAL_STATUSES",
    "Decision",
    "DecisionKind",
    "DecisionStatus",
    "VoteRecord",
    "Voter",
    "VoteValue",
    "vote_id",
    "VotingConfiguration",
    "QuorumStatus",
    "VotingMargin",
    "MarginType",
    "CommentAnalysis",
    "ConsensusLevel",
    "AdvancedStatistics",
    "VotingPattern",
    "VotingTimeline",
    "CompletionReason",
    "CompletionStatus",
]
