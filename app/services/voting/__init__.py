"""Voting services - statistics, completion detection, ballots and deadline sweeps."""

from app.services.voting.ballot import BallotService
from app.services.voting.completion import CompletionDetector
from app.services.voting.scheduler import DeadlineScheduler
from app.services.voting.statistics import VOTE_MAP, StatisticsEngine, normalize_vote

__all__ = [
    "VOTE_MAP",
    "normalize_vote",
    "StatisticsEngine",
    "CompletionDetector",
    "BallotService",
    "DeadlineScheduler",
]
