"""Ballot service - records votes and fires the completion check."""

from collections.abc import Callable
from datetime import datetime

from loguru import logger

from app.errors import DecisionNotFoundError, VotingClosedError
from app.models.common import utc_now
from app.models.voting import CompletionStatus
from app.services.ports import BallotStore
from app.services.voting.completion import CompletionDetector
from app.services.voting.statistics import normalize_vote


class BallotService:
    """Accepts one vote per member per decision; re-voting replaces the earlier vote."""

    def __init__(
        self,
        store: BallotStore,
        detector: CompletionDetector,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._detector = detector
        self._clock = clock

    async def cast_vote(
        self,
        decision_id: str,
        voter_id: str,
        vote: str,
        comment: str | None = None,
    ) -> CompletionStatus:
        value = normalize_vote(vote)

        decision = self._store.get_decision(decision_id)
        if decision is None:
            raise DecisionNotFoundError(decision_id)
        if not decision.is_voting:
            raise VotingClosedError(decision_id, f"status is {decision.status}")

        now = self._clock()
        if decision.deadline_passed(now):
            raise VotingClosedError(decision_id, "deadline has passed")

        text = comment.strip() if comment else None
        self._store.upsert_vote(decision_id, voter_id, str(value), text or None, now)
        logger.info("Vote recorded: {} -> {} ({})", voter_id, decision_id, value)

        return await self._detector.check_completion(decision_id)
