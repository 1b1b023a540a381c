"""Completion detector - decides when voting ends and performs the one-time transition."""

from collections.abc import Callable
from datetime import datetime

from loguru import logger

from app.errors import DecisionNotFoundError
from app.models.common import utc_now
from app.models.voting import (
    AdvancedStatistics,
    CompletionReason,
    CompletionStatus,
    Decision,
    DecisionStatus,
    VoteRecord,
    VotingConfiguration,
)
from app.services.ports import DecisionStore, Notifier
from app.services.voting import formulas
from app.services.voting.statistics import StatisticsEngine


class CompletionDetector:
    """Watches decisions in `voting` and closes them exactly once.

    The status write is a compare-and-swap on `voting`, so of any number of
    concurrent checks only one performs the transition and only that one
    triggers the notification run.
    """

    def __init__(
        self,
        store: DecisionStore,
        engine: StatisticsEngine | None = None,
        notifier: Notifier | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._engine = engine or StatisticsEngine()
        self._notifier = notifier
        self._clock = clock
        logger.debug("CompletionDetector initialized")

    def _load(self, decision_id: str) -> tuple[Decision, list[VoteRecord], int]:
        decision = self._store.get_decision(decision_id)
        if decision is None:
            raise DecisionNotFoundError(decision_id)
        votes = self._store.get_votes(decision_id)
        eligible = decision.total_eligible_voters
        if eligible is None:
            eligible = self._store.count_eligible_voters()
        return decision, votes, eligible

    async def check_completion(self, decision_id: str) -> CompletionStatus:
        """Evaluate a decision; close it if everyone voted or the deadline passed."""
        decision, votes, eligible = self._load(decision_id)
        now = self._clock()
        total = len(votes)
        deadline_expired = decision.deadline_passed(now)

        status = CompletionStatus(
            is_complete=False,
            reason=CompletionReason.NOT_COMPLETE,
            total_votes=total,
            total_eligible_voters=eligible,
            participation_rate=formulas.percentage(total, eligible),
            deadline_expired=deadline_expired,
            decision_id=decision_id,
        )

        if not decision.is_voting:
            logger.debug("Decision {} is not in voting status: {}", decision_id, decision.status)
            return status

        if eligible > 0 and total >= eligible:
            status.reason = CompletionReason.ALL_VOTED
            status.completed_at = now
        elif deadline_expired:
            status.reason = CompletionReason.DEADLINE_EXPIRED
            status.completed_at = decision.voting_deadline
        else:
            return status

        status.is_complete = True
        logger.info("Decision {} voting is complete: {}", decision_id, status.reason)
        await self._finalize(decision, votes, eligible, status)
        return status

    async def manually_complete(self, decision_id: str) -> CompletionStatus:
        """Close voting now regardless of turnout or deadline."""
        decision, votes, eligible = self._load(decision_id)
        now = self._clock()
        total = len(votes)
        status = CompletionStatus(
            is_complete=decision.is_voting,
            reason=CompletionReason.MANUAL_COMPLETION if decision.is_voting else CompletionReason.NOT_COMPLETE,
            total_votes=total,
            total_eligible_voters=eligible,
            participation_rate=formulas.percentage(total, eligible),
            deadline_expired=decision.deadline_passed(now),
            decision_id=decision_id,
        )
        if not decision.is_voting:
            logger.warning("Manual completion ignored for {}: status is {}", decision_id, decision.status)
            return status

        status.completed_at = now
        logger.info("Decision {} completed manually", decision_id)
        await self._finalize(decision, votes, eligible, status)
        return status

    async def check_expired_deadlines(self) -> list[str]:
        """Sweep decisions whose deadline passed; returns the ids that were closed."""
        now = self._clock()
        candidates = self._store.list_expired_voting_decisions(now)
        if not candidates:
            logger.debug("Deadline sweep: nothing expired")
            return []

        logger.info("Deadline sweep: {} expired decisions", len(candidates))
        closed = []
        for decision_id in candidates:
            try:
                status = await self.check_completion(decision_id)
            except Exception as e:
                logger.error("Deadline sweep failed for {}: {}", decision_id, e)
                continue
            if status.transitioned:
                closed.append(decision_id)

        logger.info("Deadline sweep: closed {}/{}", len(closed), len(candidates))
        return closed

    def upcoming_deadlines(self, hours: float = 24) -> list[dict]:
        """Open decisions closing within `hours`, soonest first, with whole hours remaining."""
        now = self._clock()
        return [
            {
                "id": d.id,
                "kind": str(d.kind),
                "title": d.title,
                "deadline": d.voting_deadline,
                "hours_remaining": round((d.voting_deadline - now).total_seconds() / 3600),
            }
            for d in self._store.list_upcoming_deadlines(now, hours)
        ]

    async def _finalize(
        self,
        decision: Decision,
        votes: list[VoteRecord],
        eligible: int,
        status: CompletionStatus,
    ) -> None:
        config = VotingConfiguration(
            total_eligible_voters=eligible,
            minimum_quorum=decision.minimum_quorum,
            approval_threshold=decision.approval_threshold,
        )
        stats = self._engine.compute_outcome(votes, config)
        final = decision.terminal_status(stats.passed)

        if not self._store.update_decision_status(decision.id, DecisionStatus.VOTING, final, status.completed_at):
            logger.info("Decision {} already closed by another check", decision.id)
            return

        status.transitioned = True
        status.final_status = str(final)
        decision.status = final
        decision.completed_at = status.completed_at
        logger.info("Decision {} closed as {} ({})", decision.id, final, stats.passed_reason)
        await self._notify(decision, votes, stats)

    async def _notify(self, decision: Decision, votes: list[VoteRecord], stats: AdvancedStatistics) -> None:
        if self._notifier is None:
            logger.debug("No notifier configured, skipping summary for {}", decision.id)
            return
        try:
            report = await self._notifier.notify(decision, votes, stats)
        except Exception as e:
            # status stays terminal
            logger.exception("Voting summary failed for {}: {}", decision.id, e)
            return
        logger.info("Voting summary for {}: {}", decision.id, report.summary())
