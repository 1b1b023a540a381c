"""Voting summary service - builds and delivers the post-vote summary email."""

from collections.abc import Callable
from datetime import datetime, timedelta

from loguru import logger

from app.errors import ConfigurationError, DecisionNotFoundError, SummaryRefusedError
from app.models.common import utc_now
from app.models.notification import BulkDeliveryOptions, BulkDeliveryReport, VotingSummary
from app.models.voting import TERMINAL_STATUSES, AdvancedStatistics, Decision, VoteRecord, VotingConfiguration
from app.services.notification.delivery import BulkDeliveryCoordinator
from app.services.notification.templates import SummaryRenderer
from app.services.ports import BoardDirectory, DecisionStore, DeliveryHistory, Renderer
from app.services.voting.statistics import StatisticsEngine
from settings import MIN_SUCCESS_RATIO

CLOSED_STATUSES = frozenset(s for pair in TERMINAL_STATUSES.values() for s in pair)
RESEND_GAP = timedelta(hours=1)


class VotingSummaryService:
    """Notification run for a closed decision: summarize, render, resolve, send."""

    def __init__(
        self,
        resolver: BoardDirectory,
        coordinator: BulkDeliveryCoordinator,
        renderer: Renderer | None = None,
        engine: StatisticsEngine | None = None,
        options: BulkDeliveryOptions | None = None,
        min_success_ratio: float = MIN_SUCCESS_RATIO,
        store: DecisionStore | None = None,
        history: DeliveryHistory | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._resolver = resolver
        self._coordinator = coordinator
        self._renderer = renderer or SummaryRenderer()
        self._engine = engine or StatisticsEngine()
        self._options = options or BulkDeliveryOptions()
        self._min_success_ratio = min_success_ratio
        self._store = store
        self._history = history
        self._clock = clock

    def build_summary(self, decision: Decision, votes: list[VoteRecord], statistics: AdvancedStatistics) -> VotingSummary:
        non_voters = self._engine.identify_non_voters(self._resolver.get_board_members(), votes)
        timeline = self._engine.analyze_timeline(
            votes,
            decision.created_at,
            decision.voting_deadline or decision.completed_at,
        )
        return VotingSummary(
            decision=decision,
            votes=votes,
            statistics=statistics,
            non_voters=non_voters,
            timeline=timeline,
        )

    def is_accepted(self, report: BulkDeliveryReport) -> bool:
        return report.success_ratio >= self._min_success_ratio

    async def notify(
        self,
        decision: Decision,
        votes: list[VoteRecord],
        statistics: AdvancedStatistics,
    ) -> BulkDeliveryReport:
        summary = self.build_summary(decision, votes, statistics)
        recipients = self._resolver.get_eligible_recipients()
        if not recipients:
            logger.warning("No eligible recipients for voting summary of {}", decision.id)
            return BulkDeliveryReport()

        template = self._renderer.render(summary)
        personalizations = {r.id: self._renderer.personalize(summary, r) for r in recipients}
        logger.info("Sending voting summary for {} to {} recipients", decision.id, len(recipients))

        report = await self._coordinator.send_bulk(
            recipients,
            template,
            self._options,
            personalizations,
            decision_id=decision.id,
        )

        if report.failed:
            logger.warning(
                "Voting summary for {}: {} failed: {}",
                decision.id,
                report.failed,
                [(r.email, r.error) for r in report.failed_results],
            )
        if self.is_accepted(report):
            logger.info("Voting summary for {} delivered ({:.0%} success)", decision.id, report.success_ratio)
        else:
            logger.error(
                "Voting summary for {} below acceptance bar: {:.0%} < {:.0%}",
                decision.id,
                report.success_ratio,
                self._min_success_ratio,
            )
        return report

    async def resend(self, decision_id: str, force: bool = False) -> BulkDeliveryReport:
        """Send the summary again for a closed decision, e.g. after a failed run.

        Without `force` the decision must be closed and no summary for it may
        have been delivered in the last hour.
        """
        if self._store is None:
            raise ConfigurationError("Summary resend needs a decision store")
        decision = self._store.get_decision(decision_id)
        if decision is None:
            raise DecisionNotFoundError(decision_id)

        if not force:
            if decision.status not in CLOSED_STATUSES:
                raise SummaryRefusedError(decision_id, f"status is {decision.status}")
            if self._history is not None:
                last = self._history.last_success_at(decision_id, self._options.notification_kind)
                if last is not None and self._clock() - last < RESEND_GAP:
                    raise SummaryRefusedError(decision_id, f"already sent at {last:%Y-%m-%d %H:%M}")

        votes = self._store.get_votes(decision_id)
        eligible = decision.total_eligible_voters
        if eligible is None:
            eligible = self._store.count_eligible_voters()
        config = VotingConfiguration(
            total_eligible_voters=eligible,
            minimum_quorum=decision.minimum_quorum,
            approval_threshold=decision.approval_threshold,
        )
        statistics = self._engine.compute_outcome(votes, config)
        logger.info("Resending voting summary for {} (status {}, force={})", decision_id, decision.status, force)
        return await self.notify(decision, votes, statistics)
