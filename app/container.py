"""Dependency Injection container - initialized at app startup."""

import duckdb

from app.repositories.db import get_db
from app.repositories.members import MemberRepository
from app.repositories.notification import DeliveryLogRepository
from app.repositories.voting import DecisionRepository
from app.services.notification import (
    BulkDeliveryCoordinator,
    MemberRecipientResolver,
    SummaryRenderer,
    VotingSummaryService,
)
from app.services.ports import Transport
from app.services.voting import BallotService, CompletionDetector, DeadlineScheduler, StatisticsEngine
from settings import DEADLINE_CHECK_INTERVAL


class Container:
    """Application DI container - holds all singleton instances."""

    _instance = None
    _initialized = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def init(
        self,
        conn: duckdb.DuckDBPyConnection | None = None,
        transport: Transport | None = None,
        sweep_interval: float = DEADLINE_CHECK_INTERVAL,
    ) -> None:
        """Initialize all dependencies. Call once at app startup.

        Without a transport the completion flow still runs but sends nothing.
        """
        if self._initialized:
            return

        conn = conn if conn is not None else get_db()

        # Repositories (singletons, one shared connection)
        self.decisions = DecisionRepository(conn)
        self.members = MemberRepository(conn)
        self.delivery_log = DeliveryLogRepository(conn)

        # Services (with injected repos)
        self.engine = StatisticsEngine()
        self.resolver = MemberRecipientResolver(self.members)
        self.renderer = SummaryRenderer()

        self.transport = transport
        self.coordinator = None
        self.summary = None
        if transport is not None:
            self.coordinator = BulkDeliveryCoordinator(
                transport=transport,
                resolver=self.resolver,
                recorder=self.delivery_log,
            )
            self.summary = VotingSummaryService(
                resolver=self.resolver,
                coordinator=self.coordinator,
                renderer=self.renderer,
                engine=self.engine,
                store=self.decisions,
                history=self.delivery_log,
            )

        self.detector = CompletionDetector(
            store=self.decisions,
            engine=self.engine,
            notifier=self.summary,
        )
        self.ballots = BallotService(store=self.decisions, detector=self.detector)
        self.scheduler = DeadlineScheduler(self.detector, interval=sweep_interval)

        self._initialized = True

    def reset(self) -> None:
        """Drop all instances so `init` can run again."""
        self._initialized = False


# Global container instance
container = Container()
