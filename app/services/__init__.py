"""Services package - service class exports."""

from app.services.notification import (
    BulkDeliveryCoordinator,
    MemberRecipientResolver,
    SummaryRenderer,
    VotingSummaryService,
)
from app.services.voting import (
    BallotService,
    CompletionDetector,
    DeadlineScheduler,
    StatisticsEngine,
)

__all__ = [
    "StatisticsEngine",
    "CompletionDetector",
    "BallotService",
    "DeadlineScheduler",
    "BulkDeliveryCoordinator",
    "MemberRecipientResolver",
    "SummaryRenderer",
    "VotingSummaryService",
]
