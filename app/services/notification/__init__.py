"""Notification services - recipients, rendering and bulk delivery."""

from app.services.notification.delivery import RETRY_OPTIONS, BulkDeliveryCoordinator, personalize_content
from app.services.notification.recipients import (
    MemberRecipientResolver,
    should_receive,
    validate_email_address,
    validate_recipients,
)
from app.services.notification.summary import VotingSummaryService
from app.services.notification.templates import SummaryRenderer

__all__ = [
    "RETRY_OPTIONS",
    "BulkDeliveryCoordinator",
    "personalize_content",
    "MemberRecipientResolver",
    "should_receive",
    "validate_email_address",
    "validate_recipients",
    "SummaryRenderer",
    "VotingSummaryService",
]
