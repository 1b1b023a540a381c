"""Notification models - delivery log, templates and reports."""

from app.models.notification.delivery import DELIVERY_LOG_DDL, DELIVERY_LOG_INDEXES
from app.models.notification.entities import (
    BulkDeliveryOptions,
    BulkDeliveryReport,
    DeliveryResult,
    EmailTemplate,
    VotingSummary,
)

__all__ = [
    "DELIVERY_LOG_DDL",
    "DELIVERY_LOG_INDEXES",
    "EmailTemplate",
    "BulkDeliveryOptions",
    "DeliveryResult",
    "BulkDeliveryReport",
    "VotingSummary",
]
