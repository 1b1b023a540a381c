"""Notification repositories."""

from app.repositories.notification.delivery_log import DeliveryLogRepository

__all__ = ["DeliveryLogRepository"]
