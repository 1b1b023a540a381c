"""Common models - shared base classes and helpers."""

from app.models.common.base import BaseEntity
from app.models.common.clock import utc_now

__all__ = ["BaseEntity", "utc_now"]
