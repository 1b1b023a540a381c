"""Repositories package - data access layer for our database."""

from app.repositories.base import BaseRepository
from app.repositories.db import (
    close_db,
    connect,
    get_db,
    init_tables,
)
from app.repositories.members import MemberRepository
from app.repositories.notification import DeliveryLogRepository
from app.repositories.voting import DecisionRepository

__all__ = [
    # DB
    "get_db",
    "connect",
    "close_db",
    "init_tables",
    # Base
    "BaseRepository",
    # Members
    "MemberRepository",
    # Voting
    "DecisionRepository",
    # Notification
    "DeliveryLogRepository",
]
