"""Delivery log repository - persisted per-recipient delivery outcomes."""

from datetime import datetime, timedelta
from uuid import uuid4

import polars as pl
from loguru import logger

from app.models.common import utc_now
from app.models.members import NotificationKind
from app.models.notification import DeliveryResult
from app.repositories.base import BaseRepository
from app.repositories.members import MemberRepository

_LOG_SCHEMA = {
    "id": pl.Utf8,
    "decision_id": pl.Utf8,
    "recipient_id": pl.Utf8,
    "email": pl.Utf8,
    "notification_kind": pl.Utf8,
    "success": pl.Boolean,
    "error": pl.Utf8,
    "attempts": pl.Int32,
    "delivery_time_ms": pl.Int32,
    "sent_at": pl.Datetime("us"),
}


class DeliveryLogRepository(BaseRepository):
    """Append-only log of delivery results."""

    def record_batch(
        self,
        results: list[DeliveryResult],
        kind: NotificationKind,
        decision_id: str | None = None,
    ) -> int:
        """Insert one batch of results and stamp last_email_sent for delivered members."""
        if not results:
            return 0

        now = utc_now()
        rows = [
            {
                "id": str(uuid4()),
                "decision_id": decision_id,
                "recipient_id": r.recipient_id,
                "email": r.email,
                "notification_kind": str(kind),
                "success": r.success,
                "error": r.error,
                "attempts": r.attempts,
                "delivery_time_ms": r.delivery_time_ms,
                "sent_at": r.sent_at or now,
            }
            for r in results
        ]
        log_df = pl.DataFrame(rows, schema=_LOG_SCHEMA)
        self._db.register("delivery_log_df", log_df)
        try:
            self.execute("INSERT INTO delivery_log SELECT * FROM delivery_log_df")
        finally:
            self._db.unregister("delivery_log_df")

        delivered = [r.recipient_id for r in results if r.success]
        MemberRepository(self._db).touch_last_email_sent(delivered, now)
        logger.debug("Delivery log: +{} rows ({} delivered)", len(rows), len(delivered))
        return len(rows)

    def last_success_at(self, decision_id: str, kind: NotificationKind) -> datetime | None:
        """When a message of `kind` for the decision was last delivered to anyone."""
        row = self.fetchone(
            "SELECT MAX(sent_at) FROM delivery_log WHERE decision_id = ? AND notification_kind = ? AND success",
            [decision_id, str(kind)],
        )
        return row[0] if row else None

    def count(self, decision_id: str | None = None) -> int:
        if decision_id is None:
            return int(self.fetchone("SELECT COUNT(*) FROM delivery_log")[0])
        return int(self.fetchone("SELECT COUNT(*) FROM delivery_log WHERE decision_id = ?", [decision_id])[0])

    def stats_since(self, days: int, now: datetime | None = None) -> dict:
        """Sent/failed/bounce-rate totals over the last `days` days."""
        since = (now or utc_now()) - timedelta(days=days)
        row = self.fetchone(
            """
            SELECT COUNT(*),
                   COALESCE(SUM(CASE WHEN success THEN 1 ELSE 0 END), 0),
                   COALESCE(AVG(delivery_time_ms), 0)
            FROM delivery_log
            WHERE sent_at >= ?
            """,
            [since],
        )
        total, sent = int(row[0]), int(row[1])
        failed = total - sent
        return {
            "days": days,
            "total": total,
            "sent": sent,
            "failed": failed,
            "bounce_rate": round(failed / total * 100, 2) if total else 0.0,
            "average_delivery_time_ms": round(float(row[2]), 1),
        }
