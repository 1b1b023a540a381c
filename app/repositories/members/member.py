"""Member repository - board members and their email settings."""

from datetime import datetime

from loguru import logger

from app.models.common import utc_now
from app.models.members import (
    DigestFrequency,
    EmailPreferences,
    EmailRecipient,
    MemberRole,
)
from app.repositories.base import BaseRepository

_MEMBER_COLUMNS = """
    id, full_name, email, position, role, is_active,
    email_notifications_enabled, voting_email_notifications,
    voting_summaries, voting_reminders, system_notifications,
    digest_frequency, preferred_format, last_email_sent
"""


def _to_recipient(row: tuple) -> EmailRecipient:
    return EmailRecipient(
        id=row[0],
        name=row[1],
        email=row[2],
        position=row[3],
        role=MemberRole(row[4]),
        is_active=bool(row[5]),
        email_notifications_enabled=bool(row[6]),
        voting_email_notifications=bool(row[7]),
        preferences=EmailPreferences(
            voting_summaries=bool(row[8]),
            voting_reminders=bool(row[9]),
            system_notifications=bool(row[10]),
            digest_frequency=DigestFrequency(row[11] or DigestFrequency.IMMEDIATE),
            preferred_format=row[12] or "html",
        ),
        last_email_sent=row[13],
    )


class MemberRepository(BaseRepository):
    """Store adapter for members."""

    def get_member(self, member_id: str) -> EmailRecipient | None:
        row = self.fetchone(f"SELECT {_MEMBER_COLUMNS} FROM member WHERE id = ?", [member_id])
        return _to_recipient(row) if row else None

    def list_board_members(self, notifications_only: bool = False) -> list[EmailRecipient]:
        """Active admins and board members, optionally only those with email enabled."""
        query = f"""
            SELECT {_MEMBER_COLUMNS} FROM member
            WHERE is_active AND role IN ('admin', 'board_member')
        """
        if notifications_only:
            query += " AND email_notifications_enabled"
        rows = self.fetchall(query + " ORDER BY full_name")
        members = [_to_recipient(r) for r in rows]
        logger.debug("list_board_members(notifications_only={}): {}", notifications_only, len(members))
        return members

    def upsert_member(self, member: EmailRecipient) -> None:
        prefs = member.preferences
        self.execute(
            f"""
            INSERT OR REPLACE INTO member ({_MEMBER_COLUMNS}, bounce_reason, bounced_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, NULL, NULL)
            """,
            [
                member.id,
                member.name,
                member.email,
                member.position,
                str(member.role),
                member.is_active,
                member.email_notifications_enabled,
                member.voting_email_notifications,
                prefs.voting_summaries,
                prefs.voting_reminders,
                prefs.system_notifications,
                str(prefs.digest_frequency),
                prefs.preferred_format,
                member.last_email_sent,
            ],
        )

    def record_bounce(self, member_id: str, reason: str, disable: bool, at: datetime | None = None) -> bool:
        """Store bounce info; a hard bounce also turns email off. False if the member is unknown."""
        if disable:
            query = """
                UPDATE member
                SET bounce_reason = ?, bounced_at = ?,
                    email_notifications_enabled = FALSE, voting_email_notifications = FALSE
                WHERE id = ?
                RETURNING id
            """
        else:
            query = "UPDATE member SET bounce_reason = ?, bounced_at = ? WHERE id = ? RETURNING id"
        row = self.fetchone(query, [reason, at or utc_now(), member_id])
        return row is not None

    def get_bounce(self, member_id: str) -> tuple[str | None, datetime | None] | None:
        row = self.fetchone("SELECT bounce_reason, bounced_at FROM member WHERE id = ?", [member_id])
        return (row[0], row[1]) if row else None

    def touch_last_email_sent(self, member_ids: list[str], at: datetime) -> None:
        if not member_ids:
            return
        placeholders = ", ".join("?" for _ in member_ids)
        self.execute(
            f"UPDATE member SET last_email_sent = ? WHERE id IN ({placeholders})",
            [at, *member_ids],
        )

    def email_stats(self, since: datetime) -> dict:
        """Counts over admins/board members; bounces counted from `since`."""
        row = self.fetchone(
            """
            SELECT COUNT(*),
                   COUNT(*) FILTER (WHERE is_active),
                   COUNT(*) FILTER (WHERE is_active AND email_notifications_enabled),
                   COUNT(*) FILTER (WHERE is_active AND email_notifications_enabled AND voting_email_notifications),
                   COUNT(*) FILTER (WHERE bounced_at IS NOT NULL AND bounced_at >= ?)
            FROM member
            WHERE role IN ('admin', 'board_member')
            """,
            [since],
        )
        return {
            "total_recipients": int(row[0]),
            "active_recipients": int(row[1]),
            "email_enabled_recipients": int(row[2]),
            "voting_email_enabled": int(row[3]),
            "recent_bounces": int(row[4]),
        }
