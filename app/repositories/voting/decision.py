"""Decision repository - decisions, votes and the guarded status write."""

from datetime import datetime, timedelta

from loguru import logger

from app.models.common import utc_now
from app.models.voting import (
    Decision,
    DecisionKind,
    DecisionStatus,
    VoteRecord,
    Voter,
    vote_id,
)
from app.repositories.base import BaseRepository
from settings import DEFAULT_APPROVAL_THRESHOLD, DEFAULT_QUORUM

_DECISION_COLUMNS = """
    id, kind, title, status, minimum_quorum, approval_threshold,
    voting_deadline, total_eligible_voters, created_at, updated_at, completed_at
"""


def _to_decision(row: tuple) -> Decision:
    return Decision(
        id=row[0],
        kind=DecisionKind(row[1]),
        title=row[2],
        status=DecisionStatus(row[3]),
        minimum_quorum=float(row[4]),
        approval_threshold=float(row[5]),
        voting_deadline=row[6],
        total_eligible_voters=row[7],
        created_at=row[8],
        updated_at=row[9],
        completed_at=row[10],
    )


class DecisionRepository(BaseRepository):
    """Store adapter for decisions and their votes."""

    def get_decision(self, decision_id: str) -> Decision | None:
        row = self.fetchone(f"SELECT {_DECISION_COLUMNS} FROM decision WHERE id = ?", [decision_id])
        return _to_decision(row) if row else None

    def get_votes(self, decision_id: str) -> list[VoteRecord]:
        """Votes for a decision with voter identity, oldest first."""
        rows = self.fetchall(
            """
            SELECT v.vote, v.comment, v.voted_at, v.voter_id,
                   COALESCE(m.full_name, v.voter_id), COALESCE(m.email, ''), m.position
            FROM vote v
            LEFT JOIN member m ON m.id = v.voter_id
            WHERE v.decision_id = ?
            ORDER BY v.voted_at
            """,
            [decision_id],
        )
        votes = [
            VoteRecord(
                vote=r[0],
                comment=r[1],
                voted_at=r[2],
                voter=Voter(id=r[3], full_name=r[4], email=r[5], position=r[6]),
            )
            for r in rows
        ]
        logger.debug("get_votes({}): {} votes", decision_id, len(votes))
        return votes

    def update_decision_status(
        self,
        decision_id: str,
        expected: DecisionStatus,
        new: DecisionStatus,
        completed_at: datetime | None = None,
    ) -> bool:
        """Compare-and-swap on status. True only for the caller that performed the write."""
        row = self.fetchone(
            """
            UPDATE decision
            SET status = ?, completed_at = ?, updated_at = ?
            WHERE id = ? AND status = ?
            RETURNING id
            """,
            [str(new), completed_at, utc_now(), decision_id, str(expected)],
        )
        if row is None:
            logger.debug("Status write skipped for {}: no longer {}", decision_id, expected)
            return False
        logger.info("Decision {}: {} -> {}", decision_id, expected, new)
        return True

    def list_expired_voting_decisions(self, now: datetime) -> list[str]:
        rows = self.fetchall(
            """
            SELECT id FROM decision
            WHERE status = ? AND voting_deadline IS NOT NULL AND voting_deadline <= ?
            ORDER BY voting_deadline
            """,
            [str(DecisionStatus.VOTING), now],
        )
        return [r[0] for r in rows]

    def list_upcoming_deadlines(self, now: datetime, hours: float = 24) -> list[Decision]:
        """Decisions still in voting whose deadline falls within the next `hours`, soonest first."""
        rows = self.fetchall(
            f"""
            SELECT {_DECISION_COLUMNS} FROM decision
            WHERE status = ? AND voting_deadline IS NOT NULL
              AND voting_deadline >= ? AND voting_deadline <= ?
            ORDER BY voting_deadline
            """,
            [str(DecisionStatus.VOTING), now, now + timedelta(hours=hours)],
        )
        return [_to_decision(r) for r in rows]

    def count_eligible_voters(self) -> int:
        """Active admins and board members."""
        row = self.fetchone("SELECT COUNT(*) FROM member WHERE is_active AND role IN ('admin', 'board_member')")
        return int(row[0])

    def upsert_vote(
        self,
        decision_id: str,
        voter_id: str,
        vote: str,
        comment: str | None = None,
        voted_at: datetime | None = None,
    ) -> None:
        """Record a vote; a second vote by the same member replaces the first."""
        self.execute(
            "INSERT OR REPLACE INTO vote VALUES (?, ?, ?, ?, ?, ?)",
            [vote_id(decision_id, voter_id), decision_id, voter_id, vote, comment, voted_at or utc_now()],
        )

    def create_decision(
        self,
        decision_id: str,
        title: str,
        kind: DecisionKind = DecisionKind.RESOLUTION,
        status: DecisionStatus = DecisionStatus.VOTING,
        voting_deadline: datetime | None = None,
        total_eligible_voters: int | None = None,
        minimum_quorum: float | None = None,
        approval_threshold: float | None = None,
    ) -> Decision:
        now = utc_now()
        decision = Decision(
            id=decision_id,
            kind=DecisionKind(kind),
            title=title,
            status=DecisionStatus(status),
            minimum_quorum=DEFAULT_QUORUM if minimum_quorum is None else minimum_quorum,
            approval_threshold=DEFAULT_APPROVAL_THRESHOLD if approval_threshold is None else approval_threshold,
            voting_deadline=voting_deadline,
            total_eligible_voters=total_eligible_voters,
            created_at=now,
            updated_at=now,
        )
        self.execute(
            f"INSERT INTO decision ({_DECISION_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            [
                decision.id,
                str(decision.kind),
                decision.title,
                str(decision.status),
                decision.minimum_quorum,
                decision.approval_threshold,
                decision.voting_deadline,
                decision.total_eligible_voters,
                decision.created_at,
                decision.updated_at,
                None,
            ],
        )
        logger.info("Decision created: {} ({}, {})", decision.id, decision.kind, decision.status)
        return decision
