"""Shared fixtures: in-memory DuckDB, fake transport, vote/recipient builders."""

import asyncio
import time
from datetime import datetime, timedelta

import duckdb
import pytest

from app.models.members import EmailRecipient, MemberRole
from app.models.notification import BulkDeliveryReport
from app.models.voting import VoteRecord, Voter
from app.repositories import DecisionRepository, DeliveryLogRepository, MemberRepository, init_tables

NOW = datetime(2025, 3, 14, 12, 0, 0)


@pytest.fixture
def conn():
    c = duckdb.connect(":memory:")
    init_tables(c)
    yield c
    c.close()


@pytest.fixture
def decisions(conn):
    return DecisionRepository(conn)


@pytest.fixture
def members(conn):
    return MemberRepository(conn)


@pytest.fixture
def delivery_log(conn):
    return DeliveryLogRepository(conn)


def make_vote(value: str, voter_id: str, comment: str | None = None, voted_at: datetime | None = None) -> VoteRecord:
    return VoteRecord(
        vote=value,
        voter=Voter(id=voter_id, full_name=f"Member {voter_id}", email=f"{voter_id}@board.org"),
        comment=comment,
        voted_at=voted_at,
    )


def make_recipient(n: int | str, **kwargs) -> EmailRecipient:
    defaults = {
        "id": f"m{n}",
        "name": f"Member {n}",
        "email": f"m{n}@board.org",
        "role": MemberRole.BOARD_MEMBER,
    }
    defaults.update(kwargs)
    return EmailRecipient(**defaults)


def seed_members(repo: MemberRepository, count: int) -> list[EmailRecipient]:
    recipients = [make_recipient(i) for i in range(count)]
    for r in recipients:
        repo.upsert_member(r)
    return recipients


class FakeTransport:
    """Scripted transport. `script[email]` is consumed one outcome per call:
    True/False is returned, an exception instance is raised. Unscripted sends succeed."""

    def __init__(self, script=None, always_fail=(), delay: float = 0.01):
        self.script = {k: list(v) for k, v in (script or {}).items()}
        self.always_fail = set(always_fail)
        self.delay = delay
        self.calls: list[tuple[str, str, str, str]] = []
        self.started: list[tuple[str, float]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.on_send = None

    def calls_to(self, email: str) -> int:
        return sum(1 for c in self.calls if c[0] == email)

    def start_times(self, email: str) -> list[float]:
        return [t for to, t in self.started if to == email]

    async def send(self, to: str, subject: str, html: str, text: str) -> bool:
        self.calls.append((to, subject, html, text))
        self.started.append((to, time.monotonic()))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.on_send is not None:
                self.on_send(to)
            await asyncio.sleep(self.delay)
            if to in self.always_fail:
                raise ConnectionError(f"mailbox unavailable: {to}")
            outcomes = self.script.get(to)
            if outcomes:
                outcome = outcomes.pop(0)
                if isinstance(outcome, BaseException):
                    raise outcome
                return outcome
            return True
        finally:
            self.in_flight -= 1


class RecordingNotifier:
    def __init__(self, error: Exception | None = None):
        self.calls = []
        self.error = error

    async def notify(self, decision, votes, statistics):
        self.calls.append((decision, votes, statistics))
        if self.error is not None:
            raise self.error
        return BulkDeliveryReport(total_recipients=len(votes), successful=len(votes))


class Clock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)
