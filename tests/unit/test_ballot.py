"""Tests for vote casting."""

import asyncio
from datetime import timedelta

import pytest
from conftest import NOW, Clock, RecordingNotifier, seed_members

from app.errors import DecisionNotFoundError, InvalidVoteError, VotingClosedError
from app.models.voting import CompletionReason, DecisionStatus
from app.services.voting import BallotService, CompletionDetector


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def ballots(decisions, notifier, clock):
    detector = CompletionDetector(decisions, notifier=notifier, clock=clock)
    return BallotService(decisions, detector, clock=clock)


@pytest.fixture
def open_decision(decisions, members):
    seed_members(members, 3)
    return decisions.create_decision(
        "r1", "Budget", voting_deadline=NOW + timedelta(days=1), minimum_quorum=50, approval_threshold=60
    )


class TestCastVote:
    def test_synonym_stored_normalized(self, ballots, decisions, open_decision):
        status = asyncio.run(ballots.cast_vote("r1", "m0", " For ", "  fine  "))

        votes = decisions.get_votes("r1")
        assert votes[0].vote == "approve"
        assert votes[0].comment == "fine"
        assert votes[0].voted_at == NOW
        assert not status.is_complete
        assert status.total_votes == 1

    def test_blank_comment_dropped(self, ballots, decisions, open_decision):
        asyncio.run(ballots.cast_vote("r1", "m0", "against", "   "))
        assert decisions.get_votes("r1")[0].comment is None

    def test_revote_replaces(self, ballots, decisions, open_decision):
        asyncio.run(ballots.cast_vote("r1", "m0", "approve"))
        asyncio.run(ballots.cast_vote("r1", "m0", "abstain"))

        votes = decisions.get_votes("r1")
        assert [v.vote for v in votes] == ["abstain"]

    def test_invalid_value(self, ballots, decisions, open_decision):
        with pytest.raises(InvalidVoteError):
            asyncio.run(ballots.cast_vote("r1", "m0", "maybe"))
        assert decisions.get_votes("r1") == []

    def test_unknown_decision(self, ballots):
        with pytest.raises(DecisionNotFoundError):
            asyncio.run(ballots.cast_vote("nope", "m0", "approve"))

    def test_closed_decision(self, ballots, decisions, open_decision):
        decisions.update_decision_status("r1", DecisionStatus.VOTING, DecisionStatus.APPROVED, NOW)
        with pytest.raises(VotingClosedError):
            asyncio.run(ballots.cast_vote("r1", "m0", "approve"))

    def test_deadline_passed(self, ballots, clock, open_decision):
        clock.advance(days=2)
        with pytest.raises(VotingClosedError):
            asyncio.run(ballots.cast_vote("r1", "m0", "approve"))

    def test_last_vote_closes_decision(self, ballots, decisions, notifier, open_decision):
        asyncio.run(ballots.cast_vote("r1", "m0", "approve"))
        asyncio.run(ballots.cast_vote("r1", "m1", "approve"))
        status = asyncio.run(ballots.cast_vote("r1", "m2", "reject"))

        assert status.is_complete
        assert status.reason == CompletionReason.ALL_VOTED
        assert status.transitioned
        assert decisions.get_decision("r1").status == DecisionStatus.APPROVED
        assert len(notifier.calls) == 1
