"""Tests for the voting summary email renderer."""

import pytest
from conftest import NOW, make_recipient, make_vote

from app.models.notification import VotingSummary
from app.models.voting import Decision, DecisionKind, DecisionStatus, Voter, VotingConfiguration
from app.services.notification import SummaryRenderer
from app.services.voting import StatisticsEngine


def build_summary(title="Budget 2025", kind=DecisionKind.RESOLUTION, votes=None, non_voters=None):
    votes = votes if votes is not None else [
        make_vote("approve", "m0", comment="Looks good"),
        make_vote("reject", "m1"),
        make_vote("approve", "m2"),
    ]
    decision = Decision(
        id="r1",
        kind=kind,
        title=title,
        status=DecisionStatus.APPROVED,
        minimum_quorum=50,
        approval_threshold=60,
        completed_at=NOW,
    )
    config = VotingConfiguration(total_eligible_voters=4, minimum_quorum=50, approval_threshold=60)
    stats = StatisticsEngine().compute_outcome(votes, config)
    return VotingSummary(
        decision=decision,
        votes=votes,
        statistics=stats,
        non_voters=non_voters if non_voters is not None else [Voter(id="m3", full_name="Member m3", email="m3@board.org")],
    )


@pytest.fixture
def renderer():
    return SummaryRenderer(app_name="Board", app_url="https://board.org")


class TestSubject:
    def test_passed(self, renderer):
        assert renderer.subject(build_summary()) == "Board - Resolution Voting Complete: Budget 2025 - PASSED"

    def test_minutes_failed(self, renderer):
        summary = build_summary(kind=DecisionKind.MINUTES, votes=[make_vote("reject", "m0"), make_vote("reject", "m1")])
        assert renderer.subject(summary).endswith("Minutes Voting Complete: Budget 2025 - FAILED")

    def test_long_title_truncated(self, renderer):
        subject = renderer.subject(build_summary(title="x" * 80))
        assert ("x" * 47 + "...") in subject
        assert "x" * 48 not in subject


class TestBodies:
    def test_placeholders_kept(self, renderer):
        template = renderer.render(build_summary())

        for body in (template.html, template.text):
            assert "{{recipient_name}}" in body
            assert "{{participation_message}}" in body
            assert "{{personal_note}}" in body

    def test_html_escapes_member_content(self, renderer):
        votes = [make_vote("approve", "m0", comment="<script>alert(1)</script>")]
        html = renderer.html(build_summary(title="A & B", votes=votes), "Ann")

        assert "<script>" not in html
        assert "&lt;script&gt;" in html
        assert "A &amp; B" in html

    def test_text_content(self, renderer):
        text = renderer.text(build_summary(), "Ann")

        assert "Hello Ann," in text
        assert "RESULT: PASSED" in text
        assert "Total Votes Cast: 3 of 4 eligible voters" in text
        assert "- Member m1: REJECT" in text
        assert 'Comment: "Looks good"' in text
        assert "MEMBERS WHO DID NOT VOTE (1)" in text
        assert "https://board.org/dashboard/resolutions" in text
        assert "Friday, March 14, 2025 12:00" in text

    def test_no_link_without_app_url(self):
        text = SummaryRenderer(app_name="Board", app_url="").text(build_summary(), "Ann")
        assert "VIEW FULL DETAILS" not in text

    def test_long_comment_truncated_in_text(self, renderer):
        votes = [make_vote("approve", "m0", comment="y" * 300)]
        text = renderer.text(build_summary(votes=votes), "Ann")
        assert "y" * 200 + "..." in text
        assert "y" * 201 not in text


class TestPersonalize:
    def test_voter_with_comment(self, renderer):
        fields = renderer.personalize(build_summary(), make_recipient(0))

        assert fields["participation_message"].endswith("You approved this item.")
        assert fields["personal_note"] == "Your comments have been included in the summary above."

    def test_voter_without_comment(self, renderer):
        fields = renderer.personalize(build_summary(), make_recipient(1))

        assert fields["participation_message"].endswith("You rejected this item.")
        assert fields["personal_note"] == ""

    def test_non_voter(self, renderer):
        fields = renderer.personalize(build_summary(), make_recipient(3))

        assert fields["participation_message"] == "You did not participate in this vote."
        assert "future votes" in fields["personal_note"]

    def test_other_recipient(self, renderer):
        fields = renderer.personalize(build_summary(), make_recipient("admin"))

        assert fields["participation_message"] == "Thank you for your participation in board governance."
