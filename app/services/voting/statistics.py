"""Statistics engine - tallies, quorum, margin and pass/fail for a set of votes."""

from collections.abc import Iterable
from datetime import datetime, timedelta

from loguru import logger

from app.errors import InvalidVoteError
from app.models.voting import (
    AdvancedStatistics,
    CommentAnalysis,
    ConsensusLevel,
    MarginType,
    QuorumStatus,
    VoteRecord,
    Voter,
    VoteValue,
    VotingConfiguration,
    VotingMargin,
    VotingPattern,
    VotingTimeline,
)
from app.services.voting import formulas

# Every accepted spelling of a vote. Legacy rows use for/against.
VOTE_MAP: dict[str, VoteValue] = {
    "approve": VoteValue.APPROVE,
    "for": VoteValue.APPROVE,
    "reject": VoteValue.REJECT,
    "against": VoteValue.REJECT,
    "abstain": VoteValue.ABSTAIN,
}


def normalize_vote(value: str) -> VoteValue:
    """Map a stored or submitted vote to its canonical value."""
    try:
        return VOTE_MAP[str(value).strip().lower()]
    except KeyError:
        raise InvalidVoteError(value) from None


class StatisticsEngine:
    """Pure computation over vote lists. Holds no state."""

    def tally(self, votes: Iterable[VoteRecord]) -> dict[VoteValue, int]:
        counts = {VoteValue.APPROVE: 0, VoteValue.REJECT: 0, VoteValue.ABSTAIN: 0}
        for v in votes:
            counts[normalize_vote(v.vote)] += 1
        return counts

    def check_quorum(self, counted: int, eligible: int, minimum_quorum: float) -> QuorumStatus:
        pct = formulas.percentage(counted, eligible)
        met = pct >= minimum_quorum
        required = formulas.required_votes(minimum_quorum, eligible)
        return QuorumStatus(
            met=met,
            required=required,
            actual=counted,
            percentage=pct,
            shortfall=None if met else max(required - counted, 0),
        )

    def voting_margin(self, approve: int, reject: int) -> VotingMargin:
        absolute, pct, kind = formulas.margin(approve, reject)
        return VotingMargin(
            absolute_margin=absolute,
            percentage_margin=pct,
            margin_type=MarginType(kind),
            description=formulas.margin_description(absolute, pct, kind),
        )

    def analyze_comments(self, votes: list[VoteRecord]) -> CommentAnalysis:
        commented = [v for v in votes if v.has_comment]
        by_type = {str(value): 0 for value in VoteValue}
        for v in commented:
            by_type[str(normalize_vote(v.vote))] += 1

        texts = [v.comment for v in commented]
        concerns = formulas.find_concerns(texts)
        total_length = sum(len(t) for t in texts)

        return CommentAnalysis(
            total_comments=len(commented),
            comments_by_vote_type=by_type,
            average_comment_length=round(total_length / len(commented)) if commented else 0,
            has_concerns=bool(concerns) or by_type[VoteValue.REJECT] > 0,
            concern_keywords=concerns,
            participation_with_comments=formulas.percentage(len(commented), len(votes)),
        )

    def compute_outcome(self, votes: list[VoteRecord], config: VotingConfiguration) -> AdvancedStatistics:
        """Full statistics and the pass/fail decision. Raises InvalidVoteError on unknown values."""
        counts = self.tally(votes)
        approve = counts[VoteValue.APPROVE]
        reject = counts[VoteValue.REJECT]
        abstain = counts[VoteValue.ABSTAIN]
        total = approve + reject + abstain
        eligible = config.total_eligible_voters

        participation = formulas.percentage(total, eligible)
        approval_pct = formulas.percentage(approve, total)

        is_unanimous = total > 0 and (approve == total or reject == total)
        unanimous_type = None
        if is_unanimous:
            unanimous_type = str(VoteValue.APPROVE if approve == total else VoteValue.REJECT)

        counted = total if config.abstentions_count_toward_quorum else approve + reject
        quorum = self.check_quorum(counted, eligible, config.minimum_quorum)
        margin = self.voting_margin(approve, reject)
        comments = self.analyze_comments(votes)

        approval_met = approval_pct >= config.approval_threshold
        passed = quorum.met and approval_met

        if not quorum.met:
            reason = (
                f"Quorum not met ({formulas.fmt_pct(quorum.percentage)}% participation, "
                f"{formulas.fmt_pct(config.minimum_quorum)}% required)"
            )
        elif not approval_met:
            reason = (
                f"Insufficient approval ({formulas.fmt_pct(approval_pct)}% approval, "
                f"{formulas.fmt_pct(config.approval_threshold)}% required)"
            )
        elif unanimous_type == VoteValue.APPROVE:
            reason = "Unanimous approval"
        else:
            reason = f"Majority approval ({formulas.fmt_pct(approval_pct)}% of votes)"

        stats = AdvancedStatistics(
            total_votes=total,
            total_eligible_voters=eligible,
            approve_votes=approve,
            reject_votes=reject,
            abstain_votes=abstain,
            participation_rate=participation,
            approval_percentage=approval_pct,
            rejection_percentage=formulas.percentage(reject, total),
            abstention_percentage=formulas.percentage(abstain, total),
            is_unanimous=is_unanimous,
            unanimous_type=unanimous_type,
            quorum_status=quorum,
            voting_margin=margin,
            comment_analysis=comments,
            passed=passed,
            passed_reason=reason,
            engagement_score=formulas.engagement_score(participation, comments.participation_with_comments),
            consensus_level=ConsensusLevel(formulas.consensus(is_unanimous, margin.percentage_margin)),
        )
        logger.debug("Outcome: {}/{} votes, passed={} ({})", total, eligible, passed, reason)
        return stats

    def identify_non_voters(self, members: Iterable[Voter], votes: Iterable[VoteRecord]) -> list[Voter]:
        voted = {v.voter.id for v in votes}
        return [m for m in members if m.id not in voted]

    def analyze_timeline(
        self,
        votes: list[VoteRecord],
        start: datetime | None,
        end: datetime | None,
    ) -> VotingTimeline:
        """Classify when votes arrived; the last 10% of the period counts as last-minute."""
        if start is None or end is None:
            return VotingTimeline(voting_pattern=VotingPattern.UNKNOWN)

        duration = end - start
        hours = duration.total_seconds() / 3600
        cutoff = end - timedelta(seconds=duration.total_seconds() * 0.1)
        late = sum(1 for v in votes if v.voted_at is not None and v.voted_at >= cutoff)

        late_pct = late / len(votes) * 100 if votes else 0
        if late_pct >= 50:
            pattern = VotingPattern.LAST_MINUTE
        elif late_pct <= 20:
            pattern = VotingPattern.EARLY
        else:
            pattern = VotingPattern.STEADY

        return VotingTimeline(
            voting_pattern=pattern,
            voting_duration_hours=round(hours, 2),
            last_minute_votes=late,
        )

    def summary_report(self, stats: AdvancedStatistics) -> str:
        """Plain-text report for logs and the text email body."""
        q = stats.quorum_status
        lines = [
            "Voting Summary Report",
            "=====================",
            "",
            f"Participation: {stats.total_votes}/{stats.total_eligible_voters} eligible voters "
            f"({formulas.fmt_pct(stats.participation_rate)}%)",
            f"Quorum: {'MET' if q.met else 'NOT MET'} ({formulas.fmt_pct(q.percentage)}% participation)",
            "",
            f"Result: {'PASSED' if stats.passed else 'FAILED'}",
            f"Reason: {stats.passed_reason}",
            "",
            "Vote Breakdown:",
            f"  Approve: {stats.approve_votes} ({formulas.fmt_pct(stats.approval_percentage)}%)",
            f"  Reject: {stats.reject_votes} ({formulas.fmt_pct(stats.rejection_percentage)}%)",
            f"  Abstain: {stats.abstain_votes} ({formulas.fmt_pct(stats.abstention_percentage)}%)",
            "",
        ]
        if stats.is_unanimous:
            lines.append(f"Unanimous {stats.unanimous_type} vote")
        else:
            lines.append(f"Margin: {stats.voting_margin.description}")
        lines.append(f"Consensus Level: {stats.consensus_level.upper()}")
        lines.append(f"Engagement Score: {stats.engagement_score}/100")
        lines.append("")

        c = stats.comment_analysis
        if c.total_comments:
            lines.append(
                f"Comments: {c.total_comments} voters provided comments "
                f"({formulas.fmt_pct(c.participation_with_comments)}%)"
            )
            if c.has_concerns:
                lines.append("Significant concerns raised in comments")
        else:
            lines.append("No comments provided by voters")
        return "\n".join(lines)
