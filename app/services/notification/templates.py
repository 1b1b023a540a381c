"""Voting summary email rendering (HTML and plain text)."""

from html import escape

from app.models.common import utc_now
from app.models.members import EmailRecipient
from app.models.notification import EmailTemplate, VotingSummary
from app.models.voting import AdvancedStatistics, DecisionKind, VoteRecord
from app.services.voting.statistics import normalize_vote
from settings import APP_NAME, APP_URL

_VOTE_LABELS = {"approve": "Approve", "reject": "Reject", "abstain": "Abstain"}
_VOTE_VERBS = {"approve": "approved", "reject": "rejected", "abstain": "abstained"}
_VOTE_COLORS = {"approve": "#10B981", "reject": "#EF4444", "abstain": "#6B7280"}


def _truncate(text: str, limit: int) -> str:
    return text if len(text) <= limit else text[: limit - 3] + "..."


def _item_type(summary: VotingSummary) -> str:
    return "Resolution" if summary.decision.kind == DecisionKind.RESOLUTION else "Minutes"


def _plural(n: int, word: str) -> str:
    return f"{n} {word}{'' if n == 1 else 's'}"


def _consensus_line(stats: AdvancedStatistics) -> str:
    if stats.is_unanimous:
        return f"Unanimous {stats.unanimous_type} vote"
    return f"{stats.consensus_level.capitalize()} consensus ({stats.voting_margin.description})"


class SummaryRenderer:
    """Builds the subject and both bodies of the voting summary email.

    Bodies keep `{{recipient_name}}`, `{{participation_message}}` and
    `{{personal_note}}` placeholders for per-recipient substitution.
    """

    def __init__(self, app_name: str = APP_NAME, app_url: str = APP_URL):
        self._app_name = app_name
        self._app_url = app_url

    def subject(self, summary: VotingSummary) -> str:
        outcome = "PASSED" if summary.statistics.passed else "FAILED"
        title = _truncate(summary.decision.title, 50)
        return f"{self._app_name} - {_item_type(summary)} Voting Complete: {title} - {outcome}"

    def render(self, summary: VotingSummary, recipient_name: str = "{{recipient_name}}") -> EmailTemplate:
        return EmailTemplate(
            subject=self.subject(summary),
            html=self.html(summary, recipient_name),
            text=self.text(summary, recipient_name),
        )

    def personalize(self, summary: VotingSummary, recipient: EmailRecipient) -> dict[str, str]:
        """Custom fields telling the recipient how they took part."""
        own = self._find_vote(summary.votes, recipient)
        if own is not None:
            verb = _VOTE_VERBS[normalize_vote(own.vote)]
            note = "Your comments have been included in the summary above." if own.has_comment else ""
            return {
                "participation_message": f"Thank you for participating in this vote. You {verb} this item.",
                "personal_note": note,
            }
        if any(m.id == recipient.id or m.email == recipient.email for m in summary.non_voters):
            return {
                "participation_message": "You did not participate in this vote.",
                "personal_note": (
                    "Your participation in future votes is important for effective board governance. "
                    "Please ensure you vote on upcoming items."
                ),
            }
        return {
            "participation_message": "Thank you for your participation in board governance.",
            "personal_note": "",
        }

    @staticmethod
    def _find_vote(votes: list[VoteRecord], recipient: EmailRecipient) -> VoteRecord | None:
        for v in votes:
            if v.voter.id == recipient.id or (v.voter.email and v.voter.email == recipient.email):
                return v
        return None

    def _details_url(self, summary: VotingSummary) -> str:
        if not self._app_url:
            return ""
        section = "resolutions" if summary.decision.kind == DecisionKind.RESOLUTION else "minutes"
        return f"{self._app_url}/dashboard/{section}"

    def html(self, summary: VotingSummary, recipient_name: str) -> str:
        stats = summary.statistics
        item_type = _item_type(summary)
        title = escape(summary.decision.title)
        outcome_color = "#10B981" if stats.passed else "#EF4444"

        vote_rows = []
        for v in summary.votes:
            value = normalize_vote(v.vote)
            position = f"<br><small>{escape(v.voter.position)}</small>" if v.voter.position else ""
            comment = f"<em>{escape(_truncate(v.comment.strip(), 103))}</em>" if v.has_comment else "No comment"
            vote_rows.append(
                f"<tr><td><strong>{escape(v.voter.full_name)}</strong>{position}</td>"
                f'<td style="color: {_VOTE_COLORS[value]};">{_VOTE_LABELS[value]}</td>'
                f"<td>{comment}</td></tr>"
            )

        non_voters = ""
        if summary.non_voters:
            names = ", ".join(escape(m.full_name) for m in summary.non_voters)
            non_voters = (
                f"<h3>Members Who Did Not Vote ({len(summary.non_voters)})</h3><p>{names}</p>"
                "<p>Board participation is crucial for effective governance. "
                "Please encourage all members to participate in future votes.</p>"
            )

        c = stats.comment_analysis
        concerns = "<li>Significant concerns were raised in the comments</li>" if c.has_concerns else ""
        url = self._details_url(summary)
        link = f'<p><a href="{escape(url)}">View Full Details in System</a></p>' if url else ""

        return f"""<!DOCTYPE html>
<html lang="en">
<head><meta charset="UTF-8"><title>Voting Summary - {title}</title></head>
<body style="font-family: Arial, sans-serif; color: #374151; max-width: 800px; margin: 0 auto;">
<h1>{item_type} Voting Summary</h1>
<p>Hello {escape(recipient_name)},</p>
<p>Voting has concluded for the following {item_type.lower()}: <strong>{title}</strong></p>
<div style="background: {outcome_color}; color: white; padding: 16px; text-align: center;">
<h2>{'PASSED' if stats.passed else 'FAILED'}</h2>
<p>{escape(stats.passed_reason)}</p>
</div>
<p>{{{{participation_message}}}} {{{{personal_note}}}}</p>
<h3>Voting Results</h3>
<ul>
<li>Total Votes Cast: {stats.total_votes} of {stats.total_eligible_voters} eligible voters</li>
<li>Participation Rate: {stats.participation_rate:.1f}%</li>
<li>Approval Rate: {stats.approval_percentage:.1f}%</li>
<li>Engagement Score: {stats.engagement_score}/100</li>
<li>Approve: {stats.approve_votes} ({stats.approval_percentage:.1f}%)</li>
<li>Reject: {stats.reject_votes} ({stats.rejection_percentage:.1f}%)</li>
<li>Abstain: {stats.abstain_votes} ({stats.abstention_percentage:.1f}%)</li>
</ul>
<h3>Individual Votes</h3>
<table>
<thead><tr><th>Board Member</th><th>Vote</th><th>Comments</th></tr></thead>
<tbody>{''.join(vote_rows)}</tbody>
</table>
{non_voters}
<h3>Voting Insights</h3>
<ul>
<li>Quorum {'was met' if stats.quorum_status.met else 'was NOT met'} ({stats.quorum_status.percentage:.1f}% participation)</li>
<li>{escape(_consensus_line(stats))}</li>
<li>{_plural(c.total_comments, 'member')} provided comments ({c.participation_with_comments:.1f}% of voters)</li>
{concerns}
</ul>
{link}
<p><small>Voting concluded on {(summary.decision.completed_at or utc_now()):%A, %B %d, %Y %H:%M} UTC</small></p>
<hr>
<p><small>This is an automated notification from {escape(self._app_name)}.
You can manage your notification preferences in your account settings.</small></p>
</body>
</html>"""

    def text(self, summary: VotingSummary, recipient_name: str) -> str:
        stats = summary.statistics
        item_type = _item_type(summary)
        c = stats.comment_analysis

        lines = [
            f"{self._app_name.upper()} - {item_type.upper()} VOTING SUMMARY",
            "=" * 60,
            "",
            f"Hello {recipient_name},",
            "",
            f"Voting has concluded for the following {item_type.lower()}:",
            summary.decision.title,
            "",
            f"RESULT: {'PASSED' if stats.passed else 'FAILED'}",
            f"Reason: {stats.passed_reason}",
            "",
            "{{participation_message}} {{personal_note}}",
            "",
            "VOTING SUMMARY",
            "--------------",
            f"Total Votes Cast: {stats.total_votes} of {stats.total_eligible_voters} eligible voters",
            f"Participation Rate: {stats.participation_rate:.1f}%",
            f"Approval Rate: {stats.approval_percentage:.1f}%",
            f"Engagement Score: {stats.engagement_score}/100",
            "",
            "VOTE BREAKDOWN",
            "--------------",
            f"Approve: {stats.approve_votes} ({stats.approval_percentage:.1f}%)",
            f"Reject: {stats.reject_votes} ({stats.rejection_percentage:.1f}%)",
            f"Abstain: {stats.abstain_votes} ({stats.abstention_percentage:.1f}%)",
            "",
            "INDIVIDUAL VOTES",
            "----------------",
        ]
        for v in summary.votes:
            position = f" ({v.voter.position})" if v.voter.position else ""
            lines.append(f"- {v.voter.full_name}{position}: {_VOTE_LABELS[normalize_vote(v.vote)].upper()}")
            if v.has_comment:
                lines.append(f'   Comment: "{_truncate(v.comment.strip(), 203)}"')

        if summary.non_voters:
            lines += ["", f"MEMBERS WHO DID NOT VOTE ({len(summary.non_voters)})", "-" * 30]
            lines += [f"- {m.full_name}" for m in summary.non_voters]
            lines.append(
                "Board participation is crucial for effective governance. "
                "Please encourage all members to participate in future votes."
            )

        lines += [
            "",
            "VOTING INSIGHTS",
            "---------------",
            f"- Quorum: {'MET' if stats.quorum_status.met else 'NOT MET'} "
            f"({stats.quorum_status.percentage:.1f}% participation)",
            f"- Consensus: {_consensus_line(stats)}",
            f"- Comments: {_plural(c.total_comments, 'member')} provided comments "
            f"({c.participation_with_comments:.1f}% of voters)",
        ]
        if c.has_concerns:
            lines.append("- WARNING: Significant concerns were raised in the comments")

        url = self._details_url(summary)
        if url:
            lines += ["", "VIEW FULL DETAILS", "-----------------", url]

        concluded = summary.decision.completed_at or utc_now()
        lines += [
            "",
            f"Voting concluded on {concluded:%A, %B %d, %Y %H:%M} UTC",
            "-" * 60,
            f"This is an automated notification from {self._app_name}.",
            "You can manage your notification preferences in your account settings.",
        ]
        return "\n".join(lines)
