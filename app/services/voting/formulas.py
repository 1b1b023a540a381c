"""Pure vote-counting formulas - no dependencies, easily testable."""

from math import ceil, floor

CONCERN_KEYWORDS = ("concern", "worried", "issue", "problem", "disagree", "oppose", "against", "risk")


def percentage(part: int, whole: int) -> float:
    """part/whole as a percentage rounded to 2 decimals, 0 for an empty whole."""
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 2)


def fmt_pct(value: float) -> str:
    """50.0 -> '50', 83.33 -> '83.33'."""
    return f"{value:g}"


def required_votes(minimum_quorum: float, eligible: int) -> int:
    return ceil(minimum_quorum / 100 * eligible)


def margin(approve: int, reject: int) -> tuple[int, float, str]:
    """(absolute margin, % of decisive votes, victory|defeat|tie)."""
    absolute = abs(approve - reject)
    pct = percentage(absolute, approve + reject)
    if approve > reject:
        return absolute, pct, "victory"
    if reject > approve:
        return absolute, pct, "defeat"
    return absolute, pct, "tie"


def margin_description(absolute: int, pct: float, kind: str) -> str:
    if kind == "tie":
        return "Tied vote - no margin"
    plural = "" if absolute == 1 else "s"
    verb = "Passed" if kind == "victory" else "Failed"
    return f"{verb} by {absolute} vote{plural} ({fmt_pct(pct)}% margin)"


def engagement_score(participation_rate: float, comment_rate: float) -> int:
    """70% participation, 30% commenting (comment rate counts double), clamped to 0-100."""
    score = floor(0.7 * min(participation_rate, 100) + 0.3 * min(comment_rate * 2, 100) + 0.5)
    return max(0, min(100, score))


def consensus(is_unanimous: bool, margin_pct: float) -> str:
    if is_unanimous or margin_pct >= 60:
        return "high"
    if margin_pct >= 30:
        return "moderate"
    if margin_pct >= 10:
        return "low"
    return "polarized"


def find_concerns(texts: list[str]) -> list[str]:
    """Concern keywords present in any of the texts (case-insensitive substring)."""
    joined = " ".join(t.lower() for t in texts)
    return [k for k in CONCERN_KEYWORDS if k in joined]
