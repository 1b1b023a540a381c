"""Domain errors."""


class VotingError(Exception):
    """Base error for the voting core."""

    def __init__(self, message: str = "Voting error"):
        self.message = message
        super().__init__(self.message)


class ConfigurationError(VotingError):
    """Invalid settings or options."""

    def __init__(self, message: str = "Invalid configuration"):
        super().__init__(message)


class InvalidVoteError(VotingError):
    """Vote value outside the known vocabulary."""

    def __init__(self, value: str):
        self.value = value
        super().__init__(f"Unknown vote value: {value!r}")


class DecisionNotFoundError(VotingError):
    """Decision does not exist."""

    def __init__(self, decision_id: str):
        self.decision_id = decision_id
        super().__init__(f"Decision not found: {decision_id}")


class VotingClosedError(VotingError):
    """Vote submitted for a decision that is not accepting votes."""

    def __init__(self, decision_id: str, reason: str):
        self.decision_id = decision_id
        super().__init__(f"Voting closed for {decision_id}: {reason}")


class StoreError(VotingError):
    """Persistent store read/write failure."""

    def __init__(self, message: str = "Store error"):
        super().__init__(message)


class SummaryRefusedError(VotingError):
    """Manual summary send refused without force (wrong status or sent recently)."""

    def __init__(self, decision_id: str, reason: str):
        self.decision_id = decision_id
        super().__init__(f"Summary not sent for {decision_id}: {reason}")
