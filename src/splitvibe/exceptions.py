"""Custom exceptions for SplitVibe."""


class SplitVibeError(Exception):
    """Base exception for all SplitVibe errors."""

    pass


class ConfigurationError(SplitVibeError):
    """Raised when configuration is invalid or missing."""

    pass


class ValidationError(SplitVibeError):
    """Base class for input that is rejected before any computation."""

    pass


class InvalidAmountError(ValidationError):
    """Raised when a monetary amount is not positive once rounded to cents."""

    def __init__(self, amount, message: str | None = None):
        self.amount = amount
        super().__init__(message or f"Amount must be positive, got {amount}")


class InvalidPolicyParametersError(ValidationError):
    """Raised when split policy parameters are malformed."""

    pass


class ParticipantMismatchError(InvalidPolicyParametersError):
    """Raised when parameter maps and the participant set disagree."""

    def __init__(self, message: str, user_ids: list[str] | None = None):
        self.user_ids = sorted(user_ids or [])
        super().__init__(message)


class InvalidSettlementError(ValidationError):
    """Raised when a settlement cannot be recorded."""

    pass


class SettlementNotFoundError(SplitVibeError):
    """Raised when a settlement does not exist or was already deleted."""

    pass


class DeletionWindowExpiredError(SplitVibeError):
    """Raised when deleting a settlement after its deletion window has passed."""

    def __init__(self, settlement_id: str | None, window_hours: int):
        self.settlement_id = settlement_id
        self.window_hours = window_hours
        super().__init__(f"Deletion window has passed ({window_hours} hours)")


class LedgerFileError(SplitVibeError):
    """Raised when a ledger snapshot file cannot be read or parsed."""

    pass


class RoundingError(SplitVibeError):
    """Raised when split amounts don't add back up to the expense total."""

    pass
