"""
Domain exceptions for SplitPal.

Services raise these; ``splitpal.main`` turns them into HTTP responses.
"""


class SplitPalError(Exception):
    """Base exception for ledger and balance errors."""
    pass


class ValidationError(SplitPalError):
    """Raised when expense or settlement input is malformed."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class NotFoundError(SplitPalError):
    """Raised when a group, member or settlement does not exist."""
    pass


class LedgerDataError(SplitPalError):
    """Raised when stored ledger records cannot be balanced."""
    pass


class InvalidReferenceError(LedgerDataError):
    """Raised when a ledger record points at a member outside the snapshot."""

    def __init__(self, kind: str, ref_id, member_id):
        self.kind = kind
        self.ref_id = ref_id
        self.member_id = member_id
        super().__init__(
            f"{kind} {ref_id} references unknown member {member_id}"
        )


class SelfSettlementError(LedgerDataError):
    """Raised when a stored settlement has the same payer and receiver."""

    def __init__(self, settlement_id):
        self.settlement_id = settlement_id
        super().__init__(f"settlement {settlement_id} pays its own payer")


class LedgerIntegrityError(SplitPalError):
    """Raised when a multi-row ledger write fails and is rolled back."""
    pass


class DataSourceUnavailable(SplitPalError):
    """Raised when the ledger store cannot be reached."""
    pass


class InvalidStatusTransition(SplitPalError):
    """Raised when a payment status change is not allowed."""
    pass
