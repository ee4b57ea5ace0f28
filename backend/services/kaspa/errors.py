class KaspaWalletError(Exception):
    """Base class for wallet sync failures."""

    pass


class ParameterError(KaspaWalletError):
    """Raised when a sync job runs without the parameters it needs. Never retried."""

    pass


class TransientFetchError(KaspaWalletError):
    """Raised when the ledger API call fails; retried before being reported."""

    pass


class InvariantViolation(KaspaWalletError):
    """Raised when a merge would break a snapshot invariant.

    This is a logic defect, not an environment failure: it is never retried.
    """

    pass
