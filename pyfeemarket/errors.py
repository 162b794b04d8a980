"""Exception hierarchy for fee-market transfers.

Every error raised by the pipeline derives from :class:`FeeMarketError`, so
callers can catch the whole family at once while still telling the kinds
apart. None of them is retried internally.
"""

from typing import Optional


class FeeMarketError(Exception):
    """Base class for all pyfeemarket errors."""


class ConfigurationError(FeeMarketError):
    """Missing or malformed input, or fee overrides that contradict each other."""


class KeyDerivationError(ConfigurationError):
    """The supplied private key cannot produce a sender address."""


class NetworkError(FeeMarketError):
    """The RPC endpoint was unreachable or returned something unusable."""


class ValidationError(FeeMarketError, ValueError):
    """A field failed structural validation before assembly."""


class SubmissionRejected(FeeMarketError):
    """The node refused the raw transaction.

    ``reason`` holds the node's message verbatim (e.g. ``"nonce too low"``).
    """

    def __init__(self, reason: str):
        super().__init__(f"transaction rejected by node: {reason}")
        self.reason = reason


class ConfirmationTimeout(FeeMarketError):
    """The transaction was broadcast but no receipt arrived in time.

    This is not a correctness failure: the transaction may still be mined.
    """

    def __init__(self, transaction_hash: bytes, polls: int, waited: Optional[float] = None):
        message = f"no receipt for 0x{transaction_hash.hex()} after {polls} polls"
        if waited is not None:
            message += f" ({waited:.1f}s)"
        super().__init__(message)
        self.transaction_hash = transaction_hash
        self.polls = polls
        self.waited = waited
