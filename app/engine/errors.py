"""
Error kinds raised by the transfer engine.

None of these are caught or retried inside the engine. They propagate to
the caller, which decides how to present them. Errors coming from the
payment network are raised by the client as UpstreamError and pass
through untouched.
"""

from typing import Optional


class PayoutEngineError(Exception):
    """Base class for engine-level errors."""


class ConfigurationError(PayoutEngineError):
    """The host has no active connected account for the payment service."""

    def __init__(self, message: str = "Host is not connected to Transferwise", host_id: Optional[int] = None):
        super().__init__(message)
        self.host_id = host_id


class UnsupportedCurrencyError(PayoutEngineError):
    """The host's currency has no entry in the network's currency-pair table."""

    def __init__(self, currency: str, host_id: Optional[int] = None):
        super().__init__(f"Transferwise does not support {currency} as a source currency")
        self.currency = currency
        self.host_id = host_id


class FundingRejectedError(PayoutEngineError):
    """The network refused to fund a created transfer."""

    def __init__(self, error_code: Optional[str], transfer_id: Optional[int] = None):
        super().__init__(f"Transferwise could not fund transfer: {error_code}")
        self.error_code = error_code
        self.transfer_id = transfer_id


class InvalidTransitionError(PayoutEngineError):
    """A payout step was attempted out of order."""


class UpstreamError(Exception):
    """Failure surfaced by the payment network client (transport or non-2xx response)."""

    def __init__(
        self,
        message: str,
        status_code: int = 500,
        retriable: bool = False,
        code: Optional[str] = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.retriable = retriable
        self.code = code


class RateLimitError(UpstreamError):
    """429 Too Many Requests from the payment network."""

    def __init__(self, message: str = "Rate limited", retry_after: float | None = None):
        super().__init__(message, status_code=429, retriable=True)
        self.retry_after = retry_after
