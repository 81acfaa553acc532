"""
Payment network client interface.

The engine talks to the payment network only through this interface. The
production implementation wraps the Wise (TransferWise) REST API; the mock
implementation simulates it in memory. Every operation takes the
connected account's bearer token.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class Profile:
    """A sending entity (personal or business) under a connected account."""

    id: int
    type: str  # "personal", "business"
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Profile":
        return cls(
            id=payload["id"],
            type=payload.get("type", ""),
            details=payload.get("details") or {},
        )


@dataclass
class Quote:
    """
    An exchange quote.

    Temporary quotes carry no profile and may carry no id; they exist only
    to read the live rate. Final quotes are bound to a profile and can be
    used to create a transfer.
    """

    rate: float
    source_currency: str
    target_currency: str
    target_amount: Optional[float] = None
    source_amount: Optional[float] = None
    id: Optional[int] = None
    profile_id: Optional[int] = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_temporary(self) -> bool:
        return self.profile_id is None

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Quote":
        return cls(
            id=payload.get("id"),
            rate=float(payload["rate"]),
            source_currency=payload.get("source") or payload.get("sourceCurrency", ""),
            target_currency=payload.get("target") or payload.get("targetCurrency", ""),
            target_amount=payload.get("targetAmount"),
            source_amount=payload.get("sourceAmount"),
            profile_id=payload.get("profile"),
            raw=payload,
        )


@dataclass
class Recipient:
    """Network-side bank account record, destination of a transfer."""

    id: int
    currency: Optional[str] = None
    account_holder_name: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Recipient":
        return cls(
            id=payload["id"],
            currency=payload.get("currency"),
            account_holder_name=payload.get("accountHolderName"),
            raw=payload,
        )


@dataclass
class Transfer:
    """A transfer linking a quote and a recipient, created in a pending state."""

    id: int
    status: str
    reference: Optional[str] = None
    customer_transaction_id: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Transfer":
        return cls(
            id=payload["id"],
            status=payload.get("status", ""),
            reference=payload.get("reference") or (payload.get("details") or {}).get("reference"),
            customer_transaction_id=payload.get("customerTransactionId"),
            raw=payload,
        )


@dataclass
class Fund:
    """Result of asking the network to settle a transfer."""

    status: str  # "OK", "REJECTED"
    error_code: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "Fund":
        return cls(
            status=payload.get("status", ""),
            error_code=payload.get("errorCode"),
            raw=payload,
        )


@dataclass
class CurrencyPairs:
    """Supported source currency → target currencies table."""

    pairs: dict[str, list[str]]

    def targets_for(self, source_currency: str) -> Optional[list[str]]:
        """Target currency codes for a source currency, or None if the source is unsupported."""
        return self.pairs.get(source_currency)

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "CurrencyPairs":
        return cls(pairs={
            source["currencyCode"]: [t["currencyCode"] for t in source.get("targetCurrencies", [])]
            for source in payload.get("sourceCurrencies", [])
        })


class PaymentNetworkClient(ABC):
    """Abstract client for the payment network's operations."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Client identifier (e.g. 'wise')."""
        ...

    @abstractmethod
    async def get_profiles(self, token: str) -> list[Profile]:
        ...

    @abstractmethod
    async def get_temporary_quote(
        self,
        token: str,
        source_currency: str,
        target_currency: str,
        target_amount: float,
    ) -> Quote:
        """Unbound rate preview. Creates nothing on the network side."""
        ...

    @abstractmethod
    async def create_quote(
        self,
        token: str,
        profile_id: Optional[int],
        source_currency: str,
        target_currency: str,
        target_amount: float,
    ) -> Quote:
        ...

    @abstractmethod
    async def create_recipient_account(
        self,
        token: str,
        profile_id: Optional[int],
        fields: dict[str, Any],
    ) -> Recipient:
        ...

    @abstractmethod
    async def create_transfer(
        self,
        token: str,
        account_id: int,
        quote_id: Optional[int],
        uuid: str,
        reference: str,
    ) -> Transfer:
        """
        Create a transfer.

        ``uuid`` is the idempotency token: the network returns the existing
        transfer instead of creating a second one when it sees it again.
        """
        ...

    @abstractmethod
    async def fund_transfer(self, token: str, profile_id: Optional[int], transfer_id: int) -> Fund:
        ...

    @abstractmethod
    async def get_account_requirements(self, token: str, quote_id: Optional[int]) -> list[dict[str, Any]]:
        """Schema of the fields a recipient bank account must supply for a quote's route."""
        ...

    @abstractmethod
    async def get_currency_pairs(self, token: str) -> CurrencyPairs:
        ...
