"""
Mock payment network for tests and demos.

Simulates the Wise API contract in memory:
  - Configurable profiles, exchange rates and currency-pair table
  - Configurable funding outcome (OK or REJECTED with an error code)
  - Injectable failures for any operation
  - Transfers de-duplicated on their idempotency token, like the real network
  - Every call recorded for assertions
"""

import asyncio
import copy
import itertools
from dataclasses import dataclass, field
from typing import Any, Optional

from app.config import settings
from app.engine.errors import UpstreamError
from app.providers.base import (
    CurrencyPairs,
    Fund,
    PaymentNetworkClient,
    Profile,
    Quote,
    Recipient,
    Transfer,
)

DEFAULT_PROFILES = [
    {"id": 1001, "type": "personal", "details": {"firstName": "Ada", "lastName": "Lovelace"}},
    {"id": 1002, "type": "business", "details": {"name": "Open Collective Test Host"}},
]

DEFAULT_CURRENCY_PAIRS = {
    "USD": ["EUR", "GBP", "BRL", "INR", "JPY", "UYU", "PKR", "MXN"],
    "EUR": ["USD", "GBP", "BDT", "CHF"],
    "GBP": ["EUR", "USD"],
}

DEFAULT_REQUIREMENTS = [
    {
        "type": "iban",
        "title": "IBAN",
        "fields": [
            {"name": "IBAN", "group": [{"key": "IBAN", "type": "text", "required": True}]},
        ],
    },
]


@dataclass
class MockCall:
    operation: str
    token: str
    params: dict[str, Any] = field(default_factory=dict)


class MockPaymentNetwork(PaymentNetworkClient):
    """In-memory stand-in for the Wise API."""

    def __init__(
        self,
        profiles: Optional[list[dict[str, Any]]] = None,
        rate: float = 0.9,
        rates: Optional[dict[tuple[str, str], float]] = None,
        currency_pairs: Optional[dict[str, list[str]]] = None,
        requirements: Optional[list[dict[str, Any]]] = None,
        fund_status: str = "OK",
        fund_error_code: Optional[str] = None,
        failures: Optional[dict[str, UpstreamError]] = None,
        latency_ms: Optional[int] = None,
    ):
        self.profiles = copy.deepcopy(DEFAULT_PROFILES if profiles is None else profiles)
        self.rate = rate
        self.rates = rates or {}
        self.currency_pairs = copy.deepcopy(DEFAULT_CURRENCY_PAIRS if currency_pairs is None else currency_pairs)
        self.requirements = copy.deepcopy(DEFAULT_REQUIREMENTS if requirements is None else requirements)
        self.fund_status = fund_status
        self.fund_error_code = fund_error_code
        self.failures = failures or {}
        self._latency_ms = latency_ms if latency_ms is not None else settings.mock_latency_ms

        self.calls: list[MockCall] = []
        self.transfers: dict[str, Transfer] = {}
        self._ids = itertools.count(50_000)

    @property
    def name(self) -> str:
        return "mock_network"

    def call_count(self, operation: str) -> int:
        return sum(1 for c in self.calls if c.operation == operation)

    def calls_to(self, operation: str) -> list[MockCall]:
        return [c for c in self.calls if c.operation == operation]

    @property
    def operations(self) -> list[str]:
        return [c.operation for c in self.calls]

    async def _enter(self, operation: str, token: str, **params: Any) -> None:
        self.calls.append(MockCall(operation=operation, token=token, params=params))
        if self._latency_ms > 0:
            await asyncio.sleep(self._latency_ms / 1000)
        if operation in self.failures:
            raise self.failures[operation]

    def _rate_for(self, source: str, target: str) -> float:
        if source == target:
            return 1.0
        return self.rates.get((source, target), self.rate)

    @staticmethod
    def _require_profile(profile_id: Optional[int]) -> None:
        if profile_id is None:
            raise UpstreamError("Mock network: profile is required", status_code=400, code="profile.required")

    async def get_profiles(self, token: str) -> list[Profile]:
        await self._enter("get_profiles", token)
        return [Profile.from_payload(copy.deepcopy(p)) for p in self.profiles]

    async def get_temporary_quote(self, token, source_currency, target_currency, target_amount) -> Quote:
        await self._enter(
            "get_temporary_quote",
            token,
            source_currency=source_currency,
            target_currency=target_currency,
            target_amount=target_amount,
        )
        rate = self._rate_for(source_currency, target_currency)
        return Quote(
            rate=rate,
            source_currency=source_currency,
            target_currency=target_currency,
            target_amount=target_amount,
            source_amount=round(target_amount / rate, 2),
        )

    async def create_quote(self, token, profile_id, source_currency, target_currency, target_amount) -> Quote:
        await self._enter(
            "create_quote",
            token,
            profile_id=profile_id,
            source_currency=source_currency,
            target_currency=target_currency,
            target_amount=target_amount,
        )
        self._require_profile(profile_id)
        rate = self._rate_for(source_currency, target_currency)
        return Quote(
            id=next(self._ids),
            rate=rate,
            source_currency=source_currency,
            target_currency=target_currency,
            target_amount=target_amount,
            source_amount=round(target_amount / rate, 2),
            profile_id=profile_id,
        )

    async def create_recipient_account(self, token, profile_id, fields) -> Recipient:
        await self._enter("create_recipient_account", token, profile_id=profile_id, fields=fields)
        self._require_profile(profile_id)
        return Recipient(
            id=next(self._ids),
            currency=fields.get("currency"),
            account_holder_name=fields.get("accountHolderName"),
        )

    async def create_transfer(self, token, account_id, quote_id, uuid, reference) -> Transfer:
        await self._enter(
            "create_transfer",
            token,
            account_id=account_id,
            quote_id=quote_id,
            uuid=uuid,
            reference=reference,
        )
        if uuid in self.transfers:
            return self.transfers[uuid]
        transfer = Transfer(
            id=next(self._ids),
            status="incoming_payment_waiting",
            reference=reference,
            customer_transaction_id=uuid,
        )
        self.transfers[uuid] = transfer
        return transfer

    async def fund_transfer(self, token, profile_id, transfer_id) -> Fund:
        await self._enter("fund_transfer", token, profile_id=profile_id, transfer_id=transfer_id)
        self._require_profile(profile_id)
        if self.fund_status == "REJECTED":
            return Fund(status="REJECTED", error_code=self.fund_error_code)
        return Fund(status=self.fund_status)

    async def get_account_requirements(self, token, quote_id) -> list[dict[str, Any]]:
        await self._enter("get_account_requirements", token, quote_id=quote_id)
        return copy.deepcopy(self.requirements)

    async def get_currency_pairs(self, token) -> CurrencyPairs:
        await self._enter("get_currency_pairs", token)
        return CurrencyPairs(pairs={k: list(v) for k, v in self.currency_pairs.items()})
