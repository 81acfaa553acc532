"""
Wise (TransferWise) REST API client.

Thin typed wrapper over the endpoints the transfer engine needs. Every
non-2xx response and every transport failure is raised as UpstreamError
(RateLimitError for 429). Nothing is retried here; callers see the first
failure.
"""

import logging
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Optional

import httpx

from app.config import settings
from app.engine.errors import RateLimitError, UpstreamError
from app.providers.base import (
    CurrencyPairs,
    Fund,
    PaymentNetworkClient,
    Profile,
    Quote,
    Recipient,
    Transfer,
)

logger = logging.getLogger("transfer_engine.wise")


def _error_code(response: httpx.Response) -> Optional[str]:
    """Pull the first error code out of a Wise error body, if any."""
    try:
        body = response.json()
    except ValueError:
        return None
    if not isinstance(body, dict):
        return None
    errors = body.get("errors")
    if isinstance(errors, list) and errors:
        first = errors[0]
        return first.get("code") if isinstance(first, dict) else None
    return body.get("error") or body.get("errorCode")


def _retry_after_seconds(value: Optional[str]) -> Optional[float]:
    """Retry-After as seconds. Accepts delta-seconds or an HTTP-date; None when unparseable."""
    if not value:
        return None
    try:
        return max(float(value), 0.0)
    except ValueError:
        pass
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    return max((when - datetime.now(timezone.utc)).total_seconds(), 0.0)



class WiseClient(PaymentNetworkClient):
    """Async client for the Wise API."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.wise_api_url).rstrip("/")
        self.timeout_seconds = timeout_seconds if timeout_seconds is not None else settings.wise_timeout_seconds
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_seconds,
            transport=transport,
        )

    @property
    def name(self) -> str:
        return "wise"

    async def close(self):
        await self.client.aclose()

    async def __aenter__(self) -> "WiseClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        token: str,
        **kwargs: Any,
    ) -> Any:
        headers = {"Authorization": f"Bearer {token}"}
        logger.debug("%s %s%s", method, self.base_url, path)
        try:
            response = await self.client.request(method, path, headers=headers, **kwargs)
        except httpx.TransportError as e:
            raise UpstreamError(
                f"Wise request failed: {method} {path}: {e}",
                status_code=503,
                retriable=True,
            ) from e

        if response.status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                f"Wise rate limit on {method} {path}",
                retry_after=_retry_after_seconds(retry_after),
            )
        if response.is_error:
            code = _error_code(response)
            logger.warning("Wise %s %s -> %d (%s)", method, path, response.status_code, code or "no code")
            raise UpstreamError(
                f"Wise {method} {path} returned {response.status_code}",
                status_code=response.status_code,
                retriable=response.status_code >= 500,
                code=code,
            )
        return response.json() if response.content else {}

    async def get_profiles(self, token: str) -> list[Profile]:
        data = await self._request("GET", "/v1/profiles", token)
        return [Profile.from_payload(p) for p in data]

    async def get_temporary_quote(
        self,
        token: str,
        source_currency: str,
        target_currency: str,
        target_amount: float,
    ) -> Quote:
        data = await self._request("GET", "/v1/quotes", token, params={
            "source": source_currency,
            "target": target_currency,
            "rateType": "FIXED",
            "targetAmount": target_amount,
        })
        return Quote.from_payload(data)

    async def create_quote(
        self,
        token: str,
        profile_id: Optional[int],
        source_currency: str,
        target_currency: str,
        target_amount: float,
    ) -> Quote:
        data = await self._request("POST", "/v1/quotes", token, json={
            "profile": profile_id,
            "source": source_currency,
            "target": target_currency,
            "rateType": "FIXED",
            "targetAmount": target_amount,
            "type": "BALANCE_PAYOUT",
        })
        return Quote.from_payload(data)

    async def create_recipient_account(
        self,
        token: str,
        profile_id: Optional[int],
        fields: dict[str, Any],
    ) -> Recipient:
        data = await self._request("POST", "/v1/accounts", token, json={"profile": profile_id, **fields})
        return Recipient.from_payload(data)

    async def create_transfer(
        self,
        token: str,
        account_id: int,
        quote_id: Optional[int],
        uuid: str,
        reference: str,
    ) -> Transfer:
        data = await self._request("POST", "/v1/transfers", token, json={
            "targetAccount": account_id,
            "quote": quote_id,
            "customerTransactionId": uuid,
            "details": {"reference": reference},
        })
        return Transfer.from_payload(data)

    async def fund_transfer(self, token: str, profile_id: Optional[int], transfer_id: int) -> Fund:
        data = await self._request(
            "POST",
            f"/v3/profiles/{profile_id}/transfers/{transfer_id}/payments",
            token,
            json={"type": "BALANCE"},
        )
        return Fund.from_payload(data)

    async def get_account_requirements(self, token: str, quote_id: Optional[int]) -> list[dict[str, Any]]:
        return await self._request("GET", f"/v1/quotes/{quote_id}/account-requirements", token)

    async def get_currency_pairs(self, token: str) -> CurrencyPairs:
        data = await self._request("GET", "/v1/currency-pairs", token)
        return CurrencyPairs.from_payload(data)
