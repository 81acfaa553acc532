"""
TransferWise payout service.

Bundles a database session, a payment network client and a cache into the
five operations the rest of the platform calls: available currencies,
required bank information, temporary quote, expense quote and expense
payment.
"""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.cache.base import CacheGateway
from app.cache.singleflight import SingleFlight
from app.engine import currencies, orchestrator, quotes, requirements
from app.engine.errors import ConfigurationError
from app.engine.profiles import get_active_connected_account
from app.models.records import ConnectedAccount, Expense, Host, PayoutMethod
from app.providers.base import PaymentNetworkClient, Quote


class TransferwiseService:
    """
    One instance per unit of work. The session is not shared between
    concurrent calls; the cache and client may be.
    """

    def __init__(
        self,
        session: AsyncSession,
        client: PaymentNetworkClient,
        cache: CacheGateway,
        single_flight: Optional[SingleFlight] = None,
    ):
        self.session = session
        self.client = client
        self.cache = cache
        self.single_flight = single_flight

    async def get_available_currencies(self, host: Host) -> list[str]:
        return await currencies.get_available_currencies(
            self.session, host, self.client, self.cache, self.single_flight
        )

    async def get_required_bank_information(self, host: Host, currency: str) -> list[dict[str, Any]]:
        return await requirements.get_required_bank_information(
            self.session, host, currency, self.client, self.cache, self.single_flight
        )

    async def get_temporary_quote(
        self,
        connected_account: ConnectedAccount,
        payout_method: PayoutMethod,
        expense: Expense,
    ) -> Quote:
        return await quotes.get_temporary_quote(connected_account, payout_method, expense, self.client)

    async def quote_expense(
        self,
        connected_account: ConnectedAccount,
        payout_method: PayoutMethod,
        expense: Expense,
    ) -> Quote:
        return await quotes.quote_expense(self.session, connected_account, payout_method, expense, self.client)

    async def pay_expense(
        self,
        payout_method: PayoutMethod,
        expense: Expense,
        connected_account: Optional[ConnectedAccount] = None,
    ) -> orchestrator.PayoutExecution:
        """Pay an expense through its host's active connected account unless one is given."""
        if connected_account is None:
            connected_account = await get_active_connected_account(self.session, expense.host_id)
            if not connected_account:
                raise ConfigurationError(host_id=expense.host_id)
        return await orchestrator.pay_expense(
            self.session, connected_account, payout_method, expense, self.client
        )
