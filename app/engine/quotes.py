"""
Two-phase quoting.

A temporary quote reads the live rate without creating anything bound to
the profile. The final quote then locks a target amount computed from
that rate, so the payee receives the expense amount converted at the
current market rate. The two calls are made back to back; the lock is
best effort, not atomic with the network's own rate movement.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app.audit.logger import log_event
from app.engine.profiles import ensure_profile
from app.models.records import ConnectedAccount, Expense, PayoutMethod
from app.providers.base import PaymentNetworkClient, Quote

logger = logging.getLogger("transfer_engine.quotes")


def to_major_units(amount: int) -> float:
    """Convert a minor-unit amount (cents) to major units."""
    return amount / 100


async def get_temporary_quote(
    connected_account: ConnectedAccount,
    payout_method: PayoutMethod,
    expense: Expense,
    client: PaymentNetworkClient,
) -> Quote:
    """Rate preview for paying the expense in the payout method's currency."""
    return await client.get_temporary_quote(
        connected_account.token,
        source_currency=expense.currency,
        target_currency=payout_method.currency,
        target_amount=to_major_units(expense.amount),
    )


async def quote_expense(
    session: AsyncSession,
    connected_account: ConnectedAccount,
    payout_method: PayoutMethod,
    expense: Expense,
    client: PaymentNetworkClient,
) -> Quote:
    """
    Compute a locked, profile-bound quote for an expense.

    Args:
        session: Database session (used to persist profile resolution).
        connected_account: The host's connected account.
        payout_method: Payee bank account; its currency is the target.
        expense: Expense whose currency is the source.
        client: Payment network client.

    Returns:
        The final quote, usable to create a transfer.
    """
    await ensure_profile(session, connected_account, client)

    temporary = await get_temporary_quote(connected_account, payout_method, expense, client)
    target_amount = round(to_major_units(expense.amount) * temporary.rate, 2)

    logger.debug(
        "Expense %s: %s->%s rate=%s target_amount=%.2f",
        expense.id,
        expense.currency,
        payout_method.currency,
        temporary.rate,
        target_amount,
    )

    quote = await client.create_quote(
        connected_account.token,
        profile_id=connected_account.profile_id,
        source_currency=expense.currency,
        target_currency=payout_method.currency,
        target_amount=target_amount,
    )

    log_event("quote_created", expense_id=expense.id, host_id=connected_account.host_id, details={
        "quote_id": quote.id,
        "rate": quote.rate,
        "source": expense.currency,
        "target": payout_method.currency,
        "target_amount": target_amount,
    })
    return quote
