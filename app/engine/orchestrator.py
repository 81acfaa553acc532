"""
Transfer orchestrator: the core execution engine.

Pays one expense to one payout method through the host's connected
account. The flow is a strict sequence, each step fed by the previous
one:

  1. Quote the expense (temporary rate, then locked final quote)
  2. Create the recipient bank account from the payout method
  3. Create the transfer, tagged with a fresh idempotency token
  4. Fund the transfer from the profile's balance

Progress is tracked as a linear state machine:

  PENDING → QUOTED → RECIPIENT_CREATED → TRANSFER_CREATED → FUNDED

A failure at any step stops the run. Nothing is retried and nothing is
rolled back: a recipient may exist without a transfer, or a transfer
without funding. The idempotency token is generated per call, so calling
pay_expense again after a partial failure creates a new recipient and a
new transfer. Callers must not retry without their own de-duplication.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.audit.logger import log_event
from app.engine.errors import FundingRejectedError, InvalidTransitionError
from app.engine.quotes import quote_expense
from app.models.enums import FundStatus, TransferState
from app.models.records import ConnectedAccount, Expense, PayoutMethod
from app.providers.base import Fund, PaymentNetworkClient, Quote, Recipient, Transfer

logger = logging.getLogger("transfer_engine.orchestrator")

_NEXT_STATE: dict[TransferState, TransferState] = {
    TransferState.PENDING: TransferState.QUOTED,
    TransferState.QUOTED: TransferState.RECIPIENT_CREATED,
    TransferState.RECIPIENT_CREATED: TransferState.TRANSFER_CREATED,
    TransferState.TRANSFER_CREATED: TransferState.FUNDED,
}


@dataclass
class PayoutExecution:
    """Artifacts produced so far by one orchestration, and the state reached."""

    expense_id: int
    idempotency_key: str
    state: TransferState = TransferState.PENDING
    quote: Optional[Quote] = None
    recipient: Optional[Recipient] = None
    transfer: Optional[Transfer] = None
    fund: Optional[Fund] = None
    history: list[TransferState] = field(default_factory=list)

    def advance(self, to_state: TransferState) -> None:
        expected = _NEXT_STATE.get(self.state)
        if expected is not to_state:
            raise InvalidTransitionError(
                f"Expense {self.expense_id}: cannot move from {self.state.value} to {to_state.value}"
            )
        self.history.append(self.state)
        self.state = to_state

    def record_quote(self, quote: Quote) -> None:
        self.advance(TransferState.QUOTED)
        self.quote = quote

    def record_recipient(self, recipient: Recipient) -> None:
        self.advance(TransferState.RECIPIENT_CREATED)
        self.recipient = recipient

    def record_transfer(self, transfer: Transfer) -> None:
        self.advance(TransferState.TRANSFER_CREATED)
        self.transfer = transfer

    def record_fund(self, fund: Fund) -> None:
        self.advance(TransferState.FUNDED)
        self.fund = fund

    @property
    def is_funded(self) -> bool:
        return self.state is TransferState.FUNDED


def transfer_reference(expense: Expense) -> str:
    return f"Expense {expense.id}"


async def pay_expense(
    session: AsyncSession,
    connected_account: ConnectedAccount,
    payout_method: PayoutMethod,
    expense: Expense,
    client: PaymentNetworkClient,
) -> PayoutExecution:
    """
    Execute the full payout for an expense.

    Args:
        session: Database session (profile resolution writes to the account).
        connected_account: The host's active connected account.
        payout_method: Payee bank account.
        expense: The approved expense; its id tags the transfer.
        client: Payment network client.

    Returns:
        A PayoutExecution in the FUNDED state holding the quote, recipient,
        transfer and fund result.

    Raises:
        FundingRejectedError: The network refused to fund the transfer.
        UpstreamError: Any step failed at the network.
    """
    execution = PayoutExecution(expense_id=expense.id, idempotency_key=str(uuid.uuid4()))
    host_id = connected_account.host_id

    try:
        # Step 1: Quote
        execution.record_quote(
            await quote_expense(session, connected_account, payout_method, expense, client)
        )

        # Step 2: Recipient
        recipient = await client.create_recipient_account(
            connected_account.token,
            profile_id=connected_account.profile_id,
            fields={"currency": payout_method.currency, **payout_method.data},
        )
        execution.record_recipient(recipient)
        log_event("recipient_created", expense_id=expense.id, host_id=host_id, details={
            "recipient_id": recipient.id,
            "payout_method_id": payout_method.id,
        })

        # Step 3: Transfer
        transfer = await client.create_transfer(
            connected_account.token,
            account_id=recipient.id,
            quote_id=execution.quote.id,
            uuid=execution.idempotency_key,
            reference=transfer_reference(expense),
        )
        execution.record_transfer(transfer)
        log_event("transfer_created", expense_id=expense.id, host_id=host_id, details={
            "transfer_id": transfer.id,
            "quote_id": execution.quote.id,
            "uuid": execution.idempotency_key,
        })

        # Step 4: Fund
        fund = await client.fund_transfer(
            connected_account.token,
            profile_id=connected_account.profile_id,
            transfer_id=transfer.id,
        )
        if fund.status == FundStatus.REJECTED.value:
            log_event("fund_rejected", expense_id=expense.id, host_id=host_id, level=logging.WARNING, details={
                "transfer_id": transfer.id,
                "error_code": fund.error_code,
            })
            raise FundingRejectedError(fund.error_code, transfer_id=transfer.id)

        execution.record_fund(fund)
        log_event("transfer_funded", expense_id=expense.id, host_id=host_id, details={
            "transfer_id": transfer.id,
            "status": fund.status,
        })

    except Exception:
        logger.warning(
            "Expense %s: payout stopped at state=%s (recipient=%s transfer=%s)",
            expense.id,
            execution.state.value,
            execution.recipient.id if execution.recipient else None,
            execution.transfer.id if execution.transfer else None,
        )
        raise

    logger.info(
        "Expense %s paid: quote=%s recipient=%s transfer=%s",
        expense.id,
        execution.quote.id,
        execution.recipient.id,
        execution.transfer.id,
    )
    return execution
