"""
Event trail for money-moving operations.

Each orchestration step emits one line on the ``transfer_engine.audit``
logger with:
  - Expense ID (which payout)
  - Host ID (whose connected account)
  - Action (what happened)
  - Details (network identifiers, amounts, error codes)

The engine does not persist quotes, recipients or transfers. These lines
are what an operator greps when reconciling a partially completed payout.
"""

import json
import logging
from typing import Any, Optional

logger = logging.getLogger("transfer_engine.audit")


def log_event(
    action: str,
    expense_id: Optional[int] = None,
    host_id: Optional[int] = None,
    details: Optional[dict[str, Any]] = None,
    level: int = logging.INFO,
) -> None:
    """
    Emit a single audit line.

    Args:
        action: What happened (e.g. "quote_created", "transfer_created", "fund_rejected").
        expense_id: The expense being paid, when there is one.
        host_id: The host whose connected account is used.
        details: Arbitrary context (serialized to JSON, truncated to 200 chars).
        level: Logging level for the line.
    """
    logger.log(
        level,
        "AUDIT | expense=%s host=%s action=%s | %s",
        expense_id if expense_id is not None else "-",
        host_id if host_id is not None else "-",
        action,
        json.dumps(details, default=str)[:200] if details else "",
    )
