from app.models.enums import FundStatus, ProfileType, TransferState
from app.models.records import (
    TRANSFERWISE_SERVICE,
    Base,
    CacheEntry,
    ConnectedAccount,
    Expense,
    Host,
    PayoutMethod,
)

__all__ = [
    "TRANSFERWISE_SERVICE",
    "Base",
    "Host",
    "ConnectedAccount",
    "PayoutMethod",
    "Expense",
    "CacheEntry",
    "FundStatus",
    "ProfileType",
    "TransferState",
]
