"""Enumerations for the transfer engine domain model."""

from enum import Enum


class ProfileType(str, Enum):
    """Kinds of sending profile a connected account can hold."""

    PERSONAL = "personal"
    BUSINESS = "business"


class FundStatus(str, Enum):
    """Outcomes reported by the network when funding a transfer."""

    OK = "OK"
    REJECTED = "REJECTED"


class TransferState(str, Enum):
    """Linear progression of a single payout orchestration."""

    PENDING = "pending"
    QUOTED = "quoted"
    RECIPIENT_CREATED = "recipient_created"
    TRANSFER_CREATED = "transfer_created"
    FUNDED = "funded"
