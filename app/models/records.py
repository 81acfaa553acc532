"""SQLAlchemy models for hosts, connected accounts, payout methods and expenses."""

from datetime import datetime, timezone
from typing import Any, Optional

from sqlalchemy import (
    JSON,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, relationship


class Base(DeclarativeBase):
    pass


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


TRANSFERWISE_SERVICE = "transferwise"


class Host(Base):
    """A fiscal host organization paying out expenses in its own currency."""

    __tablename__ = "hosts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    slug = Column(String(100), nullable=False, unique=True)
    name = Column(String(200), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    connected_accounts = relationship("ConnectedAccount", back_populates="host", lazy="raise")


class ConnectedAccount(Base):
    """
    A host's link to an external payment network.

    The network profile used to send money is stored as explicit columns
    (profile_id, profile_type). Any other metadata returned with the
    profile lands in the ``data`` extension map. A soft-deleted account
    (deleted_at set) is never used for payouts.
    """

    __tablename__ = "connected_accounts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    service = Column(String(50), nullable=False, default=TRANSFERWISE_SERVICE, index=True)
    host_id = Column(Integer, ForeignKey("hosts.id"), nullable=False, index=True)
    account_type = Column(String(20), nullable=True)  # declared profile type: personal, business
    token = Column(String(255), nullable=False)

    profile_id = Column(Integer, nullable=True)
    profile_type = Column(String(20), nullable=True)
    data = Column(JSON, nullable=False, default=dict)

    deleted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)

    host = relationship("Host", back_populates="connected_accounts")

    @property
    def has_profile(self) -> bool:
        return self.profile_id is not None

    def apply_profile(self, profile_id: int, profile_type: Optional[str], details: dict[str, Any]) -> None:
        """Merge a network profile into this account. Existing extension keys are kept."""
        self.profile_id = profile_id
        self.profile_type = profile_type
        self.data = {**(self.data or {}), **details}


class PayoutMethod(Base):
    """
    A payee's bank account description.

    ``data`` holds the recipient fields expected by the network
    (accountHolderName, legalType, details, ...). Immutable once used in a
    funded transfer.
    """

    __tablename__ = "payout_methods"

    id = Column(Integer, primary_key=True, autoincrement=True)
    payee_name = Column(String(200), nullable=True)
    type = Column(String(30), nullable=False, default="BANK_ACCOUNT")
    currency = Column(String(3), nullable=False)
    data = Column(JSON, nullable=False, default=dict)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class Expense(Base):
    """An approved expense to be paid out. ``amount`` is in minor units (cents)."""

    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, autoincrement=True)
    host_id = Column(Integer, ForeignKey("hosts.id"), nullable=False, index=True)
    payout_method_id = Column(Integer, ForeignKey("payout_methods.id"), nullable=True)
    description = Column(Text, nullable=True)
    amount = Column(Integer, nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    created_at = Column(DateTime(timezone=True), default=_utcnow)

    payout_method = relationship("PayoutMethod", lazy="raise")


class CacheEntry(Base):
    """Key/value row backing the database cache. Rows past expires_at are ignored."""

    __tablename__ = "cache_entries"

    key = Column(String(255), primary_key=True)
    value = Column(JSON, nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
