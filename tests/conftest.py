"""Shared test fixtures."""

from datetime import datetime, timezone

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.cache.memory import MemoryCache
from app.models.records import Base, ConnectedAccount, Expense, Host, PayoutMethod
from app.providers.mock_provider import MockPaymentNetwork


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest_asyncio.fixture
async def session_factory():
    """Session factory over a fresh in-memory database."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def seeded_session(db_session: AsyncSession):
    """
    Database session pre-loaded with:
      - Host 1 (USD) with an active connected account, profile not yet resolved
      - Host 2 (USD) with only a soft-deleted connected account
      - Host 3 (CLP) with no connected account
      - A EUR payout method and a 50.00 USD expense on host 1
    """
    db_session.add_all([
        Host(id=1, slug="opensource", name="Open Source Collective", currency="USD"),
        Host(id=2, slug="disconnected", name="Disconnected Host", currency="USD"),
        Host(id=3, slug="no-account", name="Unconnected Host", currency="CLP"),
    ])
    db_session.add_all([
        ConnectedAccount(id=10, host_id=1, account_type="business", token="token-host-1", data={}),
        ConnectedAccount(
            id=20,
            host_id=2,
            account_type="business",
            token="token-revoked",
            data={},
            deleted_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
        ),
    ])
    db_session.add(PayoutMethod(
        id=1,
        payee_name="Hans Mueller",
        currency="EUR",
        data={
            "type": "iban",
            "accountHolderName": "Hans Mueller",
            "legalType": "PRIVATE",
            "details": {"IBAN": "DE89370400440532013000"},
        },
    ))
    db_session.add(Expense(id=42, host_id=1, payout_method_id=1, description="Travel", amount=5000, currency="USD"))
    await db_session.commit()

    yield db_session


@pytest_asyncio.fixture
async def host(seeded_session):
    return await seeded_session.get(Host, 1)


@pytest_asyncio.fixture
async def connected_account(seeded_session):
    return await seeded_session.get(ConnectedAccount, 10)


@pytest_asyncio.fixture
async def payout_method(seeded_session):
    return await seeded_session.get(PayoutMethod, 1)


@pytest_asyncio.fixture
async def expense(seeded_session):
    return await seeded_session.get(Expense, 42)


@pytest.fixture
def network():
    return MockPaymentNetwork(latency_ms=0)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return MemoryCache(clock=clock)
