"""
Seed the database with sample payout data.

Creates:
  - 3 hosts (USD, EUR, GBP)
  - A connected account per host, plus a soft-deleted one
  - Payout methods across EUR, GBP, INR and MXN
  - Approved expenses, one per payout method

Run:
    python -m seed.seed_data            # seed only
    python -m seed.seed_data --pay      # seed, then pay every expense on the mock network
"""

import argparse
import asyncio
import sys
from datetime import datetime, timezone
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from sqlalchemy import select

from app.cache.memory import MemoryCache
from app.database import async_session, reset_db
from app.engine.errors import FundingRejectedError
from app.models.records import ConnectedAccount, Expense, Host, PayoutMethod
from app.providers.mock_provider import MockPaymentNetwork
from app.service import TransferwiseService


HOSTS = [
    {"id": 1, "slug": "opensource", "name": "Open Source Collective", "currency": "USD"},
    {"id": 2, "slug": "europe", "name": "Open Collective Europe", "currency": "EUR"},
    {"id": 3, "slug": "uk-host", "name": "UK Fiscal Host", "currency": "GBP"},
]

CONNECTED_ACCOUNTS = [
    {"host_id": 1, "account_type": "business", "token": "sandbox-token-osc"},
    {"host_id": 2, "account_type": "business", "token": "sandbox-token-oce"},
    {"host_id": 3, "account_type": "personal", "token": "sandbox-token-uk"},
    # Disconnected: must never be picked
    {"host_id": 3, "account_type": "business", "token": "revoked-token", "deleted_at": datetime(2024, 1, 1, tzinfo=timezone.utc)},
]

PAYOUT_METHODS = [
    {
        "id": 1,
        "payee_name": "Hans Mueller",
        "currency": "EUR",
        "data": {
            "type": "iban",
            "accountHolderName": "Hans Mueller",
            "legalType": "PRIVATE",
            "details": {"IBAN": "DE89370400440532013000"},
        },
    },
    {
        "id": 2,
        "payee_name": "James Thompson",
        "currency": "GBP",
        "data": {
            "type": "sort_code",
            "accountHolderName": "James Thompson",
            "legalType": "PRIVATE",
            "details": {"sortCode": "231470", "accountNumber": "28821822"},
        },
    },
    {
        "id": 3,
        "payee_name": "Priya Sharma",
        "currency": "INR",
        "data": {
            "type": "indian",
            "accountHolderName": "Priya Sharma",
            "legalType": "PRIVATE",
            "details": {"ifscCode": "YESB0236041", "accountNumber": "678911234567891"},
        },
    },
    {
        "id": 4,
        "payee_name": "Lucia Hernandez",
        "currency": "MXN",
        "data": {
            "type": "mexican",
            "accountHolderName": "Lucia Hernandez",
            "legalType": "PRIVATE",
            "details": {"clabe": "032180000118359719"},
        },
    },
]

EXPENSES = [
    {"id": 101, "host_id": 1, "payout_method_id": 1, "description": "Conference travel", "amount": 125_000, "currency": "USD"},
    {"id": 102, "host_id": 1, "payout_method_id": 2, "description": "Design work", "amount": 80_000, "currency": "USD"},
    {"id": 103, "host_id": 1, "payout_method_id": 3, "description": "Translation", "amount": 15_050, "currency": "USD"},
    {"id": 104, "host_id": 2, "payout_method_id": 2, "description": "Meetup venue", "amount": 42_000, "currency": "EUR"},
    {"id": 105, "host_id": 3, "payout_method_id": 1, "description": "Hosting costs", "amount": 9_999, "currency": "GBP"},
]


async def seed():
    """Recreate tables and insert sample data."""
    await reset_db()

    async with async_session() as session:
        for data in HOSTS:
            session.add(Host(**data))
        for data in CONNECTED_ACCOUNTS:
            session.add(ConnectedAccount(**data))
        for data in PAYOUT_METHODS:
            session.add(PayoutMethod(**data))
        for data in EXPENSES:
            session.add(Expense(**data))

        await session.commit()
        print(
            f"Seeded {len(HOSTS)} hosts, {len(CONNECTED_ACCOUNTS)} connected accounts, "
            f"{len(PAYOUT_METHODS)} payout methods and {len(EXPENSES)} expenses."
        )


async def pay_all():
    """Pay every seeded expense against the mock network."""
    network = MockPaymentNetwork()
    cache = MemoryCache()

    async with async_session() as session:
        service = TransferwiseService(session, network, cache)
        hosts = {h.id: h for h in (await session.execute(select(Host))).scalars().all()}
        methods = {m.id: m for m in (await session.execute(select(PayoutMethod))).scalars().all()}
        expenses = (await session.execute(select(Expense).order_by(Expense.id))).scalars().all()

        for host in hosts.values():
            currencies = await service.get_available_currencies(host)
            print(f"{host.slug}: pays out in {', '.join(currencies)}")

        for expense in expenses:
            payout_method = methods[expense.payout_method_id]
            try:
                execution = await service.pay_expense(payout_method, expense)
            except FundingRejectedError as e:
                print(f"Expense {expense.id}: rejected ({e.error_code})")
                continue
            print(
                f"Expense {expense.id}: {expense.amount / 100:.2f} {expense.currency} → "
                f"{execution.quote.target_amount:.2f} {payout_method.currency} "
                f"(transfer {execution.transfer.id}, fund {execution.fund.status})"
            )


async def run(pay: bool):
    await seed()
    if pay:
        await pay_all()


def main():
    parser = argparse.ArgumentParser(description="Seed the transfer engine database.")
    parser.add_argument("--pay", action="store_true", help="Pay every expense on the mock network")
    args = parser.parse_args()

    asyncio.run(run(args.pay))


if __name__ == "__main__":
    main()
