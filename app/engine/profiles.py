"""
Connected account lookup and profile resolution.

Every quote, recipient and transfer call is made on behalf of a network
profile. Before any of them, the connected account must know which
profile to use. Resolution is idempotent: an account that already has a
profile is left alone without a network call. Two concurrent resolutions
of the same account both write the same profile, since selection is
deterministic for a given profile list.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.audit.logger import log_event
from app.models.enums import ProfileType
from app.models.records import TRANSFERWISE_SERVICE, ConnectedAccount
from app.providers.base import PaymentNetworkClient, Profile

logger = logging.getLogger("transfer_engine.profiles")


async def get_active_connected_account(
    session: AsyncSession,
    host_id: int,
    service: str = TRANSFERWISE_SERVICE,
) -> Optional[ConnectedAccount]:
    """Return the host's non-deleted connected account for a service, if any."""
    result = await session.execute(
        select(ConnectedAccount)
        .where(
            ConnectedAccount.host_id == host_id,
            ConnectedAccount.service == service,
            ConnectedAccount.deleted_at.is_(None),
        )
        .order_by(ConnectedAccount.id.desc())
        .limit(1)
    )
    return result.scalars().first()


def select_profile(profiles: list[Profile], account_type: Optional[str]) -> Optional[Profile]:
    """
    Pick the profile to send money from.

    Priority:
      1. Profile matching the account's declared type
      2. Business profile
      3. First profile returned
    """
    if account_type:
        for profile in profiles:
            if profile.type == account_type:
                return profile
    for profile in profiles:
        if profile.type == ProfileType.BUSINESS.value:
            return profile
    return profiles[0] if profiles else None


async def ensure_profile(
    session: AsyncSession,
    connected_account: ConnectedAccount,
    client: PaymentNetworkClient,
) -> None:
    """
    Make sure the connected account has a network profile.

    When the network returns no profiles at all, the account is left
    without one and the next profile-bound call fails upstream.
    """
    if connected_account.has_profile:
        return

    profiles = await client.get_profiles(connected_account.token)
    profile = select_profile(profiles, connected_account.account_type)
    if profile is None:
        logger.warning("Connected account %s has no profiles on %s", connected_account.id, client.name)
        return

    connected_account.apply_profile(profile.id, profile.type, profile.details)
    await session.commit()

    log_event("profile_resolved", host_id=connected_account.host_id, details={
        "connected_account_id": connected_account.id,
        "profile_id": profile.id,
        "profile_type": profile.type,
    })
