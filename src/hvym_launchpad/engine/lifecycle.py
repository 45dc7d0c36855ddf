"""Lifecycle state machine - contributions and termination.

Phase is derived, never stored: ``CampaignRecord.phase()`` combines the
completed/terminated flags with the sale window and the grace period.
"""

from __future__ import annotations

import logging
from typing import Callable

from hvym_launchpad.engine.operation import atomic
from hvym_launchpad.errors import EconomicError, ErrorKind, StateError, ValidationError
from hvym_launchpad.interfaces.store import LedgerStore
from hvym_launchpad.interfaces.token import Token
from hvym_launchpad.models.events import CampaignTerminated, Contributed
from hvym_launchpad.models.records import CampaignPhase, CampaignRecord

log = logging.getLogger(__name__)


async def require_campaign(store: LedgerStore, organizer: str) -> CampaignRecord:
    campaign = await store.get_campaign(organizer)
    if campaign is None:
        raise StateError(
            ErrorKind.CAMPAIGN_NOT_FOUND, "No campaign for organizer", organizer=organizer,
        )
    return campaign


class LifecycleStateMachine:
    """Gates contributions and termination on the campaign's phase."""

    def __init__(
        self,
        store: LedgerStore,
        funds: Token,
        platform_address: str,
        grace_period: int,
        clock: Callable[[], int],
    ) -> None:
        self._store = store
        self._funds = funds
        self._platform = platform_address
        self._grace_period = grace_period
        self._clock = clock

    def phase(self, campaign: CampaignRecord) -> CampaignPhase:
        return campaign.phase(self._clock(), self._grace_period)

    async def contribute(self, organizer: str, contributor: str, amount: int) -> int:
        """Pay ``amount`` into an active campaign; returns tokens reserved.

        A contributor is entitled to ``contributed // unit_price`` tokens over
        their whole running total. Each call reserves only the growth of that
        entitlement, so sub-unit remainders from earlier contributions combine
        with later ones and the reserved supply always equals what contributors
        are owed.

        Checks run in this order: campaign exists, campaign is active, amount
        is positive, enough supply remains.
        """
        async with atomic(self._store, "contribute"):
            campaign = await require_campaign(self._store, organizer)
            phase = self.phase(campaign)
            if phase != CampaignPhase.ACTIVE:
                raise StateError(
                    ErrorKind.CAMPAIGN_NOT_ACTIVE,
                    "Campaign is not accepting contributions",
                    organizer=organizer,
                    phase=phase.value,
                )
            if amount <= 0:
                raise ValidationError(
                    ErrorKind.ZERO_AMOUNT, "Contribution must be positive", amount=amount,
                )

            entry = await self._store.get_contribution(organizer, contributor)
            held = entry.contributed // campaign.unit_price
            owed = (entry.contributed + amount) // campaign.unit_price
            tokens_requested = owed - held
            if tokens_requested > campaign.remaining_tokens:
                raise EconomicError(
                    ErrorKind.INSUFFICIENT_SUPPLY,
                    "Not enough tokens left in the campaign",
                    requested=tokens_requested,
                    available=campaign.remaining_tokens,
                )

            campaign.raised += amount
            campaign.remaining_tokens -= tokens_requested
            await self._store.update_campaign(campaign)

            entry.contributed += amount
            await self._store.save_contribution(entry)

            await self._funds.transfer_from(contributor, self._platform, amount)

            await self._store.record_notification(Contributed(
                organizer=organizer,
                contributor=contributor,
                amount=amount,
                tokens_requested=tokens_requested,
            ))

        log.info(
            "Contribution: organizer=%s contributor=%s amount=%d tokens=%d remaining=%d",
            organizer[:16], contributor[:16], amount, tokens_requested,
            campaign.remaining_tokens,
        )
        return tokens_requested

    async def terminate(self, organizer: str) -> bool:
        """Cancel the campaign. Returns False if it was already terminated."""
        async with atomic(self._store, "terminate"):
            campaign = await require_campaign(self._store, organizer)
            if campaign.completed:
                raise StateError(
                    ErrorKind.CAMPAIGN_COMPLETED,
                    "Campaign is already settled",
                    organizer=organizer,
                )
            if campaign.terminated:
                log.debug("Campaign %s already terminated", organizer[:16])
                return False

            campaign.terminated = True
            await self._store.update_campaign(campaign)
            await self._store.record_notification(CampaignTerminated(organizer=organizer))

        log.info("Campaign terminated: organizer=%s", organizer[:16])
        return True
