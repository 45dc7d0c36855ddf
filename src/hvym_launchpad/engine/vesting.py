"""Vesting calculator - linear unlock of purchased tokens after settlement."""

from __future__ import annotations

import logging
from typing import Callable

from hvym_launchpad.engine.lifecycle import require_campaign
from hvym_launchpad.engine.operation import atomic
from hvym_launchpad.errors import ErrorKind, StateError
from hvym_launchpad.interfaces.store import LedgerStore
from hvym_launchpad.interfaces.token import TokenProvider
from hvym_launchpad.models.events import TokensClaimed
from hvym_launchpad.models.records import CampaignRecord, ContributionRecord

log = logging.getLogger(__name__)


def vested_amount(total_entitled: int, elapsed: int, vesting_period: int) -> int:
    """Tokens unlocked after ``elapsed`` seconds of a linear schedule.

    Elapsed time is clamped to ``[0, vesting_period]`` before the ratio is
    applied, so the result never exceeds ``total_entitled``.
    """
    elapsed = max(0, min(elapsed, vesting_period))
    return total_entitled * elapsed // vesting_period


def claimable_amount(campaign: CampaignRecord, entry: ContributionRecord, now: int) -> int:
    if not campaign.completed or campaign.vesting_start is None:
        return 0
    vested = vested_amount(
        entry.entitlement(campaign.unit_price),
        now - campaign.vesting_start,
        campaign.vesting_period,
    )
    return max(0, vested - entry.claimed)


class VestingCalculator:
    """Releases vested tokens to contributors of a settled campaign."""

    def __init__(
        self,
        store: LedgerStore,
        tokens: TokenProvider,
        clock: Callable[[], int],
    ) -> None:
        self._store = store
        self._tokens = tokens
        self._clock = clock

    async def claim_tokens(self, organizer: str, contributor: str) -> int:
        """Transfer everything vested but not yet claimed; 0 means nothing was due."""
        async with atomic(self._store, "claim_tokens"):
            campaign = await require_campaign(self._store, organizer)
            if not campaign.completed:
                raise StateError(
                    ErrorKind.CAMPAIGN_NOT_COMPLETED,
                    "Campaign has not been settled",
                    organizer=organizer,
                )

            entry = await self._store.get_contribution(organizer, contributor)
            claimable = claimable_amount(campaign, entry, self._clock())
            if claimable <= 0:
                return 0

            entry.claimed += claimable
            await self._store.save_contribution(entry)

            await self._tokens.token(campaign.token_id).transfer(contributor, claimable)

            await self._store.record_notification(TokensClaimed(
                organizer=organizer, contributor=contributor, amount=claimable,
            ))

        log.info(
            "Tokens claimed: organizer=%s contributor=%s amount=%d total_claimed=%d",
            organizer[:16], contributor[:16], claimable, entry.claimed,
        )
        return claimable
