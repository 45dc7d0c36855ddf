"""Refund engine - returns custody from campaigns that will never vest.

Contributors get their funds back once a campaign is terminated or
abandoned. Organizers recover tokens that no contributor is entitled to.
"""

from __future__ import annotations

import logging
from typing import Callable

from hvym_launchpad.engine.lifecycle import require_campaign
from hvym_launchpad.engine.operation import atomic
from hvym_launchpad.errors import ErrorKind, StateError
from hvym_launchpad.interfaces.store import LedgerStore
from hvym_launchpad.interfaces.token import Token, TokenProvider
from hvym_launchpad.models.events import RefundIssued, UnsoldReclaimed
from hvym_launchpad.models.records import CampaignRecord

log = logging.getLogger(__name__)


def refund_open(campaign: CampaignRecord, now: int, grace_period: int) -> bool:
    return campaign.terminated or campaign.is_abandoned(now, grace_period)


class RefundEngine:
    def __init__(
        self,
        store: LedgerStore,
        tokens: TokenProvider,
        funds: Token,
        grace_period: int,
        clock: Callable[[], int],
    ) -> None:
        self._store = store
        self._tokens = tokens
        self._funds = funds
        self._grace_period = grace_period
        self._clock = clock

    async def claim_refund(self, organizer: str, contributor: str) -> int:
        """Pay back the contributor's whole balance; 0 means nothing was owed."""
        async with atomic(self._store, "claim_refund"):
            campaign = await require_campaign(self._store, organizer)
            if not refund_open(campaign, self._clock(), self._grace_period):
                raise StateError(
                    ErrorKind.CAMPAIGN_NOT_TERMINATED_OR_ABANDONED,
                    "Refunds are not available for this campaign",
                    organizer=organizer,
                    completed=campaign.completed,
                    settle_deadline=campaign.settle_deadline(self._grace_period),
                )

            entry = await self._store.get_contribution(organizer, contributor)
            amount = entry.contributed
            if amount <= 0:
                return 0

            # Zero the entry before paying out so a re-entrant call finds nothing.
            entry.contributed = 0
            await self._store.save_contribution(entry)
            campaign.raised -= amount
            await self._store.update_campaign(campaign)

            await self._funds.transfer(contributor, amount)

            await self._store.record_notification(RefundIssued(
                organizer=organizer, contributor=contributor, amount=amount,
            ))

        log.info(
            "Refund issued: organizer=%s contributor=%s amount=%d",
            organizer[:16], contributor[:16], amount,
        )
        return amount

    async def reclaim_unsold(self, organizer: str) -> int:
        """Return unowed escrowed tokens to the organizer, once per campaign."""
        async with atomic(self._store, "reclaim_unsold"):
            campaign = await require_campaign(self._store, organizer)
            if campaign.unsold_reclaimed:
                raise StateError(
                    ErrorKind.UNSOLD_ALREADY_RECLAIMED,
                    "Unsold tokens were already reclaimed",
                    organizer=organizer,
                )

            if campaign.completed:
                owed = await self._store.total_entitled(organizer, campaign.unit_price)
                amount = campaign.total_tokens - owed
            elif refund_open(campaign, self._clock(), self._grace_period):
                amount = campaign.total_tokens
            else:
                raise StateError(
                    ErrorKind.CAMPAIGN_NOT_FINISHED,
                    "Campaign is still open",
                    organizer=organizer,
                    phase=campaign.phase(self._clock(), self._grace_period).value,
                )

            campaign.unsold_reclaimed = True
            await self._store.update_campaign(campaign)

            if amount > 0:
                await self._tokens.token(campaign.token_id).transfer(organizer, amount)

            await self._store.record_notification(
                UnsoldReclaimed(organizer=organizer, amount=amount)
            )

        log.info("Unsold tokens reclaimed: organizer=%s amount=%d", organizer[:16], amount)
        return amount
