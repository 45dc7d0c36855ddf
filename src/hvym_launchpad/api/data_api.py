"""Data API aggregator - builds JSON-serializable views of the ledger."""

from __future__ import annotations

import logging
from typing import Callable

from hvym_launchpad.engine.refund import refund_open
from hvym_launchpad.engine.vesting import vested_amount
from hvym_launchpad.interfaces.store import LedgerStore
from hvym_launchpad.models.records import CampaignRecord, ContributionRecord
from hvym_launchpad.models.snapshots import (
    CampaignSnapshot,
    ContributionSnapshot,
    NotificationEntry,
)

log = logging.getLogger(__name__)


def _campaign_to_snapshot(
    campaign: CampaignRecord, now: int, grace_period: int
) -> CampaignSnapshot:
    vesting_end = None
    if campaign.vesting_start is not None:
        vesting_end = campaign.vesting_start + campaign.vesting_period
    return CampaignSnapshot(
        organizer=campaign.organizer,
        token_id=campaign.token_id,
        phase=campaign.phase(now, grace_period).value,
        unit_price=campaign.unit_price,
        total_tokens=campaign.total_tokens,
        remaining_tokens=campaign.remaining_tokens,
        tokens_sold=campaign.total_tokens - campaign.remaining_tokens,
        raised=campaign.raised,
        start_time=campaign.start_time,
        end_time=campaign.end_time,
        settle_deadline=campaign.settle_deadline(grace_period),
        vesting_start=campaign.vesting_start,
        vesting_end=vesting_end,
        vesting_period=campaign.vesting_period,
        completed=campaign.completed,
        terminated=campaign.terminated,
        unsold_reclaimed=campaign.unsold_reclaimed,
        fee_pending=campaign.fee_pending,
    )


def _contribution_to_snapshot(
    campaign: CampaignRecord, entry: ContributionRecord, now: int, grace_period: int
) -> ContributionSnapshot:
    entitled = entry.entitlement(campaign.unit_price)
    vested = 0
    if campaign.completed and campaign.vesting_start is not None:
        vested = vested_amount(entitled, now - campaign.vesting_start, campaign.vesting_period)
    refundable = entry.contributed if refund_open(campaign, now, grace_period) else 0
    return ContributionSnapshot(
        organizer=entry.organizer,
        contributor=entry.contributor,
        contributed=entry.contributed,
        claimed=entry.claimed,
        entitled=entitled,
        vested=vested,
        claimable=max(0, vested - entry.claimed),
        refundable=refundable,
    )


class LaunchpadDataAPI:
    """Builds snapshots of campaigns, contributions and notifications.

    Reads never mutate the ledger; phase and vesting figures are evaluated
    against the injected clock at call time.
    """

    def __init__(
        self,
        store: LedgerStore,
        grace_period: int,
        clock: Callable[[], int],
    ) -> None:
        self._store = store
        self._grace_period = grace_period
        self._clock = clock

    async def get_campaign(self, organizer: str) -> CampaignSnapshot | None:
        campaign = await self._store.get_campaign(organizer)
        if campaign is None:
            return None
        return _campaign_to_snapshot(campaign, self._clock(), self._grace_period)

    async def get_campaigns(self, phase: str | None = None) -> list[CampaignSnapshot]:
        now = self._clock()
        snapshots = [
            _campaign_to_snapshot(c, now, self._grace_period)
            for c in await self._store.list_campaigns()
        ]
        if phase:
            snapshots = [s for s in snapshots if s.phase == phase]
        return snapshots

    async def get_contribution(
        self, organizer: str, contributor: str
    ) -> ContributionSnapshot | None:
        campaign = await self._store.get_campaign(organizer)
        if campaign is None:
            return None
        entry = await self._store.get_contribution(organizer, contributor)
        return _contribution_to_snapshot(campaign, entry, self._clock(), self._grace_period)

    async def get_contributions(self, organizer: str) -> list[ContributionSnapshot]:
        campaign = await self._store.get_campaign(organizer)
        if campaign is None:
            return []
        now = self._clock()
        return [
            _contribution_to_snapshot(campaign, e, now, self._grace_period)
            for e in await self._store.get_contributions(organizer)
        ]

    async def get_notifications(
        self, organizer: str | None = None, limit: int = 50
    ) -> list[NotificationEntry]:
        records = await self._store.get_notifications(organizer, limit)
        return [
            NotificationEntry(
                id=r.id,
                kind=r.kind,
                organizer=r.organizer,
                contributor=r.contributor,
                amount=r.amount,
                payload=r.payload,
                created_at=r.created_at,
            )
            for r in records
        ]
