"""Campaign registry - opens campaigns and escrows their tokens."""

from __future__ import annotations

import logging
from typing import Callable

from hvym_launchpad.engine.operation import atomic
from hvym_launchpad.errors import ErrorKind, ValidationError
from hvym_launchpad.interfaces.store import LedgerStore
from hvym_launchpad.interfaces.token import TokenProvider
from hvym_launchpad.models.events import CampaignCreated
from hvym_launchpad.models.records import CampaignRecord

log = logging.getLogger(__name__)


class CampaignRegistry:
    """Creates campaign records, one per organizer identity for good.

    A used organizer slot is never released, not even after termination or
    abandonment.
    """

    def __init__(
        self,
        store: LedgerStore,
        tokens: TokenProvider,
        platform_address: str,
        clock: Callable[[], int],
    ) -> None:
        self._store = store
        self._tokens = tokens
        self._platform = platform_address
        self._clock = clock

    async def create(
        self,
        organizer: str,
        token_id: str,
        unit_price: int,
        total_tokens: int,
        duration: int,
        vesting_period: int,
    ) -> CampaignRecord:
        """Open a campaign for ``organizer`` and escrow ``total_tokens``.

        The first failing check wins, in this order: organizer already has a
        campaign, token id, total tokens, unit price, duration, vesting period.
        """
        async with atomic(self._store, "create"):
            if await self._store.get_campaign(organizer) is not None:
                raise ValidationError(
                    ErrorKind.CAMPAIGN_EXISTS,
                    "Organizer already has a campaign",
                    organizer=organizer,
                )
            _validate_terms(token_id, unit_price, total_tokens, duration, vesting_period)

            now = self._clock()
            record = CampaignRecord(
                organizer=organizer,
                token_id=token_id,
                unit_price=unit_price,
                total_tokens=total_tokens,
                remaining_tokens=total_tokens,
                start_time=now,
                duration=duration,
                vesting_period=vesting_period,
            )
            await self._store.insert_campaign(record)

            await self._tokens.token(token_id).transfer_from(
                organizer, self._platform, total_tokens,
            )

            await self._store.record_notification(CampaignCreated(
                organizer=organizer,
                token_id=token_id,
                unit_price=unit_price,
                total_tokens=total_tokens,
                start_time=now,
                duration=duration,
                vesting_period=vesting_period,
            ))

        log.info(
            "Campaign created: organizer=%s token=%s price=%d tokens=%d",
            organizer[:16], token_id[:16], unit_price, total_tokens,
        )
        return record


def _validate_terms(
    token_id: str,
    unit_price: int,
    total_tokens: int,
    duration: int,
    vesting_period: int,
) -> None:
    if not token_id:
        raise ValidationError(ErrorKind.INVALID_TOKEN, "Token identifier is empty")
    if total_tokens <= 0:
        raise ValidationError(
            ErrorKind.ZERO_AMOUNT, "Total tokens must be positive", total_tokens=total_tokens,
        )
    if unit_price <= 0:
        raise ValidationError(
            ErrorKind.ZERO_PRICE, "Unit price must be positive", unit_price=unit_price,
        )
    if duration <= 0:
        raise ValidationError(
            ErrorKind.ZERO_DURATION, "Duration must be positive", duration=duration,
        )
    if vesting_period <= 0:
        raise ValidationError(
            ErrorKind.ZERO_VESTING_PERIOD,
            "Vesting period must be positive",
            vesting_period=vesting_period,
        )
