"""Settlement engine - converts raised funds into a pool deposit plus a fee.

Split math, all integer:

    pool_funds    = raised * (100 - fee_percent) // 100
    fee_funds     = raised - pool_funds
    implied_price = pool_funds // token_amount

Settlement is refused when ``implied_price < unit_price``: contributors must
never see the pool seeded at worse economics than they paid.

The pool deposit is the point of no return. The fee transfer runs after it;
if that transfer fails the campaign still completes and the fee stays in
``fee_pending`` until ``pay_pending_fee`` succeeds.
"""

from __future__ import annotations

import logging
from typing import Callable

from hvym_launchpad.engine.lifecycle import require_campaign
from hvym_launchpad.engine.operation import atomic
from hvym_launchpad.errors import (
    CollaboratorError,
    EconomicError,
    ErrorKind,
    StateError,
    ValidationError,
)
from hvym_launchpad.interfaces.pool import FundingPool
from hvym_launchpad.interfaces.store import LedgerStore
from hvym_launchpad.interfaces.token import Token, TokenProvider
from hvym_launchpad.models.config import PoolConfig
from hvym_launchpad.models.events import FeePaid, Settled
from hvym_launchpad.models.records import SettlementResult

log = logging.getLogger(__name__)

BPS = 10_000


def split_raised(raised: int, fee_percent: int) -> tuple[int, int]:
    """Return ``(pool_funds, fee_funds)``; the two always sum to ``raised``."""
    pool_funds = raised * (100 - fee_percent) // 100
    return pool_funds, raised - pool_funds


def implied_price(pool_funds: int, token_amount: int) -> int:
    return pool_funds // token_amount


def with_slippage(amount: int, slippage_bps: int) -> int:
    """Minimum acceptable amount after tolerating ``slippage_bps``."""
    return amount * (BPS - slippage_bps) // BPS


class SettlementEngine:
    """Completes a campaign by seeding the funding pool and paying the fee."""

    def __init__(
        self,
        store: LedgerStore,
        tokens: TokenProvider,
        funds: Token,
        pool: FundingPool,
        platform_address: str,
        fee_recipient: str,
        fee_percent: int,
        grace_period: int,
        pool_config: PoolConfig,
        clock: Callable[[], int],
    ) -> None:
        self._store = store
        self._tokens = tokens
        self._funds = funds
        self._pool = pool
        self._platform = platform_address
        self._fee_recipient = fee_recipient
        self._fee_percent = fee_percent
        self._grace_period = grace_period
        self._pool_cfg = pool_config
        self._clock = clock

    async def settle(self, organizer: str, token_amount: int) -> SettlementResult:
        """Seed the pool with ``token_amount`` tokens and the raised funds.

        Checks run in this order: token amount is positive, campaign exists,
        not yet settled, not terminated or past its settle deadline, implied
        price at or above the sale price.
        """
        async with atomic(self._store, "settle") as compensations:
            if token_amount <= 0:
                raise ValidationError(
                    ErrorKind.ZERO_AMOUNT,
                    "Settlement token amount must be positive",
                    token_amount=token_amount,
                )
            campaign = await require_campaign(self._store, organizer)
            if campaign.completed:
                raise StateError(
                    ErrorKind.CAMPAIGN_COMPLETED, "Campaign is already settled",
                    organizer=organizer,
                )

            now = self._clock()
            deadline = campaign.settle_deadline(self._grace_period)
            if campaign.terminated or now > deadline:
                raise StateError(
                    ErrorKind.CAMPAIGN_TERMINATED_OR_ABANDONED,
                    "Campaign can no longer be settled",
                    organizer=organizer,
                    terminated=campaign.terminated,
                    now=now,
                    settle_deadline=deadline,
                )

            pool_funds, fee_funds = split_raised(campaign.raised, self._fee_percent)
            price = implied_price(pool_funds, token_amount)
            if price < campaign.unit_price:
                raise EconomicError(
                    ErrorKind.PRICE_BELOW_FLOOR,
                    "Pool would be seeded below the sale price",
                    implied_price=price,
                    unit_price=campaign.unit_price,
                    pool_funds=pool_funds,
                    token_amount=token_amount,
                )

            campaign.vesting_start = now
            campaign.completed = True
            campaign.fee_pending = fee_funds
            await self._store.update_campaign(campaign)

            token = self._tokens.token(campaign.token_id)
            await token.transfer_from(organizer, self._platform, token_amount)
            compensations.push(
                f"escrow of {token_amount} tokens from {organizer[:16]}",
                lambda: token.transfer(organizer, token_amount),
            )

            pool_id = self._pool.pool_id
            await token.approve(pool_id, token_amount)
            compensations.push("token allowance", lambda: token.approve(pool_id, 0))
            await self._funds.approve(pool_id, pool_funds)
            compensations.push("funds allowance", lambda: self._funds.approve(pool_id, 0))

            deposit = await self._pool.deposit_paired(
                token_id=campaign.token_id,
                token_amount=token_amount,
                paired_amount=pool_funds,
                min_token_amount=with_slippage(token_amount, self._pool_cfg.slippage_bps),
                min_paired_amount=with_slippage(pool_funds, self._pool_cfg.slippage_bps),
                recipient=self._platform,
                deadline=now + self._pool_cfg.deadline,
            )
            # The deposit cannot be pulled back; completion commits from here on.
            compensations.seal()

            if fee_funds > 0:
                try:
                    await self._funds.transfer(self._fee_recipient, fee_funds)
                except CollaboratorError as exc:
                    log.warning(
                        "Settlement fee of %d for %s left pending: %s",
                        fee_funds, organizer[:16], exc,
                    )
                else:
                    campaign.fee_pending = 0
                    await self._store.update_campaign(campaign)

            await self._store.record_notification(Settled(
                organizer=organizer,
                token_amount=token_amount,
                pool_funds=pool_funds,
                fee_funds=fee_funds,
                implied_price=price,
                vesting_start=now,
                fee_pending=campaign.fee_pending,
            ))

        log.info(
            "Settled: organizer=%s raised=%d pool=%d fee=%d tokens=%d price=%d",
            organizer[:16], campaign.raised, pool_funds, fee_funds, token_amount, price,
        )
        return SettlementResult(
            organizer=organizer,
            pool_funds=pool_funds,
            fee_funds=fee_funds,
            implied_price=price,
            vesting_start=now,
            deposit=deposit,
            fee_pending=campaign.fee_pending,
        )

    async def pay_pending_fee(self, organizer: str) -> int:
        """Retry a settlement fee whose transfer failed; 0 means nothing was owed."""
        async with atomic(self._store, "pay_pending_fee"):
            campaign = await require_campaign(self._store, organizer)
            if not campaign.completed:
                raise StateError(
                    ErrorKind.CAMPAIGN_NOT_COMPLETED,
                    "Campaign has not been settled",
                    organizer=organizer,
                )
            amount = campaign.fee_pending
            if amount <= 0:
                return 0

            campaign.fee_pending = 0
            await self._store.update_campaign(campaign)

            await self._funds.transfer(self._fee_recipient, amount)

            await self._store.record_notification(FeePaid(
                organizer=organizer, recipient=self._fee_recipient, amount=amount,
            ))

        log.info("Pending fee paid: organizer=%s amount=%d", organizer[:16], amount)
        return amount
