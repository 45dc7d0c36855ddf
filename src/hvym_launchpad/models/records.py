"""Ledger record types and operation results."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class CampaignPhase(str, Enum):
    """Lifecycle phase of a campaign at a given instant."""

    ACTIVE = "active"  # accepting contributions
    ENDED_PENDING = "ended_pending"  # sale closed, organizer may still settle
    COMPLETED = "completed"  # settled, tokens vesting
    TERMINATED = "terminated"  # cancelled by the organizer
    ABANDONED = "abandoned"  # grace period elapsed without settlement


@dataclass
class CampaignRecord:
    """A campaign as persisted in the registry. One per organizer, forever."""

    organizer: str
    token_id: str
    unit_price: int  # funds per token, immutable
    total_tokens: int  # escrowed at creation
    remaining_tokens: int
    start_time: int
    duration: int
    vesting_period: int
    raised: int = 0
    vesting_start: int | None = None  # set iff completed
    completed: bool = False
    terminated: bool = False
    unsold_reclaimed: bool = False
    fee_pending: int = 0  # platform fee owed to the fee recipient after settlement
    created_at: str = ""
    updated_at: str = ""

    @property
    def end_time(self) -> int:
        return self.start_time + self.duration

    def settle_deadline(self, grace_period: int) -> int:
        """Last instant at which the organizer may still settle."""
        return self.end_time + grace_period

    def is_abandoned(self, now: int, grace_period: int) -> bool:
        return (
            not self.completed
            and not self.terminated
            and now >= self.settle_deadline(grace_period)
        )

    def phase(self, now: int, grace_period: int) -> CampaignPhase:
        if self.completed:
            return CampaignPhase.COMPLETED
        if self.terminated:
            return CampaignPhase.TERMINATED
        if now <= self.end_time:
            return CampaignPhase.ACTIVE
        if now < self.settle_deadline(grace_period):
            return CampaignPhase.ENDED_PENDING
        return CampaignPhase.ABANDONED


@dataclass
class ContributionRecord:
    """Per (organizer, contributor) accounting entry."""

    organizer: str
    contributor: str
    contributed: int = 0  # funds
    claimed: int = 0  # tokens
    updated_at: str = ""

    def entitlement(self, unit_price: int) -> int:
        """Total tokens this contribution buys; the remainder is not credited."""
        return self.contributed // unit_price


@dataclass
class PoolDeposit:
    """Amounts actually accepted by the funding pool."""

    token_amount: int
    paired_amount: int
    liquidity: int = 0  # pool shares credited to the platform


@dataclass
class SettlementResult:
    """Outcome of a successful settlement."""

    organizer: str
    pool_funds: int
    fee_funds: int
    implied_price: int
    vesting_start: int
    deposit: PoolDeposit
    fee_pending: int = 0  # fee left unpaid because its transfer failed


@dataclass
class NotificationRecord:
    """A persisted domain notification."""

    id: int
    kind: str  # event class name, e.g. "Contributed"
    organizer: str
    contributor: str | None
    amount: int | None
    payload: dict
    created_at: str
