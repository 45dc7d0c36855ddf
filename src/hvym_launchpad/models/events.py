"""Domain notifications emitted by launchpad operations.

Every notification is persisted to the ledger's notification log inside the
same transaction as the state change it describes, so a rolled-back
operation never leaves a notification behind.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CampaignCreated:
    """An organizer opened a campaign and escrowed its tokens."""

    organizer: str
    token_id: str
    unit_price: int  # funds per token
    total_tokens: int
    start_time: int
    duration: int  # seconds
    vesting_period: int  # seconds


@dataclass(frozen=True)
class Contributed:
    """A contributor paid into an active campaign."""

    organizer: str
    contributor: str
    amount: int  # funds paid
    tokens_requested: int  # amount // unit_price


@dataclass(frozen=True)
class CampaignTerminated:
    """The organizer cancelled the campaign; contributors may claim refunds."""

    organizer: str


@dataclass(frozen=True)
class Settled:
    """Raised funds were split into a pool deposit and the platform fee.

    Also marks the campaign completed and starts the vesting clock.
    """

    organizer: str
    token_amount: int  # tokens paired into the pool
    pool_funds: int
    fee_funds: int
    implied_price: int  # pool_funds // token_amount
    vesting_start: int
    fee_pending: int = 0  # fee still owed when its transfer failed


@dataclass(frozen=True)
class TokensClaimed:
    """A contributor unlocked vested tokens."""

    organizer: str
    contributor: str
    amount: int


@dataclass(frozen=True)
class RefundIssued:
    """A contributor's funds were returned from a terminated or abandoned campaign."""

    organizer: str
    contributor: str
    amount: int


@dataclass(frozen=True)
class UnsoldReclaimed:
    """The organizer recovered tokens no contributor is entitled to."""

    organizer: str
    amount: int


@dataclass(frozen=True)
class FeePaid:
    """The platform fee of a settled campaign reached the fee recipient."""

    organizer: str
    recipient: str
    amount: int
