"""JSON-serializable snapshot models for the public read surface."""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any


def to_dict(obj: Any) -> dict:
    """Recursively convert a dataclass to a plain dict."""
    return asdict(obj)


@dataclass
class CampaignSnapshot:
    organizer: str
    token_id: str
    phase: str  # CampaignPhase value at snapshot time
    unit_price: int
    total_tokens: int
    remaining_tokens: int
    tokens_sold: int
    raised: int
    start_time: int
    end_time: int
    settle_deadline: int
    vesting_start: int | None
    vesting_end: int | None
    vesting_period: int
    completed: bool
    terminated: bool
    unsold_reclaimed: bool
    fee_pending: int


@dataclass
class ContributionSnapshot:
    organizer: str
    contributor: str
    contributed: int
    claimed: int
    entitled: int  # contributed // unit_price
    vested: int  # unlocked so far, capped at entitled
    claimable: int  # vested - claimed, never negative
    refundable: int  # contributed, when a refund is currently legal


@dataclass
class NotificationEntry:
    id: int
    kind: str
    organizer: str
    contributor: str | None
    amount: int | None
    payload: dict
    created_at: str
