"""Notification union - every domain event a launchpad operation can emit."""

from __future__ import annotations

from typing import Union

from hvym_launchpad.models.events import (
    CampaignCreated,
    CampaignTerminated,
    Contributed,
    FeePaid,
    RefundIssued,
    Settled,
    TokensClaimed,
    UnsoldReclaimed,
)

Notification = Union[
    CampaignCreated,
    Contributed,
    CampaignTerminated,
    Settled,
    TokensClaimed,
    RefundIssued,
    UnsoldReclaimed,
    FeePaid,
]
