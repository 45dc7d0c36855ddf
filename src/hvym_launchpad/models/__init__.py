"""Data models for the hvym_launchpad ledger."""

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
from hvym_launchpad.models.records import (
    CampaignPhase,
    CampaignRecord,
    ContributionRecord,
    NotificationRecord,
    PoolDeposit,
    SettlementResult,
)
from hvym_launchpad.models.config import LaunchpadConfig, PoolConfig
from hvym_launchpad.models.snapshots import (
    CampaignSnapshot,
    ContributionSnapshot,
    NotificationEntry,
)

__all__ = [
    "CampaignCreated", "CampaignTerminated", "Contributed", "RefundIssued",
    "FeePaid", "Settled", "TokensClaimed", "UnsoldReclaimed",
    "CampaignPhase", "CampaignRecord", "ContributionRecord",
    "NotificationRecord", "PoolDeposit", "SettlementResult",
    "LaunchpadConfig", "PoolConfig",
    "CampaignSnapshot", "ContributionSnapshot", "NotificationEntry",
]
