"""Campaign lifecycle engines."""

from hvym_launchpad.engine.lifecycle import LifecycleStateMachine
from hvym_launchpad.engine.refund import RefundEngine
from hvym_launchpad.engine.registry import CampaignRegistry
from hvym_launchpad.engine.settlement import SettlementEngine
from hvym_launchpad.engine.vesting import VestingCalculator

__all__ = [
    "CampaignRegistry",
    "LifecycleStateMachine",
    "SettlementEngine",
    "VestingCalculator",
    "RefundEngine",
]
