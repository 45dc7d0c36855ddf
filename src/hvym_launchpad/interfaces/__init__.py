"""Protocol interfaces for all hvym_launchpad components."""

from hvym_launchpad.interfaces.notifications import Notification
from hvym_launchpad.interfaces.pool import FundingPool
from hvym_launchpad.interfaces.store import LedgerStore
from hvym_launchpad.interfaces.token import Token, TokenProvider

__all__ = [
    "Notification",
    "FundingPool",
    "LedgerStore",
    "Token", "TokenProvider",
]
