"""Launchpad error taxonomy.

Every failed operation raises one of these before any ledger change is
committed. ``kind`` identifies the failure precisely; ``detail`` carries the
offending values (for example requested vs available supply).
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    # Validation
    CAMPAIGN_EXISTS = "campaign_exists"
    INVALID_TOKEN = "invalid_token"
    ZERO_AMOUNT = "zero_amount"
    ZERO_PRICE = "zero_price"
    ZERO_DURATION = "zero_duration"
    ZERO_VESTING_PERIOD = "zero_vesting_period"

    # State
    CAMPAIGN_NOT_FOUND = "campaign_not_found"
    CAMPAIGN_NOT_ACTIVE = "campaign_not_active"
    CAMPAIGN_COMPLETED = "campaign_completed"
    CAMPAIGN_NOT_COMPLETED = "campaign_not_completed"
    CAMPAIGN_TERMINATED_OR_ABANDONED = "campaign_terminated_or_abandoned"
    CAMPAIGN_NOT_TERMINATED_OR_ABANDONED = "campaign_not_terminated_or_abandoned"
    CAMPAIGN_NOT_FINISHED = "campaign_not_finished"
    UNSOLD_ALREADY_RECLAIMED = "unsold_already_reclaimed"

    # Economic
    INSUFFICIENT_SUPPLY = "insufficient_supply"
    PRICE_BELOW_FLOOR = "price_below_floor"


class LaunchpadError(Exception):
    """Base class for all operation failures."""

    def __init__(self, kind: ErrorKind, message: str, **detail: object) -> None:
        super().__init__(message)
        self.kind = kind
        self.detail = detail

    def __str__(self) -> str:
        msg = super().__str__()
        if not self.detail:
            return msg
        extra = ", ".join(f"{k}={v}" for k, v in self.detail.items())
        return f"{msg} ({extra})"


class ValidationError(LaunchpadError):
    """Zero or invalid parameters, campaign already exists, invalid token."""


class StateError(LaunchpadError):
    """Operation not legal in the campaign's current lifecycle phase."""


class EconomicError(LaunchpadError):
    """Insufficient supply or settlement price below the floor."""


class CollaboratorError(Exception):
    """A token or funding-pool call failed on the network side."""

    def __init__(self, operation: str, reason: str, tx_hash: str | None = None) -> None:
        super().__init__(f"{operation} failed: {reason}")
        self.operation = operation
        self.reason = reason
        self.tx_hash = tx_hash


class CompensationError(CollaboratorError):
    """An operation failed and some of its outward effects could not be undone.

    ``failed`` names each custody move that is still in effect; the ledger
    was rolled back, so those moves are owned by no ledger record until an
    operator resolves them.
    """

    def __init__(self, operation: str, failed: list[str]) -> None:
        super().__init__(operation, "could not undo " + "; ".join(failed))
        self.failed = failed


class ConfigurationError(Exception):
    """Raised when the launchpad configuration is invalid."""
