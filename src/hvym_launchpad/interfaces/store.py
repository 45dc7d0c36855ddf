"""LedgerStore protocol - the campaign registry and contribution ledger."""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import Protocol

from hvym_launchpad.interfaces.notifications import Notification
from hvym_launchpad.models.records import (
    CampaignRecord,
    ContributionRecord,
    NotificationRecord,
)


class LedgerStore(Protocol):
    """Owns campaign records and per-contributor accounting entries.

    Writes are only durable inside ``transaction()``; leaving the block with
    an exception discards every write made in it.
    """

    # ── Lifecycle ──────────────────────────────────────────

    async def initialize(self) -> None:
        """Create tables if they don't exist."""
        ...

    async def close(self) -> None:
        ...

    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Serialize one operation and make its writes all-or-nothing."""
        ...

    # ── Campaign registry ──────────────────────────────────

    async def get_campaign(self, organizer: str) -> CampaignRecord | None:
        ...

    async def insert_campaign(self, record: CampaignRecord) -> None:
        ...

    async def update_campaign(self, record: CampaignRecord) -> None:
        ...

    async def list_campaigns(self) -> list[CampaignRecord]:
        ...

    # ── Contribution ledger ────────────────────────────────

    async def get_contribution(self, organizer: str, contributor: str) -> ContributionRecord:
        """Return the entry, or a zeroed one if the pair has never contributed."""
        ...

    async def save_contribution(self, record: ContributionRecord) -> None:
        ...

    async def get_contributions(self, organizer: str) -> list[ContributionRecord]:
        ...

    async def total_contributed(self, organizer: str) -> int:
        ...

    async def total_entitled(self, organizer: str, unit_price: int) -> int:
        """Sum of every contributor's ``contributed // unit_price``."""
        ...

    # ── Notifications ──────────────────────────────────────

    async def record_notification(self, event: Notification) -> None:
        ...

    async def get_notifications(
        self, organizer: str | None = None, limit: int = 50
    ) -> list[NotificationRecord]:
        ...
