"""SQLite implementation of the LedgerStore protocol."""

from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import AsyncIterator

import aiosqlite

from hvym_launchpad.interfaces.notifications import Notification
from hvym_launchpad.models.records import (
    CampaignRecord,
    ContributionRecord,
    NotificationRecord,
)

SCHEMA = """
-- Campaign registry: one row per organizer, never deleted
CREATE TABLE IF NOT EXISTS campaigns (
    organizer TEXT PRIMARY KEY,
    token_id TEXT NOT NULL CHECK (token_id <> ''),
    unit_price INTEGER NOT NULL CHECK (unit_price > 0),
    total_tokens INTEGER NOT NULL,
    remaining_tokens INTEGER NOT NULL CHECK (remaining_tokens >= 0),
    start_time INTEGER NOT NULL,
    duration INTEGER NOT NULL,
    vesting_period INTEGER NOT NULL,
    raised INTEGER NOT NULL DEFAULT 0,
    vesting_start INTEGER,
    completed INTEGER NOT NULL DEFAULT 0,
    terminated INTEGER NOT NULL DEFAULT 0,
    unsold_reclaimed INTEGER NOT NULL DEFAULT 0,
    fee_pending INTEGER NOT NULL DEFAULT 0 CHECK (fee_pending >= 0),
    created_at TEXT NOT NULL DEFAULT (datetime('now')),
    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
    CHECK (NOT (completed AND terminated)),
    CHECK ((vesting_start IS NOT NULL) = (completed = 1))
);

-- Contribution ledger: (organizer, contributor) accounting
CREATE TABLE IF NOT EXISTS contributions (
    organizer TEXT NOT NULL REFERENCES campaigns(organizer),
    contributor TEXT NOT NULL,
    contributed INTEGER NOT NULL DEFAULT 0 CHECK (contributed >= 0),
    claimed INTEGER NOT NULL DEFAULT 0 CHECK (claimed >= 0),
    updated_at TEXT NOT NULL DEFAULT (datetime('now')),
    PRIMARY KEY (organizer, contributor)
);

-- Emitted domain notifications
CREATE TABLE IF NOT EXISTS notifications (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    kind TEXT NOT NULL,
    organizer TEXT NOT NULL,
    contributor TEXT,
    amount INTEGER,
    payload TEXT NOT NULL,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);
CREATE INDEX IF NOT EXISTS idx_notifications_organizer ON notifications(organizer);
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class SQLiteLedgerStore:
    """SQLite-backed implementation of the LedgerStore protocol.

    The connection runs in autocommit mode; ``transaction()`` issues an
    explicit ``BEGIN IMMEDIATE`` so that every write made by one operation
    commits or rolls back together.
    """

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path
        self._db: aiosqlite.Connection | None = None
        self._lock = asyncio.Lock()

    async def initialize(self) -> None:
        Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        self._db = await aiosqlite.connect(self._db_path, isolation_level=None)
        self._db.row_factory = aiosqlite.Row
        await self._db.execute("PRAGMA foreign_keys = ON")
        await self._db.executescript(SCHEMA)

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None

    @property
    def db(self) -> aiosqlite.Connection:
        assert self._db is not None, "Store not initialized. Call initialize() first."
        return self._db

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        async with self._lock:
            await self.db.execute("BEGIN IMMEDIATE")
            try:
                yield
            except BaseException:
                await self.db.execute("ROLLBACK")
                raise
            await self.db.execute("COMMIT")

    # ── Campaign registry ──────────────────────────────────

    async def get_campaign(self, organizer: str) -> CampaignRecord | None:
        async with self.db.execute(
            "SELECT * FROM campaigns WHERE organizer=?", (organizer,)
        ) as cur:
            row = await cur.fetchone()
            return _row_to_campaign(row) if row else None

    async def insert_campaign(self, record: CampaignRecord) -> None:
        now = _now()
        await self.db.execute(
            "INSERT INTO campaigns"
            " (organizer, token_id, unit_price, total_tokens, remaining_tokens,"
            "  start_time, duration, vesting_period, raised, vesting_start,"
            "  completed, terminated, unsold_reclaimed, fee_pending, created_at, updated_at)"
            " VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                record.organizer, record.token_id, record.unit_price,
                record.total_tokens, record.remaining_tokens, record.start_time,
                record.duration, record.vesting_period, record.raised,
                record.vesting_start, int(record.completed),
                int(record.terminated), int(record.unsold_reclaimed), record.fee_pending,
                now, now,
            ),
        )
        record.created_at = record.updated_at = now

    async def update_campaign(self, record: CampaignRecord) -> None:
        # Terms (token, price, start, duration, vesting period) are immutable.
        record.updated_at = _now()
        await self.db.execute(
            "UPDATE campaigns SET remaining_tokens=?, raised=?, vesting_start=?,"
            " completed=?, terminated=?, unsold_reclaimed=?, fee_pending=?, updated_at=?"
            " WHERE organizer=?",
            (
                record.remaining_tokens, record.raised, record.vesting_start,
                int(record.completed), int(record.terminated),
                int(record.unsold_reclaimed), record.fee_pending, record.updated_at,
                record.organizer,
            ),
        )

    async def list_campaigns(self) -> list[CampaignRecord]:
        async with self.db.execute("SELECT * FROM campaigns ORDER BY start_time") as cur:
            return [_row_to_campaign(row) async for row in cur]

    # ── Contribution ledger ────────────────────────────────

    async def get_contribution(self, organizer: str, contributor: str) -> ContributionRecord:
        async with self.db.execute(
            "SELECT * FROM contributions WHERE organizer=? AND contributor=?",
            (organizer, contributor),
        ) as cur:
            row = await cur.fetchone()
            if row:
                return _row_to_contribution(row)
        return ContributionRecord(organizer=organizer, contributor=contributor)

    async def save_contribution(self, record: ContributionRecord) -> None:
        record.updated_at = _now()
        await self.db.execute(
            "INSERT INTO contributions (organizer, contributor, contributed, claimed, updated_at)"
            " VALUES (?, ?, ?, ?, ?)"
            " ON CONFLICT(organizer, contributor) DO UPDATE SET"
            " contributed=excluded.contributed, claimed=excluded.claimed,"
            " updated_at=excluded.updated_at",
            (
                record.organizer, record.contributor, record.contributed,
                record.claimed, record.updated_at,
            ),
        )

    async def get_contributions(self, organizer: str) -> list[ContributionRecord]:
        async with self.db.execute(
            "SELECT * FROM contributions WHERE organizer=? ORDER BY contributor",
            (organizer,),
        ) as cur:
            return [_row_to_contribution(row) async for row in cur]

    async def total_contributed(self, organizer: str) -> int:
        async with self.db.execute(
            "SELECT COALESCE(SUM(contributed), 0) as s FROM contributions WHERE organizer=?",
            (organizer,),
        ) as cur:
            row = await cur.fetchone()
            return row["s"] if row else 0

    async def total_entitled(self, organizer: str, unit_price: int) -> int:
        # Integer operands, so SQLite division truncates like Python's //.
        async with self.db.execute(
            "SELECT COALESCE(SUM(contributed / ?), 0) as s FROM contributions WHERE organizer=?",
            (unit_price, organizer),
        ) as cur:
            row = await cur.fetchone()
            return row["s"] if row else 0

    # ── Notifications ──────────────────────────────────────

    async def record_notification(self, event: Notification) -> None:
        await self.db.execute(
            "INSERT INTO notifications (kind, organizer, contributor, amount, payload, created_at)"
            " VALUES (?, ?, ?, ?, ?, ?)",
            (
                type(event).__name__,
                event.organizer,
                getattr(event, "contributor", None),
                getattr(event, "amount", None),
                json.dumps(asdict(event)),
                _now(),
            ),
        )

    async def get_notifications(
        self, organizer: str | None = None, limit: int = 50
    ) -> list[NotificationRecord]:
        if organizer:
            sql = "SELECT * FROM notifications WHERE organizer=? ORDER BY id DESC LIMIT ?"
            params: tuple = (organizer, limit)
        else:
            sql = "SELECT * FROM notifications ORDER BY id DESC LIMIT ?"
            params = (limit,)
        async with self.db.execute(sql, params) as cur:
            return [
                NotificationRecord(
                    id=row["id"],
                    kind=row["kind"],
                    organizer=row["organizer"],
                    contributor=row["contributor"],
                    amount=row["amount"],
                    payload=json.loads(row["payload"]),
                    created_at=row["created_at"],
                )
                async for row in cur
            ]


# ── Row converters ─────────────────────────────────────────


def _row_to_campaign(row: aiosqlite.Row) -> CampaignRecord:
    return CampaignRecord(
        organizer=row["organizer"],
        token_id=row["token_id"],
        unit_price=row["unit_price"],
        total_tokens=row["total_tokens"],
        remaining_tokens=row["remaining_tokens"],
        start_time=row["start_time"],
        duration=row["duration"],
        vesting_period=row["vesting_period"],
        raised=row["raised"],
        vesting_start=row["vesting_start"],
        completed=bool(row["completed"]),
        terminated=bool(row["terminated"]),
        unsold_reclaimed=bool(row["unsold_reclaimed"]),
        fee_pending=row["fee_pending"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _row_to_contribution(row: aiosqlite.Row) -> ContributionRecord:
    return ContributionRecord(
        organizer=row["organizer"],
        contributor=row["contributor"],
        contributed=row["contributed"],
        claimed=row["claimed"],
        updated_at=row["updated_at"],
    )
