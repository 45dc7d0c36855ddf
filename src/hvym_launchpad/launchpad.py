"""Launchpad facade - wires the ledger, collaborators, and engines together."""

from __future__ import annotations

import logging
import time
from typing import Callable

from stellar_sdk import Keypair

from hvym_launchpad.config import validate_config
from hvym_launchpad.engine.lifecycle import LifecycleStateMachine
from hvym_launchpad.engine.refund import RefundEngine
from hvym_launchpad.engine.registry import CampaignRegistry
from hvym_launchpad.engine.settlement import SettlementEngine
from hvym_launchpad.engine.vesting import VestingCalculator
from hvym_launchpad.interfaces.pool import FundingPool
from hvym_launchpad.interfaces.store import LedgerStore
from hvym_launchpad.interfaces.token import TokenProvider
from hvym_launchpad.models.config import LaunchpadConfig
from hvym_launchpad.models.records import (
    CampaignPhase,
    CampaignRecord,
    ContributionRecord,
    SettlementResult,
)
from hvym_launchpad.stellar.pool import SorobanFundingPool
from hvym_launchpad.stellar.token import SorobanTokenProvider
from hvym_launchpad.storage.sqlite import SQLiteLedgerStore

log = logging.getLogger(__name__)

NETWORK_PASSPHRASES = {
    "testnet": "Test SDF Network ; September 2015",
    "mainnet": "Public Global Stellar Network ; September 2015",
}


def unix_now() -> int:
    return int(time.time())


class Launchpad:
    """Fundraising-and-distribution ledger.

    The platform account (derived from ``keypair_secret``) custodies escrowed
    tokens and raised funds. Collaborators default to the Soroban clients and
    can be replaced, e.g. by test doubles.
    """

    def __init__(
        self,
        cfg: LaunchpadConfig,
        store: LedgerStore | None = None,
        tokens: TokenProvider | None = None,
        pool: FundingPool | None = None,
        clock: Callable[[], int] | None = None,
    ) -> None:
        validate_config(cfg)
        self._cfg = cfg
        self._clock = clock or unix_now

        passphrase = cfg.network_passphrase or NETWORK_PASSPHRASES.get(cfg.network, "")
        keypair = Keypair.from_secret(cfg.keypair_secret)
        self.platform_address = keypair.public_key

        self._owned: list = []
        if store is None:
            store = SQLiteLedgerStore(cfg.db_path)
            self._owned.append(store)
        if tokens is None:
            tokens = SorobanTokenProvider(cfg.rpc_url, passphrase, keypair)
            self._owned.append(tokens)
        if pool is None:
            pool = SorobanFundingPool(
                cfg.pool.router_id, cfg.funds_token_id, cfg.rpc_url, passphrase, keypair,
            )
            self._owned.append(pool)

        self.store = store
        self.tokens = tokens
        self.funds = tokens.token(cfg.funds_token_id)
        self.pool = pool

        self.registry = CampaignRegistry(
            store, tokens, self.platform_address, self._clock,
        )
        self.lifecycle = LifecycleStateMachine(
            store, self.funds, self.platform_address, cfg.grace_period, self._clock,
        )
        self.settlement = SettlementEngine(
            store=store,
            tokens=tokens,
            funds=self.funds,
            pool=pool,
            platform_address=self.platform_address,
            fee_recipient=cfg.fee_recipient,
            fee_percent=cfg.fee_percent,
            grace_period=cfg.grace_period,
            pool_config=cfg.pool,
            clock=self._clock,
        )
        self.vesting = VestingCalculator(store, tokens, self._clock)
        self.refunds = RefundEngine(store, tokens, self.funds, cfg.grace_period, self._clock)

    @property
    def config(self) -> LaunchpadConfig:
        return self._cfg

    def now(self) -> int:
        return self._clock()

    async def initialize(self) -> None:
        log.info("Starting hvym_launchpad")
        log.info("  Platform: %s", self.platform_address)
        log.info("  Fee: %d%% -> %s", self._cfg.fee_percent, self._cfg.fee_recipient or "(not set)")
        log.info("  Grace period: %ds", self._cfg.grace_period)
        await self.store.initialize()

    async def close(self) -> None:
        await self.store.close()
        for component in self._owned:
            if component is not self.store:
                await component.close()

    # ── Operations ─────────────────────────────────────────

    async def create(
        self,
        organizer: str,
        token_id: str,
        unit_price: int,
        total_tokens: int,
        duration: int,
        vesting_period: int,
    ) -> CampaignRecord:
        return await self.registry.create(
            organizer, token_id, unit_price, total_tokens, duration, vesting_period,
        )

    async def contribute(self, organizer: str, contributor: str, amount: int) -> int:
        return await self.lifecycle.contribute(organizer, contributor, amount)

    async def terminate(self, organizer: str) -> bool:
        return await self.lifecycle.terminate(organizer)

    async def settle(self, organizer: str, token_amount: int) -> SettlementResult:
        return await self.settlement.settle(organizer, token_amount)

    async def pay_pending_fee(self, organizer: str) -> int:
        return await self.settlement.pay_pending_fee(organizer)

    async def claim_tokens(self, organizer: str, contributor: str) -> int:
        return await self.vesting.claim_tokens(organizer, contributor)

    async def claim_refund(self, organizer: str, contributor: str) -> int:
        return await self.refunds.claim_refund(organizer, contributor)

    async def reclaim_unsold(self, organizer: str) -> int:
        return await self.refunds.reclaim_unsold(organizer)

    # ── Reads ──────────────────────────────────────────────

    async def get_campaign(self, organizer: str) -> CampaignRecord | None:
        return await self.store.get_campaign(organizer)

    async def get_contribution(self, organizer: str, contributor: str) -> ContributionRecord:
        return await self.store.get_contribution(organizer, contributor)

    async def custody_balance(self, token_id: str) -> int:
        """Amount of ``token_id`` currently held by the platform account."""
        return await self.tokens.token(token_id).balance_of(self.platform_address)

    def phase_of(self, campaign: CampaignRecord) -> CampaignPhase:
        return campaign.phase(self._clock(), self._cfg.grace_period)
