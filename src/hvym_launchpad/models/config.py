"""Configuration models for the launchpad."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class PoolConfig:
    """Funding-pool deposit parameters, fixed for the deployment."""

    router_id: str = ""  # Soroswap-style router contract ID
    slippage_bps: int = 0  # tolerated shortfall on deposit, basis points
    deadline: int = 300  # seconds a deposit may wait before the router rejects it


@dataclass
class LaunchpadConfig:
    """Complete launchpad configuration."""

    # Launchpad
    fee_percent: int = 1  # whole-number percentage of raised funds
    grace_period: int = 7 * 86400  # seconds after a sale ends during which settle is allowed
    fee_recipient: str = ""  # Stellar address receiving platform fees
    log_level: str = "info"

    # Stellar
    network: str = "testnet"
    rpc_url: str = "https://soroban-testnet.stellar.org"
    network_passphrase: str = "Test SDF Network ; September 2015"
    funds_token_id: str = ""  # SAC contract ID of the asset contributors pay with
    keypair_secret: str = ""  # platform custody account, loaded from env var HVYM_LAUNCHPAD_SECRET

    # Funding pool
    pool: PoolConfig = field(default_factory=PoolConfig)

    # Storage
    db_path: str = "~/.hvym_launchpad/ledger.db"
