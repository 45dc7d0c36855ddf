"""Configuration loading: TOML file + environment variables."""

from __future__ import annotations

import os
from pathlib import Path

try:
    import tomllib  # Python 3.11+
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

from hvym_launchpad.errors import ConfigurationError
from hvym_launchpad.models.config import LaunchpadConfig, PoolConfig


def load_config(
    config_path: str | Path | None = None,
    env_prefix: str = "HVYM_LAUNCHPAD_",
) -> LaunchpadConfig:
    """Load launchpad configuration from TOML file and env vars.

    Priority (highest wins):
        1. Environment variables (HVYM_LAUNCHPAD_SECRET, etc.)
        2. TOML config file
        3. Defaults from LaunchpadConfig

    Fee and pool parameters are read once here and stay fixed for the life
    of the process.
    """
    raw: dict = {}
    if config_path is not None:
        p = Path(config_path).expanduser()
        if p.exists():
            with open(p, "rb") as f:
                raw = tomllib.load(f)

    cfg = LaunchpadConfig()

    # ── Launchpad section ──────────────────────────────────
    launchpad = raw.get("launchpad", {})
    if (v := launchpad.get("fee_percent")) is not None:
        cfg.fee_percent = int(v)
    if (v := launchpad.get("grace_period")) is not None:
        cfg.grace_period = int(v)
    if v := launchpad.get("fee_recipient"):
        cfg.fee_recipient = str(v)
    if v := launchpad.get("log_level"):
        cfg.log_level = str(v)

    # ── Stellar section ────────────────────────────────────
    stellar = raw.get("stellar", {})
    if v := stellar.get("network"):
        cfg.network = str(v)
    if v := stellar.get("rpc_url"):
        cfg.rpc_url = str(v)
    if v := stellar.get("network_passphrase"):
        cfg.network_passphrase = str(v)
    if v := stellar.get("funds_token_id"):
        cfg.funds_token_id = str(v)
    if v := stellar.get("keypair_secret"):
        cfg.keypair_secret = str(v)

    # ── Pool section ───────────────────────────────────────
    pool_raw = raw.get("pool", {})
    cfg.pool = PoolConfig(
        router_id=pool_raw.get("router_id", ""),
        slippage_bps=int(pool_raw.get("slippage_bps", 0)),
        deadline=int(pool_raw.get("deadline", 300)),
    )

    # ── Storage section ────────────────────────────────────
    storage = raw.get("storage", {})
    if v := storage.get("db_path"):
        cfg.db_path = str(v)

    # ── Environment variable overrides (highest priority) ──
    if secret := os.environ.get(f"{env_prefix}SECRET"):
        cfg.keypair_secret = secret
    if net := os.environ.get(f"{env_prefix}NETWORK"):
        cfg.network = net
    if rpc := os.environ.get(f"{env_prefix}RPC_URL"):
        cfg.rpc_url = rpc
    if recipient := os.environ.get(f"{env_prefix}FEE_RECIPIENT"):
        cfg.fee_recipient = recipient
    if db_path := os.environ.get(f"{env_prefix}DB_PATH"):
        cfg.db_path = db_path

    # Expand ~ in paths
    if cfg.db_path != ":memory:":
        cfg.db_path = str(Path(cfg.db_path).expanduser())

    validate_config(cfg)
    return cfg


def validate_config(cfg: LaunchpadConfig) -> None:
    """Reject parameter values the settlement math cannot honour."""
    if not 0 <= cfg.fee_percent <= 100:
        raise ConfigurationError(f"fee_percent must be within 0..100, got {cfg.fee_percent}")
    if cfg.grace_period < 0:
        raise ConfigurationError(f"grace_period must not be negative, got {cfg.grace_period}")
    if not 0 <= cfg.pool.slippage_bps <= 10_000:
        raise ConfigurationError(
            f"pool slippage_bps must be within 0..10000, got {cfg.pool.slippage_bps}"
        )
    if cfg.pool.deadline <= 0:
        raise ConfigurationError(f"pool deadline must be positive, got {cfg.pool.deadline}")
