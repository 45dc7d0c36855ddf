"""CLI entry point for the hvym_launchpad ledger."""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import Awaitable, Callable, TypeVar

import click

from hvym_launchpad.api.data_api import LaunchpadDataAPI
from hvym_launchpad.config import load_config
from hvym_launchpad.errors import CollaboratorError, ConfigurationError, LaunchpadError
from hvym_launchpad.launchpad import Launchpad
from hvym_launchpad.models.config import LaunchpadConfig
from hvym_launchpad.models.snapshots import to_dict

T = TypeVar("T")


def _load(ctx: click.Context) -> LaunchpadConfig:
    try:
        return load_config(ctx.obj["config_path"])
    except ConfigurationError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


def _require_secret(cfg: LaunchpadConfig) -> None:
    """Exit with error if no keypair secret is configured."""
    if not cfg.keypair_secret:
        click.echo("Error: No keypair secret configured.", err=True)
        click.echo("Set HVYM_LAUNCHPAD_SECRET env var or keypair_secret in config.", err=True)
        sys.exit(1)


def _require_funds_token(cfg: LaunchpadConfig) -> None:
    if not cfg.funds_token_id:
        click.echo("Error: No funds token configured.", err=True)
        click.echo("Set funds_token_id in the [stellar] config section.", err=True)
        sys.exit(1)


def _run(cfg: LaunchpadConfig, op: Callable[[Launchpad], Awaitable[T]]) -> T:
    """Run one ledger operation against a freshly opened Launchpad."""
    _require_secret(cfg)
    _require_funds_token(cfg)

    async def _go() -> T:
        launchpad = Launchpad(cfg)
        await launchpad.initialize()
        try:
            return await op(launchpad)
        finally:
            await launchpad.close()

    try:
        return asyncio.run(_go())
    except (LaunchpadError, CollaboratorError) as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


def _echo_json(obj) -> None:
    click.echo(json.dumps(obj, indent=2))


@click.group()
@click.option("-c", "--config", "config_path", default=None, help="Path to config TOML file")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: str | None, verbose: bool) -> None:
    """hvym_launchpad - Token sale launchpad for Stellar."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose

    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


# ── Info ───────────────────────────────────────────────


@cli.command()
@click.pass_context
def status(ctx: click.Context) -> None:
    """Show launchpad configuration."""
    cfg = _load(ctx)
    click.echo(f"Network:       {cfg.network}")
    click.echo(f"RPC URL:       {cfg.rpc_url}")
    click.echo(f"Funds token:   {cfg.funds_token_id or '(not set)'}")
    click.echo(f"Pool router:   {cfg.pool.router_id or '(not set)'}")
    click.echo(f"Fee:           {cfg.fee_percent}%")
    click.echo(f"Fee recipient: {cfg.fee_recipient or '(not set)'}")
    click.echo(f"Grace period:  {cfg.grace_period}s")
    click.echo(f"Slippage:      {cfg.pool.slippage_bps} bps")
    click.echo(f"DB path:       {cfg.db_path}")
    click.echo(f"Secret:        {'***configured***' if cfg.keypair_secret else '(not set)'}")


@cli.command()
@click.pass_context
def init(ctx: click.Context) -> None:
    """Create the ledger database."""
    cfg = _load(ctx)

    async def _init(lp: Launchpad) -> None:
        click.echo(f"Ledger ready at {cfg.db_path}")

    _run(cfg, _init)


# ── Operations ─────────────────────────────────────────


@cli.command()
@click.option("--organizer", required=True, help="Organizer address")
@click.option("--token", "token_id", required=True, help="Sale token contract ID")
@click.option("--price", type=int, required=True, help="Funds per whole token (stroops)")
@click.option("--supply", type=int, required=True, help="Tokens escrowed for sale")
@click.option("--duration", type=int, required=True, help="Sale window in seconds")
@click.option("--vesting", type=int, required=True, help="Vesting period in seconds")
@click.pass_context
def create(
    ctx: click.Context,
    organizer: str,
    token_id: str,
    price: int,
    supply: int,
    duration: int,
    vesting: int,
) -> None:
    """Open a campaign and escrow its token supply."""
    cfg = _load(ctx)
    record = _run(cfg, lambda lp: lp.create(organizer, token_id, price, supply, duration, vesting))
    click.echo(f"Campaign created for {record.organizer}")
    click.echo(f"  Sale ends: {record.end_time}")


@cli.command()
@click.argument("organizer")
@click.option("--contributor", required=True, help="Contributor address")
@click.option("--amount", type=int, required=True, help="Funds to contribute (stroops)")
@click.pass_context
def contribute(ctx: click.Context, organizer: str, contributor: str, amount: int) -> None:
    """Buy into an active campaign."""
    cfg = _load(ctx)
    tokens = _run(cfg, lambda lp: lp.contribute(organizer, contributor, amount))
    click.echo(f"Contributed {amount} stroops for {tokens} tokens")


@cli.command()
@click.argument("organizer")
@click.pass_context
def terminate(ctx: click.Context, organizer: str) -> None:
    """Cancel a campaign and open refunds."""
    cfg = _load(ctx)
    changed = _run(cfg, lambda lp: lp.terminate(organizer))
    click.echo("Campaign terminated" if changed else "Campaign was already terminated")


@cli.command()
@click.argument("organizer")
@click.option("--tokens", "token_amount", type=int, required=True, help="Tokens to pair in the pool")
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def settle(ctx: click.Context, organizer: str, token_amount: int, yes: bool) -> None:
    """Settle a campaign: seed the pool, pay the fee, start vesting."""
    cfg = _load(ctx)
    if not yes:
        click.confirm(f"Pair {token_amount} tokens with the raised funds?", abort=True)
    result = _run(cfg, lambda lp: lp.settle(organizer, token_amount))
    click.echo("Settlement successful!")
    click.echo(f"  Pool funds:    {result.pool_funds} stroops")
    click.echo(f"  Fee:           {result.fee_funds} stroops")
    click.echo(f"  Implied price: {result.implied_price} stroops")
    click.echo(f"  Liquidity:     {result.deposit.liquidity}")
    click.echo(f"  Vesting from:  {result.vesting_start}")
    if result.fee_pending:
        click.echo(f"  Fee pending:   {result.fee_pending} stroops (run pay-fee to retry)")


@cli.command("pay-fee")
@click.argument("organizer")
@click.pass_context
def pay_fee(ctx: click.Context, organizer: str) -> None:
    """Retry a platform fee left pending by settlement."""
    cfg = _load(ctx)
    amount = _run(cfg, lambda lp: lp.pay_pending_fee(organizer))
    if amount:
        click.echo(f"Paid {amount} stroops fee")
    else:
        click.echo("No fee pending")


@cli.command()
@click.argument("organizer")
@click.option("--contributor", required=True, help="Contributor address")
@click.pass_context
def claim(ctx: click.Context, organizer: str, contributor: str) -> None:
    """Release vested tokens to a contributor."""
    cfg = _load(ctx)
    amount = _run(cfg, lambda lp: lp.claim_tokens(organizer, contributor))
    if amount:
        click.echo(f"Claimed {amount} tokens")
    else:
        click.echo("Nothing to claim yet")


@cli.command()
@click.argument("organizer")
@click.option("--contributor", required=True, help="Contributor address")
@click.pass_context
def refund(ctx: click.Context, organizer: str, contributor: str) -> None:
    """Return a contributor's funds from a terminated or abandoned campaign."""
    cfg = _load(ctx)
    amount = _run(cfg, lambda lp: lp.claim_refund(organizer, contributor))
    if amount:
        click.echo(f"Refunded {amount} stroops")
    else:
        click.echo("Nothing to refund")


@cli.command()
@click.argument("organizer")
@click.pass_context
def reclaim(ctx: click.Context, organizer: str) -> None:
    """Return unsold tokens to the organizer."""
    cfg = _load(ctx)
    amount = _run(cfg, lambda lp: lp.reclaim_unsold(organizer))
    click.echo(f"Reclaimed {amount} tokens")


# ── Queries ────────────────────────────────────────────


def _data_api(lp: Launchpad) -> LaunchpadDataAPI:
    return LaunchpadDataAPI(lp.store, lp.config.grace_period, lp.now)


@cli.command()
@click.argument("organizer", required=False)
@click.option("--phase", default=None, help="Only list campaigns in this phase")
@click.pass_context
def campaign(ctx: click.Context, organizer: str | None, phase: str | None) -> None:
    """Show one campaign, or list all of them."""
    cfg = _load(ctx)

    async def _show(lp: Launchpad):
        api = _data_api(lp)
        if organizer:
            return await api.get_campaign(organizer)
        return await api.get_campaigns(phase)

    result = _run(cfg, _show)
    if result is None:
        click.echo(f"No campaign for {organizer}", err=True)
        sys.exit(1)
    if isinstance(result, list):
        _echo_json([to_dict(s) for s in result])
    else:
        _echo_json(to_dict(result))


@cli.command()
@click.argument("organizer")
@click.option("--contributor", default=None, help="Show a single contributor")
@click.pass_context
def contribution(ctx: click.Context, organizer: str, contributor: str | None) -> None:
    """Show contribution ledger entries for a campaign."""
    cfg = _load(ctx)

    async def _show(lp: Launchpad):
        api = _data_api(lp)
        if contributor:
            return await api.get_contribution(organizer, contributor)
        return await api.get_contributions(organizer)

    result = _run(cfg, _show)
    if result is None:
        click.echo(f"No campaign for {organizer}", err=True)
        sys.exit(1)
    if isinstance(result, list):
        _echo_json([to_dict(s) for s in result])
    else:
        _echo_json(to_dict(result))


@cli.command()
@click.argument("token_id", required=False)
@click.pass_context
def custody(ctx: click.Context, token_id: str | None) -> None:
    """Show what the platform account holds of a token (default: funds)."""
    cfg = _load(ctx)
    tid = token_id or cfg.funds_token_id
    balance = _run(cfg, lambda lp: lp.custody_balance(tid))
    click.echo(f"{tid}: {balance}")


@cli.command()
@click.option("--organizer", default=None, help="Filter by campaign")
@click.option("--limit", type=int, default=50, help="Number of entries")
@click.pass_context
def events(ctx: click.Context, organizer: str | None, limit: int) -> None:
    """Show recorded notifications, newest first."""
    cfg = _load(ctx)
    entries = _run(cfg, lambda lp: _data_api(lp).get_notifications(organizer, limit))

    if not entries:
        click.echo("No notifications recorded.")
        return

    for e in entries:
        who = f" contributor={e.contributor[:16]}" if e.contributor else ""
        amount = f" amount={e.amount}" if e.amount is not None else ""
        click.echo(f"  [{e.created_at}] {e.kind:<20} organizer={e.organizer[:16]}{who}{amount}")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
