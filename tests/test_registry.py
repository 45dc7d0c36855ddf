"""Campaign creation: validation order, escrow, and one-campaign-per-organizer."""

from __future__ import annotations

import pytest

from hvym_launchpad.errors import CollaboratorError, ErrorKind, ValidationError
from hvym_launchpad.models.records import CampaignPhase

from tests.conftest import ORGANIZER_TOKENS, PLATFORM, notification_kinds
from tests.factories import (
    DURATION,
    ORGANIZER,
    TOKEN_ID,
    TOTAL_TOKENS,
    UNIT_PRICE,
    VESTING_PERIOD,
    open_campaign,
)


async def test_create_escrows_supply(launchpad, store, sale_token, clock):
    record = await open_campaign(launchpad)

    assert record.remaining_tokens == TOTAL_TOKENS
    assert record.raised == 0
    assert record.start_time == clock.now
    assert record.end_time == clock.now + DURATION

    stored = await store.get_campaign(ORGANIZER)
    assert stored is not None
    assert stored.token_id == TOKEN_ID
    assert stored.unit_price == UNIT_PRICE
    assert stored.vesting_period == VESTING_PERIOD
    assert launchpad.phase_of(stored) == CampaignPhase.ACTIVE

    assert sale_token.transfer_from_calls == [(ORGANIZER, PLATFORM, TOTAL_TOKENS)]
    assert sale_token.balances[ORGANIZER] == ORGANIZER_TOKENS - TOTAL_TOKENS
    assert sale_token.balances[PLATFORM] == TOTAL_TOKENS

    assert await notification_kinds(store) == ["CampaignCreated"]
    created = (await store.get_notifications(ORGANIZER))[0]
    assert created.amount is None
    assert created.payload["total_tokens"] == TOTAL_TOKENS
    assert created.payload["start_time"] == clock.now


async def test_duplicate_organizer_rejected(launchpad):
    await open_campaign(launchpad)
    with pytest.raises(ValidationError) as exc_info:
        await open_campaign(launchpad)
    assert exc_info.value.kind == ErrorKind.CAMPAIGN_EXISTS


async def test_organizer_slot_never_released(launchpad, clock):
    """Terminated or abandoned campaigns still block a second campaign."""
    await open_campaign(launchpad)
    await launchpad.terminate(ORGANIZER)
    clock.advance(DURATION + 10_000)

    with pytest.raises(ValidationError) as exc_info:
        await open_campaign(launchpad)
    assert exc_info.value.kind == ErrorKind.CAMPAIGN_EXISTS


async def test_existing_campaign_checked_before_terms(launchpad):
    await open_campaign(launchpad)
    with pytest.raises(ValidationError) as exc_info:
        await open_campaign(launchpad, unit_price=0)
    assert exc_info.value.kind == ErrorKind.CAMPAIGN_EXISTS


@pytest.mark.parametrize("overrides,kind", [
    (dict(token_id=""), ErrorKind.INVALID_TOKEN),
    (dict(total_tokens=0), ErrorKind.ZERO_AMOUNT),
    (dict(unit_price=0), ErrorKind.ZERO_PRICE),
    (dict(duration=0), ErrorKind.ZERO_DURATION),
    (dict(vesting_period=0), ErrorKind.ZERO_VESTING_PERIOD),
    (dict(total_tokens=0, unit_price=0), ErrorKind.ZERO_AMOUNT),
    (dict(duration=0, vesting_period=0), ErrorKind.ZERO_DURATION),
])
async def test_invalid_terms(launchpad, store, sale_token, overrides, kind):
    with pytest.raises(ValidationError) as exc_info:
        await open_campaign(launchpad, **overrides)

    assert exc_info.value.kind == kind
    assert await store.get_campaign(ORGANIZER) is None
    assert sale_token.transfer_from_calls == []
    assert await notification_kinds(store) == []


async def test_escrow_failure_leaves_no_campaign(launchpad, store, sale_token):
    sale_token.fail_ops.add("transfer_from")

    with pytest.raises(CollaboratorError):
        await open_campaign(launchpad)

    assert await store.get_campaign(ORGANIZER) is None
    assert await notification_kinds(store) == []

    # The slot is still free once the token cooperates
    sale_token.fail_ops.clear()
    await open_campaign(launchpad)
    assert await store.get_campaign(ORGANIZER) is not None


async def test_insufficient_organizer_balance(launchpad, store):
    with pytest.raises(CollaboratorError):
        await open_campaign(launchpad, total_tokens=ORGANIZER_TOKENS + 1)
    assert await store.get_campaign(ORGANIZER) is None


async def test_facade_reads(launchpad):
    assert await launchpad.get_campaign(ORGANIZER) is None
    await open_campaign(launchpad)

    campaign = await launchpad.get_campaign(ORGANIZER)
    assert campaign.total_tokens == TOTAL_TOKENS
    entry = await launchpad.get_contribution(ORGANIZER, "GNOBODY")
    assert entry.contributed == 0


async def test_custody_balance(launchpad):
    await open_campaign(launchpad)
    assert await launchpad.custody_balance(TOKEN_ID) == TOTAL_TOKENS
