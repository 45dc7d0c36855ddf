"""Contributions: token reservation, supply limits, and phase gating."""

from __future__ import annotations

import pytest

from hvym_launchpad.errors import (
    CollaboratorError,
    EconomicError,
    ErrorKind,
    StateError,
    ValidationError,
)

from tests.conftest import (
    CONTRIBUTOR,
    CONTRIBUTOR_2,
    CONTRIBUTOR_FUNDS,
    PLATFORM,
    notification_kinds,
)
from tests.factories import DURATION, ORGANIZER, TOTAL_TOKENS, UNIT_PRICE, open_campaign


async def test_contribution_reserves_tokens(launchpad, store, funds):
    await open_campaign(launchpad)

    tokens = await launchpad.contribute(ORGANIZER, CONTRIBUTOR, 10_000_000)

    assert tokens == 10
    campaign = await store.get_campaign(ORGANIZER)
    assert campaign.remaining_tokens == TOTAL_TOKENS - 10
    assert campaign.raised == 10_000_000

    entry = await store.get_contribution(ORGANIZER, CONTRIBUTOR)
    assert entry.contributed == 10_000_000
    assert entry.claimed == 0

    assert funds.transfer_from_calls == [(CONTRIBUTOR, PLATFORM, 10_000_000)]
    assert funds.balances[PLATFORM] == 10_000_000
    assert funds.balances[CONTRIBUTOR] == CONTRIBUTOR_FUNDS - 10_000_000

    assert await notification_kinds(store) == ["CampaignCreated", "Contributed"]
    contributed = (await store.get_notifications(ORGANIZER))[0]
    assert contributed.contributor == CONTRIBUTOR
    assert contributed.amount == 10_000_000
    assert contributed.payload["tokens_requested"] == 10


async def test_remainder_kept_but_not_credited(launchpad, store):
    await open_campaign(launchpad)

    tokens = await launchpad.contribute(ORGANIZER, CONTRIBUTOR, 2_500_000)

    assert tokens == 2
    campaign = await store.get_campaign(ORGANIZER)
    assert campaign.raised == 2_500_000
    assert campaign.remaining_tokens == TOTAL_TOKENS - 2
    entry = await store.get_contribution(ORGANIZER, CONTRIBUTOR)
    assert entry.contributed == 2_500_000
    assert entry.entitlement(campaign.unit_price) == 2


async def test_amount_below_price_reserves_nothing(launchpad, store):
    await open_campaign(launchpad)

    assert await launchpad.contribute(ORGANIZER, CONTRIBUTOR, 500_000) == 0

    campaign = await store.get_campaign(ORGANIZER)
    assert campaign.remaining_tokens == TOTAL_TOKENS
    assert campaign.raised == 500_000


async def test_contributions_accumulate(launchpad, store):
    await open_campaign(launchpad)
    await launchpad.contribute(ORGANIZER, CONTRIBUTOR, 3_000_000)
    await launchpad.contribute(ORGANIZER, CONTRIBUTOR, 4_000_000)
    await launchpad.contribute(ORGANIZER, CONTRIBUTOR_2, 5_000_000)

    campaign = await store.get_campaign(ORGANIZER)
    assert campaign.raised == 12_000_000
    assert campaign.remaining_tokens == TOTAL_TOKENS - 12
    assert campaign.raised == await store.total_contributed(ORGANIZER)
    assert (await store.get_contribution(ORGANIZER, CONTRIBUTOR)).contributed == 7_000_000
    assert (await store.get_contribution(ORGANIZER, CONTRIBUTOR_2)).contributed == 5_000_000


async def test_zero_amount_rejected(launchpad, store):
    await open_campaign(launchpad)
    with pytest.raises(ValidationError) as exc_info:
        await launchpad.contribute(ORGANIZER, CONTRIBUTOR, 0)
    assert exc_info.value.kind == ErrorKind.ZERO_AMOUNT


async def test_insufficient_supply(launchpad, store, funds):
    await open_campaign(launchpad)
    await launchpad.contribute(ORGANIZER, CONTRIBUTOR, 95_000_000)

    with pytest.raises(EconomicError) as exc_info:
        await launchpad.contribute(ORGANIZER, CONTRIBUTOR_2, 6_000_000)

    err = exc_info.value
    assert err.kind == ErrorKind.INSUFFICIENT_SUPPLY
    assert err.detail["requested"] == 6
    assert err.detail["available"] == 5
    campaign = await store.get_campaign(ORGANIZER)
    assert campaign.remaining_tokens == 5
    assert campaign.raised == 95_000_000
    assert len(funds.transfer_from_calls) == 1


async def test_exact_remaining_supply_sells_out(launchpad, store):
    await open_campaign(launchpad)
    assert await launchpad.contribute(ORGANIZER, CONTRIBUTOR, 100_000_000) == TOTAL_TOKENS
    assert (await store.get_campaign(ORGANIZER)).remaining_tokens == 0


async def test_contribution_at_end_instant_accepted(launchpad, clock):
    await open_campaign(launchpad)
    clock.advance(DURATION)
    assert await launchpad.contribute(ORGANIZER, CONTRIBUTOR, 1_000_000) == 1


async def test_contribution_after_end_rejected(launchpad, clock):
    await open_campaign(launchpad)
    clock.advance(DURATION + 1)

    with pytest.raises(StateError) as exc_info:
        await launchpad.contribute(ORGANIZER, CONTRIBUTOR, 1_000_000)
    assert exc_info.value.kind == ErrorKind.CAMPAIGN_NOT_ACTIVE
    assert exc_info.value.detail["phase"] == "ended_pending"


async def test_contribution_to_terminated_campaign(launchpad):
    await open_campaign(launchpad)
    await launchpad.terminate(ORGANIZER)

    with pytest.raises(StateError) as exc_info:
        await launchpad.contribute(ORGANIZER, CONTRIBUTOR, 1_000_000)
    assert exc_info.value.kind == ErrorKind.CAMPAIGN_NOT_ACTIVE


async def test_phase_checked_before_amount(launchpad):
    await open_campaign(launchpad)
    await launchpad.terminate(ORGANIZER)

    with pytest.raises(StateError) as exc_info:
        await launchpad.contribute(ORGANIZER, CONTRIBUTOR, 0)
    assert exc_info.value.kind == ErrorKind.CAMPAIGN_NOT_ACTIVE


async def test_contribution_to_unknown_campaign(launchpad):
    with pytest.raises(StateError) as exc_info:
        await launchpad.contribute(ORGANIZER, CONTRIBUTOR, 1_000_000)
    assert exc_info.value.kind == ErrorKind.CAMPAIGN_NOT_FOUND


async def test_failed_payment_rolls_back(launchpad, store, funds):
    await open_campaign(launchpad)
    funds.fail_ops.add("transfer_from")

    with pytest.raises(CollaboratorError):
        await launchpad.contribute(ORGANIZER, CONTRIBUTOR, 10_000_000)

    campaign = await store.get_campaign(ORGANIZER)
    assert campaign.raised == 0
    assert campaign.remaining_tokens == TOTAL_TOKENS
    assert (await store.get_contribution(ORGANIZER, CONTRIBUTOR)).contributed == 0
    assert await notification_kinds(store) == ["CampaignCreated"]


# ── Sub-unit remainders ──────────────────────────────────────────


async def test_split_contributions_reserve_entitlement_growth(launchpad, store):
    await open_campaign(launchpad)

    assert await launchpad.contribute(ORGANIZER, CONTRIBUTOR, 1_500_000) == 1
    assert await launchpad.contribute(ORGANIZER, CONTRIBUTOR, 1_500_000) == 2

    campaign = await store.get_campaign(ORGANIZER)
    assert campaign.remaining_tokens == TOTAL_TOKENS - 3
    entry = await store.get_contribution(ORGANIZER, CONTRIBUTOR)
    assert entry.entitlement(campaign.unit_price) == 3


async def test_sold_out_campaign_rejects_remainder_crossing_a_token(launchpad, store, funds):
    await open_campaign(launchpad)
    await launchpad.contribute(ORGANIZER, CONTRIBUTOR, TOTAL_TOKENS * UNIT_PRICE)

    # Below one unit: accepted, buys nothing
    assert await launchpad.contribute(ORGANIZER, CONTRIBUTOR_2, UNIT_PRICE - 1) == 0

    with pytest.raises(EconomicError) as exc_info:
        await launchpad.contribute(ORGANIZER, CONTRIBUTOR_2, UNIT_PRICE - 1)

    err = exc_info.value
    assert err.kind == ErrorKind.INSUFFICIENT_SUPPLY
    assert err.detail["requested"] == 1
    assert err.detail["available"] == 0

    campaign = await store.get_campaign(ORGANIZER)
    assert campaign.raised == TOTAL_TOKENS * UNIT_PRICE + UNIT_PRICE - 1
    assert (await store.get_contribution(ORGANIZER, CONTRIBUTOR_2)).contributed == UNIT_PRICE - 1
    assert await store.total_entitled(ORGANIZER, UNIT_PRICE) == TOTAL_TOKENS
    assert len(funds.transfer_from_calls) == 2


async def test_many_small_contributions_stay_within_escrow(launchpad, store, sale_token):
    await open_campaign(launchpad, total_tokens=10)

    accepted = 0
    for _ in range(20):
        try:
            await launchpad.contribute(ORGANIZER, CONTRIBUTOR, UNIT_PRICE - 1)
        except EconomicError as exc:
            assert exc.kind == ErrorKind.INSUFFICIENT_SUPPLY
            break
        accepted += 1
        campaign = await store.get_campaign(ORGANIZER)
        entitled = await store.total_entitled(ORGANIZER, UNIT_PRICE)
        assert entitled == campaign.total_tokens - campaign.remaining_tokens

    # 11 * (UNIT_PRICE - 1) entitles 10 tokens; the 12th would entitle 11
    assert accepted == 11
    campaign = await store.get_campaign(ORGANIZER)
    assert campaign.remaining_tokens == 0
    assert await store.total_entitled(ORGANIZER, UNIT_PRICE) == 10
    assert sale_token.balances[PLATFORM] == 10
