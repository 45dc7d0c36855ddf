"""Shared fixtures for hvym_launchpad tests."""

from __future__ import annotations

import pytest
from pytest_metadata.plugin import metadata_key
from stellar_sdk import Keypair

from hvym_launchpad.api.data_api import LaunchpadDataAPI
from hvym_launchpad.launchpad import Launchpad
from hvym_launchpad.models.config import LaunchpadConfig, PoolConfig
from hvym_launchpad.storage.sqlite import SQLiteLedgerStore

from tests.factories import ORGANIZER, TOKEN_ID
from tests.mocks import FakeClock, MockFundingPool, MockTokenProvider

TEST_SECRET = "SBWVJTD3F5ETMVWCNI7MM4HUAPUSCUXXMUEJZJTPRWRJGXW2BF4SVQTK"
PLATFORM = Keypair.from_secret(TEST_SECRET).public_key

FUNDS_ID = "CFUNDSTOKENAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"
POOL_ID = "CPOOLROUTERAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"
FEE_RECIPIENT = "GFEERECIPIENTAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"
CONTRIBUTOR = "GCONTRIBUTORONEAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"
CONTRIBUTOR_2 = "GCONTRIBUTORTWOAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAAA"

GRACE_PERIOD = 600
ORGANIZER_TOKENS = 1_000
CONTRIBUTOR_FUNDS = 1_000_000_000


# ── Report metadata ──────────────────────────────────────────────


def pytest_configure(config):
    """Add ledger parameters to the HTML report Environment table."""
    meta = config.stash.setdefault(metadata_key, {})
    meta["Network"] = "in-memory mocks"
    meta["Platform Account"] = PLATFORM
    meta["Funds Token"] = FUNDS_ID
    meta["Pool Router"] = POOL_ID


def pytest_html_results_summary(prefix, summary, postfix):
    """Show the ledger parameters the suite ran against."""
    prefix.append(
        '<div style="margin:8px 0;padding:10px;background:#f8f9fa;border:1px solid #dee2e6;'
        'border-radius:4px;font-family:monospace;font-size:13px;">'
        "<strong>Launchpad test parameters</strong><br/>"
        f"Grace period: {GRACE_PERIOD}s<br/>"
        f"Fee recipient: {FEE_RECIPIENT}"
        "</div>"
    )


def make_test_config(**overrides) -> LaunchpadConfig:
    """Build a LaunchpadConfig suitable for testing."""
    defaults = dict(
        fee_percent=1,
        grace_period=GRACE_PERIOD,
        fee_recipient=FEE_RECIPIENT,
        rpc_url="https://soroban-testnet.stellar.org",
        network_passphrase="Test SDF Network ; September 2015",
        funds_token_id=FUNDS_ID,
        keypair_secret=TEST_SECRET,
        pool=PoolConfig(router_id=POOL_ID, slippage_bps=0, deadline=300),
        db_path=":memory:",
    )
    defaults.update(overrides)
    return LaunchpadConfig(**defaults)


@pytest.fixture
def test_config():
    """Default LaunchpadConfig for tests."""
    return make_test_config()


@pytest.fixture
async def store():
    """Initialized in-memory SQLiteLedgerStore."""
    s = SQLiteLedgerStore(":memory:")
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mock_tokens():
    """Token provider with the organizer and contributors already funded."""
    provider = MockTokenProvider(PLATFORM)
    provider.token(TOKEN_ID).mint(ORGANIZER, ORGANIZER_TOKENS)
    funds = provider.token(FUNDS_ID)
    funds.mint(CONTRIBUTOR, CONTRIBUTOR_FUNDS)
    funds.mint(CONTRIBUTOR_2, CONTRIBUTOR_FUNDS)
    return provider


@pytest.fixture
def sale_token(mock_tokens):
    return mock_tokens.token(TOKEN_ID)


@pytest.fixture
def funds(mock_tokens):
    return mock_tokens.token(FUNDS_ID)


@pytest.fixture
def mock_pool(mock_tokens):
    return MockFundingPool(POOL_ID, mock_tokens, FUNDS_ID)


def make_launchpad(cfg, store, tokens, pool, clock) -> Launchpad:
    return Launchpad(cfg, store=store, tokens=tokens, pool=pool, clock=clock)


@pytest.fixture
def launchpad(test_config, store, mock_tokens, mock_pool, clock):
    """Fully wired Launchpad with mocked collaborators."""
    return make_launchpad(test_config, store, mock_tokens, mock_pool, clock)


@pytest.fixture
def data_api(store, clock):
    return LaunchpadDataAPI(store, GRACE_PERIOD, clock)


async def notification_kinds(store, organizer: str = ORGANIZER) -> list[str]:
    """Notification kinds for one campaign, oldest first."""
    return [n.kind for n in reversed(await store.get_notifications(organizer, 500))]
