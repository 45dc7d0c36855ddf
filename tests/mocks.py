"""Mock implementations of the token, funding pool, and clock collaborators."""

from __future__ import annotations

import math
from collections import defaultdict

from hvym_launchpad.errors import CollaboratorError
from hvym_launchpad.models.records import PoolDeposit


class FakeClock:
    """Callable clock returning a settable unix time."""

    def __init__(self, now: int = 1_700_000_000) -> None:
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        self.now += seconds


class MockToken:
    """Implements the Token protocol with an in-memory balance sheet.

    Every outward call is checked against ``fail_ops`` first, so tests can make
    any single custody move fail with a CollaboratorError.
    """

    def __init__(self, token_id: str, platform: str) -> None:
        self.token_id = token_id
        self.platform = platform
        self.balances: dict[str, int] = defaultdict(int)
        self.allowances: dict[str, int] = {}
        self.fail_ops: set[str] = set()
        self.transfer_from_calls: list[tuple[str, str, int]] = []
        self.transfer_calls: list[tuple[str, int]] = []
        self.approve_calls: list[tuple[str, int]] = []

    def mint(self, identity: str, amount: int) -> None:
        """Test helper: credit ``identity`` out of thin air."""
        self.balances[identity] += amount

    def _check(self, op: str) -> None:
        if op in self.fail_ops:
            raise CollaboratorError(op, "mock failure", tx_hash="mock_tx_failed")

    def _move(self, op: str, source: str, dest: str, amount: int) -> None:
        if self.balances[source] < amount:
            raise CollaboratorError(op, f"insufficient balance for {source[:16]}")
        self.balances[source] -= amount
        self.balances[dest] += amount

    async def transfer_from(self, owner: str, recipient: str, amount: int) -> None:
        self._check("transfer_from")
        self._move("transfer_from", owner, recipient, amount)
        self.transfer_from_calls.append((owner, recipient, amount))

    async def transfer(self, recipient: str, amount: int) -> None:
        self._check("transfer")
        self._move("transfer", self.platform, recipient, amount)
        self.transfer_calls.append((recipient, amount))

    async def approve(self, spender: str, amount: int) -> None:
        self._check("approve")
        self.allowances[spender] = amount
        self.approve_calls.append((spender, amount))

    async def balance_of(self, identity: str) -> int:
        return self.balances[identity]


class MockTokenProvider:
    """Implements the TokenProvider protocol, one MockToken per ID."""

    def __init__(self, platform: str) -> None:
        self.platform = platform
        self.tokens: dict[str, MockToken] = {}

    def token(self, token_id: str) -> MockToken:
        if token_id not in self.tokens:
            self.tokens[token_id] = MockToken(token_id, self.platform)
        return self.tokens[token_id]


class MockFundingPool:
    """Implements the FundingPool protocol. Takes both legs from platform custody."""

    def __init__(
        self,
        pool_id: str,
        tokens: MockTokenProvider,
        funds_token_id: str,
        fail: bool = False,
    ) -> None:
        self.pool_id = pool_id
        self._tokens = tokens
        self._funds_token_id = funds_token_id
        self.fail = fail
        self.deposit_calls: list[dict] = []

    async def deposit_paired(
        self,
        token_id: str,
        token_amount: int,
        paired_amount: int,
        min_token_amount: int,
        min_paired_amount: int,
        recipient: str,
        deadline: int,
    ) -> PoolDeposit:
        self.deposit_calls.append(dict(
            token_id=token_id,
            token_amount=token_amount,
            paired_amount=paired_amount,
            min_token_amount=min_token_amount,
            min_paired_amount=min_paired_amount,
            recipient=recipient,
            deadline=deadline,
        ))
        if self.fail:
            raise CollaboratorError("add_liquidity", "mock pool failure")

        token = self._tokens.token(token_id)
        funds = self._tokens.token(self._funds_token_id)
        token.balances[token.platform] -= token_amount
        token.balances[self.pool_id] += token_amount
        funds.balances[funds.platform] -= paired_amount
        funds.balances[self.pool_id] += paired_amount
        return PoolDeposit(
            token_amount=token_amount,
            paired_amount=paired_amount,
            liquidity=math.isqrt(token_amount * paired_amount),
        )
