"""FundingPool protocol - external liquidity service seeded at settlement."""

from __future__ import annotations

from typing import Protocol

from hvym_launchpad.models.records import PoolDeposit


class FundingPool(Protocol):
    """Accepts a paired deposit of sale tokens and raised funds."""

    pool_id: str

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
        """Deposit both sides and credit the resulting position to ``recipient``.

        Any failure must raise; the caller aborts the whole settlement.
        """
        ...
