"""Funding pool client - Soroswap-style router ``add_liquidity``."""

from __future__ import annotations

import logging

from stellar_sdk import Keypair, scval, xdr

from hvym_launchpad.models.records import PoolDeposit
from hvym_launchpad.stellar.submitter import SorobanSubmitter

log = logging.getLogger(__name__)


def _parse_deposit(value: xdr.SCVal) -> tuple[int, int, int]:
    """Router returns ``(amount_a, amount_b, liquidity)`` as an i128 tuple."""
    amount_a, amount_b, liquidity = (scval.from_int128(v) for v in scval.from_vec(value))
    return amount_a, amount_b, liquidity


class SorobanFundingPool:
    """Implements the FundingPool protocol, pairing sale tokens with the funds asset."""

    def __init__(
        self,
        router_id: str,
        funds_token_id: str,
        rpc_url: str,
        network_passphrase: str,
        keypair: Keypair,
    ) -> None:
        self.pool_id = router_id
        self._funds_token_id = funds_token_id
        self._submitter = SorobanSubmitter(router_id, rpc_url, network_passphrase, keypair)

    async def close(self) -> None:
        await self._submitter.close()

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
        log.info(
            "add_liquidity: token=%s amount=%d paired=%d recipient=%s",
            token_id[:16], token_amount, paired_amount, recipient[:16],
        )
        deposited_token, deposited_paired, liquidity = await self._submitter.submit(
            "add_liquidity",
            [
                scval.to_address(token_id),
                scval.to_address(self._funds_token_id),
                scval.to_int128(token_amount),
                scval.to_int128(paired_amount),
                scval.to_int128(min_token_amount),
                scval.to_int128(min_paired_amount),
                scval.to_address(recipient),
                scval.to_uint64(deadline),
            ],
            _parse_deposit,
        )
        return PoolDeposit(
            token_amount=deposited_token,
            paired_amount=deposited_paired,
            liquidity=liquidity,
        )
