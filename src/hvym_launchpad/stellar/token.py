"""SEP-41 token client - transfers and allowances from platform custody."""

from __future__ import annotations

import logging

from stellar_sdk import Keypair, scval

from hvym_launchpad.stellar.submitter import SorobanSubmitter

log = logging.getLogger(__name__)

# Allowances expire after roughly one day of ledgers (5s close time).
APPROVAL_LEDGERS = 17_280


class SorobanToken:
    """Implements the Token protocol against a SEP-41 token contract."""

    def __init__(
        self,
        token_id: str,
        rpc_url: str,
        network_passphrase: str,
        keypair: Keypair,
    ) -> None:
        self.token_id = token_id
        self._public_key = keypair.public_key
        self._submitter = SorobanSubmitter(token_id, rpc_url, network_passphrase, keypair)

    async def close(self) -> None:
        await self._submitter.close()

    async def transfer_from(self, owner: str, recipient: str, amount: int) -> None:
        await self._submitter.submit("transfer_from", [
            scval.to_address(self._public_key),
            scval.to_address(owner),
            scval.to_address(recipient),
            scval.to_int128(amount),
        ])

    async def transfer(self, recipient: str, amount: int) -> None:
        await self._submitter.submit("transfer", [
            scval.to_address(self._public_key),
            scval.to_address(recipient),
            scval.to_int128(amount),
        ])

    async def approve(self, spender: str, amount: int) -> None:
        expiration = await self._submitter.latest_ledger() + APPROVAL_LEDGERS
        await self._submitter.submit("approve", [
            scval.to_address(self._public_key),
            scval.to_address(spender),
            scval.to_int128(amount),
            scval.to_uint32(expiration),
        ])

    async def balance_of(self, identity: str) -> int:
        return await self._submitter.query(
            "balance", [scval.to_address(identity)], scval.from_int128,
        )


class SorobanTokenProvider:
    """Hands out one cached SorobanToken per contract ID."""

    def __init__(self, rpc_url: str, network_passphrase: str, keypair: Keypair) -> None:
        self._rpc_url = rpc_url
        self._passphrase = network_passphrase
        self._keypair = keypair
        self._tokens: dict[str, SorobanToken] = {}

    def token(self, token_id: str) -> SorobanToken:
        if token_id not in self._tokens:
            self._tokens[token_id] = SorobanToken(
                token_id, self._rpc_url, self._passphrase, self._keypair,
            )
        return self._tokens[token_id]

    async def close(self) -> None:
        for token in self._tokens.values():
            await token.close()
        self._tokens.clear()
