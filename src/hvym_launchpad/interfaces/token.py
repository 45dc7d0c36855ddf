"""Token protocols - fungible assets held in platform custody."""

from __future__ import annotations

from typing import Protocol


class Token(Protocol):
    """A fungible token as seen from the platform custody account.

    Implementations raise on failure and have no effect when they do.
    Standard conservation semantics are assumed (no transfer fees, no
    rebasing).
    """

    token_id: str

    async def transfer_from(self, owner: str, recipient: str, amount: int) -> None:
        """Move ``amount`` from ``owner`` to ``recipient`` using the platform's allowance."""
        ...

    async def transfer(self, recipient: str, amount: int) -> None:
        """Move ``amount`` out of platform custody to ``recipient``."""
        ...

    async def approve(self, spender: str, amount: int) -> None:
        """Let ``spender`` pull up to ``amount`` from platform custody."""
        ...

    async def balance_of(self, identity: str) -> int:
        ...


class TokenProvider(Protocol):
    """Resolves a token identifier to a ``Token`` client."""

    def token(self, token_id: str) -> Token:
        ...
