"""Transactional scope shared by every launchpad operation.

An operation validates, mutates the ledger, then calls collaborators. The
ledger writes live in one store transaction; outward custody moves that can
be reversed register a compensation. If anything raises, compensations run
newest-first while the transaction is still held, then the transaction rolls
back and the original exception propagates.

An operation whose later outward steps cannot be reversed (a pool deposit)
calls ``seal()`` once it passes that point. A failure after the seal keeps
the ledger changes made so far: the transaction commits, nothing is
compensated, and the exception still reaches the caller.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Awaitable, Callable

from hvym_launchpad.errors import CompensationError
from hvym_launchpad.interfaces.store import LedgerStore

log = logging.getLogger(__name__)


class Compensations:
    """Undo steps for outward effects already performed by an operation."""

    def __init__(self, operation: str) -> None:
        self._operation = operation
        self._steps: list[tuple[str, Callable[[], Awaitable[None]]]] = []
        self.sealed = False

    def push(self, description: str, undo: Callable[[], Awaitable[None]]) -> None:
        self._steps.append((description, undo))

    def seal(self) -> None:
        """Mark the point of no return; registered undo steps are discarded."""
        self.sealed = True
        self._steps.clear()

    async def unwind(self) -> list[str]:
        """Run every undo step newest-first; return the ones that failed."""
        failed: list[str] = []
        while self._steps:
            description, undo = self._steps.pop()
            log.warning("%s: compensating %s", self._operation, description)
            try:
                await undo()
            except Exception:
                log.error(
                    "%s: compensation failed for %s", self._operation, description,
                    exc_info=True,
                )
                failed.append(description)
        return failed


@asynccontextmanager
async def atomic(store: LedgerStore, operation: str) -> AsyncIterator[Compensations]:
    """Run one operation as an indivisible, all-or-nothing unit."""
    compensations = Compensations(operation)
    failure: Exception | None = None
    async with store.transaction():
        try:
            yield compensations
        except Exception as exc:
            if not compensations.sealed:
                log.info("%s aborted: %s", operation, exc)
                failed = await compensations.unwind()
                if failed:
                    raise CompensationError(operation, failed) from exc
                raise
            log.error(
                "%s failed past its point of no return, keeping ledger changes: %s",
                operation, exc,
            )
            failure = exc
    if failure is not None:
        raise failure
