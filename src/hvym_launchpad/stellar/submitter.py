"""Soroban contract submitter - signs and submits calls as the platform account."""

from __future__ import annotations

import logging
from typing import Any, Callable, Sequence

from stellar_sdk import Keypair, xdr
from stellar_sdk.contract import ContractClientAsync
from stellar_sdk.contract.exceptions import (
    SimulationFailedError,
    TransactionFailedError,
)

from hvym_launchpad.errors import CollaboratorError

log = logging.getLogger(__name__)


class SorobanSubmitter:
    """Invokes functions on one contract, signing with the platform keypair.

    Failures are re-raised as ``CollaboratorError`` so the calling operation
    rolls back.
    """

    def __init__(
        self,
        contract_id: str,
        rpc_url: str,
        network_passphrase: str,
        keypair: Keypair,
    ) -> None:
        self.contract_id = contract_id
        self._keypair = keypair
        self._public_key = keypair.public_key
        self._client = ContractClientAsync(
            contract_id=contract_id,
            rpc_url=rpc_url,
            network_passphrase=network_passphrase,
        )

    async def close(self) -> None:
        """Close the underlying aiohttp session."""
        await self._client.server.close()

    async def submit(
        self,
        function_name: str,
        parameters: Sequence[xdr.SCVal],
        parse_result: Callable[[xdr.SCVal], Any] | None = None,
    ) -> Any:
        """Simulate, sign, and submit a state-changing call."""
        label = f"{self.contract_id[:8]}.{function_name}"
        log.debug("Submitting %s", label)
        try:
            tx = await self._client.invoke(
                function_name,
                list(parameters),
                source=self._public_key,
                signer=self._keypair,
                parse_result_xdr_fn=parse_result,
            )
            result = await tx.sign_and_submit()

        except SimulationFailedError as exc:
            log.warning("%s simulation failed: %s", label, exc)
            raise CollaboratorError(label, f"simulation_failed: {exc}") from exc

        except TransactionFailedError as exc:
            tx_hash = ""
            if exc.assembled_transaction.send_transaction_response:
                tx_hash = exc.assembled_transaction.send_transaction_response.hash
            log.error("%s tx failed (tx=%s)", label, tx_hash[:16] if tx_hash else "?")
            raise CollaboratorError(label, f"tx_failed: {exc}", tx_hash or None) from exc

        tx_hash = ""
        if tx.send_transaction_response:
            tx_hash = tx.send_transaction_response.hash
        log.info("%s succeeded (tx=%s)", label, tx_hash[:16] if tx_hash else "?")
        return result

    async def query(
        self,
        function_name: str,
        parameters: Sequence[xdr.SCVal],
        parse_result: Callable[[xdr.SCVal], Any],
    ) -> Any:
        """Simulation-only call for read functions (no signing needed)."""
        label = f"{self.contract_id[:8]}.{function_name}"
        try:
            tx = await self._client.invoke(
                function_name,
                list(parameters),
                source=self._public_key,
                parse_result_xdr_fn=parse_result,
            )
            return tx.result()
        except SimulationFailedError as exc:
            raise CollaboratorError(label, f"simulation_failed: {exc}") from exc

    async def latest_ledger(self) -> int:
        response = await self._client.server.get_latest_ledger()
        return response.sequence
