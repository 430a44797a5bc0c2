"""Building, signing and submitting transactions."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Sequence, Tuple

from ..config import DaoCliSettings
from ..errors import TransactionFailedError
from .contracts import ContractArtifact

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class TransactionPath:
    """A single direct call the sender is allowed to perform.

    ``call`` is the bound web3 contract function (or constructor) to send.
    """

    description: str
    target: str
    method: str
    args: Tuple[Any, ...] = field(default_factory=tuple)
    call: Any = None


def _tx_hash_hex(tx_hash: Any) -> str:
    if isinstance(tx_hash, (bytes, bytearray)):
        return "0x" + bytes(tx_hash).hex()
    return str(tx_hash)


class TransactionExecutor:
    """Send transactions from one account and wait for them to be mined.

    Submissions are serialised so transactions signed locally receive
    consecutive nonces even when several are awaited concurrently.
    """

    def __init__(
        self,
        web3: Any,
        sender: str,
        *,
        private_key: Optional[str] = None,
        gas_fuzz_factor: float = 1.5,
        block_gas_limit_ratio: float = 0.95,
        receipt_timeout: float = 600.0,
    ) -> None:
        self._web3 = web3
        self._sender = sender
        self._private_key = private_key
        self._gas_fuzz_factor = gas_fuzz_factor
        self._block_gas_limit_ratio = block_gas_limit_ratio
        self._receipt_timeout = receipt_timeout
        self._lock = asyncio.Lock()
        self._next_nonce: Optional[int] = None

    @classmethod
    def from_settings(cls, web3: Any, sender: str, settings: DaoCliSettings) -> "TransactionExecutor":
        private_key = settings.private_key.get_secret_value() if settings.private_key else None
        return cls(
            web3,
            sender,
            private_key=private_key,
            gas_fuzz_factor=settings.gas_fuzz_factor,
            block_gas_limit_ratio=settings.block_gas_limit_ratio,
            receipt_timeout=settings.receipt_timeout_seconds,
        )

    @property
    def sender(self) -> str:
        return self._sender

    async def recommended_gas_limit(self, estimated_gas: int) -> int:
        """Pad ``estimated_gas`` by the fuzz factor without exceeding the block gas limit."""

        latest_block = await self._web3.eth.get_block("latest")
        block_limit = int(latest_block["gasLimit"] * self._block_gas_limit_ratio)
        if estimated_gas > block_limit:
            _LOGGER.warning(
                "Gas estimate exceeds block gas limit | estimated=%s | block_limit=%s",
                estimated_gas,
                block_limit,
            )
            return estimated_gas
        return min(int(estimated_gas * self._gas_fuzz_factor), block_limit)

    async def execute(self, path: TransactionPath) -> Mapping[str, Any]:
        """Send ``path`` and return its receipt."""

        return await self._send(path.call, path.description)

    async def deploy(self, artifact: ContractArtifact, args: Sequence[Any] = (), *, description: str) -> Mapping[str, Any]:
        """Deploy ``artifact`` with constructor ``args`` and return the receipt."""

        contract = self._web3.eth.contract(abi=artifact.abi, bytecode=artifact.require_bytecode())
        return await self._send(contract.constructor(*args), description)

    async def _send(self, call: Any, description: str) -> Mapping[str, Any]:
        base: Dict[str, Any] = {"from": self._sender}
        estimated = await call.estimate_gas(dict(base))
        gas = await self.recommended_gas_limit(estimated)

        async with self._lock:
            if self._private_key:
                nonce = await self._pending_nonce()
                tx = await call.build_transaction({**base, "gas": gas, "nonce": nonce})
                signed = self._web3.eth.account.sign_transaction(tx, self._private_key)
                tx_hash = await self._web3.eth.send_raw_transaction(signed.raw_transaction)
                self._next_nonce = nonce + 1
            else:
                tx_hash = await call.transact({**base, "gas": gas})

        tx_hash_hex = _tx_hash_hex(tx_hash)
        _LOGGER.info("Transaction sent | description=%s | tx_hash=%s | gas=%s", description, tx_hash_hex, gas)
        receipt = await self._web3.eth.wait_for_transaction_receipt(tx_hash, timeout=self._receipt_timeout)
        if receipt.get("status") == 0:
            raise TransactionFailedError(description, tx_hash_hex)
        _LOGGER.info(
            "Transaction mined | tx_hash=%s | block=%s | gas_used=%s",
            tx_hash_hex,
            receipt.get("blockNumber"),
            receipt.get("gasUsed"),
        )
        return receipt

    async def _pending_nonce(self) -> int:
        """Return the nonce for the next submission. Only a successful send advances it."""

        if self._next_nonce is None:
            self._next_nonce = await self._web3.eth.get_transaction_count(self._sender, "pending")
        return self._next_nonce


def receipt_tx_hash(receipt: Mapping[str, Any]) -> str:
    return _tx_hash_hex(receipt.get("transactionHash", ""))


__all__ = ["TransactionExecutor", "TransactionPath", "receipt_tx_hash"]
