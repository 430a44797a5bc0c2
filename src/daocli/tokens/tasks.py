"""Task pipeline that deploys a MiniMe token (and its factory when needed)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from eth_utils import to_checksum_address

from ..chain.contracts import ContractArtifact, ZERO_ADDRESS, load_artifact, looks_like_address, parse_bool
from ..chain.logs import decode_log_data, find_log
from ..chain.transactions import TransactionPath, receipt_tx_hash
from ..errors import DaoCliError, MissingAbiEntryError
from ..pipeline import Step, StepHandle

_LOGGER = logging.getLogger(__name__)

MAINNET_MINIME_TOKEN_FACTORY = "0x909d05f384d0663ed4be59863815ab43b4f347ec"
RINKEBY_MINIME_TOKEN_FACTORY = "0xad991658443c56b3dE2D7d7f5d8C68F339aEef29"
DEFAULT_TOKEN_FACTORIES: Dict[int, str] = {
    1: MAINNET_MINIME_TOKEN_FACTORY,
    4: RINKEBY_MINIME_TOKEN_FACTORY,
}
DEFAULT_DECIMAL_UNITS = 18
NEW_CLONE_TOKEN_EVENT = "NewFactoryCloneToken"


class Deployer(Protocol):
    async def deploy(
        self, artifact: ContractArtifact, args: Sequence[Any] = (), *, description: str
    ) -> Mapping[str, Any]:
        ...

    async def execute(self, path: TransactionPath) -> Mapping[str, Any]:
        ...


@dataclass(slots=True)
class TokenOptions:
    token_name: str
    symbol: str
    decimal_units: int = DEFAULT_DECIMAL_UNITS
    transfer_enabled: Any = True
    token_factory_address: Optional[str] = None


@dataclass(slots=True)
class TokenContext:
    factory_address: Optional[str] = None
    factory_tx_hash: Optional[str] = None
    token_address: Optional[str] = None
    token_tx_hash: Optional[str] = None


def default_factory_address(chain_id: int, supplied: Optional[str] = None) -> Optional[str]:
    """Return ``supplied`` or the well-known MiniMeTokenFactory for ``chain_id``."""

    return supplied or DEFAULT_TOKEN_FACTORIES.get(chain_id)


class TokenDeployer:
    """Builds the steps that deploy a MiniMeToken.

    With a compiled MiniMeToken artifact the token is deployed directly. The
    bundled artifact carries only the ABI, in which case the token is created
    by the factory's ``createCloneToken`` with the same constructor arguments.
    """

    def __init__(
        self,
        options: TokenOptions,
        *,
        chain_id: int,
        web3: Any,
        deployer: Deployer,
        artifacts_dir: Optional[Path] = None,
    ) -> None:
        self._options = options
        self._web3 = web3
        self._deployer = deployer
        self._artifacts_dir = artifacts_dir
        self._factory_address = default_factory_address(chain_id, options.token_factory_address)
        self._transfer_enabled = parse_bool(options.transfer_enabled)
        self._decimal_units = int(options.decimal_units)

    @property
    def factory_address(self) -> Optional[str]:
        return self._factory_address

    def steps(self) -> List[Step[TokenContext]]:
        return [
            Step.conditional("Deploy the MiniMeTokenFactory contract", self.needs_factory, self.deploy_factory),
            Step.required("Deploy the MiniMeToken contract", self.deploy_token),
        ]

    def needs_factory(self, ctx: TokenContext) -> bool:
        return not looks_like_address(self._factory_address)

    async def deploy_factory(self, ctx: TokenContext, task: StepHandle) -> None:
        artifact = load_artifact("MiniMeTokenFactory", self._artifacts_dir)
        task.output = "Waiting for the transaction to be mined..."
        receipt = await self._deployer.deploy(artifact, (), description="Deploy MiniMeTokenFactory")
        ctx.factory_address = receipt["contractAddress"]
        ctx.factory_tx_hash = receipt_tx_hash(receipt)

    async def deploy_token(self, ctx: TokenContext, task: StepHandle) -> None:
        factory = ctx.factory_address or self._factory_address
        if not looks_like_address(factory):
            raise ValueError(f"Invalid MiniMeTokenFactory address {factory!r}")
        factory = to_checksum_address(factory)
        token_args = (
            ZERO_ADDRESS,
            0,
            self._options.token_name,
            self._decimal_units,
            self._options.symbol,
            self._transfer_enabled,
        )
        artifact = load_artifact("MiniMeToken", self._artifacts_dir)
        task.output = "Waiting for the transaction to be mined..."
        if artifact.has_bytecode:
            _LOGGER.debug("Deploying MiniMeToken | factory=%s | symbol=%s", factory, self._options.symbol)
            receipt = await self._deployer.deploy(
                artifact, (factory, *token_args), description=f"Deploy MiniMeToken {self._options.symbol}"
            )
            ctx.token_address = receipt["contractAddress"]
        else:
            ctx.token_address, receipt = await self._clone_from_factory(factory, token_args)
        ctx.token_tx_hash = receipt_tx_hash(receipt)

    async def _clone_from_factory(
        self, factory: str, token_args: Tuple[Any, ...]
    ) -> Tuple[str, Mapping[str, Any]]:
        artifact = load_artifact("MiniMeTokenFactory", self._artifacts_dir)
        event_abi = artifact.find_entry("event", NEW_CLONE_TOKEN_EVENT)
        if event_abi is None:
            raise MissingAbiEntryError("MiniMeTokenFactory", f"{NEW_CLONE_TOKEN_EVENT} log")

        _LOGGER.debug("Creating MiniMeToken through factory | factory=%s | symbol=%s", factory, self._options.symbol)
        contract = self._web3.eth.contract(address=factory, abi=artifact.abi)
        path = TransactionPath(
            description=f"Create MiniMeToken {self._options.symbol} with factory {factory}",
            target=factory,
            method="createCloneToken",
            args=token_args,
            call=contract.functions.createCloneToken(*token_args),
        )
        receipt = await self._deployer.execute(path)

        clone_log = find_log(receipt.get("logs") or [], event_abi, address=factory)
        if clone_log is None:
            raise DaoCliError(
                f"MiniMeTokenFactory at {factory} did not report a new token in transaction {receipt_tx_hash(receipt)}"
            )
        return decode_log_data(event_abi, clone_log)["_cloneToken"], receipt


__all__ = [
    "DEFAULT_DECIMAL_UNITS",
    "DEFAULT_TOKEN_FACTORIES",
    "MAINNET_MINIME_TOKEN_FACTORY",
    "RINKEBY_MINIME_TOKEN_FACTORY",
    "TokenContext",
    "TokenDeployer",
    "TokenOptions",
    "default_factory_address",
]
