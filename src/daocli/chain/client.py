"""Construction of the async web3 client used by every command."""

from __future__ import annotations

import logging
from typing import Optional

from web3 import AsyncHTTPProvider, AsyncWeb3, WebSocketProvider

from ..config import DaoCliSettings
from ..errors import DaoCliError

_LOGGER = logging.getLogger(__name__)


class NodeUnavailableError(DaoCliError):
    """Raised when the configured JSON-RPC node does not answer."""


def _build_provider(rpc_url: str):
    if rpc_url.startswith(("ws://", "wss://")):
        return WebSocketProvider(rpc_url)
    return AsyncHTTPProvider(rpc_url)


async def connect_web3(settings: DaoCliSettings) -> AsyncWeb3:
    """Return a connected ``AsyncWeb3`` for ``settings.rpc_url``."""

    provider = _build_provider(settings.rpc_url)
    web3 = AsyncWeb3(provider)
    if isinstance(provider, WebSocketProvider):
        await provider.connect()
    if not await web3.is_connected():
        await disconnect_web3(web3)
        raise NodeUnavailableError(f"Could not connect to the Ethereum node at {settings.rpc_url}")
    _LOGGER.debug("Connected to node | rpc_url=%s", settings.rpc_url)
    return web3


async def disconnect_web3(web3: AsyncWeb3) -> None:
    provider = web3.provider
    if isinstance(provider, (WebSocketProvider, AsyncHTTPProvider)):
        await provider.disconnect()


async def resolve_sender(web3: AsyncWeb3, private_key: Optional[str] = None) -> str:
    """Return the account that signs transactions.

    A configured private key wins; otherwise the node's first unlocked account is used.
    """

    if private_key:
        return web3.eth.account.from_key(private_key).address
    accounts = await web3.eth.accounts
    if not accounts:
        raise DaoCliError("The node exposes no accounts and no private key is configured (DAOCLI_PRIVATE_KEY)")
    return accounts[0]


__all__ = ["NodeUnavailableError", "connect_web3", "disconnect_web3", "resolve_sender"]
