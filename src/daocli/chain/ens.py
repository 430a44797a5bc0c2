"""ENS name resolution for DAO and APM names."""

from __future__ import annotations

import logging
from typing import Optional

from ens import AsyncENS
from web3 import AsyncWeb3

from ..errors import DaoNotFoundError
from .contracts import looks_like_address

_LOGGER = logging.getLogger(__name__)


def build_ens(web3: AsyncWeb3, registry_address: Optional[str] = None) -> AsyncENS:
    if registry_address:
        return AsyncENS.from_web3(web3, addr=AsyncWeb3.to_checksum_address(registry_address))
    return AsyncENS.from_web3(web3)


async def resolve_ens_domain(ens: AsyncENS, name: str) -> Optional[str]:
    address = await ens.address(name)
    _LOGGER.debug("Resolved ENS name | name=%s | address=%s", name, address)
    return address


def dao_domain_name(dao: str, dao_domain: str = "aragonid.eth") -> str:
    """Append the DAO domain to bare names (``mydao`` becomes ``mydao.aragonid.eth``)."""

    return dao if "." in dao else f"{dao}.{dao_domain}"


async def resolve_dao_address(ens: AsyncENS, dao: str, dao_domain: str = "aragonid.eth") -> str:
    """Return ``dao`` untouched when it is already an address, else resolve it through ENS."""

    if looks_like_address(dao):
        return AsyncWeb3.to_checksum_address(dao)
    name = dao_domain_name(dao, dao_domain)
    address = await resolve_ens_domain(ens, name)
    if not address:
        raise DaoNotFoundError(f"Could not resolve DAO {name} to an address")
    return address


__all__ = ["build_ens", "dao_domain_name", "resolve_dao_address", "resolve_ens_domain"]
