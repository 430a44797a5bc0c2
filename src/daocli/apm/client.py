"""Resolve APM repos and their published versions."""

from __future__ import annotations

import logging
from typing import Any, Optional

from ens import AsyncENS
from eth_utils import to_hex
from web3.exceptions import BadFunctionCallOutput, ContractLogicError

from ..config import DaoCliSettings
from ..errors import RepoNotFoundError
from ..chain.contracts import ZERO_ADDRESS, load_artifact
from .content import ContentClient, decode_content_uri
from .models import AragonRepo, Role, default_apm_name, format_version, parse_version

_LOGGER = logging.getLogger(__name__)
ARTIFACT_FILE = "artifact.json"


class ApmClient:
    """Look up repo versions on chain and load their ``artifact.json``."""

    def __init__(self, web3: Any, ens: AsyncENS, content: ContentClient, settings: DaoCliSettings):
        self._web3 = web3
        self._ens = ens
        self._content = content
        self._settings = settings

    def full_name(self, name: str) -> str:
        return default_apm_name(name, self._settings.apm_domain)

    async def get_version(self, name: str, version: Optional[str] = None) -> AragonRepo:
        """Return ``name`` at ``version`` (``None`` or ``"latest"`` for the newest one)."""

        repo_name = self.full_name(name)
        semantic_version = parse_version(version)
        repo_address = await self._ens.address(repo_name)
        if not repo_address or repo_address == ZERO_ADDRESS:
            raise RepoNotFoundError(f"Repository {repo_name} does not exist")

        artifact = load_artifact("Repo", self._settings.artifacts_dir)
        repo = self._web3.eth.contract(address=repo_address, abi=artifact.abi)
        try:
            if semantic_version is None:
                entry = await repo.functions.getLatest().call()
            else:
                entry = await repo.functions.getBySemanticVersion(list(semantic_version)).call()
        except (BadFunctionCallOutput, ContractLogicError) as exc:
            raise RepoNotFoundError(f"Version {version} of {repo_name} could not be found: {exc}") from exc

        resolved_version, contract_address, raw_content_uri = entry
        if contract_address == ZERO_ADDRESS:
            raise RepoNotFoundError(f"Version {version} of {repo_name} could not be found")
        content_uri = decode_content_uri(raw_content_uri)
        _LOGGER.info(
            "Resolved repo version | repo=%s | version=%s | contract=%s | content=%s",
            repo_name,
            format_version(resolved_version),
            contract_address,
            content_uri,
        )

        metadata = await self._content.fetch_json(content_uri, ARTIFACT_FILE)
        app_name = str(metadata.get("appName") or repo_name)
        return AragonRepo(
            name=repo_name,
            app_id=to_hex(AsyncENS.namehash(app_name)),
            version=format_version(resolved_version),
            contract_address=contract_address,
            content_uri=content_uri,
            abi=list(metadata.get("abi") or []),
            roles=[Role.from_mapping(role) for role in metadata.get("roles") or []],
            app_name=app_name,
        )


__all__ = ["ApmClient", "ARTIFACT_FILE"]
