"""Configuration utilities for the dao-cli commands."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import (
    AnyHttpUrl,
    Field,
    PositiveFloat,
    PositiveInt,
    SecretStr,
    field_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict


class DaoCliSettings(BaseSettings):
    """Settings model driven by environment variables.

    Environment variables are prefixed with ``DAOCLI_``. For example, set
    ``DAOCLI_RPC_URL=https://rinkeby.example.org`` to point the commands at a
    different JSON-RPC node.
    """

    model_config = SettingsConfigDict(
        env_prefix="DAOCLI_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    rpc_url: str = Field(
        default="http://localhost:8545",
        description="JSON-RPC endpoint (http(s):// or ws(s)://) of the Ethereum node.",
    )
    ens_registry_address: Optional[str] = Field(
        default=None,
        description="ENS registry used to resolve DAO and APM names. Defaults to the web3 mainnet registry.",
    )
    ipfs_gateway: AnyHttpUrl = Field(
        default="https://ipfs.eth.aragon.network/ipfs",
        description="HTTP gateway used to fetch APM content published on IPFS.",
    )
    apm_domain: str = Field(
        default="aragonpm.eth",
        description="Domain appended to repo names given without one (e.g. 'voting').",
    )
    dao_domain: str = Field(
        default="aragonid.eth",
        description="Domain appended to DAO names given without one.",
    )
    private_key: Optional[SecretStr] = Field(
        default=None,
        description="Hex private key used to sign transactions locally. When unset the node's first account sends them.",
    )
    gas_fuzz_factor: PositiveFloat = Field(
        default=1.5,
        description="Multiplier applied to gas estimates before sending a transaction.",
    )
    block_gas_limit_ratio: PositiveFloat = Field(
        default=0.95,
        description="Fraction of the latest block gas limit a single transaction may request.",
    )
    receipt_timeout_seconds: PositiveFloat = Field(
        default=600.0,
        description="How long to wait for a transaction to be mined.",
    )
    request_timeout_seconds: PositiveFloat = Field(
        default=30.0,
        description="Total request timeout applied to content gateway calls.",
    )
    content_retry_attempts: PositiveInt = Field(
        default=3,
        description="Number of attempts for recoverable content gateway failures.",
    )
    artifacts_dir: Optional[Path] = Field(
        default=None,
        description=(
            "Directory with compiled contract artifacts (<Name>.json holding 'abi' and 'bytecode'). "
            "Takes precedence over the ABIs bundled with the package and is required to deploy MiniMe contracts."
        ),
    )

    @field_validator("block_gas_limit_ratio")
    @classmethod
    def _check_ratio(cls, value: float) -> float:
        if value > 1:
            raise ValueError("block_gas_limit_ratio must be at most 1")
        return value

    @field_validator("apm_domain", "dao_domain")
    @classmethod
    def _normalise_domain(cls, value: str) -> str:
        normalized = value.strip().strip(".").lower()
        if not normalized:
            raise ValueError("domain must not be empty")
        return normalized

    def with_overrides(self, **overrides: Any) -> "DaoCliSettings":
        """Return a copy with every non-``None`` override applied."""

        updates: Dict[str, Any] = {key: value for key, value in overrides.items() if value is not None}
        if not updates:
            return self
        return self.model_copy(update=updates)


@lru_cache(maxsize=1)
def get_settings() -> DaoCliSettings:
    """Return a cached ``DaoCliSettings`` instance."""

    return DaoCliSettings()


__all__ = ["DaoCliSettings", "get_settings"]
