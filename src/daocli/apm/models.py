"""Data structures describing APM repositories and their versions."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from eth_utils import keccak, to_hex

from ..errors import InvalidVersionError

LATEST = "latest"
_SEMVER = re.compile(r"^v?(\d+)\.(\d+)\.(\d+)$")


@dataclass(frozen=True, slots=True)
class Role:
    """An ACL role declared by an app in its ``arapp.json``."""

    id: str
    name: str = ""
    params: Tuple[str, ...] = ()
    bytes: str = ""

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "Role":
        role_id = str(payload["id"])
        role_bytes = payload.get("bytes") or to_hex(keccak(text=role_id))
        return cls(
            id=role_id,
            name=str(payload.get("name", "")),
            params=tuple(payload.get("params") or ()),
            bytes=str(role_bytes),
        )


@dataclass(slots=True)
class AragonRepo:
    """A resolved version of an APM repo together with its published artifact."""

    name: str
    app_id: str
    version: str
    contract_address: str
    content_uri: str
    abi: List[Dict[str, Any]] = field(default_factory=list)
    roles: List[Role] = field(default_factory=list)
    app_name: Optional[str] = None


def default_apm_name(identifier: str, apm_domain: str = "aragonpm.eth") -> str:
    """Append the APM domain to bare repo names (``voting`` becomes ``voting.aragonpm.eth``)."""

    return identifier if "." in identifier else f"{identifier}.{apm_domain}"


def parse_version(version: Optional[str]) -> Optional[Tuple[int, int, int]]:
    """Return ``None`` for the latest version, else the MAJOR.MINOR.PATCH triple."""

    if version is None or version == LATEST:
        return None
    match = _SEMVER.match(version.strip())
    if not match:
        raise InvalidVersionError(f"Invalid version {version!r}, expected '{LATEST}' or MAJOR.MINOR.PATCH")
    major, minor, patch = (int(part) for part in match.groups())
    return major, minor, patch


def format_version(version: Tuple[int, ...]) -> str:
    return ".".join(str(part) for part in version)


__all__ = ["AragonRepo", "LATEST", "Role", "default_apm_name", "format_version", "parse_version"]
