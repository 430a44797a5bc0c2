from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from ens import AsyncENS
from eth_utils import keccak, to_hex

from daocli.apm import ApmClient, ContentLocation, Role, decode_content_uri, default_apm_name, parse_version
from daocli.config import DaoCliSettings
from daocli.errors import ContentFetchError, InvalidVersionError, RepoNotFoundError

REPO_ADDRESS = "0x" + "5" * 40
BASE = "0x" + "a" * 40


class _Call:
    def __init__(self, value: Any) -> None:
        self.value = value

    async def call(self) -> Any:
        return self.value


class _FakeEns:
    def __init__(self, address: Optional[str]) -> None:
        self._address = address
        self.names: List[str] = []

    async def address(self, name: str) -> Optional[str]:
        self.names.append(name)
        return self._address


class _FakeContent:
    def __init__(self, payload: Dict[str, Any]) -> None:
        self.payload = payload
        self.requests: List[tuple] = []

    async def fetch_json(self, content_uri: str, path: str) -> Dict[str, Any]:
        self.requests.append((content_uri, path))
        return self.payload


def _fake_web3(entries: Dict[str, Any], seen: List[tuple]) -> SimpleNamespace:
    def contract(address: str, abi: list) -> SimpleNamespace:
        seen.append(("contract", address))

        def by_version(version: list) -> _Call:
            seen.append(("getBySemanticVersion", tuple(version)))
            return _Call(entries["version"])

        return SimpleNamespace(
            functions=SimpleNamespace(getLatest=lambda: _Call(entries["latest"]), getBySemanticVersion=by_version)
        )

    return SimpleNamespace(eth=SimpleNamespace(contract=contract))


def test_default_apm_name() -> None:
    assert default_apm_name("voting") == "voting.aragonpm.eth"
    assert default_apm_name("voting.open.aragonpm.eth") == "voting.open.aragonpm.eth"
    assert default_apm_name("finance", "hatch.aragonpm.eth") == "finance.hatch.aragonpm.eth"


def test_parse_version() -> None:
    assert parse_version(None) is None
    assert parse_version("latest") is None
    assert parse_version("2.1.0") == (2, 1, 0)
    assert parse_version("v1.0.3") == (1, 0, 3)
    with pytest.raises(InvalidVersionError):
        parse_version("1.0")


def test_content_location_parsing() -> None:
    ipfs = ContentLocation.parse("ipfs:QmHash")
    http = ContentLocation.parse("http:localhost:8001/0xabc")

    assert ipfs.url_for("artifact.json", "https://gateway.example/ipfs/") == "https://gateway.example/ipfs/QmHash/artifact.json"
    assert http.url_for("/artifact.json", "unused") == "http://localhost:8001/0xabc/artifact.json"
    with pytest.raises(ContentFetchError):
        ContentLocation.parse("swarm:abc")


def test_decode_content_uri() -> None:
    assert decode_content_uri(b"ipfs:QmHash") == "ipfs:QmHash"
    assert decode_content_uri("0x" + b"ipfs:Qm".hex()) == "ipfs:Qm"


def test_role_bytes_default_to_keccak_of_id() -> None:
    role = Role.from_mapping({"id": "CREATE_VOTES_ROLE", "name": "Create new votes", "params": ["Vote ID"]})

    assert role.bytes == to_hex(keccak(text="CREATE_VOTES_ROLE"))
    assert role.params == ("Vote ID",)


@pytest.mark.asyncio
async def test_get_latest_version_loads_artifact() -> None:
    seen: List[tuple] = []
    web3 = _fake_web3({"latest": ([1, 2, 3], BASE, b"ipfs:QmHash")}, seen)
    content = _FakeContent(
        {
            "appName": "voting.aragonpm.eth",
            "abi": [{"type": "function", "name": "initialize", "inputs": []}],
            "roles": [{"id": "CREATE_VOTES_ROLE", "name": "Create votes", "params": []}],
        }
    )
    ens = _FakeEns(REPO_ADDRESS)
    client = ApmClient(web3, ens, content, DaoCliSettings())

    repo = await client.get_version("voting")

    assert ens.names == ["voting.aragonpm.eth"]
    assert seen == [("contract", REPO_ADDRESS)]
    assert content.requests == [("ipfs:QmHash", "artifact.json")]
    assert repo.name == "voting.aragonpm.eth"
    assert repo.version == "1.2.3"
    assert repo.contract_address == BASE
    assert repo.app_id == to_hex(AsyncENS.namehash("voting.aragonpm.eth"))
    assert [role.id for role in repo.roles] == ["CREATE_VOTES_ROLE"]
    assert repo.abi[0]["name"] == "initialize"


@pytest.mark.asyncio
async def test_get_specific_version() -> None:
    seen: List[tuple] = []
    web3 = _fake_web3({"version": ([2, 0, 0], BASE, b"ipfs:QmOld")}, seen)
    client = ApmClient(web3, _FakeEns(REPO_ADDRESS), _FakeContent({}), DaoCliSettings())

    repo = await client.get_version("finance.aragonpm.eth", "2.0.0")

    assert ("getBySemanticVersion", (2, 0, 0)) in seen
    assert repo.version == "2.0.0"
    assert repo.roles == []


@pytest.mark.asyncio
async def test_missing_repo() -> None:
    client = ApmClient(SimpleNamespace(), _FakeEns(None), _FakeContent({}), DaoCliSettings())

    with pytest.raises(RepoNotFoundError, match="nope.aragonpm.eth"):
        await client.get_version("nope")
