from __future__ import annotations

import json
from pathlib import Path

import pytest
from eth_abi import decode, encode
from eth_utils import function_signature_to_4byte_selector

from daocli.chain.contracts import (
    ContractArtifact,
    addresses_equal,
    coerce_argument,
    encode_init_payload,
    load_artifact,
    looks_like_address,
    parse_bool,
)
from daocli.chain.logs import decode_log_data, event_topic, find_log
from daocli.errors import ArtifactNotFoundError, InitFunctionNotFoundError, InvalidInitArgumentsError

TOKEN = "0x" + "1" * 40
VOTING_ABI = [
    {"type": "event", "name": "StartVote", "inputs": []},
    {
        "type": "function",
        "name": "initialize",
        "inputs": [
            {"name": "_token", "type": "address"},
            {"name": "_supportRequiredPct", "type": "uint64"},
            {"name": "_voteTime", "type": "uint64"},
        ],
        "outputs": [],
    },
]


def test_encode_init_payload_coerces_string_arguments() -> None:
    payload = encode_init_payload(VOTING_ABI, "initialize", [TOKEN, "500000000000000000", "0x15180"])

    selector = function_signature_to_4byte_selector("initialize(address,uint64,uint64)")
    assert payload.startswith("0x" + selector.hex())
    decoded = decode(["address", "uint64", "uint64"], bytes.fromhex(payload[10:]))
    assert decoded == (TOKEN, 500000000000000000, 86400)


def test_encode_init_payload_none_disables_initialization() -> None:
    assert encode_init_payload(VOTING_ABI, "none", ["ignored"]) == "0x"


def test_encode_init_payload_unknown_function() -> None:
    with pytest.raises(InitFunctionNotFoundError, match="setup not found in ABI"):
        encode_init_payload(VOTING_ABI, "setup", [])


def test_encode_init_payload_argument_count_mismatch() -> None:
    with pytest.raises(InvalidInitArgumentsError, match="Expected 3 arguments but got 1"):
        encode_init_payload(VOTING_ABI, "initialize", [TOKEN])


@pytest.mark.parametrize(
    "args",
    [
        [TOKEN, "0500", "86400"],
        ["not-an-address", "1", "86400"],
        [TOKEN, str(2**64), "86400"],
    ],
)
def test_encode_init_payload_rejects_unusable_arguments(args) -> None:
    with pytest.raises(InvalidInitArgumentsError):
        encode_init_payload(VOTING_ABI, "initialize", args)


@pytest.mark.parametrize(
    "abi_type, raw, expected",
    [
        ("bool", "false", False),
        ("bool", "True", True),
        ("uint256", "42", 42),
        ("int8", "-3", -3),
        ("string", "hello", "hello"),
        ("bytes", "0x0102", b"\x01\x02"),
        ("uint8[]", "[1, 2, 3]", [1, 2, 3]),
        ("bool[2]", '["true", "false"]', [True, False]),
        ("uint256", 7, 7),
    ],
)
def test_coerce_argument(abi_type: str, raw, expected) -> None:
    assert coerce_argument(abi_type, raw) == expected


def test_parse_bool_rejects_unknown_values() -> None:
    assert parse_bool(True) is True
    assert parse_bool("0") is False
    with pytest.raises(ValueError):
        parse_bool("perhaps")


def test_address_helpers() -> None:
    assert addresses_equal("0xABCDEF" + "0" * 34, "0xabcdef" + "0" * 34)
    assert looks_like_address(TOKEN)
    assert not looks_like_address("0x1234")
    assert not looks_like_address(None)


def test_bundled_kernel_artifact_has_new_app_proxy_event() -> None:
    kernel = load_artifact("Kernel")

    event = kernel.find_entry("event", "NewAppProxy")

    assert event is not None
    assert [item["type"] for item in event["inputs"]] == ["address", "bool", "bytes32"]


def test_bundled_minime_artifacts_lack_bytecode() -> None:
    with pytest.raises(ArtifactNotFoundError, match="DAOCLI_ARTIFACTS_DIR"):
        load_artifact("MiniMeToken").require_bytecode()


def test_artifacts_dir_overrides_bundled_abi(tmp_path: Path) -> None:
    (tmp_path / "MiniMeToken.json").write_text(json.dumps({"abi": [], "bytecode": "0x6080"}), encoding="utf-8")

    artifact = load_artifact("MiniMeToken", tmp_path)

    assert artifact == ContractArtifact(name="MiniMeToken", abi=[], bytecode="0x6080")
    assert artifact.require_bytecode() == "0x6080"


def test_unknown_artifact() -> None:
    with pytest.raises(ArtifactNotFoundError):
        load_artifact("DoesNotExist")


def test_find_log_matches_topic_and_address() -> None:
    event_abi = load_artifact("Kernel").find_entry("event", "NewAppProxy")
    proxy = "0x" + "2" * 40
    dao = "0x" + "3" * 40
    log = {
        "address": dao.upper().replace("0X", "0x"),
        "topics": ["0x" + event_topic(event_abi).hex()],
        "data": "0x" + encode(["address", "bool", "bytes32"], [proxy, False, b"\x00" * 32]).hex(),
    }

    assert find_log([log], event_abi, address="0x" + "4" * 40) is None
    found = find_log([log], event_abi, address=dao)

    assert found is log
    assert decode_log_data(event_abi, found) == {"proxy": proxy, "isUpgradeable": False, "appId": b"\x00" * 32}


def test_decode_log_data_reads_indexed_arguments_from_topics() -> None:
    event_abi = load_artifact("MiniMeTokenFactory").find_entry("event", "NewFactoryCloneToken")
    token = "0x" + "7" * 40
    log = {
        "topics": [event_topic(event_abi), bytes(12) + bytes.fromhex(token[2:]), bytes(32)],
        "data": encode(["uint256"], [42]),
    }

    assert decode_log_data(event_abi, log) == {
        "_cloneToken": token,
        "_parentToken": "0x" + "0" * 40,
        "_snapshotBlock": 42,
    }


def test_decode_log_data_requires_indexed_topics() -> None:
    event_abi = load_artifact("MiniMeTokenFactory").find_entry("event", "NewFactoryCloneToken")

    with pytest.raises(ValueError, match="_cloneToken"):
        decode_log_data(event_abi, {"topics": [event_topic(event_abi)], "data": encode(["uint256"], [1])})
