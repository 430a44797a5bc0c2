"""Event log lookup and decoding helpers."""

from __future__ import annotations

from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Union

from eth_abi import decode
from eth_utils import event_abi_to_log_topic, to_bytes, to_checksum_address

from .contracts import addresses_equal

_HASHED_TYPES = {"string", "bytes"}


def _as_bytes(value: Union[str, bytes]) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return to_bytes(hexstr=value)


def _as_address(value: Union[str, bytes]) -> str:
    if isinstance(value, (bytes, bytearray)):
        return to_checksum_address(bytes(value)[-20:])
    return str(value)


def event_topic(event_abi: Mapping[str, Any]) -> bytes:
    """Return the keccak topic identifying ``event_abi`` (``topics[0]`` of its logs)."""

    return event_abi_to_log_topic(dict(event_abi))


def find_log(
    logs: Iterable[Mapping[str, Any]],
    event_abi: Mapping[str, Any],
    *,
    address: Optional[str] = None,
) -> Optional[Mapping[str, Any]]:
    """Return the first log emitted for ``event_abi``, optionally by ``address``."""

    topic = event_topic(event_abi)
    for log in logs:
        topics: Sequence[Any] = log.get("topics") or []
        if not topics or _as_bytes(topics[0]) != topic:
            continue
        if address is not None and not addresses_equal(_as_address(log.get("address", b"")), address):
            continue
        return log
    return None


def _decode_topic(abi_type: str, topic: Union[str, bytes]) -> Any:
    raw = _as_bytes(topic)
    if abi_type in _HASHED_TYPES or abi_type.endswith("]") or abi_type.startswith("tuple"):
        return raw
    return decode([abi_type], raw)[0]


def decode_log_data(event_abi: Mapping[str, Any], log: Mapping[str, Any]) -> Dict[str, Any]:
    """Decode a log's arguments into a name to value mapping.

    Indexed arguments come from ``topics[1:]``. Dynamic indexed values are only
    stored as their hash, so those are returned as the raw topic bytes.
    """

    inputs = list(event_abi.get("inputs", []))
    data_inputs = [item for item in inputs if not item.get("indexed")]
    data_values = iter(decode([str(item["type"]) for item in data_inputs], _as_bytes(log.get("data", b""))))
    topics = iter(list(log.get("topics") or [])[1:])

    decoded: Dict[str, Any] = {}
    for item in inputs:
        abi_type = str(item["type"])
        if item.get("indexed"):
            topic = next(topics, None)
            if topic is None:
                raise ValueError(f"Log has no topic for indexed argument {item['name']}")
            value = _decode_topic(abi_type, topic)
        else:
            value = next(data_values)
        if abi_type == "address":
            value = to_checksum_address(value)
        decoded[str(item["name"])] = value
    return decoded


__all__ = ["decode_log_data", "event_topic", "find_log"]
