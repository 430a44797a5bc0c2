"""Contract artifacts, ABI lookups and argument encoding."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from eth_abi import encode
from eth_abi.exceptions import EncodingError
from eth_utils import (
    function_abi_to_4byte_selector,
    get_abi_input_types,
    to_bytes,
    to_checksum_address,
)

from ..errors import ArtifactNotFoundError, InitFunctionNotFoundError, InvalidInitArgumentsError

_LOGGER = logging.getLogger(__name__)
_ARRAY_SUFFIX = re.compile(r"\[\d*\]$")
_ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"
ANY_ENTITY = to_checksum_address("0x" + "f" * 40)
NO_MANAGER = ZERO_ADDRESS
EMPTY_PAYLOAD = "0x"
SKIP_INIT = "none"

_TRUE_STRINGS = {"true", "yes", "y", "1"}
_FALSE_STRINGS = {"false", "no", "n", "0"}


@dataclass(frozen=True, slots=True)
class ContractArtifact:
    """ABI and creation bytecode of a contract."""

    name: str
    abi: List[Dict[str, Any]]
    bytecode: str = ""

    def find_entry(self, entry_type: str, name: str) -> Optional[Dict[str, Any]]:
        return find_abi_entry(self.abi, entry_type, name)

    @property
    def has_bytecode(self) -> bool:
        return bool(self.bytecode) and self.bytecode not in {"0x", "0x0"}

    def require_bytecode(self) -> str:
        if not self.has_bytecode:
            raise ArtifactNotFoundError(
                f"No bytecode available for {self.name}. Point DAOCLI_ARTIFACTS_DIR at a directory "
                f"containing a compiled {self.name}.json artifact."
            )
        return self.bytecode


def _read_bundled(name: str) -> Optional[Dict[str, Any]]:
    resource = resources.files(__package__).joinpath("artifacts", f"{name}.json")
    if not resource.is_file():
        return None
    return json.loads(resource.read_text(encoding="utf-8"))


@lru_cache(maxsize=None)
def load_artifact(name: str, artifacts_dir: Optional[Path] = None) -> ContractArtifact:
    """Load ``name`` from ``artifacts_dir`` when present, else from the bundled ABIs."""

    payload: Optional[Dict[str, Any]] = None
    if artifacts_dir is not None:
        candidate = Path(artifacts_dir).expanduser() / f"{name}.json"
        if candidate.is_file():
            _LOGGER.debug("Loading artifact | name=%s | path=%s", name, candidate)
            payload = json.loads(candidate.read_text(encoding="utf-8"))
    if payload is None:
        payload = _read_bundled(name)
    if payload is None:
        raise ArtifactNotFoundError(f"No artifact found for contract {name}")
    abi = payload.get("abi")
    if not isinstance(abi, list):
        raise ArtifactNotFoundError(f"Artifact for {name} has no ABI")
    return ContractArtifact(name=name, abi=abi, bytecode=payload.get("bytecode") or "")


def find_abi_entry(abi: Sequence[Mapping[str, Any]], entry_type: str, name: str) -> Optional[Dict[str, Any]]:
    return next(
        (dict(entry) for entry in abi if entry.get("type") == entry_type and entry.get("name") == name),
        None,
    )


def addresses_equal(first: str, second: str) -> bool:
    return first.lower() == second.lower()


def looks_like_address(value: Optional[str]) -> bool:
    """Return True for strings shaped like a hex address (any casing)."""

    return bool(value) and bool(_ADDRESS_PATTERN.match(value))


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    normalized = str(value).strip().lower()
    if normalized in _TRUE_STRINGS:
        return True
    if normalized in _FALSE_STRINGS:
        return False
    raise ValueError(f"Cannot interpret {value!r} as a boolean")


def coerce_argument(abi_type: str, value: Any) -> Any:
    """Convert a command line string into the Python value ``abi_type`` expects."""

    if _ARRAY_SUFFIX.search(abi_type):
        items = json.loads(value) if isinstance(value, str) else value
        inner = _ARRAY_SUFFIX.sub("", abi_type)
        return [coerce_argument(inner, item) for item in items]
    if not isinstance(value, str):
        return value
    if abi_type == "address":
        return to_checksum_address(value)
    if abi_type == "bool":
        return parse_bool(value)
    if abi_type.startswith(("uint", "int")):
        return int(value, 0)
    if abi_type.startswith("bytes"):
        if value.startswith("0x"):
            return to_bytes(hexstr=value)
        return value.encode("utf-8")
    if abi_type.startswith("tuple"):
        return tuple(json.loads(value))
    return value


def coerce_arguments(inputs: Sequence[Mapping[str, Any]], values: Sequence[Any]) -> List[Any]:
    if len(inputs) != len(values):
        raise InvalidInitArgumentsError(f"Expected {len(inputs)} arguments but got {len(values)}")
    coerced: List[Any] = []
    for spec, value in zip(inputs, values):
        try:
            coerced.append(coerce_argument(str(spec["type"]), value))
        except ValueError as exc:
            raise InvalidInitArgumentsError(
                f"Cannot use {value!r} as {spec['type']} for argument {spec.get('name') or len(coerced)}: {exc}"
            ) from exc
    return coerced


def encode_function_call(function_abi: Mapping[str, Any], args: Sequence[Any]) -> str:
    """Return the 0x-prefixed calldata for ``function_abi`` called with ``args``."""

    types = get_abi_input_types(dict(function_abi))
    values = coerce_arguments(function_abi.get("inputs", []), args)
    selector = function_abi_to_4byte_selector(dict(function_abi))
    try:
        encoded = encode(types, values)
    except EncodingError as exc:
        raise InvalidInitArgumentsError(f"Cannot encode arguments for {function_abi.get('name')}: {exc}") from exc
    return "0x" + (selector + encoded).hex()


def encode_init_payload(abi: Sequence[Mapping[str, Any]], init_function: str, init_args: Sequence[Any]) -> str:
    """Build the initialization calldata for a new app proxy.

    ``init_function == "none"`` disables initialization and yields ``"0x"``.
    """

    if init_function == SKIP_INIT:
        return EMPTY_PAYLOAD
    function_abi = find_abi_entry(abi, "function", init_function)
    if function_abi is None:
        raise InitFunctionNotFoundError(f"{init_function} not found in ABI")
    return encode_function_call(function_abi, init_args)


__all__ = [
    "ANY_ENTITY",
    "ContractArtifact",
    "EMPTY_PAYLOAD",
    "NO_MANAGER",
    "SKIP_INIT",
    "ZERO_ADDRESS",
    "addresses_equal",
    "coerce_argument",
    "coerce_arguments",
    "encode_function_call",
    "encode_init_payload",
    "find_abi_entry",
    "load_artifact",
    "looks_like_address",
    "parse_bool",
]
