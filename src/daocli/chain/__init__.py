"""Chain access: web3 client, contract artifacts, logs and transactions."""

from .client import NodeUnavailableError, connect_web3, disconnect_web3, resolve_sender
from .contracts import (
    ANY_ENTITY,
    EMPTY_PAYLOAD,
    NO_MANAGER,
    SKIP_INIT,
    ZERO_ADDRESS,
    ContractArtifact,
    addresses_equal,
    encode_init_payload,
    load_artifact,
    parse_bool,
)
from .ens import build_ens, resolve_dao_address, resolve_ens_domain
from .logs import decode_log_data, event_topic, find_log
from .transactions import TransactionExecutor, TransactionPath, receipt_tx_hash

__all__ = [
    "ANY_ENTITY",
    "ContractArtifact",
    "EMPTY_PAYLOAD",
    "NO_MANAGER",
    "NodeUnavailableError",
    "SKIP_INIT",
    "TransactionExecutor",
    "TransactionPath",
    "ZERO_ADDRESS",
    "addresses_equal",
    "build_ens",
    "connect_web3",
    "decode_log_data",
    "disconnect_web3",
    "encode_init_payload",
    "event_topic",
    "find_log",
    "load_artifact",
    "parse_bool",
    "receipt_tx_hash",
    "resolve_dao_address",
    "resolve_ens_domain",
    "resolve_sender",
]
