"""Exceptions raised by dao-cli commands."""

from __future__ import annotations

from typing import Optional


class DaoCliError(RuntimeError):
    """Base class for failures reported to the user."""


class VersionMismatchError(DaoCliError):
    """Raised when the DAO already runs a different base for the app being installed."""

    def __init__(self, repo_name: str, installed_address: str, expected_address: str) -> None:
        super().__init__(
            f"Cannot install app on a different version. Currently installed version for {repo_name} "
            f"in the DAO is {installed_address}, the requested version uses {expected_address}\n"
            " Please upgrade using 'dao upgrade' first or install a different version."
        )
        self.repo_name = repo_name
        self.installed_address = installed_address
        self.expected_address = expected_address


class MissingRolesError(DaoCliError):
    """Raised when open permissions are requested for a repo that declares no roles."""

    def __init__(self) -> None:
        super().__init__(
            "You have no roles defined in your arapp.json.\n"
            "This is required for your app to be properly installed.\n"
            "See https://hack.aragon.org/docs/cli-global-confg#the-arappjson-file for more information."
        )


class MissingAbiEntryError(DaoCliError):
    """Raised when a bundled ABI lacks an entry the commands depend on."""

    def __init__(self, contract: str, entry: str) -> None:
        super().__init__(f"{contract} ABI doesn't contain {entry} entry")
        self.contract = contract
        self.entry = entry


class InitFunctionNotFoundError(DaoCliError):
    """Raised when the requested initialization function is absent from the app ABI."""


class InvalidInitArgumentsError(DaoCliError):
    """Raised when initialization arguments do not match the init function's inputs."""


class DaoNotFoundError(DaoCliError):
    """Raised when a DAO name cannot be resolved to an address."""


class RepoNotFoundError(DaoCliError):
    """Raised when an APM repo or one of its versions cannot be found."""


class InvalidVersionError(DaoCliError):
    """Raised for version strings that are neither 'latest' nor MAJOR.MINOR.PATCH."""


class NoTransactionPathError(DaoCliError):
    """Raised when the sender cannot perform an action directly."""


class ArtifactNotFoundError(DaoCliError):
    """Raised when a contract artifact (ABI or bytecode) is unavailable."""


class ContentFetchError(DaoCliError):
    """Raised when APM content cannot be retrieved from its location."""

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class TransactionFailedError(DaoCliError):
    """Raised when a mined transaction reverted."""

    def __init__(self, description: str, tx_hash: str) -> None:
        super().__init__(f"Transaction reverted: {description} ({tx_hash})")
        self.description = description
        self.tx_hash = tx_hash


__all__ = [
    "ArtifactNotFoundError",
    "ContentFetchError",
    "DaoCliError",
    "DaoNotFoundError",
    "InitFunctionNotFoundError",
    "InvalidInitArgumentsError",
    "InvalidVersionError",
    "MissingAbiEntryError",
    "MissingRolesError",
    "NoTransactionPathError",
    "RepoNotFoundError",
    "TransactionFailedError",
    "VersionMismatchError",
]
