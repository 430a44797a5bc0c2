"""Task pipeline that installs an APM app into a DAO."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Tuple

from ..apm.models import AragonRepo, Role
from ..chain.contracts import (
    ANY_ENTITY,
    EMPTY_PAYLOAD,
    NO_MANAGER,
    ZERO_ADDRESS,
    addresses_equal,
    encode_init_payload,
    load_artifact,
)
from ..chain.logs import decode_log_data, find_log
from ..chain.transactions import TransactionPath
from ..errors import MissingAbiEntryError, MissingRolesError, NoTransactionPathError, VersionMismatchError
from ..pipeline import Step, StepHandle

_LOGGER = logging.getLogger(__name__)

SET_PERMISSIONS_OPEN = "open"
DEFAULT_INIT_FUNCTION = "initialize"
NEW_APP_PROXY_EVENT = "NewAppProxy"


class RepoResolver(Protocol):
    async def get_version(self, name: str, version: Optional[str] = None) -> AragonRepo:
        ...


class Executor(Protocol):
    @property
    def sender(self) -> str:
        ...

    async def execute(self, path: TransactionPath) -> Mapping[str, Any]:
        ...


@dataclass(slots=True)
class InstallOptions:
    """What to install and how. ``dao`` is an already resolved address."""

    dao: str
    apm_repo: str
    apm_repo_version: Optional[str] = None
    app_init: str = DEFAULT_INIT_FUNCTION
    app_init_args: Tuple[Any, ...] = ()
    set_permissions: Optional[str] = None


@dataclass(slots=True)
class InstallContext:
    """Results accumulated while the install pipeline runs."""

    repo: Optional[AragonRepo] = None
    transaction_path: List[TransactionPath] = field(default_factory=list)
    receipt: Optional[Mapping[str, Any]] = None
    app_address: Optional[str] = None
    not_initialized: bool = False
    permission_receipts: List[Mapping[str, Any]] = field(default_factory=list)


class AppInstaller:
    """Builds the steps that create a new app instance in a DAO kernel."""

    def __init__(
        self,
        options: InstallOptions,
        *,
        web3: Any,
        kernel: Any,
        apm: RepoResolver,
        executor: Executor,
        kernel_abi: Optional[Sequence[Mapping[str, Any]]] = None,
        artifacts_dir: Optional[Path] = None,
    ) -> None:
        self._options = options
        self._web3 = web3
        self._kernel = kernel
        self._apm = apm
        self._executor = executor
        self._artifacts_dir = artifacts_dir
        self._kernel_abi = list(kernel_abi) if kernel_abi is not None else load_artifact("Kernel", artifacts_dir).abi
        self._acl: Any = None

    def steps(self) -> List[Step[InstallContext]]:
        version = self._options.apm_repo_version or "latest"
        return [
            Step.required(f"Fetching {self._options.apm_repo}@{version}", self.fetch_repo),
            Step.required("Checking installed version", self.check_installed_version),
            Step.required("Deploying app instance", self.deploy_instance),
            Step.required("Fetching deployed app", self.fetch_deployed_app),
            Step.conditional("Set permissions", self.permissions_enabled, self.set_permissions),
        ]

    def permissions_enabled(self, ctx: InstallContext) -> bool:
        return self._options.set_permissions == SET_PERMISSIONS_OPEN and bool(ctx.app_address)

    async def fetch_repo(self, ctx: InstallContext, task: StepHandle) -> None:
        ctx.repo = await self._apm.get_version(self._options.apm_repo, self._options.apm_repo_version)

    async def check_installed_version(self, ctx: InstallContext, task: StepHandle) -> None:
        repo = _require_repo(ctx)
        namespace = await self._kernel.functions.APP_BASES_NAMESPACE().call()
        current_base = await self._kernel.functions.getApp(namespace, repo.app_id).call()
        if current_base == ZERO_ADDRESS:
            task.skip(f"Installing the first instance of {self._options.apm_repo} in DAO")
            return
        if not addresses_equal(current_base, repo.contract_address):
            raise VersionMismatchError(self._options.apm_repo, current_base, repo.contract_address)

    async def deploy_instance(self, ctx: InstallContext, task: StepHandle) -> None:
        repo = _require_repo(ctx)
        payload = encode_init_payload(repo.abi, self._options.app_init, self._options.app_init_args)
        if payload == EMPTY_PAYLOAD:
            ctx.not_initialized = True

        args = (repo.app_id, repo.contract_address, payload, False)
        role = await self._kernel.functions.APP_MANAGER_ROLE().call()
        path = await self._direct_path(
            where=self._options.dao,
            role=role,
            method="newAppInstance",
            args=args,
            call=self._kernel.functions.newAppInstance(*args),
            description=f"Create a new {repo.name} app instance in DAO {self._options.dao}",
        )
        ctx.transaction_path.append(path)
        task.output = "Waiting for the transaction to be mined..."
        ctx.receipt = await self._executor.execute(path)

    async def fetch_deployed_app(self, ctx: InstallContext, task: StepHandle) -> None:
        log_abi = next(
            (entry for entry in self._kernel_abi if entry.get("type") == "event" and entry.get("name") == NEW_APP_PROXY_EVENT),
            None,
        )
        if log_abi is None:
            raise MissingAbiEntryError("Kernel", f"{NEW_APP_PROXY_EVENT} log")

        logs = (ctx.receipt or {}).get("logs") or []
        deploy_log = find_log(logs, log_abi, address=self._options.dao)
        if deploy_log is None:
            _LOGGER.warning("No %s log found for DAO | dao=%s", NEW_APP_PROXY_EVENT, self._options.dao)
            task.skip("App wasn't deployed in transaction.")
            return

        decoded = decode_log_data(log_abi, deploy_log)
        ctx.app_address = decoded["proxy"]

    async def set_permissions(self, ctx: InstallContext, task: StepHandle) -> None:
        repo = _require_repo(ctx)
        if not repo.roles:
            raise MissingRolesError()
        app_address = ctx.app_address
        if not app_address:
            raise RuntimeError("set_permissions requires a deployed app address")

        acl = await self._acl_contract()
        create_role = await acl.functions.CREATE_PERMISSIONS_ROLE().call()
        paths = [
            await self._direct_path(
                where=acl.address,
                role=create_role,
                method="createPermission",
                args=(ANY_ENTITY, app_address, role.bytes, NO_MANAGER),
                call=acl.functions.createPermission(ANY_ENTITY, app_address, role.bytes, NO_MANAGER),
                description=_permission_description(role, app_address),
            )
            for role in repo.roles
        ]
        task.output = f"Creating {len(paths)} permissions..."
        receipts = await asyncio.gather(*(self._executor.execute(path) for path in paths))
        ctx.permission_receipts.extend(receipts)

    async def _acl_contract(self) -> Any:
        if self._acl is None:
            acl_address = await self._kernel.functions.acl().call()
            artifact = load_artifact("ACL", self._artifacts_dir)
            self._acl = self._web3.eth.contract(address=acl_address, abi=artifact.abi)
        return self._acl

    async def _direct_path(
        self,
        *,
        where: str,
        role: Any,
        method: str,
        args: Tuple[Any, ...],
        call: Any,
        description: str,
    ) -> TransactionPath:
        acl = await self._acl_contract()
        sender = self._executor.sender
        allowed = await acl.functions.hasPermission(sender, where, role).call()
        if not allowed:
            raise NoTransactionPathError(
                f"{sender} is not allowed to call {method} on {where} directly. "
                "Grant the account the required role or perform the action through a forwarder."
            )
        return TransactionPath(description=description, target=where, method=method, args=args, call=call)


def _require_repo(ctx: InstallContext) -> AragonRepo:
    if ctx.repo is None:
        raise RuntimeError("Repository metadata missing from install context")
    return ctx.repo


def _permission_description(role: Role, app_address: str) -> str:
    return f"Create permission {role.id} on {app_address} for any entity"


def summarize(ctx: InstallContext) -> Dict[str, Any]:
    """Flatten the context into a JSON friendly summary."""

    return {
        "repo": ctx.repo.name if ctx.repo else None,
        "version": ctx.repo.version if ctx.repo else None,
        "app_address": ctx.app_address,
        "initialized": not ctx.not_initialized,
        "transactions": [path.description for path in ctx.transaction_path],
        "permissions_created": len(ctx.permission_receipts),
    }


__all__ = [
    "AppInstaller",
    "DEFAULT_INIT_FUNCTION",
    "InstallContext",
    "InstallOptions",
    "SET_PERMISSIONS_OPEN",
    "summarize",
]
