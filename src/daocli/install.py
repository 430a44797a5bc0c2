"""Command runner for installing an app into a DAO."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from .apm import ApmClient, ContentClient, default_apm_name
from .apps import DEFAULT_INIT_FUNCTION, AppInstaller, InstallContext, InstallOptions, summarize
from .chain import (
    TransactionExecutor,
    build_ens,
    connect_web3,
    disconnect_web3,
    load_artifact,
    resolve_dao_address,
    resolve_sender,
)
from .config import DaoCliSettings, get_settings
from .errors import DaoCliError
from .logging_utils import configure_logging
from .pipeline import PipelineListener, PipelineRunner
from .reporter import ConsoleReporter, build_renderer

_LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class InstallRequest:
    """Arguments of ``dao-cli install`` before any name resolution."""

    dao: str
    apm_repo: str
    apm_repo_version: Optional[str] = None
    app_init: str = DEFAULT_INIT_FUNCTION
    app_init_args: Tuple[Any, ...] = ()
    set_permissions: Optional[str] = None


async def _run_async(
    request: InstallRequest,
    settings: DaoCliSettings,
    listener: Optional[PipelineListener] = None,
) -> InstallContext:
    web3 = await connect_web3(settings)
    try:
        ens = build_ens(web3, settings.ens_registry_address)
        repo_name = default_apm_name(request.apm_repo, settings.apm_domain)
        dao = await resolve_dao_address(ens, request.dao, settings.dao_domain)
        private_key = settings.private_key.get_secret_value() if settings.private_key else None
        sender = await resolve_sender(web3, private_key)
        _LOGGER.info("Installing app | repo=%s | dao=%s | sender=%s", repo_name, dao, sender)

        executor = TransactionExecutor.from_settings(web3, sender, settings)
        kernel_artifact = load_artifact("Kernel", settings.artifacts_dir)
        kernel = web3.eth.contract(address=dao, abi=kernel_artifact.abi)

        async with ContentClient(settings) as content:
            installer = AppInstaller(
                InstallOptions(
                    dao=dao,
                    apm_repo=repo_name,
                    apm_repo_version=request.apm_repo_version,
                    app_init=request.app_init,
                    app_init_args=tuple(request.app_init_args),
                    set_permissions=request.set_permissions,
                ),
                web3=web3,
                kernel=kernel,
                apm=ApmClient(web3, ens, content, settings),
                executor=executor,
                kernel_abi=kernel_artifact.abi,
                artifacts_dir=settings.artifacts_dir,
            )
            runner = PipelineRunner(installer.steps(), InstallContext(), listener=listener)
            return await runner.run()
    finally:
        await disconnect_web3(web3)


def report_result(ctx: InstallContext, repo_name: str, reporter: ConsoleReporter) -> None:
    """Tell the user what happened, mirroring the pipeline's outcome."""

    if ctx.transaction_path:
        reporter.info(f'Successfully executed: "{ctx.transaction_path[0].description}"')

    if ctx.app_address:
        reporter.success(f"Installed {repo_name} at: [bold]{ctx.app_address}[/bold]")
    else:
        reporter.warning(
            "After the app instance is created, you will need to assign permissions to it "
            "for it appear as an app in the DAO"
        )

    if ctx.not_initialized:
        reporter.warning(
            "App could not be initialized, check the --app-init flag. Functions protected "
            "behind the ACL will not work until the app is initialized"
        )


def run(
    request: InstallRequest,
    *,
    settings: Optional[DaoCliSettings] = None,
    reporter: Optional[ConsoleReporter] = None,
    silent: bool = False,
    debug: bool = False,
) -> int:
    """Execute the install pipeline synchronously and return a process exit code."""

    configure_logging(silent=silent, debug=debug)
    settings = settings or get_settings()
    reporter = reporter or ConsoleReporter(silent=silent, debug=debug)
    listener = build_renderer(silent, debug, reporter.console)

    try:
        ctx = asyncio.run(_run_async(request, settings, listener))
    except DaoCliError as exc:
        reporter.error(str(exc))
        return 1
    except Exception as exc:
        _LOGGER.exception("Install failed unexpectedly")
        reporter.error(f"Install failed: {exc}")
        return 1

    report_result(ctx, default_apm_name(request.apm_repo, settings.apm_domain), reporter)
    _LOGGER.debug("Install completed | summary=%s", summarize(ctx))
    return 0


__all__ = ["InstallRequest", "report_result", "run"]
