"""Command runner for deploying a MiniMe token."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from .chain import TransactionExecutor, connect_web3, disconnect_web3, resolve_sender
from .config import DaoCliSettings, get_settings
from .errors import DaoCliError
from .logging_utils import configure_logging
from .pipeline import PipelineListener, PipelineRunner
from .reporter import ConsoleReporter, build_renderer
from .tokens import TokenContext, TokenDeployer, TokenOptions

_LOGGER = logging.getLogger(__name__)


async def _run_async(
    options: TokenOptions,
    settings: DaoCliSettings,
    listener: Optional[PipelineListener] = None,
) -> TokenContext:
    web3 = await connect_web3(settings)
    try:
        private_key = settings.private_key.get_secret_value() if settings.private_key else None
        sender = await resolve_sender(web3, private_key)
        chain_id = await web3.eth.chain_id
        _LOGGER.info("Deploying token | symbol=%s | chain_id=%s | sender=%s", options.symbol, chain_id, sender)

        deployer = TokenDeployer(
            options,
            chain_id=chain_id,
            web3=web3,
            deployer=TransactionExecutor.from_settings(web3, sender, settings),
            artifacts_dir=settings.artifacts_dir,
        )
        runner = PipelineRunner(deployer.steps(), TokenContext(), listener=listener)
        return await runner.run()
    finally:
        await disconnect_web3(web3)


def report_result(ctx: TokenContext, reporter: ConsoleReporter) -> None:
    reporter.success(f"Successfully deployed the token at [bold]{ctx.token_address}[/bold]")
    reporter.info(f"Token transaction hash: {ctx.token_tx_hash}")

    if ctx.factory_address:
        reporter.success(f"Successfully deployed the token factory at [bold]{ctx.factory_address}[/bold]")
        reporter.info(f"Token factory transaction hash: {ctx.factory_tx_hash}")


def run(
    options: TokenOptions,
    *,
    settings: Optional[DaoCliSettings] = None,
    reporter: Optional[ConsoleReporter] = None,
    silent: bool = False,
    debug: bool = False,
) -> int:
    """Execute the token deployment pipeline synchronously and return a process exit code."""

    configure_logging(silent=silent, debug=debug)
    settings = settings or get_settings()
    reporter = reporter or ConsoleReporter(silent=silent, debug=debug)
    listener = build_renderer(silent, debug, reporter.console)

    try:
        ctx = asyncio.run(_run_async(options, settings, listener))
    except (DaoCliError, ValueError) as exc:
        reporter.error(str(exc))
        return 1
    except Exception as exc:
        _LOGGER.exception("Token deployment failed unexpectedly")
        reporter.error(f"Token deployment failed: {exc}")
        return 1

    report_result(ctx, reporter)
    return 0


__all__ = ["report_result", "run"]
