"""Command-line interface for dao-cli."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

from . import install, new_token
from .apps import DEFAULT_INIT_FUNCTION, SET_PERMISSIONS_OPEN
from .config import DaoCliSettings, get_settings
from .tokens import DEFAULT_DECIMAL_UNITS, TokenOptions

_LOGGER = logging.getLogger("daocli.cli")


def _common_options() -> argparse.ArgumentParser:
    parent = argparse.ArgumentParser(add_help=False)
    parent.add_argument(
        "--rpc",
        default=None,
        help="JSON-RPC endpoint of the Ethereum node (default: DAOCLI_RPC_URL or http://localhost:8545)",
    )
    parent.add_argument(
        "--ens-registry",
        default=None,
        help="Address of the ENS registry used to resolve DAO and repo names",
    )
    parent.add_argument(
        "--ipfs-gateway",
        default=None,
        help="IPFS gateway used to fetch APM content",
    )
    parent.add_argument(
        "--silent",
        action="store_true",
        help="Only print warnings, errors and the final result",
    )
    parent.add_argument(
        "--debug",
        action="store_true",
        help="Enable DEBUG level logging and verbose step output",
    )
    return parent


def _build_parser() -> argparse.ArgumentParser:
    common = _common_options()
    parser = argparse.ArgumentParser(
        prog="dao-cli",
        description="Install apps into Aragon DAOs and deploy MiniMe tokens.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    install_parser = commands.add_parser("install", parents=[common], help="Install an app into a DAO")
    install_parser.add_argument("dao", help="Address or ENS name of the DAO")
    install_parser.add_argument("apm_repo", metavar="apmRepo", help="APM repo name (e.g. voting or voting.aragonpm.eth)")
    install_parser.add_argument(
        "apm_repo_version",
        metavar="apmRepoVersion",
        nargs="?",
        default="latest",
        help="Version of the repo to install (default: %(default)s)",
    )
    install_parser.add_argument(
        "--app-init",
        default=DEFAULT_INIT_FUNCTION,
        help='Name of the function that will be called to initialize an app. Set it to "none" to skip initialization',
    )
    install_parser.add_argument(
        "--app-init-args",
        nargs="*",
        default=[],
        help="Arguments for calling the app init function",
    )
    install_parser.add_argument(
        "--set-permissions",
        choices=[SET_PERMISSIONS_OPEN],
        default=None,
        help='Whether to set permissions in the app. Set it to "open" to allow ANY_ENTITY on all roles.',
    )
    install_parser.set_defaults(handler=_handle_install)

    token_parser = commands.add_parser("token", help="Token commands")
    token_commands = token_parser.add_subparsers(dest="token_command", required=True)
    new_parser = token_commands.add_parser("new", parents=[common], help="Create a new MiniMe token")
    new_parser.add_argument("token_name", metavar="token-name", help="Full name of the new Token")
    new_parser.add_argument("symbol", help="Symbol of the new Token")
    new_parser.add_argument(
        "decimal_units",
        metavar="decimal-units",
        nargs="?",
        type=int,
        default=DEFAULT_DECIMAL_UNITS,
        help="Total decimal units the new token will use (default: %(default)s)",
    )
    new_parser.add_argument(
        "transfer_enabled",
        metavar="transfer-enabled",
        nargs="?",
        default="true",
        help="Whether the new token will have transfers enabled (default: %(default)s)",
    )
    new_parser.add_argument(
        "token_factory_address",
        metavar="token-factory-address",
        nargs="?",
        default=None,
        help="Address of the MiniMeTokenFactory",
    )
    new_parser.set_defaults(handler=_handle_token_new)
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = _build_parser()
    return parser.parse_args(argv)


def _settings_for(args: argparse.Namespace) -> DaoCliSettings:
    return get_settings().with_overrides(
        rpc_url=args.rpc,
        ens_registry_address=args.ens_registry,
        ipfs_gateway=args.ipfs_gateway,
    )


def _handle_install(args: argparse.Namespace) -> int:
    request = install.InstallRequest(
        dao=args.dao,
        apm_repo=args.apm_repo,
        apm_repo_version=args.apm_repo_version,
        app_init=args.app_init,
        app_init_args=tuple(args.app_init_args),
        set_permissions=args.set_permissions,
    )
    return install.run(request, settings=_settings_for(args), silent=args.silent, debug=args.debug)


def _handle_token_new(args: argparse.Namespace) -> int:
    options = TokenOptions(
        token_name=args.token_name,
        symbol=args.symbol,
        decimal_units=args.decimal_units,
        transfer_enabled=args.transfer_enabled,
        token_factory_address=args.token_factory_address,
    )
    return new_token.run(options, settings=_settings_for(args), silent=args.silent, debug=args.debug)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        return args.handler(args)
    except KeyboardInterrupt:
        _LOGGER.warning("Interrupted by user")
        return 130


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
