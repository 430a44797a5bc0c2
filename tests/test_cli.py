from __future__ import annotations

from typing import Any, Dict

import pytest

from daocli import cli, config
from daocli.tokens import TokenOptions


@pytest.fixture(autouse=True)
def clear_settings_cache():
    config.get_settings.cache_clear()
    yield
    config.get_settings.cache_clear()


def test_install_arguments_and_defaults() -> None:
    args = cli.parse_args(["install", "mydao", "voting"])

    assert args.dao == "mydao"
    assert args.apm_repo == "voting"
    assert args.apm_repo_version == "latest"
    assert args.app_init == "initialize"
    assert args.app_init_args == []
    assert args.set_permissions is None


def test_install_rejects_unknown_permission_mode() -> None:
    with pytest.raises(SystemExit):
        cli.parse_args(["install", "mydao", "voting", "--set-permissions", "closed"])


def test_main_dispatches_install(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: Dict[str, Any] = {}

    def fake_run(request, *, settings, silent, debug) -> int:
        captured.update(request=request, settings=settings, silent=silent, debug=debug)
        return 0

    monkeypatch.setattr(cli.install, "run", fake_run)

    exit_code = cli.main(
        [
            "install",
            "0x" + "3" * 40,
            "finance",
            "2.0.0",
            "--app-init-args",
            "0xabc",
            "30",
            "--set-permissions",
            "open",
            "--rpc",
            "http://node:8545",
            "--silent",
        ]
    )

    assert exit_code == 0
    request = captured["request"]
    assert request.dao == "0x" + "3" * 40
    assert request.apm_repo == "finance"
    assert request.apm_repo_version == "2.0.0"
    assert request.app_init_args == ("0xabc", "30")
    assert request.set_permissions == "open"
    assert captured["settings"].rpc_url == "http://node:8545"
    assert captured["silent"] is True
    assert captured["debug"] is False


def test_main_dispatches_token_new(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: Dict[str, Any] = {}

    def fake_run(options: TokenOptions, *, settings, silent, debug) -> int:
        captured["options"] = options
        return 1

    monkeypatch.setattr(cli.new_token, "run", fake_run)

    exit_code = cli.main(["token", "new", "My Token", "MTK", "2", "false", "0x" + "6" * 40])

    assert exit_code == 1
    assert captured["options"] == TokenOptions(
        token_name="My Token",
        symbol="MTK",
        decimal_units=2,
        transfer_enabled="false",
        token_factory_address="0x" + "6" * 40,
    )


def test_token_new_defaults() -> None:
    args = cli.parse_args(["token", "new", "Token", "TKN"])

    assert args.decimal_units == 18
    assert args.transfer_enabled == "true"
    assert args.token_factory_address is None


def test_keyboard_interrupt_returns_130(monkeypatch: pytest.MonkeyPatch) -> None:
    def interrupted(*args: Any, **kwargs: Any) -> int:
        raise KeyboardInterrupt

    monkeypatch.setattr(cli.new_token, "run", interrupted)

    assert cli.main(["token", "new", "Token", "TKN"]) == 130
