"""Unit tests for CLI argument parsing and one-shot commands."""
from __future__ import annotations

import json
from unittest.mock import AsyncMock, patch

import pytest

from conftest import WALLET
from debank_proxy.cli import build_parser, main
from debank_proxy.config import AppConfig, DebankConfig


class TestBuildParser:
    def test_serve_command(self) -> None:
        args = build_parser().parse_args(["serve"])
        assert args.command == "serve"
        assert args.host is None
        assert args.port is None

    def test_serve_overrides(self) -> None:
        args = build_parser().parse_args(["serve", "--host", "127.0.0.1", "--port", "9000"])
        assert args.host == "127.0.0.1"
        assert args.port == 9000

    def test_tokens_command_defaults_to_all(self) -> None:
        args = build_parser().parse_args(["tokens", WALLET])
        assert args.command == "tokens"
        assert args.address == WALLET
        assert args.is_all is True

    def test_tokens_no_all(self) -> None:
        args = build_parser().parse_args(["tokens", WALLET, "--no-all"])
        assert args.is_all is False

    def test_tokens_all_flag(self) -> None:
        args = build_parser().parse_args(["tokens", WALLET, "--all"])
        assert args.is_all is True

    def test_positions_command(self) -> None:
        args = build_parser().parse_args(["positions", WALLET])
        assert args.command == "positions"

    def test_config_flag(self) -> None:
        args = build_parser().parse_args(["--config", "/tmp/c.yaml", "test"])
        assert args.config == "/tmp/c.yaml"

    def test_log_level_flag(self) -> None:
        args = build_parser().parse_args(["--log-level", "DEBUG", "assets", WALLET])
        assert args.log_level == "DEBUG"

    def test_no_command(self) -> None:
        args = build_parser().parse_args([])
        assert args.command is None


class TestMain:
    def test_no_command_exits(self) -> None:
        with pytest.raises(SystemExit):
            main([])

    def test_positions_prints_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        config = AppConfig(debank=DebankConfig(api_key="k"))
        with (
            patch("debank_proxy.cli.load_config", return_value=config),
            patch("debank_proxy.cli.configure_logging"),
            patch(
                "debank_proxy.cli.PortfolioService.positions",
                new=AsyncMock(return_value=[]),
            ) as positions,
        ):
            main(["positions", WALLET.upper().replace("0X", "0x")])

        positions.assert_awaited_once_with(WALLET)
        assert json.loads(capsys.readouterr().out) == []

    def test_bad_address_exits(self, capsys: pytest.CaptureFixture[str]) -> None:
        config = AppConfig(debank=DebankConfig(api_key="k"))
        with (
            patch("debank_proxy.cli.load_config", return_value=config),
            patch("debank_proxy.cli.configure_logging"),
        ):
            with pytest.raises(SystemExit):
                main(["assets", "not-an-address"])

        assert "Valid wallet address" in capsys.readouterr().err

    def test_missing_key_exits(self, capsys: pytest.CaptureFixture[str]) -> None:
        with (
            patch("debank_proxy.cli.load_config", return_value=AppConfig()),
            patch("debank_proxy.cli.configure_logging"),
        ):
            with pytest.raises(SystemExit):
                main(["tokens", WALLET])

        assert "API key not configured" in capsys.readouterr().err

    def test_connection_test_without_key_reports_body(self, capsys: pytest.CaptureFixture[str]) -> None:
        with (
            patch("debank_proxy.cli.load_config", return_value=AppConfig()),
            patch("debank_proxy.cli.configure_logging"),
            patch(
                "debank_proxy.cli.PortfolioService.check_connection",
                new=AsyncMock(),
            ) as check_connection,
        ):
            main(["test"])

        body = json.loads(capsys.readouterr().out)
        assert body["ok"] is False
        assert body["error"] == "no key"
        assert "DEBANK_API_KEY" in body["hint"]
        check_connection.assert_not_awaited()

    def test_serve_runs_server(self) -> None:
        config = AppConfig()
        with (
            patch("debank_proxy.cli.load_config", return_value=config),
            patch("debank_proxy.cli.configure_logging"),
            patch("debank_proxy.cli.run_server") as run_server,
        ):
            main(["serve", "--port", "9001"])

        run_server.assert_called_once_with(config, host=None, port=9001)
