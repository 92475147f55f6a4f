"""Command-line interface for the DeBank wallet proxy."""
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

from .clients import DebankClient
from .config import AppConfig, load_config
from .errors import MissingCredentialError, ProxyError
from .logging_setup import configure_logging
from .server import run_server
from .services import PortfolioService, missing_key_diagnostic
from .validation import wallet_address_from_query


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="debank-proxy",
        description="DeBank wallet proxy and position reconciliation",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    serve_parser = sub.add_parser("serve", help="Run the HTTP proxy")
    serve_parser.add_argument("--host", default=None, help="Bind address (overrides config)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (overrides config)")

    tokens_parser = sub.add_parser("tokens", help="Print a wallet's token list")
    tokens_parser.add_argument("address")
    tokens_parser.add_argument(
        "--all",
        dest="is_all",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="Include non-core tokens (default: --all; --no-all sends is_all=false)",
    )

    assets_parser = sub.add_parser("assets", help="Print tokens with protocol attribution")
    assets_parser.add_argument("address")

    positions_parser = sub.add_parser("positions", help="Print flattened DeFi positions")
    positions_parser.add_argument("address")

    sub.add_parser("test", help="Check DeBank API connectivity")

    return parser


async def _query(config: AppConfig, args: argparse.Namespace) -> Any:
    """Run a one-shot command and return its JSON-serialisable result."""
    if not config.debank.api_key:
        if args.command == "test":
            return missing_key_diagnostic()
        raise MissingCredentialError()

    service = PortfolioService(DebankClient(config.debank), config.reconciliation)

    if args.command == "test":
        return await service.check_connection(config.debank.probe_address)

    address = wallet_address_from_query({"id": args.address}, ("id",))

    if args.command == "tokens":
        return await service.tokens(address, is_all=args.is_all)
    if args.command == "assets":
        return await service.assets(address)
    positions = await service.positions(address)
    return [p.to_dict() for p in positions]


def main(argv: list[str] | None = None) -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = load_config(args.config)
    configure_logging(args.log_level, secrets=(config.debank.api_key,))

    if args.command == "serve":
        run_server(config, host=args.host, port=args.port)
        return

    try:
        result = asyncio.run(_query(config, args))
    except ProxyError as e:
        body = e.to_body()
        print(json.dumps(body, indent=2), file=sys.stderr)
        sys.exit(1)

    print(json.dumps(result, indent=2))
