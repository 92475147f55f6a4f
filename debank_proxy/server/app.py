"""aiohttp application factory."""
from __future__ import annotations

import logging
import time
from collections.abc import Callable

from aiohttp import web

from ..clients import DebankClient
from ..config import AppConfig
from ..interfaces.portfolio_api import PortfolioApi
from ..services import PortfolioService
from .handlers import ProxyHandlers
from .middleware import cors_middleware, error_middleware

logger = logging.getLogger(__name__)


def create_app(
    config: AppConfig,
    client: PortfolioApi | None = None,
    clock: Callable[[], float] = time.time,
) -> web.Application:
    """Build the proxy application.

    Args:
        config: Loaded application configuration.
        client: Upstream API client; defaults to a :class:`DebankClient`.
        clock: Wall clock used for ``days_open``.
    """
    if client is None:
        client = DebankClient(config.debank)
    service = PortfolioService(client, config.reconciliation, clock=clock)
    handlers = ProxyHandlers(service, config)

    app = web.Application(
        middlewares=[cors_middleware(config.server.cors_allow_origin), error_middleware]
    )
    app.router.add_get("/api/debank", handlers.passthrough)
    app.router.add_get("/api/debank/wallet", handlers.wallet)
    app.router.add_get("/api/debank/test", handlers.connection_test)
    app.router.add_get("/api/debank-test", handlers.connection_preview)
    app.router.add_get("/api/debank-tokens", handlers.tokens)
    app.router.add_get("/api/debank-assets", handlers.assets)
    app.router.add_get("/api/defi-positions", handlers.positions)
    return app


def run_server(config: AppConfig, host: str | None = None, port: int | None = None) -> None:
    """Serve the proxy until interrupted."""
    host = host or config.server.host
    port = port or config.server.port
    logger.info("Starting DeBank proxy on %s:%d", host, port)
    web.run_app(create_app(config), host=host, port=port, print=None)
