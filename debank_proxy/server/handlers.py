"""HTTP handlers for the wallet proxy endpoints."""
from __future__ import annotations

import logging
from typing import Any

from aiohttp import web
from multidict import MultiDict

from ..config import AppConfig
from ..errors import MissingCredentialError, MissingPathError
from ..services import PortfolioService, missing_key_diagnostic
from ..validation import wallet_address_from_query

logger = logging.getLogger(__name__)


class ProxyHandlers:
    """Request handlers bound to one service and configuration."""

    def __init__(self, service: PortfolioService, config: AppConfig) -> None:
        self._service = service
        self._config = config

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _require_api_key(self) -> None:
        if not self._config.debank.api_key:
            raise MissingCredentialError()

    def _ok(self, data: Any) -> web.Response:
        response = web.json_response(data)
        response.headers["Cache-Control"] = self._config.server.cache_control
        return response

    def _redact(self, text: str) -> str:
        key = self._config.debank.api_key
        return text.replace(key, "***") if key else text

    # ------------------------------------------------------------------
    # Proxy endpoints
    # ------------------------------------------------------------------

    async def passthrough(self, request: web.Request) -> web.Response:
        """GET /api/debank?path=<upstream path>&... — unrestricted passthrough."""
        self._require_api_key()
        path = request.query.get("path")
        if not path:
            raise MissingPathError()
        params = MultiDict(request.query)
        params.popall("path")
        return self._ok(await self._service.passthrough(path, params))

    async def wallet(self, request: web.Request) -> web.Response:
        """GET /api/debank/wallet — total balance."""
        self._require_api_key()
        address = wallet_address_from_query(request.query, ("addr", "id"))
        return self._ok(await self._service.total_balance(address))

    async def tokens(self, request: web.Request) -> web.Response:
        """GET /api/debank-tokens — raw token list."""
        self._require_api_key()
        address = wallet_address_from_query(request.query)
        is_all = request.query.get("is_all") != "false"
        return self._ok(await self._service.tokens(address, is_all=is_all))

    async def assets(self, request: web.Request) -> web.Response:
        """GET /api/debank-assets — tokens joined with protocol positions."""
        self._require_api_key()
        address = wallet_address_from_query(request.query)
        return self._ok(await self._service.assets(address))

    async def positions(self, request: web.Request) -> web.Response:
        """GET /api/defi-positions — flattened protocol positions."""
        self._require_api_key()
        address = wallet_address_from_query(request.query, ("id", "addr", "address"))
        positions = await self._service.positions(address)
        return self._ok([p.to_dict() for p in positions])

    # ------------------------------------------------------------------
    # Diagnostics: always HTTP 200, failures go in the body
    # ------------------------------------------------------------------

    async def connection_test(self, request: web.Request) -> web.Response:
        """GET /api/debank/test — parsed total balance of the probe wallet."""
        if not self._config.debank.api_key:
            return web.json_response(missing_key_diagnostic())
        result = await self._service.check_connection(self._config.debank.probe_address)
        if "preview" in result:
            result["preview"] = self._redact(result["preview"])
        return web.json_response(result)

    async def connection_preview(self, request: web.Request) -> web.Response:
        """GET /api/debank-test — raw body preview of the probe request."""
        if not self._config.debank.api_key:
            return web.json_response(missing_key_diagnostic())
        result = await self._service.preview_connection(self._config.debank.probe_address)
        if "bodyPreview" in result:
            result["bodyPreview"] = self._redact(result["bodyPreview"])
        return web.json_response(result)
