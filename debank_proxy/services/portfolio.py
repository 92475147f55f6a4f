"""Wallet portfolio orchestration — upstream fetches plus reconciliation."""
from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from ..config import API_KEY_ENV, ReconciliationConfig
from ..errors import UpstreamFormatError, UpstreamStatusError
from ..interfaces.portfolio_api import PortfolioApi
from ..models import FlatPosition, UpstreamResponse
from ..reconciliation import (
    build_token_protocol_index,
    enrich_tokens,
    flatten_positions,
)

logger = logging.getLogger(__name__)

TOKEN_LIST_PATH = "user/all_token_list"
PROTOCOL_LIST_PATH = "user/all_complex_protocol_list"
TOTAL_BALANCE_PATH = "user/total_balance"

_PREVIEW_CHARS = 500


def missing_key_diagnostic() -> dict[str, Any]:
    """Diagnostics body reported when no access key is configured."""
    return {
        "ok": False,
        "error": "no key",
        "hint": f"{API_KEY_ENV} is not set in the server environment",
    }


def _decode_ok(response: UpstreamResponse) -> Any:
    """Decode a response body, raising for non-JSON or non-2xx answers."""
    data = response.json()
    if not response.ok:
        raise UpstreamStatusError(response.status, data)
    return data


class PortfolioService:
    """Fetches wallet data from the upstream API and reshapes it for clients."""

    def __init__(
        self,
        client: PortfolioApi,
        config: ReconciliationConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._client = client
        self._config = config or ReconciliationConfig()
        self._clock = clock

    # ------------------------------------------------------------------
    # Pass-through endpoints
    # ------------------------------------------------------------------

    async def passthrough(self, path: str, params: Mapping[str, Any]) -> Any:
        """Forward ``params`` verbatim to ``path`` and return the decoded body."""
        response = await self._client.request(path, params)
        return _decode_ok(response)

    async def total_balance(self, address: str) -> Any:
        response = await self._client.request(TOTAL_BALANCE_PATH, {"id": address})
        return _decode_ok(response)

    async def tokens(self, address: str, is_all: bool = True) -> list[Any]:
        response = await self._client.request(
            TOKEN_LIST_PATH,
            {"id": address, "is_all": "true" if is_all else "false"},
        )
        data = _decode_ok(response)
        return data if isinstance(data, list) else []

    # ------------------------------------------------------------------
    # Reconciled views
    # ------------------------------------------------------------------

    async def assets(self, address: str) -> list[dict[str, Any]]:
        """Token list enriched with protocol attribution and holding age.

        Both upstream lists are fetched concurrently. A failing protocol
        list degrades to no attribution; a failing token list fails the call.
        """
        tokens_res, protocols_res = await asyncio.gather(
            self._client.request(TOKEN_LIST_PATH, {"id": address, "is_all": "false"}),
            self._client.request(PROTOCOL_LIST_PATH, {"id": address}),
        )

        tokens = tokens_res.json()
        protocol_list = protocols_res.json()

        if not tokens_res.ok:
            raise UpstreamStatusError(tokens_res.status, tokens)
        if not protocols_res.ok:
            logger.warning(
                "Protocol list unavailable for %s (HTTP %s); continuing without it",
                address,
                protocols_res.status,
            )
            protocol_list = []

        index = build_token_protocol_index(protocol_list)
        enriched = enrich_tokens(tokens, index, now=self._clock())
        logger.info(
            "Enriched %d tokens for %s (%d protocol links)",
            len(enriched),
            address,
            len(index),
        )
        return enriched

    async def positions(self, address: str) -> list[FlatPosition]:
        """Protocol positions above dust, sorted by net USD value."""
        response = await self._client.request(PROTOCOL_LIST_PATH, {"id": address})
        protocol_list = _decode_ok(response)
        positions = flatten_positions(
            protocol_list, dust_threshold=self._config.dust_threshold_usd
        )
        logger.info("Flattened %d positions for %s", len(positions), address)
        return positions

    # ------------------------------------------------------------------
    # Diagnostics (never raise)
    # ------------------------------------------------------------------

    async def check_connection(self, probe_address: str) -> dict[str, Any]:
        """Probe ``user/total_balance`` and summarise the outcome."""
        try:
            response = await self._client.request(TOTAL_BALANCE_PATH, {"id": probe_address})
        except Exception as e:
            logger.error("DeBank connection check failed: %s", e)
            return {"ok": False, "error": str(e)}

        try:
            data = response.json()
        except UpstreamFormatError:
            return {
                "ok": False,
                "error": "DeBank returned HTML instead of JSON",
                "status": response.status,
                "contentType": response.content_type,
                "preview": response.text[:200],
                "hint": "Invalid or expired API key. Get a new key at cloud.debank.com",
            }

        if not response.ok:
            return {
                "ok": False,
                "error": "DeBank API error",
                "status": response.status,
                "data": data,
            }

        return {
            "ok": True,
            "message": "DeBank API connection OK",
            "total_usd_value": data.get("total_usd_value") if isinstance(data, dict) else None,
        }

    async def preview_connection(self, probe_address: str) -> dict[str, Any]:
        """Probe ``user/total_balance`` and return a raw body preview."""
        try:
            response = await self._client.request(TOTAL_BALANCE_PATH, {"id": probe_address})
        except Exception as e:
            logger.error("DeBank connection preview failed: %s", e)
            return {"ok": False, "error": str(e)}

        return {
            "ok": response.ok,
            "httpStatus": response.status,
            "contentType": response.content_type,
            "bodyPreview": response.text[:_PREVIEW_CHARS],
            "bodyLength": len(response.text),
        }
