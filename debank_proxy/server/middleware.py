"""aiohttp middlewares: permissive CORS and JSON error mapping."""
from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from aiohttp import web

from ..errors import ProxyError

logger = logging.getLogger(__name__)

Handler = Callable[[web.Request], Awaitable[web.StreamResponse]]


def cors_middleware(allow_origin: str = "*"):
    """Add CORS headers to every response and answer preflights with 200."""

    @web.middleware
    async def middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
        if request.method == "OPTIONS":
            response: web.StreamResponse = web.Response(status=200)
        else:
            response = await handler(request)
        response.headers["Access-Control-Allow-Origin"] = allow_origin
        response.headers["Access-Control-Allow-Methods"] = "GET, OPTIONS"
        response.headers["Access-Control-Allow-Headers"] = "Content-Type"
        return response

    return middleware


@web.middleware
async def error_middleware(request: web.Request, handler: Handler) -> web.StreamResponse:
    """Turn exceptions into JSON error bodies."""
    try:
        return await handler(request)
    except ProxyError as e:
        if e.status >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, e.message)
        else:
            logger.info("%s %s rejected: %s", request.method, request.path, e.message)
        return web.json_response(e.to_body(), status=e.status)
    except web.HTTPException as e:
        message = "Method not allowed" if e.status == 405 else e.reason
        return web.json_response({"error": message}, status=e.status)
    except Exception as e:
        logger.error("%s %s raised: %s", request.method, request.path, e)
        return web.json_response({"error": str(e)}, status=500)
