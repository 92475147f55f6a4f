"""DeBank Pro OpenAPI client."""
import logging
import ssl
from collections.abc import Mapping
from typing import Any

import aiohttp
import certifi

from ..config import DebankConfig
from ..models import UpstreamResponse

logger = logging.getLogger(__name__)


class DebankClient:
    """Thin GET client for the DeBank Pro OpenAPI.

    Responses are returned as-is (status + raw text); decoding and error
    mapping are left to the caller. The access key is sent as a header only.
    """

    def __init__(self, config: DebankConfig) -> None:
        self.base_url = config.base_url.rstrip("/")
        self._api_key = config.api_key

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    async def request(self, path: str, params: Mapping[str, Any]) -> UpstreamResponse:
        """GET ``path`` under the API base with ``params`` as the query string."""
        url = self.url_for(path)
        headers = {"Accept": "application/json", "AccessKey": self._api_key}

        ssl_context = ssl.create_default_context(cafile=certifi.where())
        connector = aiohttp.TCPConnector(ssl=ssl_context)

        async with aiohttp.ClientSession(connector=connector) as session:
            async with session.get(url, params=params, headers=headers) as response:
                text = await response.text(errors="replace")
                if response.status >= 400:
                    logger.warning("DeBank %s answered HTTP %s", path, response.status)
                else:
                    logger.debug("DeBank %s answered HTTP %s", path, response.status)
                return UpstreamResponse(
                    status=response.status,
                    text=text,
                    content_type=response.headers.get("Content-Type"),
                )
