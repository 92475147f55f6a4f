"""Portfolio API protocol — upstream wallet data abstraction."""
from collections.abc import Mapping
from typing import Any, Protocol

from ..models import UpstreamResponse


class PortfolioApi(Protocol):
    """Abstract interface for GET requests against the wallet data API."""

    async def request(self, path: str, params: Mapping[str, Any]) -> UpstreamResponse: ...
