"""Data models — all frozen (immutable)."""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from typing import Any

from .errors import UpstreamFormatError


@dataclass(frozen=True)
class ProtocolLink:
    """Earliest known protocol association of a (chain, token) pair."""

    protocol_id: str
    protocol_name: str
    time_at: float | None = None


@dataclass(frozen=True)
class TokenLine:
    """Single token within a flattened position; debt lines carry a negative value."""

    symbol: str
    amount: float
    amount_usd: float


@dataclass(frozen=True)
class FlatPosition:
    """One protocol position reshaped for the client."""

    protocol_id: str
    protocol_name: str
    protocol_logo_url: str | None
    chain: str
    position_type: str
    position_name: str
    tokens: tuple[TokenLine, ...] = ()
    total_usd: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["tokens"] = [asdict(t) for t in self.tokens]
        return data


@dataclass(frozen=True)
class UpstreamResponse:
    """Raw HTTP answer from the DeBank API."""

    status: int
    text: str
    content_type: str | None = None

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        try:
            return json.loads(self.text)
        except ValueError as e:
            raise UpstreamFormatError() from e
