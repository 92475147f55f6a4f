"""Exceptions mapped onto HTTP responses by the server's error middleware."""
from __future__ import annotations

from typing import Any


class ProxyError(Exception):
    """Base error carrying the HTTP status it should be reported with."""

    status: int = 500

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status

    def to_body(self) -> Any:
        return {"error": self.message}


class InvalidAddressError(ProxyError):
    status = 400

    def __init__(self, params: str = "id or addr") -> None:
        super().__init__(f"Valid wallet address required ({params})")


class MissingPathError(ProxyError):
    status = 400

    def __init__(self) -> None:
        super().__init__("Missing path parameter (e.g. ?path=user/total_balance)")


class MissingCredentialError(ProxyError):
    status = 500

    def __init__(self) -> None:
        super().__init__("API key not configured")


class UpstreamStatusError(ProxyError):
    """Non-2xx upstream answer, relayed with its own status and body."""

    def __init__(self, status: int, body: Any) -> None:
        super().__init__(f"DeBank API returned HTTP {status}", status=status)
        self.body = body

    def to_body(self) -> Any:
        return self.body


class UpstreamFormatError(ProxyError):
    """Upstream body could not be decoded as JSON."""

    status = 502

    def __init__(self) -> None:
        super().__init__("DeBank API temporarily unavailable")

    def to_body(self) -> Any:
        return {"error": self.message, "detail": "Unexpected response format"}
