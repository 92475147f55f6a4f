"""Request input validation."""
from __future__ import annotations

import re
from collections.abc import Mapping, Sequence

from .errors import InvalidAddressError

_ADDRESS_RE = re.compile(r"^0x[a-f0-9]{40}$")


def normalize_address(raw: str | None) -> str | None:
    """Trim and lowercase a wallet address; ``None`` if it is not 0x + 40 hex."""
    address = (raw or "").strip().lower()
    if not _ADDRESS_RE.match(address):
        return None
    return address


def wallet_address_from_query(
    query: Mapping[str, str], names: Sequence[str] = ("id", "addr")
) -> str:
    """Return the first non-empty address parameter, normalized.

    Raises:
        InvalidAddressError: if no parameter is set or the value is malformed.
    """
    raw = next((query.get(name) for name in names if query.get(name)), "")
    address = normalize_address(raw)
    if address is None:
        raise InvalidAddressError(_describe(names))
    return address


def _describe(names: Sequence[str]) -> str:
    """("id", "addr", "address") → "id, addr or address"."""
    if len(names) == 1:
        return names[0]
    return ", ".join(names[:-1]) + f" or {names[-1]}"
