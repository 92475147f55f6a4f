"""Token → protocol association index built from complex protocol lists — no I/O."""
from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from ..models import ProtocolLink

PLACEHOLDER = "—"


def join_key(chain: str | None, token_id: str | None) -> str:
    """Build the ``chain:token-id`` key used to match tokens across endpoints.

    Examples:
        ("eth", "0xA0b8...") → "eth:0xa0b8..."
    """
    return f"{chain or ''}:{str(token_id or '').lower()}"


def as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else []


def as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _iter_held_tokens(
    protocol_list: Any,
) -> Iterator[tuple[str, ProtocolLink]]:
    """Yield (key, candidate link) for every supplied and reward token.

    Borrowed tokens are not holdings and are left out of the index.
    """
    for proto in as_list(protocol_list):
        proto = as_dict(proto)
        protocol_id = proto.get("id") or ""
        protocol_name = proto.get("name") or protocol_id or PLACEHOLDER
        chain = proto.get("chain") or ""

        for item in as_list(proto.get("portfolio_item_list")):
            item = as_dict(item)
            detail = as_dict(item.get("detail"))
            held = as_list(detail.get("supply_token_list")) + as_list(
                detail.get("reward_token_list")
            )
            for tok in held:
                tok = as_dict(tok)
                token_id = str(tok.get("id") or "").lower()
                if not token_id:
                    continue
                yield join_key(chain, token_id), ProtocolLink(
                    protocol_id=tok.get("protocol_id") or protocol_id,
                    protocol_name=protocol_name,
                    time_at=tok.get("time_at") or item.get("update_at"),
                )


def merge_link(existing: ProtocolLink | None, candidate: ProtocolLink) -> ProtocolLink:
    """Keep whichever association has the earliest known timestamp.

    The first entry seen wins ties and absent timestamps; a later entry
    replaces it only when it carries a timestamp and the stored one is
    missing or later.
    """
    if existing is None:
        return candidate
    if candidate.time_at and (not existing.time_at or candidate.time_at < existing.time_at):
        return candidate
    return existing


def build_token_protocol_index(protocol_list: Any) -> dict[str, ProtocolLink]:
    """Map ``chain:token-id`` to the earliest protocol association seen.

    Malformed input (not a list, missing sub-lists) degrades to an empty or
    partial index rather than raising.
    """
    index: dict[str, ProtocolLink] = {}
    for key, candidate in _iter_held_tokens(protocol_list):
        index[key] = merge_link(index.get(key), candidate)
    return index
