"""Attach protocol attribution and holding age to a flat token list — no I/O.

``opened_at`` is an APPROXIMATION. It is the earliest ``time_at`` seen for
the token in any supplied/reward list of the complex protocol list (the
first time the wallet is observed in a protocol with it), falling back to
the token's own ``time_at``. It is not the on-chain acquisition time.
"""
from __future__ import annotations

import math
import time
from datetime import datetime, timezone
from typing import Any

from ..models import ProtocolLink
from .protocol_index import PLACEHOLDER, join_key

SECONDS_PER_DAY = 86400


def opened_at(timestamp: float | None) -> str | None:
    """UTC calendar date (``YYYY-MM-DD``) of a unix timestamp."""
    if not timestamp:
        return None
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).strftime("%Y-%m-%d")


def days_open(timestamp: float | None, now: float) -> int | None:
    """Whole days elapsed between ``timestamp`` and ``now`` (floored)."""
    if not timestamp:
        return None
    return math.floor((now - timestamp) / SECONDS_PER_DAY)


def enrich_token(
    token: dict[str, Any], link: ProtocolLink | None, now: float
) -> dict[str, Any]:
    """Return a copy of ``token`` with protocol and age fields added."""
    own_protocol_id = token.get("protocol_id")

    if link is not None and link.protocol_name:
        protocol_name = link.protocol_name
    else:
        protocol_name = own_protocol_id or PLACEHOLDER

    if link is not None and link.protocol_id is not None:
        protocol_id = link.protocol_id
    elif own_protocol_id is not None:
        protocol_id = own_protocol_id
    else:
        protocol_id = ""

    timestamp = None
    if link is not None:
        timestamp = link.time_at
    if timestamp is None:
        timestamp = token.get("time_at")

    return {
        **token,
        "protocol_id": protocol_id,
        "protocol_name": protocol_name,
        "opened_at": opened_at(timestamp),
        "days_open": days_open(timestamp, now),
    }


def enrich_tokens(
    tokens: Any,
    index: dict[str, ProtocolLink],
    now: float | None = None,
) -> list[dict[str, Any]]:
    """Join each token against the protocol index.

    Args:
        tokens: ``user/all_token_list`` payload; non-list input yields ``[]``.
        index: Output of :func:`build_token_protocol_index`.
        now: Current unix time in seconds. Defaults to the wall clock.
    """
    if not isinstance(tokens, list):
        return []
    if now is None:
        now = time.time()
    now = math.floor(now)

    enriched: list[dict[str, Any]] = []
    for tok in tokens:
        if not isinstance(tok, dict):
            continue
        link = index.get(join_key(tok.get("chain"), tok.get("id")))
        enriched.append(enrich_token(tok, link, now))
    return enriched
