"""Flatten DeBank complex protocol lists into client-facing positions — no I/O."""
from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any

from ..models import FlatPosition, TokenLine
from .protocol_index import PLACEHOLDER, as_dict, as_list

# Positions and supplied/reward lines worth less than this (USD) are dust.
DUST_THRESHOLD_USD = 0.01

DEBT_SUFFIX = " (debt)"

_Rule = tuple[Callable[[str, Sequence[str]], bool], str]

# Evaluated top to bottom; the first matching predicate decides the type.
POSITION_TYPE_RULES: tuple[_Rule, ...] = (
    (lambda name, types: "lending" in types, "lending"),
    (lambda name, types: "locked" in types, "stake"),
    (lambda name, types: "leveraged_farming" in types, "lp"),
    (lambda name, types: "lending" in name, "lending"),
    (lambda name, types: "borrow" in name, "borrow"),
    (lambda name, types: "farm" in name, "lp"),
    (lambda name, types: "liquidity" in name or "pool" in name, "lp"),
    (lambda name, types: "stake" in name or "locked" in name, "stake"),
    (lambda name, types: "deposit" in name or name == "yield", "lending"),
    (lambda name, types: "vest" in name or name == "rewards", "stake"),
)


def map_position_type(name: str | None, detail_types: Any) -> str:
    """Classify a position as lending / borrow / lp / stake.

    Best-effort heuristic over DeBank's free-text item names: names the
    rules do not anticipate fall through to the lowercased name itself, or
    ``"other"`` when there is no name.

    Examples:
        ("USDC Lending", []) → "lending"
        ("ETH-USDC LP Farming", []) → "lp"
        ("Anything", ["locked"]) → "stake"
    """
    n = (name or "").lower()
    types = [str(t).lower() for t in as_list(detail_types)]
    for predicate, position_type in POSITION_TYPE_RULES:
        if predicate(n, types):
            return position_type
    return n or "other"


def token_symbol(token: dict[str, Any]) -> str:
    return token.get("optimized_symbol") or token.get("symbol") or token.get("name") or "?"


def _usd_value(token: dict[str, Any]) -> tuple[float, float]:
    amount = token.get("amount")
    price = token.get("price")
    amount = 0 if amount is None else amount
    price = 0 if price is None else price
    return amount, amount * price


def build_token_lines(
    detail: dict[str, Any], dust_threshold: float = DUST_THRESHOLD_USD
) -> tuple[TokenLine, ...]:
    """Supplied and reward tokens above dust, then every borrowed token as debt.

    Debt lines are never dust-filtered so that a near-zero borrow still shows up.
    """
    lines: list[TokenLine] = []
    held = as_list(detail.get("supply_token_list")) + as_list(
        detail.get("reward_token_list")
    )
    for tok in held:
        tok = as_dict(tok)
        amount, amount_usd = _usd_value(tok)
        if amount_usd < dust_threshold:
            continue
        lines.append(TokenLine(symbol=token_symbol(tok), amount=amount, amount_usd=amount_usd))

    for tok in as_list(detail.get("borrow_token_list")):
        tok = as_dict(tok)
        amount, amount_usd = _usd_value(tok)
        lines.append(
            TokenLine(
                symbol=token_symbol(tok) + DEBT_SUFFIX,
                amount=amount,
                amount_usd=-amount_usd,
            )
        )
    return tuple(lines)


def flatten_positions(
    protocol_list: Any, dust_threshold: float = DUST_THRESHOLD_USD
) -> list[FlatPosition]:
    """One ``FlatPosition`` per portfolio item, richest first.

    Items whose ``stats.net_usd_value`` is below ``dust_threshold`` are
    dropped. Ties keep upstream order.
    """
    positions: list[FlatPosition] = []

    for proto in as_list(protocol_list):
        proto = as_dict(proto)
        protocol_id = proto.get("id") or ""
        protocol_name = proto.get("name") or protocol_id or PLACEHOLDER
        chain = proto.get("chain") or ""
        logo_url = proto.get("logo_url") or None

        for item in as_list(proto.get("portfolio_item_list")):
            item = as_dict(item)
            net_usd = as_dict(item.get("stats")).get("net_usd_value")
            if net_usd is None:
                net_usd = 0
            if net_usd < dust_threshold:
                continue

            positions.append(
                FlatPosition(
                    protocol_id=protocol_id,
                    protocol_name=protocol_name,
                    protocol_logo_url=logo_url,
                    chain=chain,
                    position_type=map_position_type(item.get("name"), item.get("detail_types")),
                    position_name=item.get("name") or PLACEHOLDER,
                    tokens=build_token_lines(as_dict(item.get("detail")), dust_threshold),
                    total_usd=net_usd,
                )
            )

    return sorted(positions, key=lambda p: p.total_usd, reverse=True)
