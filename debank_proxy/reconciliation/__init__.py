"""Position reconciliation: token → protocol join and position flattening."""
from .enricher import enrich_tokens
from .positions import DUST_THRESHOLD_USD, flatten_positions, map_position_type
from .protocol_index import build_token_protocol_index, join_key

__all__ = [
    "DUST_THRESHOLD_USD",
    "build_token_protocol_index",
    "enrich_tokens",
    "flatten_positions",
    "join_key",
    "map_position_type",
]
