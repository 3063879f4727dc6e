from .pairing import (
    fought_pairs,
    next_match,
    pair_key,
    remaining_pairings,
    unplayed_pairs,
)

__all__ = [
    "fought_pairs",
    "next_match",
    "pair_key",
    "remaining_pairings",
    "unplayed_pairs",
]
