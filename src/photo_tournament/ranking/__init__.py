"""Ranking module for Photo Tournament.

Provides the Elo rating engine, score/tier normalization and standings.
"""

from __future__ import annotations

from photo_tournament.ranking.elo import (
    EloUpdate,
    RatingDelta,
    calculate_expected_win_chance,
    compute_update,
    initial_ratings,
    update_ratings,
)
from photo_tournament.ranking.standings import (
    Standing,
    build_standings,
    build_stats,
    rank_stats,
    select_champion,
    validate_state,
)
from photo_tournament.ranking.tiers import (
    TIERS,
    Tier,
    hybrid_score,
    normalize,
    rating_range,
    scores_and_tiers,
    tier_for,
)

__all__ = [
    "TIERS",
    "EloUpdate",
    "RatingDelta",
    "Standing",
    "Tier",
    "build_standings",
    "build_stats",
    "calculate_expected_win_chance",
    "compute_update",
    "hybrid_score",
    "initial_ratings",
    "normalize",
    "rank_stats",
    "rating_range",
    "scores_and_tiers",
    "select_champion",
    "tier_for",
    "update_ratings",
    "validate_state",
]
