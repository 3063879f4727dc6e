"""Display scores and tiers.

Ratings are internal; users see a 0-100 score normalized against the current
rating range of the contest, plus the tier band the score falls in.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

from photo_tournament.core.config import DEFAULT_RATING
from photo_tournament.models import RatingRange, ScoreTier, Stats
from photo_tournament.ranking.elo import round_half_up

SCORE_MIN = 0
SCORE_MAX = 100
NEUTRAL_SCORE = 50


@dataclass(frozen=True)
class Tier:
    """A contiguous band of the 0-100 score scale."""

    id: str
    label: str
    min: int
    max: int
    icon: str

    def contains(self, score: float) -> bool:
        return self.min <= score <= self.max


# Bands are contiguous, non-overlapping and cover 0..100.
TIERS: tuple[Tier, ...] = (
    Tier("rascunho", "Rascunho", 0, 9, "✏️"),
    Tier("captura", "Captura", 10, 19, "📷"),
    Tier("foco", "Foco", 20, 29, "🎯"),
    Tier("enquadrada", "Enquadrada", 30, 39, "🖼️"),
    Tier("bem-composta", "Bem Composta", 40, 49, "📐"),
    Tier("destaque", "Destaque", 50, 59, "⭐"),
    Tier("portfolio", "Portfólio", 60, 69, "📁"),
    Tier("curadoria", "Curadoria", 70, 79, "🏛️"),
    Tier("galeria", "Galeria", 80, 89, "🖼️"),
    Tier("obra-prima", "Obra-prima Visual", 90, 100, "👑"),
)


def clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def rating_range(ratings: Mapping[str, int]) -> RatingRange:
    """Min/max over current ratings; ``DEFAULT_RATING`` for both when empty."""
    if not ratings:
        return RatingRange(min=DEFAULT_RATING, max=DEFAULT_RATING)
    values = ratings.values()
    return RatingRange(min=min(values), max=max(values))


def normalize(rating: float, min_rating: float, max_rating: float) -> int:
    """Rescale a rating to 0-100 within [min_rating, max_rating].

    Returns exactly ``NEUTRAL_SCORE`` when every rating is equal.
    """
    if max_rating == min_rating:
        return NEUTRAL_SCORE

    clamped = clamp(rating, min_rating, max_rating)
    normalized = (clamped - min_rating) / (max_rating - min_rating) * SCORE_MAX
    return int(clamp(round_half_up(normalized), SCORE_MIN, SCORE_MAX))


def tier_for(score: float) -> Tier:
    """Return the tier whose band contains ``score``.

    Scores outside 0-100 are clamped first.
    """
    clamped = clamp(score, SCORE_MIN, SCORE_MAX)
    for tier in TIERS:
        if tier.contains(clamped):
            return tier
    # Only reachable for fractional scores between two bands.
    return tier_for(round_half_up(clamped))


def win_loss_score(wins: int, losses: int) -> int:
    """Win rate scaled to 0-100; ``NEUTRAL_SCORE`` before any match."""
    total = wins + losses
    if total == 0:
        return NEUTRAL_SCORE
    return round_half_up(wins / total * SCORE_MAX)


def hybrid_score(
    elo_score: float,
    wins: int,
    losses: int,
    elo_weight: float = 0.3,
    win_loss_weight: float = 0.7,
) -> int:
    """Blend the Elo score with the win/loss score.

    Only used by the deprecated final round.
    """
    hybrid = elo_score * elo_weight + win_loss_score(wins, losses) * win_loss_weight
    return int(clamp(round_half_up(hybrid), SCORE_MIN, SCORE_MAX))


def score_tier(score: int, rating: int) -> ScoreTier:
    tier = tier_for(score)
    return ScoreTier(score=score, tier_id=tier.id, label=tier.label, icon=tier.icon, rating=rating)


def scores_and_tiers(
    ratings: Mapping[str, int],
    stats: Mapping[str, Stats] | None = None,
    range_: RatingRange | None = None,
    use_hybrid: bool = False,
    elo_weight: float = 0.3,
    win_loss_weight: float = 0.7,
) -> dict[str, ScoreTier]:
    """Compute score and tier for every rated item.

    Args:
        ratings: Current ratings keyed by item ID.
        stats: Win/loss stats keyed by item ID, needed for the hybrid score.
        range_: Rating range to normalize against; computed when omitted.
        use_hybrid: Blend in the win/loss score where stats are available.
        elo_weight: Hybrid weight of the Elo score.
        win_loss_weight: Hybrid weight of the win/loss score.

    Returns:
        Mapping of item ID to ScoreTier.
    """
    bounds = range_ or rating_range(ratings)
    result: dict[str, ScoreTier] = {}

    for item_id, rating in ratings.items():
        score = normalize(rating, bounds.min, bounds.max)
        if use_hybrid and stats and item_id in stats:
            item_stats = stats[item_id]
            score = hybrid_score(
                score, item_stats.wins, item_stats.losses, elo_weight, win_loss_weight
            )
        result[item_id] = score_tier(score, rating)

    return result
