"""Elo rating calculations for Photo Tournament."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass

from photo_tournament.core.config import DEFAULT_K_FACTOR, DEFAULT_RATING


@dataclass(frozen=True)
class RatingDelta:
    """Points gained by the winner and lost by the loser of one match."""

    winner: int
    loser: int


@dataclass(frozen=True)
class EloUpdate:
    """Result of a single Elo update.

    Attributes:
        winner: New rating of the winner.
        loser: New rating of the loser.
        delta: Rating change for each side. Rounding can make
            ``delta.winner != -delta.loser``.
    """

    winner: int
    loser: int
    delta: RatingDelta


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity."""
    return math.floor(value + 0.5)


def calculate_expected_win_chance(rating_a: float, rating_b: float) -> float:
    """Calculate expected win probability for player A against player B.

    Uses the standard Elo formula:
    E_A = 1 / (1 + 10^((R_B - R_A) / 400))

    Args:
        rating_a: Rating of player A.
        rating_b: Rating of player B.

    Returns:
        Probability that A wins (0.0 to 1.0).
    """
    return 1.0 / (1.0 + 10 ** ((rating_b - rating_a) / 400))


def compute_update(
    winner_rating: float,
    loser_rating: float,
    k_factor: float = DEFAULT_K_FACTOR,
) -> EloUpdate:
    """Compute new ratings after a match.

    Args:
        winner_rating: Current rating of the winner.
        loser_rating: Current rating of the loser.
        k_factor: Maximum points exchanged.

    Returns:
        EloUpdate with both new ratings rounded to integers.
    """
    expected_winner = calculate_expected_win_chance(winner_rating, loser_rating)
    expected_loser = 1.0 - expected_winner

    # Actual scores: 1 for the winner, 0 for the loser
    new_winner = round_half_up(winner_rating + k_factor * (1.0 - expected_winner))
    new_loser = round_half_up(loser_rating + k_factor * (0.0 - expected_loser))

    return EloUpdate(
        winner=new_winner,
        loser=new_loser,
        delta=RatingDelta(
            winner=round_half_up(new_winner - winner_rating),
            loser=round_half_up(new_loser - loser_rating),
        ),
    )


def update_ratings(
    winner_id: str,
    loser_id: str,
    ratings: Mapping[str, int],
    k_factor: float = DEFAULT_K_FACTOR,
) -> tuple[dict[str, int], RatingDelta]:
    """Return a new ratings map with the two participants updated.

    The caller's mapping is never modified. Missing entries start from
    ``DEFAULT_RATING``.

    Args:
        winner_id: ID of the winning item.
        loser_id: ID of the losing item.
        ratings: Current ratings keyed by item ID.
        k_factor: Maximum points exchanged.

    Returns:
        Tuple of (new_ratings, delta).
    """
    update = compute_update(
        ratings.get(winner_id, DEFAULT_RATING),
        ratings.get(loser_id, DEFAULT_RATING),
        k_factor,
    )
    new_ratings = dict(ratings)
    new_ratings[winner_id] = update.winner
    new_ratings[loser_id] = update.loser
    return new_ratings, update.delta


def initial_ratings(item_ids: list[str], initial_rating: int = DEFAULT_RATING) -> dict[str, int]:
    """Initialize ratings for all participants."""
    return {item_id: initial_rating for item_id in item_ids}
