"""Round-robin pairing for Photo Tournament."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping, Sequence
from itertools import combinations

from photo_tournament.core.config import DEFAULT_RATING
from photo_tournament.models import CurrentMatch, MatchRecord
from photo_tournament.models.contest import MatchPhase

PAIR_SEPARATOR = "|"


def pair_key(item_a_id: str, item_b_id: str) -> str:
    """Order-independent key for an unordered pair."""
    first, second = sorted((item_a_id, item_b_id))
    return f"{first}{PAIR_SEPARATOR}{second}"


def fought_pairs(history: Iterable[MatchRecord], phase: MatchPhase = "qualifying") -> set[str]:
    """Pair keys already played in ``phase``."""
    return {pair_key(m.item_a_id, m.item_b_id) for m in history if m.phase == phase}


def unplayed_pairs(
    item_ids: Sequence[str],
    history: Iterable[MatchRecord],
    phase: MatchPhase = "qualifying",
) -> Iterator[tuple[str, str]]:
    """Yield every unordered pair of distinct items not yet played in ``phase``.

    Pairs come out sorted, each as (smaller_id, larger_id).
    """
    fought = fought_pairs(history, phase)
    unique_ids = sorted(set(item_ids))
    for item_a, item_b in combinations(unique_ids, 2):
        if pair_key(item_a, item_b) not in fought:
            yield item_a, item_b


def next_match(
    item_ids: Sequence[str],
    ratings: Mapping[str, int],
    history: Iterable[MatchRecord],
    phase: MatchPhase = "qualifying",
) -> CurrentMatch | None:
    """Pick the next duel, or None once every pair has been played.

    Among the pairs not yet played, the one with the smallest rating gap is
    chosen (the most competitive duel). Ties go to the lexically smallest pair
    key, so identical inputs always give the same pairing.

    Args:
        item_ids: Participants.
        ratings: Current ratings; missing entries count as ``DEFAULT_RATING``.
        history: Match history of the contest.
        phase: Only matches from this phase count as played.

    Returns:
        The next CurrentMatch, with the smaller ID on side A.
    """
    best: tuple[float, str] | None = None
    best_pair: tuple[str, str] | None = None

    for item_a, item_b in unplayed_pairs(item_ids, history, phase):
        gap = abs(ratings.get(item_a, DEFAULT_RATING) - ratings.get(item_b, DEFAULT_RATING))
        candidate = (gap, pair_key(item_a, item_b))
        if best is None or candidate < best:
            best = candidate
            best_pair = (item_a, item_b)

    if best_pair is None:
        return None
    return CurrentMatch(a_id=best_pair[0], b_id=best_pair[1])


def remaining_pairings(
    item_ids: Sequence[str],
    history: Iterable[MatchRecord],
    phase: MatchPhase = "qualifying",
) -> int:
    """How many pairs are still to be played in ``phase``."""
    return sum(1 for _ in unplayed_pairs(item_ids, history, phase))
