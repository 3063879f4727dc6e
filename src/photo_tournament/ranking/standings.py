"""Standings: win/loss stats, ranks and the champion."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from photo_tournament.core.config import DEFAULT_RATING
from photo_tournament.models import ContestState, MatchRecord, Stats
from photo_tournament.ranking.tiers import NEUTRAL_SCORE, SCORE_MAX, SCORE_MIN, tier_for
from photo_tournament.services.match.pairing import pair_key


@dataclass(frozen=True)
class Standing:
    """One leaderboard row."""

    item_id: str
    rank: int
    rating: int
    wins: int
    losses: int
    score: int
    tier_id: str
    tier_label: str
    tier_icon: str

    @property
    def matches(self) -> int:
        return self.wins + self.losses


def _primary_key(entry: tuple[str, Stats]) -> tuple:
    item_id, s = entry
    return (-s.rating, -s.wins, s.losses, item_id)


def _win_loss_key(entry: tuple[str, Stats]) -> tuple:
    item_id, s = entry
    return (-(s.wins - s.losses), -s.wins, -s.rating, item_id)


def rank_stats(stats: Mapping[str, Stats], prioritize_win_loss: bool = False) -> dict[str, Stats]:
    """Assign 1-based ranks.

    The primary order is rating desc, wins desc, losses asc, id asc. The legacy
    final round orders by (wins - losses) desc, wins desc, rating desc, id asc.

    Args:
        stats: Stats keyed by item ID. Not modified.
        prioritize_win_loss: Use the legacy final-round order.

    Returns:
        New mapping with ranks set, in rank order.
    """
    key = _win_loss_key if prioritize_win_loss else _primary_key
    ordered = sorted(stats.items(), key=key)
    return {
        item_id: s.model_copy(update={"rank": rank})
        for rank, (item_id, s) in enumerate(ordered, start=1)
    }


def build_stats(
    item_ids: Iterable[str],
    ratings: Mapping[str, int],
    history: Iterable[MatchRecord],
    prioritize_win_loss: bool = False,
) -> dict[str, Stats]:
    """Rebuild ranked stats from the match history.

    Records involving items outside ``item_ids`` only count for the side that
    is still present.
    """
    stats = {
        item_id: Stats(rating=ratings.get(item_id, DEFAULT_RATING)) for item_id in item_ids
    }
    for record in history:
        if record.winner_id in stats:
            stats[record.winner_id].wins += 1
        if record.loser_id in stats:
            stats[record.loser_id].losses += 1
    return rank_stats(stats, prioritize_win_loss)


def select_champion(ratings: Mapping[str, int]) -> str | None:
    """Highest rating wins; ties go to the smallest ID."""
    if not ratings:
        return None
    return min(ratings.items(), key=lambda entry: (-entry[1], entry[0]))[0]


def build_standings(state: ContestState) -> list[Standing]:
    """Leaderboard rows for every participant, in rank order."""
    stats = state.stats
    if set(stats) != set(state.eligible_item_ids) or any(s.rank is None for s in stats.values()):
        stats = build_stats(state.eligible_item_ids, state.ratings, state.match_history)

    rows = []
    for item_id, s in sorted(stats.items(), key=lambda entry: entry[1].rank or 0):
        score_data = state.scores_and_tiers.get(item_id)
        score = score_data.score if score_data else NEUTRAL_SCORE
        tier = tier_for(score)
        rows.append(
            Standing(
                item_id=item_id,
                rank=s.rank or 0,
                rating=state.ratings.get(item_id, DEFAULT_RATING),
                wins=s.wins,
                losses=s.losses,
                score=score,
                tier_id=tier.id,
                tier_label=tier.label,
                tier_icon=tier.icon,
            )
        )
    return rows


def max_pairings(participant_count: int) -> int:
    """Number of unordered pairs among ``participant_count`` items."""
    return participant_count * (participant_count - 1) // 2


def validate_state(state: ContestState) -> list[str]:
    """Check the contest invariants.

    Returns:
        Human-readable violations; empty when the state is consistent.
    """
    errors: list[str] = []
    eligible = set(state.eligible_item_ids)

    if set(state.ratings) != eligible:
        errors.append("ratings keys differ from the eligible items")

    wins = sum(s.wins for s in state.stats.values())
    losses = sum(s.losses for s in state.stats.values())
    expected = sum(
        (record.item_a_id in eligible) + (record.item_b_id in eligible)
        for record in state.match_history
    )
    if wins + losses != expected:
        errors.append(f"wins ({wins}) + losses ({losses}) != {expected} recorded appearances")

    seen: set[str] = set()
    for index, record in enumerate(state.match_history):
        if record.winner_id not in record.participants:
            errors.append(f"match {index}: winner is neither participant")
        if record.phase != "qualifying":
            continue
        key = pair_key(record.item_a_id, record.item_b_id)
        if key in seen:
            errors.append(f"match {index}: pair {key} already played")
        seen.add(key)

    qualifying_in_play = [
        r
        for r in state.history_for("qualifying")
        if r.item_a_id in eligible and r.item_b_id in eligible
    ]
    if len(qualifying_in_play) > max_pairings(len(eligible)):
        errors.append("more qualifying matches than unique pairs")

    for item_id, score_data in state.scores_and_tiers.items():
        if not SCORE_MIN <= score_data.score <= SCORE_MAX:
            errors.append(f"score of {item_id} out of range: {score_data.score}")
        elif tier_for(score_data.score).id != score_data.tier_id:
            errors.append(f"tier of {item_id} does not match its score")

    if state.is_finished and state.champion_id not in eligible:
        errors.append("finished contest without a participating champion")

    return errors
