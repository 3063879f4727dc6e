"""Contest state transitions.

Every function here takes a ContestState and returns the next one without
touching the input, so callers decide when (and whether) a new state becomes
current. None of them perform I/O.

Phases: idle (no state) -> qualifying -> finished. The deprecated ``final``
phase is delegated to :mod:`photo_tournament.services.contest.legacy`.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any, Protocol

import structlog

from photo_tournament.core.config import RatingConfig
from photo_tournament.core.errors import InsufficientParticipantsError, InvalidSideError
from photo_tournament.models import (
    ContestState,
    MatchRecord,
    QualifyingRound,
    RatingChange,
    RatingPoint,
    Side,
    Stats,
)
from photo_tournament.ranking.elo import initial_ratings, update_ratings
from photo_tournament.ranking.standings import (
    build_stats,
    max_pairings,
    rank_stats,
    select_champion,
)
from photo_tournament.ranking.tiers import rating_range, scores_and_tiers
from photo_tournament.services.contest import legacy
from photo_tournament.services.match.pairing import next_match

logger = structlog.get_logger()

SIDES = ("A", "B")


class ContestItem(Protocol):
    """What a contest needs to know about an item."""

    id: str
    rating: int


def is_eligible_for(config: RatingConfig) -> Callable[[Any], bool]:
    """Default eligibility: the item's star rating equals ``eligible_rating``."""

    def _is_eligible(item: Any) -> bool:
        return getattr(item, "rating", None) == config.eligible_rating

    return _is_eligible


def refresh_scores(state: ContestState) -> None:
    """Recompute rating range and Elo-only scores in place (on a private copy)."""
    state.rating_range = rating_range(state.ratings)
    state.scores_and_tiers = scores_and_tiers(state.ratings, range_=state.rating_range)


def start_contest(
    items: Iterable[ContestItem],
    config: RatingConfig | None = None,
    is_eligible: Callable[[Any], bool] | None = None,
    now: datetime | None = None,
) -> ContestState:
    """Create a contest from the eligible items.

    Args:
        items: Candidate items; filtered with ``is_eligible``.
        config: Rating configuration.
        is_eligible: Eligibility predicate, defaults to the configured star rating.
        now: Timestamp for the initial rating points.

    Returns:
        A qualifying-phase state with no match lined up yet.

    Raises:
        InsufficientParticipantsError: If fewer than ``min_participants`` are eligible.
    """
    config = config or RatingConfig()
    is_eligible = is_eligible or is_eligible_for(config)
    timestamp = now or datetime.now(UTC)

    item_ids: list[str] = []
    for item in items:
        if is_eligible(item) and item.id not in item_ids:
            item_ids.append(item.id)

    if len(item_ids) < config.min_participants:
        raise InsufficientParticipantsError(len(item_ids), config.min_participants)

    ratings = initial_ratings(item_ids, config.initial_rating)
    state = ContestState(
        phase="qualifying",
        eligible_item_ids=item_ids,
        ratings=ratings,
        stats=build_stats(item_ids, ratings, []),
        qualifying=QualifyingRound(
            total_matches=max_pairings(len(item_ids)),
            rating_history={
                item_id: [RatingPoint(rating=rating, timestamp=timestamp)]
                for item_id, rating in ratings.items()
            },
        ),
    )
    refresh_scores(state)

    logger.info("contest_started", participants=len(item_ids), pairings=state.qualifying.total_matches)
    return state


def ensure_match(state: ContestState, config: RatingConfig | None = None) -> ContestState:
    """Line up the next pairing, or finalize when every pair has been played.

    Returns ``state`` itself when nothing changes.
    """
    if state.phase == "finished":
        return state
    if state.phase == "final":
        return legacy.ensure_final_match(state, config or RatingConfig())
    if state.qualifying.current_match is not None:
        return state

    match = next_match(state.eligible_item_ids, state.ratings, state.match_history)
    if match is None:
        return finalize(state)

    new_state = state.model_copy(deep=True)
    new_state.qualifying.current_match = match
    logger.debug("match_scheduled", a=match.a_id, b=match.b_id)
    return new_state


def resolve(
    state: ContestState,
    side: Side,
    config: RatingConfig | None = None,
    now: datetime | None = None,
) -> ContestState:
    """Apply the user's pick for the current match.

    Updates ratings (unless frozen), appends the match record, updates and
    re-ranks stats, then lines up the next match or finalizes.

    Args:
        state: Current state.
        side: "A" or "B".
        config: Rating configuration (K-factor).
        now: Match timestamp.

    Returns:
        The next state. With no match pending, the state after re-requesting one.

    Raises:
        InvalidSideError: If ``side`` is not "A" or "B".
    """
    if side not in SIDES:
        raise InvalidSideError(str(side))

    config = config or RatingConfig()
    if state.phase == "finished":
        logger.info("resolve_after_finish")
        return state
    if state.phase == "final":
        return legacy.resolve_final(state, side, config, now)

    match = state.qualifying.current_match
    if match is None:
        logger.info("no_active_match")
        return ensure_match(state, config)

    winner_id, loser_id = match.side_ids(side)
    timestamp = now or datetime.now(UTC)
    new_state = state.model_copy(deep=True)

    if new_state.frozen:
        delta = RatingChange(winner=0, loser=0)
    else:
        new_state.ratings, elo_delta = update_ratings(
            winner_id, loser_id, new_state.ratings, config.k_factor
        )
        delta = RatingChange(winner=elo_delta.winner, loser=elo_delta.loser)
        refresh_scores(new_state)

    new_state.match_history.append(
        MatchRecord(
            item_a_id=match.a_id,
            item_b_id=match.b_id,
            winner_id=winner_id,
            timestamp=timestamp,
            rating_delta=delta,
            phase="qualifying",
        )
    )

    record_result(new_state, winner_id, loser_id)
    new_state.stats = rank_stats(new_state.stats)

    match_index = len(new_state.match_history) - 1
    for item_id in (winner_id, loser_id):
        new_state.qualifying.rating_history.setdefault(item_id, []).append(
            RatingPoint(rating=new_state.ratings[item_id], timestamp=timestamp, match_index=match_index)
        )

    new_state.qualifying.completed_matches += 1
    new_state.qualifying.current_match = None

    logger.info(
        "match_resolved",
        winner=winner_id,
        loser=loser_id,
        delta_winner=delta.winner,
        delta_loser=delta.loser,
        completed=new_state.qualifying.completed_matches,
        total=new_state.qualifying.total_matches,
    )
    return ensure_match(new_state, config)


def record_result(state: ContestState, winner_id: str, loser_id: str) -> None:
    """Increment the cached win/loss counters (on a private copy)."""
    for item_id in (winner_id, loser_id):
        if item_id not in state.stats:
            state.stats[item_id] = Stats()
        state.stats[item_id].rating = state.ratings[item_id]
    state.stats[winner_id].wins += 1
    state.stats[loser_id].losses += 1


def finalize(state: ContestState) -> ContestState:
    """Close the contest: the highest rating is champion, ties to the smallest ID."""
    new_state = state.model_copy(deep=True)
    eligible = {item_id: new_state.ratings[item_id] for item_id in new_state.eligible_item_ids}
    new_state.champion_id = select_champion(eligible)
    new_state.stats = rank_stats(new_state.stats)
    new_state.qualifying.current_match = None
    new_state.phase = "finished"

    logger.info(
        "contest_finalized",
        champion=new_state.champion_id,
        matches=len(new_state.match_history),
    )
    return new_state
