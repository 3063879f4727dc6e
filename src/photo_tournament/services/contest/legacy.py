"""Handlers for the deprecated all-play-all final round.

Contests created today never enter the ``final`` phase. Old persisted state
can still be in the middle of one; these handlers play out its remaining
pairs and then close the contest. The final round ranks by win/loss first and
shows the hybrid score.
"""

from __future__ import annotations

from datetime import UTC, datetime

import structlog

from photo_tournament.core.config import RatingConfig
from photo_tournament.models import ContestState, MatchRecord, RatingChange, Side
from photo_tournament.ranking.elo import update_ratings
from photo_tournament.ranking.standings import build_stats
from photo_tournament.ranking.tiers import rating_range, scores_and_tiers
from photo_tournament.services.match.pairing import fought_pairs, pair_key

logger = structlog.get_logger()


def ensure_final_match(state: ContestState, config: RatingConfig) -> ContestState:
    """Take the next pending pair, or close the contest when none is left."""
    final = state.final
    if final is None or not final.has_pending:
        return finish_final(state)
    if final.current_match is not None:
        return state

    new_state = state.model_copy(deep=True)
    new_state.final.current_match = new_state.final.pending_matches.pop(0)
    return new_state


def resolve_final(
    state: ContestState,
    side: Side,
    config: RatingConfig,
    now: datetime | None = None,
) -> ContestState:
    """Apply a pick inside the final round."""
    if state.final is None or state.final.current_match is None:
        logger.info("no_active_match", phase="final")
        return ensure_final_match(state, config)

    match = state.final.current_match
    winner_id, loser_id = match.side_ids(side)
    new_state = state.model_copy(deep=True)
    final = new_state.final

    if new_state.frozen:
        delta = RatingChange(winner=0, loser=0)
    else:
        new_state.ratings, elo_delta = update_ratings(
            winner_id, loser_id, new_state.ratings, config.k_factor
        )
        delta = RatingChange(winner=elo_delta.winner, loser=elo_delta.loser)

    new_state.match_history.append(
        MatchRecord(
            item_a_id=match.a_id,
            item_b_id=match.b_id,
            winner_id=winner_id,
            timestamp=now or datetime.now(UTC),
            rating_delta=delta,
            phase="final",
        )
    )

    refresh_final_scores(new_state, config)
    new_state.stats = build_stats(
        new_state.eligible_item_ids,
        new_state.ratings,
        new_state.match_history,
        prioritize_win_loss=True,
    )

    final.completed_matches += 1
    played = fought_pairs(new_state.match_history, "final")
    final.pending_matches = [
        m for m in final.pending_matches if pair_key(m.a_id, m.b_id) not in played
    ]
    final.current_match = None

    logger.info("final_match_resolved", winner=winner_id, loser=loser_id, pending=len(final.pending_matches))
    return ensure_final_match(new_state, config)


def refresh_final_scores(state: ContestState, config: RatingConfig) -> None:
    """Recompute hybrid scores from final-round results (on a private copy)."""
    final_ids = state.final.item_ids if state.final else state.eligible_item_ids
    final_stats = build_stats(final_ids, state.ratings, state.history_for("final"))
    state.rating_range = rating_range(state.ratings)
    state.scores_and_tiers = scores_and_tiers(
        state.ratings,
        final_stats,
        state.rating_range,
        use_hybrid=True,
        elo_weight=config.elo_weight,
        win_loss_weight=config.win_loss_weight,
    )


def finish_final(state: ContestState) -> ContestState:
    """Close the final round; the win/loss leader becomes champion."""
    new_state = state.model_copy(deep=True)
    new_state.stats = build_stats(
        new_state.eligible_item_ids,
        new_state.ratings,
        new_state.match_history,
        prioritize_win_loss=True,
    )
    leader = next(iter(new_state.stats), None)
    new_state.champion_id = leader
    if new_state.final is not None:
        new_state.final.current_match = None
        new_state.final.pending_matches = []
    new_state.phase = "finished"

    logger.info("legacy_final_finished", champion=leader)
    return new_state
