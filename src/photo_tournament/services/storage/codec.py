"""Contest state (de)serialization and reconciliation.

Blobs carry a ``schema_version``. Blobs without one come from the older
browser app (camelCase keys, epoch-millisecond timestamps) and are migrated
once, on load, before validation.

Deserializing also reconciles the state with the current photo collection:
photos that were deleted since the last save are dropped, and any pending
pairing that references them is cleared so a fresh one gets scheduled.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

import structlog

from photo_tournament.core.config import DEFAULT_RATING, RatingConfig
from photo_tournament.models import SCHEMA_VERSION, ContestState, CurrentMatch
from photo_tournament.models.contest import MatchPhase
from photo_tournament.ranking.elo import round_half_up
from photo_tournament.ranking.standings import build_stats, max_pairings, select_champion
from photo_tournament.services.contest import legacy
from photo_tournament.services.contest.transitions import refresh_scores

logger = structlog.get_logger()

CURRENT_PHASES = ("qualifying", "finished")


def serialize(state: ContestState) -> dict[str, Any]:
    """Convert state to a JSON-compatible blob (IDs only, no photo payloads)."""
    return {"schema_version": SCHEMA_VERSION, **state.model_dump(mode="json")}


def deserialize(
    blob: dict[str, Any] | None,
    items: Iterable[Any],
    config: RatingConfig | None = None,
) -> ContestState | None:
    """Rebuild state from a blob and reconcile it with the current items.

    Args:
        blob: Stored blob, current or legacy schema.
        items: Current item collection; anything with an ``id`` attribute.
        config: Rating configuration, used when legacy scores need recomputing.

    Returns:
        The reconciled state, or None if nothing usable was stored.
    """
    if not blob:
        return None

    config = config or RatingConfig()
    data = dict(blob)
    if "schema_version" not in data:
        data = migrate_blob(data)
    data.pop("schema_version", None)
    data["phase"] = coerce_phase(data)

    state = ContestState.model_validate(data)
    return reconcile(state, {item.id for item in items}, config)


def coerce_phase(data: dict[str, Any]) -> str:
    """Map stored phases onto the ones current code can drive.

    ``bracket`` always becomes ``finished``. ``final`` stays only while its
    round still has pairs to play.
    """
    phase = data.get("phase") or "qualifying"
    if phase in CURRENT_PHASES:
        return phase
    if phase == "final":
        final = data.get("final") or {}
        if final.get("current_match") or final.get("pending_matches"):
            return "final"
    logger.info("phase_coerced", stored=phase, phase="finished")
    return "finished"


def reconcile(state: ContestState, known_ids: set[str], config: RatingConfig) -> ContestState | None:
    """Drop references to items that no longer exist.

    The match history is kept as is. Returns None when no participant is left.
    """
    missing = [item_id for item_id in state.eligible_item_ids if item_id not in known_ids]
    eligible = [item_id for item_id in state.eligible_item_ids if item_id in known_ids]
    if not eligible:
        if state.eligible_item_ids:
            logger.warning("reconciliation_drift", missing=missing, remaining=0)
        return None

    state = state.model_copy(deep=True)
    drift = bool(missing) or set(state.ratings) != set(eligible)
    if missing:
        logger.warning("reconciliation_drift", missing=missing, remaining=len(eligible))

    state.eligible_item_ids = eligible
    state.ratings = {item_id: state.ratings.get(item_id, DEFAULT_RATING) for item_id in eligible}
    state.scores_and_tiers = {k: v for k, v in state.scores_and_tiers.items() if k in known_ids}
    state.qualifying.rating_history = {
        k: v for k, v in state.qualifying.rating_history.items() if k in known_ids
    }

    eligible_set = set(eligible)
    if _references_missing(state.qualifying.current_match, eligible_set):
        logger.info("current_match_cleared", phase="qualifying")
        state.qualifying.current_match = None
    if drift:
        state.qualifying.total_matches = max_pairings(len(eligible))
        state.qualifying.completed_matches = _played_among(state, "qualifying", eligible_set)

    if state.final is not None:
        final = state.final
        final.item_ids = [item_id for item_id in final.item_ids if item_id in eligible_set]
        if _references_missing(final.current_match, eligible_set):
            final.current_match = None
        final.pending_matches = [
            m for m in final.pending_matches if not _references_missing(m, eligible_set)
        ]
        if drift:
            final.completed_matches = _played_among(state, "final", eligible_set)
            unplayed = len(final.pending_matches) + (final.current_match is not None)
            final.total_matches = final.completed_matches + unplayed

    prioritize_win_loss = state.final is not None
    if drift or not _stats_consistent(state):
        state.stats = build_stats(
            eligible, state.ratings, state.match_history, prioritize_win_loss=prioritize_win_loss
        )

    if drift or set(state.scores_and_tiers) != eligible_set:
        if state.phase == "final":
            legacy.refresh_final_scores(state, config)
        else:
            refresh_scores(state)

    if state.phase == "final" and (state.final is None or not state.final.has_pending):
        state = legacy.finish_final(state)

    if state.is_finished and state.champion_id not in eligible_set:
        state.champion_id = select_champion(state.ratings)
        logger.info("champion_recomputed", champion=state.champion_id)

    return state


def _references_missing(match: CurrentMatch | None, eligible: set[str]) -> bool:
    return match is not None and (match.a_id not in eligible or match.b_id not in eligible)


def _played_among(state: ContestState, phase: MatchPhase, eligible: set[str]) -> int:
    return sum(1 for m in state.history_for(phase) if m.item_a_id in eligible and m.item_b_id in eligible)


def _stats_consistent(state: ContestState) -> bool:
    if set(state.stats) != set(state.eligible_item_ids):
        return False
    if any(s.rank is None or s.rating != state.ratings[k] for k, s in state.stats.items()):
        return False
    expected = build_stats(state.eligible_item_ids, state.ratings, state.match_history)
    return all(
        (s.wins, s.losses) == (expected[k].wins, expected[k].losses)
        for k, s in state.stats.items()
    )


# ==================== Legacy schema ====================


def _from_millis(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value / 1000, tz=UTC).isoformat()
    return str(value)


def _legacy_pair(raw: Any) -> dict[str, str] | None:
    if not isinstance(raw, dict) or not raw.get("photoA") or not raw.get("photoB"):
        return None
    return {"a_id": raw["photoA"], "b_id": raw["photoB"]}


def _legacy_score(raw: dict[str, Any], rating: int) -> dict[str, Any]:
    tier = raw.get("tier") or {}
    return {
        "score": raw.get("score", 50),
        "tier_id": tier.get("id", "destaque"),
        "label": tier.get("label", ""),
        "icon": tier.get("icon", ""),
        "rating": raw.get("elo", rating),
    }


def migrate_blob(blob: dict[str, Any]) -> dict[str, Any]:
    """Translate a legacy camelCase blob into the current schema.

    Battles missing a participant or winner are skipped.
    """
    ratings = {k: round_half_up(v) for k, v in (blob.get("eloScores") or {}).items()}

    history = []
    for battle in blob.get("battleHistory") or []:
        if not battle.get("photoA") or not battle.get("photoB") or not battle.get("winner"):
            continue
        change = battle.get("eloChange") or {}
        history.append(
            {
                "item_a_id": battle["photoA"],
                "item_b_id": battle["photoB"],
                "winner_id": battle["winner"],
                "timestamp": _from_millis(battle.get("timestamp")) or datetime.now(UTC).isoformat(),
                "rating_delta": {
                    "winner": round_half_up(change.get("winner") or 0),
                    "loser": round_half_up(change.get("loser") or 0),
                },
                "phase": battle.get("phase") or "qualifying",
            }
        )

    stats = {
        k: {
            "wins": v.get("wins", 0),
            "losses": v.get("losses", 0),
            "rating": round_half_up(v.get("elo", ratings.get(k, DEFAULT_RATING))),
            "rank": v.get("rank"),
        }
        for k, v in (blob.get("photoStats") or {}).items()
    }

    qualifying = blob.get("qualifying") or {}
    rating_history = {
        k: [
            {"rating": round_half_up(p.get("elo", DEFAULT_RATING)), "timestamp": _from_millis(p.get("timestamp"))}
            for p in points
        ]
        for k, points in (qualifying.get("eloHistory") or {}).items()
    }

    final = blob.get("final")
    migrated_final = None
    if final:
        pending = [_legacy_pair(m) for m in final.get("pendingMatches") or []]
        migrated_final = {
            "item_ids": final.get("finalPhotoIds") or [],
            "current_match": _legacy_pair(final.get("currentMatch")),
            "pending_matches": [m for m in pending if m],
            "total_matches": final.get("totalBattles") or 0,
            "completed_matches": final.get("completedBattles") or 0,
        }

    migrated = {
        "schema_version": SCHEMA_VERSION,
        "phase": blob.get("phase"),
        "eligible_item_ids": blob.get("qualifiedPhotoIds") or [],
        "ratings": ratings,
        "match_history": history,
        "stats": stats,
        "frozen": bool(blob.get("frozen")),
        "rating_range": blob.get("eloRange") or {"min": DEFAULT_RATING, "max": DEFAULT_RATING},
        "scores_and_tiers": {
            k: _legacy_score(v, ratings.get(k, DEFAULT_RATING))
            for k, v in (blob.get("scoresAndTiers") or {}).items()
        },
        "champion_id": blob.get("championId"),
        "qualifying": {
            "current_match": _legacy_pair(qualifying.get("currentMatch")),
            "total_matches": qualifying.get("totalBattles") or 0,
            "completed_matches": qualifying.get("completedBattles") or 0,
            "rating_history": {
                k: [p for p in points if p["timestamp"]] for k, points in rating_history.items()
            },
        },
        "final": migrated_final,
    }
    logger.info("state_migrated", phase=migrated["phase"], matches=len(history))
    return migrated
