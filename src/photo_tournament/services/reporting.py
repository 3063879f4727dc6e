"""Leaderboard and match-history rendering."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from tabulate import tabulate

from photo_tournament.models import ContestState, MatchRecord
from photo_tournament.ranking.standings import Standing

LEADERBOARD_HEADERS = ("Rank", "Photo", "Rating", "Score", "Tier", "Matches", "Wins", "Losses")
HISTORY_HEADERS = ("#", "Phase", "A", "B", "Winner", "Δ Winner", "Δ Loser", "When")


def leaderboard_rows(standings: Sequence[Standing], labels: dict[str, str] | None = None) -> list[tuple]:
    """Table rows for a leaderboard.

    Args:
        standings: Rows in rank order.
        labels: Optional display names by photo ID (e.g. filenames).
    """
    labels = labels or {}
    return [
        (
            s.rank,
            labels.get(s.item_id, s.item_id),
            s.rating,
            s.score,
            f"{s.tier_icon} {s.tier_label}",
            s.matches,
            s.wins,
            s.losses,
        )
        for s in standings
    ]


def generate_leaderboard(
    standings: Sequence[Standing],
    title: str,
    labels: dict[str, str] | None = None,
    champion_id: str | None = None,
    tablefmt: str = "github",
) -> str:
    """Render a leaderboard as a Markdown document.

    Args:
        standings: Rows in rank order.
        title: Report title (markdown heading).
        labels: Optional display names by photo ID.
        champion_id: Champion to announce below the title, if the contest is over.
        tablefmt: tabulate format.

    Returns:
        Markdown report content.
    """
    lines = [f"# {title}", ""]
    if champion_id:
        labels_ = labels or {}
        lines.extend([f"Champion: **{labels_.get(champion_id, champion_id)}**", ""])
    lines.append(tabulate(leaderboard_rows(standings, labels), headers=LEADERBOARD_HEADERS, tablefmt=tablefmt))
    return "\n".join(lines)


def history_rows(history: Sequence[MatchRecord], labels: dict[str, str] | None = None) -> list[tuple]:
    labels = labels or {}
    return [
        (
            index,
            record.phase,
            labels.get(record.item_a_id, record.item_a_id),
            labels.get(record.item_b_id, record.item_b_id),
            labels.get(record.winner_id, record.winner_id),
            f"{record.rating_delta.winner:+d}",
            f"{record.rating_delta.loser:+d}",
            record.timestamp.strftime("%Y-%m-%d %H:%M:%S"),
        )
        for index, record in enumerate(history, 1)
    ]


def generate_history(
    state: ContestState,
    labels: dict[str, str] | None = None,
    limit: int | None = None,
    tablefmt: str = "github",
) -> str:
    """Render the match history, most recent last.

    ``limit`` keeps only the last N matches.
    """
    history = state.match_history
    offset = 0
    if limit is not None and limit < len(history):
        offset = len(history) - limit
        history = history[offset:]
    rows = [(index + offset, *rest) for index, *rest in history_rows(history, labels)]
    return tabulate(rows, headers=HISTORY_HEADERS, tablefmt=tablefmt, disable_numparse=True)


def standings_to_records(standings: Sequence[Standing]) -> list[dict[str, Any]]:
    """Plain dicts for JSON/CSV export."""
    return [
        {
            "rank": s.rank,
            "item_id": s.item_id,
            "rating": s.rating,
            "score": s.score,
            "tier_id": s.tier_id,
            "tier_label": s.tier_label,
            "matches": s.matches,
            "wins": s.wins,
            "losses": s.losses,
        }
        for s in standings
    ]
