"""Contest state models.

The contest state is the aggregate root of a running tournament. It only ever
references photos by ID; photo payloads stay in the item store.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from photo_tournament.core.config import DEFAULT_RATING

Side = Literal["A", "B"]
Phase = Literal["qualifying", "final", "finished"]
MatchPhase = Literal["qualifying", "final", "bracket"]

PHASE_IDLE = "idle"
SCHEMA_VERSION = 2


class RatingRange(BaseModel):
    """Lowest and highest rating currently held by any participant."""

    min: int = DEFAULT_RATING
    max: int = DEFAULT_RATING


class ScoreTier(BaseModel):
    """Display score (0-100) and tier for one participant."""

    score: int
    tier_id: str
    label: str
    icon: str
    rating: int


class RatingChange(BaseModel):
    """Rating points gained by the winner and by the loser (usually negative)."""

    model_config = ConfigDict(frozen=True)

    winner: int
    loser: int


class MatchRecord(BaseModel):
    """A resolved duel. Appended to the history and never changed."""

    model_config = ConfigDict(frozen=True)

    item_a_id: str
    item_b_id: str
    winner_id: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    rating_delta: RatingChange
    phase: MatchPhase = "qualifying"

    @property
    def loser_id(self) -> str:
        return self.item_b_id if self.winner_id == self.item_a_id else self.item_a_id

    @property
    def participants(self) -> tuple[str, str]:
        return self.item_a_id, self.item_b_id


class CurrentMatch(BaseModel):
    """The pairing waiting for the user's decision."""

    model_config = ConfigDict(frozen=True)

    a_id: str
    b_id: str

    def side_ids(self, side: Side) -> tuple[str, str]:
        """Return (winner_id, loser_id) for the chosen side."""
        if side == "A":
            return self.a_id, self.b_id
        return self.b_id, self.a_id


class Stats(BaseModel):
    """Cached per-participant record; always rebuildable from the history."""

    wins: int = 0
    losses: int = 0
    rating: int = DEFAULT_RATING
    rank: int | None = None


class RatingPoint(BaseModel):
    """One point on a participant's rating timeline."""

    rating: int
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    match_index: int | None = None


class QualifyingRound(BaseModel):
    """Sub-state of the round-robin qualifying phase."""

    current_match: CurrentMatch | None = None
    total_matches: int = 0
    completed_matches: int = 0
    rating_history: dict[str, list[RatingPoint]] = Field(default_factory=dict)


class LegacyFinalRound(BaseModel):
    """Sub-state of the deprecated all-play-all final round.

    Only produced by migrating old persisted state.
    """

    item_ids: list[str] = Field(default_factory=list)
    current_match: CurrentMatch | None = None
    pending_matches: list[CurrentMatch] = Field(default_factory=list)
    total_matches: int = 0
    completed_matches: int = 0

    @property
    def has_pending(self) -> bool:
        return self.current_match is not None or bool(self.pending_matches)


class ContestState(BaseModel):
    """Authoritative state of one contest."""

    phase: Phase = "qualifying"
    eligible_item_ids: list[str] = Field(default_factory=list)
    ratings: dict[str, int] = Field(default_factory=dict)
    match_history: list[MatchRecord] = Field(default_factory=list)
    stats: dict[str, Stats] = Field(default_factory=dict)
    frozen: bool = False
    rating_range: RatingRange = Field(default_factory=RatingRange)
    scores_and_tiers: dict[str, ScoreTier] = Field(default_factory=dict)
    champion_id: str | None = None
    qualifying: QualifyingRound = Field(default_factory=QualifyingRound)
    final: LegacyFinalRound | None = None

    @property
    def current_match(self) -> CurrentMatch | None:
        if self.phase == "qualifying":
            return self.qualifying.current_match
        if self.phase == "final" and self.final is not None:
            return self.final.current_match
        return None

    @property
    def is_finished(self) -> bool:
        return self.phase == "finished"

    def history_for(self, phase: MatchPhase) -> list[MatchRecord]:
        return [m for m in self.match_history if m.phase == phase]
