from photo_tournament.models.contest import (
    PHASE_IDLE,
    SCHEMA_VERSION,
    ContestState,
    CurrentMatch,
    LegacyFinalRound,
    MatchRecord,
    Phase,
    QualifyingRound,
    RatingChange,
    RatingPoint,
    RatingRange,
    ScoreTier,
    Side,
    Stats,
)
from photo_tournament.models.photo import Photo
from photo_tournament.models.snapshot import ContestSnapshot

__all__ = [
    "PHASE_IDLE",
    "SCHEMA_VERSION",
    "ContestSnapshot",
    "ContestState",
    "CurrentMatch",
    "LegacyFinalRound",
    "MatchRecord",
    "Phase",
    "Photo",
    "QualifyingRound",
    "RatingChange",
    "RatingPoint",
    "RatingRange",
    "ScoreTier",
    "Side",
    "Stats",
]
