"""Core configuration and errors for Photo Tournament."""

from photo_tournament.core.config import (
    DEFAULT_K_FACTOR,
    DEFAULT_RATING,
    ContestConfig,
    RatingConfig,
    load_config,
    save_config,
    slugify,
)
from photo_tournament.core.errors import (
    ConfigurationError,
    ContestError,
    InsufficientParticipantsError,
    InvalidSideError,
    PersistenceError,
)

__all__ = [
    "DEFAULT_K_FACTOR",
    "DEFAULT_RATING",
    "ContestConfig",
    "RatingConfig",
    "load_config",
    "save_config",
    "slugify",
    "ConfigurationError",
    "ContestError",
    "InsufficientParticipantsError",
    "InvalidSideError",
    "PersistenceError",
]
