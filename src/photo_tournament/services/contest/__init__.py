from . import legacy
from .transitions import (
    ensure_match,
    finalize,
    is_eligible_for,
    refresh_scores,
    resolve,
    start_contest,
)

__all__ = [
    "ensure_match",
    "finalize",
    "is_eligible_for",
    "legacy",
    "refresh_scores",
    "resolve",
    "start_contest",
]
