"""Photo Tournament.

Rank a photo collection through pairwise duels scored with Elo, then map the
ratings onto a 0-100 score and named tiers.
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
