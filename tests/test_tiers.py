"""Tests for score normalization and tiers."""

import pytest

from photo_tournament.models import RatingRange, Stats
from photo_tournament.ranking.tiers import (
    NEUTRAL_SCORE,
    TIERS,
    hybrid_score,
    normalize,
    rating_range,
    scores_and_tiers,
    tier_for,
    win_loss_score,
)


class TestNormalize:
    """Tests for rating to 0-100 normalization."""

    def test_midpoint(self):
        """Test the middle of the range scores 50."""
        assert normalize(1600, 1500, 1700) == 50

    def test_bounds(self):
        """Test the range ends score 0 and 100."""
        assert normalize(1500, 1500, 1700) == 0
        assert normalize(1700, 1500, 1700) == 100

    def test_degenerate_range_is_neutral(self):
        """Test equal min and max always give the neutral score."""
        assert normalize(1500, 1500, 1500) == NEUTRAL_SCORE
        assert normalize(1900, 1500, 1500) == NEUTRAL_SCORE

    def test_out_of_range_is_clamped(self):
        """Test ratings outside the range are clamped."""
        assert normalize(1400, 1500, 1700) == 0
        assert normalize(1800, 1500, 1700) == 100

    def test_half_rounds_up(self):
        """Test 0.5 rounds toward the higher score."""
        # (1501 - 1500) / 200 * 100 = 0.5
        assert normalize(1501, 1500, 1700) == 1

    def test_monotonic(self):
        """Test scores never drop as ratings rise."""
        scores = [normalize(r, 1450, 1650) for r in range(1450, 1651)]
        assert scores == sorted(scores)
        assert all(0 <= s <= 100 for s in scores)


class TestTierFor:
    """Tests for tier lookup."""

    def test_destaque_band(self):
        """Test a score of 55 lands in the destaque band."""
        tier = tier_for(55)
        assert tier.id == "destaque"
        assert (tier.min, tier.max) == (50, 59)

    def test_extremes(self):
        """Test 0 and 100 map to the lowest and highest tiers."""
        assert tier_for(0).id == "rascunho"
        assert tier_for(100).id == "obra-prima"

    def test_out_of_range_clamped(self):
        """Test scores outside 0-100 map to the end tiers."""
        assert tier_for(-5).id == "rascunho"
        assert tier_for(140).id == "obra-prima"

    def test_every_integer_score_has_one_tier(self):
        """Test the bands cover 0-100 with no gaps or overlaps."""
        for score in range(0, 101):
            matching = [t for t in TIERS if t.contains(score)]
            assert len(matching) == 1, score
            assert tier_for(score) is matching[0]

    def test_bands_are_contiguous(self):
        """Test each band starts right after the previous one."""
        assert TIERS[0].min == 0
        assert TIERS[-1].max == 100
        for lower, upper in zip(TIERS, TIERS[1:], strict=False):
            assert upper.min == lower.max + 1

    def test_fractional_score_between_bands(self):
        """Test fractional scores are rounded before lookup."""
        assert tier_for(9.6).id == "captura"
        assert tier_for(9.4).id == "rascunho"


class TestHybridScore:
    """Tests for the legacy hybrid score."""

    def test_no_matches_uses_neutral_win_rate(self):
        """Test no matches give the neutral win rate."""
        assert win_loss_score(0, 0) == NEUTRAL_SCORE

    def test_win_rate(self):
        """Test the win rate as a percentage."""
        assert win_loss_score(3, 1) == 75

    def test_blend(self):
        """Test the default Elo and win/loss blend."""
        # 40 * 0.3 + 100 * 0.7 = 82
        assert hybrid_score(40, 2, 0) == 82

    def test_custom_weights(self):
        """Test custom blend weights."""
        assert hybrid_score(80, 0, 2, elo_weight=0.5, win_loss_weight=0.5) == 40


class TestScoresAndTiers:
    """Tests for batch score computation."""

    def test_all_equal_ratings_are_neutral(self):
        """Test equal ratings all get the neutral score."""
        result = scores_and_tiers({"a": 1500, "b": 1500})
        assert {s.score for s in result.values()} == {50}
        assert {s.tier_id for s in result.values()} == {"destaque"}

    def test_uses_given_range(self):
        """Test an explicit range overrides the computed one."""
        result = scores_and_tiers({"a": 1600}, range_=RatingRange(min=1500, max=1700))
        assert result["a"].score == 50
        assert result["a"].rating == 1600

    def test_spread(self):
        """Test scores spread across the rating range."""
        result = scores_and_tiers({"a": 1484, "b": 1516, "c": 1500})
        assert result["a"].score == 0
        assert result["b"].score == 100
        assert result["c"].score == 50
        assert result["b"].tier_id == "obra-prima"

    def test_hybrid_needs_stats(self):
        """Test items without stats keep their Elo score."""
        ratings = {"a": 1484, "b": 1516}
        stats = {"b": Stats(wins=1, losses=0, rating=1516)}
        result = scores_and_tiers(ratings, stats, use_hybrid=True)
        assert result["a"].score == 0
        # 100 * 0.3 + 100 * 0.7
        assert result["b"].score == 100

    @pytest.mark.parametrize("ratings", [{}, {"solo": 1500}])
    def test_small_inputs(self, ratings):
        """Test empty and single-item inputs."""
        result = scores_and_tiers(ratings)
        assert set(result) == set(ratings)


class TestRatingRange:
    """Tests for rating range computation."""

    def test_empty_uses_default(self):
        """Test no ratings give a range at the default."""
        bounds = rating_range({})
        assert bounds.min == bounds.max == 1500

    def test_min_max(self):
        """Test the range spans the lowest and highest ratings."""
        bounds = rating_range({"a": 1480, "b": 1530, "c": 1500})
        assert (bounds.min, bounds.max) == (1480, 1530)
