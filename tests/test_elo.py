"""Tests for Elo rating calculations."""

import pytest

from photo_tournament.core.config import DEFAULT_RATING
from photo_tournament.ranking.elo import (
    calculate_expected_win_chance,
    compute_update,
    initial_ratings,
    round_half_up,
    update_ratings,
)


class TestCalculateExpectedWinChance:
    """Tests for expected win probability calculation."""

    def test_equal_ratings(self):
        """Test equal ratings produce 0.5 expected."""
        expected = calculate_expected_win_chance(1500, 1500)
        assert expected == pytest.approx(0.5, abs=0.001)

    def test_higher_rating_higher_expected(self):
        """Test higher rated player has higher expected score."""
        expected = calculate_expected_win_chance(1600, 1400)
        assert 0.5 < expected < 1.0

    def test_400_point_difference(self):
        """Test 400 point difference produces ~91% expected."""
        expected = calculate_expected_win_chance(1900, 1500)
        assert expected == pytest.approx(0.909, abs=0.01)

    def test_symmetry(self):
        """Test both sides' expectations sum to one."""
        a = calculate_expected_win_chance(1432, 1611)
        b = calculate_expected_win_chance(1611, 1432)
        assert a + b == pytest.approx(1.0)


class TestRoundHalfUp:
    """Tests for rounding of rating values."""

    def test_halves_round_up(self):
        """Test positive halves round up."""
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4

    def test_negative_halves_round_toward_positive(self):
        """Test negative halves round toward positive infinity."""
        assert round_half_up(-2.5) == -2
        assert round_half_up(-2.6) == -3


class TestComputeUpdate:
    """Tests for a single Elo update."""

    def test_equal_ratings_k32(self):
        """Test two 1500 items exchange exactly 16 points."""
        update = compute_update(1500, 1500, 32)

        assert update.winner == 1516
        assert update.loser == 1484
        assert update.delta.winner == 16
        assert update.delta.loser == -16

    def test_upset_win_larger_change(self):
        """Test underdog wins gain more than half of K."""
        update = compute_update(1400, 1600, 32)
        assert update.delta.winner > 16

    def test_expected_win_smaller_change(self):
        """Test favourite wins gain less than half of K."""
        update = compute_update(1600, 1400, 32)
        assert 0 <= update.delta.winner < 16

    @pytest.mark.parametrize(
        ("winner", "loser", "k"),
        [(1500, 1500, 32), (1517, 1483, 32), (1200, 1900, 24), (1733, 1401, 16), (1500, 1499, 10)],
    )
    def test_near_zero_sum(self, winner, loser, k):
        """Test gains and losses cancel out up to rounding."""
        update = compute_update(winner, loser, k)
        assert abs(update.delta.winner + update.delta.loser) <= 1
        assert update.delta.winner >= 0
        assert update.delta.loser <= 0

    def test_results_are_integers(self):
        """Test new ratings are always integers."""
        update = compute_update(1511, 1497, 32)
        assert isinstance(update.winner, int)
        assert isinstance(update.loser, int)


class TestUpdateRatings:
    """Tests for updating a ratings map."""

    def test_input_not_mutated(self):
        """Test the caller's mapping is left alone."""
        ratings = {"a": 1500, "b": 1500}
        new_ratings, delta = update_ratings("a", "b", ratings, 32)

        assert ratings == {"a": 1500, "b": 1500}
        assert new_ratings == {"a": 1516, "b": 1484}
        assert delta.winner == 16

    def test_other_entries_untouched(self):
        """Test ratings of bystanders do not change."""
        ratings = {"a": 1500, "b": 1500, "c": 1620}
        new_ratings, _ = update_ratings("b", "a", ratings)
        assert new_ratings["c"] == 1620

    def test_missing_entries_use_default(self):
        """Test unknown IDs start from the default rating."""
        new_ratings, _ = update_ratings("x", "y", {})
        assert new_ratings == {"x": DEFAULT_RATING + 16, "y": DEFAULT_RATING - 16}


class TestInitialRatings:
    """Tests for rating initialization."""

    def test_every_item_gets_initial_rating(self):
        """Test each ID starts at the given rating."""
        assert initial_ratings(["a", "b"], 1200) == {"a": 1200, "b": 1200}

    def test_default_rating(self):
        """Test the default starting rating is 1500."""
        assert initial_ratings(["a"]) == {"a": DEFAULT_RATING}
