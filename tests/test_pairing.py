"""Tests for round-robin pairing."""

from photo_tournament.models import MatchRecord, RatingChange
from photo_tournament.services.match.pairing import (
    fought_pairs,
    next_match,
    pair_key,
    remaining_pairings,
    unplayed_pairs,
)


def make_record(a: str, b: str, winner: str | None = None, phase: str = "qualifying") -> MatchRecord:
    return MatchRecord(
        item_a_id=a,
        item_b_id=b,
        winner_id=winner or a,
        rating_delta=RatingChange(winner=16, loser=-16),
        phase=phase,
    )


class TestPairKey:
    """Tests for pair keys."""

    def test_order_independent(self):
        """Test pair keys ignore argument order."""
        assert pair_key("b", "a") == pair_key("a", "b") == "a|b"

    def test_fought_pairs_filters_phase(self):
        """Test fought pairs only come from the requested phase."""
        history = [make_record("a", "b"), make_record("c", "d", phase="final")]
        assert fought_pairs(history) == {"a|b"}
        assert fought_pairs(history, "final") == {"c|d"}


class TestUnplayedPairs:
    """Tests for the remaining-pair enumeration."""

    def test_all_pairs_initially(self):
        """Test every pair remains before any match."""
        pairs = list(unplayed_pairs(["c", "a", "b"], []))
        assert pairs == [("a", "b"), ("a", "c"), ("b", "c")]

    def test_played_pairs_excluded_either_orientation(self):
        """Test a played pair is excluded whichever side each item took."""
        pairs = list(unplayed_pairs(["a", "b", "c"], [make_record("b", "a")]))
        assert ("a", "b") not in pairs
        assert remaining_pairings(["a", "b", "c"], [make_record("b", "a")]) == 2

    def test_duplicates_ignored(self):
        """Test duplicate IDs do not create extra pairs."""
        assert list(unplayed_pairs(["a", "a", "b"], [])) == [("a", "b")]


class TestNextMatch:
    """Tests for next-match selection."""

    def test_smallest_gap_wins(self):
        """Test the closest ratings are paired first."""
        ratings = {"a": 1500, "b": 1600, "c": 1590}
        match = next_match(["a", "b", "c"], ratings, [])
        assert (match.a_id, match.b_id) == ("b", "c")

    def test_ties_broken_by_pair_key(self):
        """Test equal gaps fall back to the pair key."""
        ratings = {"a": 1500, "b": 1500, "c": 1500}
        match = next_match(["c", "b", "a"], ratings, [])
        assert (match.a_id, match.b_id) == ("a", "b")

    def test_deterministic(self):
        """Test input order does not change the pick."""
        ratings = {"x": 1516, "y": 1484, "z": 1500, "w": 1500}
        first = next_match(list(ratings), ratings, [])
        second = next_match(list(reversed(list(ratings))), dict(ratings), [])
        assert first == second

    def test_missing_ratings_use_default(self):
        """Test unrated items count as the default rating."""
        match = next_match(["a", "b", "c"], {"a": 1700}, [])
        assert (match.a_id, match.b_id) == ("b", "c")

    def test_none_when_exhausted(self):
        """Test no match is returned once every pair has played."""
        history = [make_record("a", "b")]
        assert next_match(["a", "b"], {}, history) is None

    def test_fewer_than_two_items(self):
        """Test one or zero items give no match."""
        assert next_match(["a"], {}, []) is None
        assert next_match([], {}, []) is None

    def test_full_schedule_never_repeats(self):
        """Test n items yield exactly n(n-1)/2 distinct pairs, then None."""
        ids = [f"p{i}" for i in range(6)]
        ratings = {item_id: 1500 + i * 7 for i, item_id in enumerate(ids)}
        history = []
        seen = set()
        while (match := next_match(ids, ratings, history)) is not None:
            key = pair_key(match.a_id, match.b_id)
            assert key not in seen
            seen.add(key)
            history.append(make_record(match.a_id, match.b_id))
        assert len(seen) == 15
