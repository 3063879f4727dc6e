"""Tests for leaderboard and history rendering."""

from photo_tournament.ranking.standings import build_standings
from photo_tournament.services.contest.transitions import ensure_match, resolve, start_contest
from photo_tournament.services.reporting import (
    generate_history,
    generate_leaderboard,
    leaderboard_rows,
    standings_to_records,
)


def played_state(photos, config, picks=2):
    state = ensure_match(start_contest(photos, config), config)
    for _ in range(picks):
        state = resolve(state, "A", config)
    return state


class TestLeaderboard:
    """Tests for leaderboard rendering."""

    def test_rows_use_labels(self, photos, rating_config):
        """Test rows show labels instead of IDs."""
        standings = build_standings(played_state(photos, rating_config))
        rows = leaderboard_rows(standings, {"a": "a.jpg"})

        assert rows[0][1] == "a.jpg"
        assert rows[0][0] == 1

    def test_markdown(self, photos, rating_config):
        """Test the Markdown report has title, champion and table."""
        standings = build_standings(played_state(photos, rating_config))
        report = generate_leaderboard(standings, "Leaderboard: Test", champion_id="a")

        assert report.startswith("# Leaderboard: Test")
        assert "Champion: **a**" in report
        assert "| Rank" in report

    def test_records(self, photos, rating_config):
        """Test export records carry the ranking fields."""
        standings = build_standings(played_state(photos, rating_config))
        records = standings_to_records(standings)
        assert records[0]["rank"] == 1
        assert {"item_id", "score", "tier_id", "wins", "losses"} <= set(records[0])


class TestHistory:
    """Tests for match history rendering."""

    def test_all_matches(self, photos, rating_config):
        """Test every match is listed with signed deltas."""
        table = generate_history(played_state(photos, rating_config), {"a": "a.jpg"})
        assert "a.jpg" in table
        assert "+16" in table
        assert "-16" in table

    def test_limit_keeps_latest(self, photos, rating_config):
        """Test a limit keeps the latest matches and their numbers."""
        state = played_state(photos, rating_config, picks=3)
        table = generate_history(state, limit=1)
        lines = table.splitlines()

        # header, separator, one row numbered 3
        assert len(lines) == 3
        assert lines[2].lstrip("| ").startswith("3")
