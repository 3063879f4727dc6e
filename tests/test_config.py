"""Tests for configuration loading and validation."""

from pathlib import Path

import pydantic
import pytest
import yaml

from photo_tournament.core.config import (
    DEFAULT_RATING,
    ContestConfig,
    RatingConfig,
    load_config,
    save_config,
    slugify,
)
from photo_tournament.core.errors import ConfigurationError


class TestSlugify:
    """Tests for project slugs."""

    def test_basic(self):
        """Test punctuation is dropped and words are hyphenated."""
        assert slugify("Summer Trip 2024!") == "summer-trip-2024"

    def test_empty_falls_back(self):
        """Test a name with no usable characters becomes default."""
        assert slugify("???") == "default"

    def test_max_length(self):
        """Test slugs are truncated."""
        assert slugify("a" * 80, max_length=10) == "a" * 10


class TestRatingConfig:
    """Tests for RatingConfig."""

    def test_defaults(self):
        """Test the default rating settings."""
        config = RatingConfig()
        assert config.initial_rating == DEFAULT_RATING == 1500
        assert config.k_factor == 32
        assert config.eligible_rating == 5
        assert config.min_participants == 2

    def test_k_factor_must_be_positive(self):
        """Test a zero K-factor is rejected."""
        with pytest.raises(pydantic.ValidationError):
            RatingConfig(k_factor=0)

    def test_weights_bounded(self):
        """Test score weights must lie in 0-1."""
        with pytest.raises(pydantic.ValidationError):
            RatingConfig(elo_weight=1.5)

    def test_eligible_rating_bounded(self):
        """Test the eligibility gate must be a star rating."""
        with pytest.raises(pydantic.ValidationError):
            RatingConfig(eligible_rating=6)

    def test_min_participants(self):
        """Test a contest needs at least two participants."""
        with pytest.raises(pydantic.ValidationError):
            RatingConfig(min_participants=1)


class TestContestConfig:
    """Tests for ContestConfig."""

    def test_paths(self, tmp_path: Path):
        """Test project paths derive from the project slug."""
        config = ContestConfig(project="My Photos", output_dir=str(tmp_path))
        assert config.project_dir == tmp_path / "my-photos"
        assert config.get_database_url() == f"sqlite:///{tmp_path / 'my-photos' / 'photos.sqlite'}"

    def test_explicit_database_url(self):
        """Test an explicit database URL wins."""
        config = ContestConfig(database_url="sqlite://")
        assert config.get_database_url() == "sqlite://"

    def test_namespace_defaults_to_slug(self):
        """Test the state namespace defaults to the slug."""
        assert ContestConfig(project="My Photos").state_namespace == "my-photos"
        assert ContestConfig(project="My Photos", namespace="x").state_namespace == "x"

    def test_empty_project_rejected(self):
        """Test a blank project name is rejected."""
        with pytest.raises(pydantic.ValidationError):
            ContestConfig(project="  ")


class TestLoadConfig:
    """Tests for config file loading."""

    def test_load_valid(self, tmp_path: Path):
        """Test loading a valid config file."""
        path = tmp_path / "config.yaml"
        path.write_text(yaml.dump({"project": "Trip", "rating": {"k_factor": 24}}))

        config = load_config(path)
        assert config.project == "Trip"
        assert config.rating.k_factor == 24

    def test_empty_file_uses_defaults(self, tmp_path: Path):
        """Test an empty file gives the default config."""
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path).project == "default"

    def test_missing_file(self, tmp_path: Path):
        """Test a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "nope.yaml")

    def test_not_a_mapping(self, tmp_path: Path):
        """Test a YAML list is rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigurationError, match="Configuration Error"):
            load_config(path)

    def test_save_round_trip(self, tmp_path: Path):
        """Test a saved config loads back equal."""
        config = ContestConfig(project="Trip", output_dir=str(tmp_path))
        config.rating.k_factor = 20
        path = save_config(config, tmp_path / "nested" / "config.yaml")

        assert load_config(path) == config
