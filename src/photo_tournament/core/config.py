"""Configuration schemas and loading for Photo Tournament."""

from __future__ import annotations

import re
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

from photo_tournament.core.errors import ConfigurationError

DEFAULT_RATING = 1500
DEFAULT_K_FACTOR = 32
DEFAULT_SLUG_MAX_LENGTH = 50


def slugify(value: str, max_length: int = DEFAULT_SLUG_MAX_LENGTH) -> str:
    """Generate a filesystem-safe slug from free text."""
    slug = re.sub(r"[^a-z0-9]+", "-", value.lower()).strip("-")
    return slug[:max_length] or "default"


class RatingConfig(BaseModel):
    """Rating and eligibility configuration.

    Attributes:
        initial_rating: Elo rating every participant starts from.
        k_factor: Maximum rating points exchanged per match.
        elo_weight: Weight of the Elo score in the legacy hybrid score.
        win_loss_weight: Weight of the win/loss score in the legacy hybrid score.
        eligible_rating: Star rating (0-5) a photo needs to enter a contest.
        min_participants: Fewest eligible photos a contest can start with.
    """

    initial_rating: int = DEFAULT_RATING
    k_factor: float = DEFAULT_K_FACTOR
    elo_weight: float = Field(default=0.3, ge=0.0, le=1.0)
    win_loss_weight: float = Field(default=0.7, ge=0.0, le=1.0)
    eligible_rating: int = Field(default=5, ge=0, le=5)
    min_participants: int = Field(default=2, ge=2)

    @field_validator("k_factor")
    @classmethod
    def validate_k_factor(cls, v: float) -> float:
        if v <= 0:
            msg = "k_factor must be positive"
            raise ValueError(msg)
        return v


class ContestConfig(BaseModel):
    """Complete project configuration."""

    project: str = "default"
    output_dir: str = "./projects"
    database_url: str | None = None
    namespace: str | None = None
    rating: RatingConfig = Field(default_factory=RatingConfig)

    @field_validator("project")
    @classmethod
    def validate_project(cls, v: str) -> str:
        if not v or not v.strip():
            msg = "Project name cannot be empty"
            raise ValueError(msg)
        return v

    @property
    def project_slug(self) -> str:
        """Filesystem-safe project identifier."""
        return slugify(self.project)

    @property
    def project_dir(self) -> Path:
        return Path(self.output_dir) / self.project_slug

    @property
    def state_namespace(self) -> str:
        """Key the contest state is persisted under."""
        return self.namespace or self.project_slug

    def get_database_url(self) -> str:
        """Get database URL from config or the project directory default."""
        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.project_dir / 'photos.sqlite'}"


def load_config(path: str | Path) -> ContestConfig:
    """Load and validate configuration from YAML file.

    Args:
        path: Path to YAML configuration file.

    Returns:
        Validated ContestConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ConfigurationError: If the file is not a YAML mapping.
        pydantic.ValidationError: If a field is invalid.
    """
    config_path = Path(path)
    if not config_path.exists():
        msg = f"Configuration file not found: {config_path}"
        raise FileNotFoundError(msg)

    with config_path.open() as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected a mapping at the top of {config_path}",
            "Write the configuration as 'key: value' pairs.",
        )

    return ContestConfig.model_validate(data)


def save_config(config: ContestConfig, path: str | Path) -> Path:
    """Write configuration to a YAML file."""
    config_path = Path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w") as f:
        yaml.dump(config.model_dump(exclude_none=True), f, default_flow_style=False)
    return config_path
