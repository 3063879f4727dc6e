"""Shared fixtures for Photo Tournament tests."""

from pathlib import Path

import pytest

from photo_tournament.core.config import ContestConfig, RatingConfig
from photo_tournament.models import Photo
from photo_tournament.services.contest.service import ContestService
from photo_tournament.services.storage import InMemoryItemStore, InMemoryStateStore


@pytest.fixture
def photos() -> list[Photo]:
    """Four eligible photos and one that is not."""
    eligible = [Photo(id=item_id, filename=f"{item_id}.jpg", rating=5) for item_id in "abcd"]
    return [*eligible, Photo(id="e", filename="e.jpg", rating=3)]


@pytest.fixture
def rating_config() -> RatingConfig:
    return RatingConfig()


@pytest.fixture
def config(tmp_path: Path) -> ContestConfig:
    return ContestConfig(project="Test Project", output_dir=str(tmp_path / "projects"))


@pytest.fixture
def item_store(photos: list[Photo]) -> InMemoryItemStore:
    return InMemoryItemStore(photos)


@pytest.fixture
def state_store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture
def service(
    config: ContestConfig, item_store: InMemoryItemStore, state_store: InMemoryStateStore
) -> ContestService:
    return ContestService(config, item_store, state_store)
