"""In-memory stores for tests and dry runs."""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable
from datetime import UTC, datetime
from typing import Any

from photo_tournament.models import Photo


class InMemoryItemStore:
    """Photo collection held in a dict."""

    def __init__(self, photos: Iterable[Photo] = ()) -> None:
        self._photos: dict[str, Photo] = {photo.id: photo for photo in photos}

    def add(self, photo_id: str, rating: int = 0, filename: str | None = None) -> Photo:
        photo = Photo(id=photo_id, filename=filename or f"{photo_id}.jpg", rating=rating)
        self._photos[photo_id] = photo
        return photo

    def soft_delete(self, photo_id: str) -> None:
        self._photos[photo_id].deleted_at = datetime.now(UTC)

    async def list_items(self) -> list[Photo]:
        return [photo for photo in self._photos.values() if not photo.is_deleted]

    async def list_eligible(self, predicate: Callable[[Photo], bool]) -> list[Photo]:
        return [photo for photo in await self.list_items() if predicate(photo)]


class InMemoryStateStore:
    """Blob store held in a dict.

    Attributes:
        fail_saves: When True, ``save`` and ``clear`` raise OSError.
        save_count: Number of successful saves.
    """

    def __init__(self) -> None:
        self._blobs: dict[str, dict[str, Any]] = {}
        self.fail_saves = False
        self.save_count = 0

    async def load(self, namespace: str) -> dict[str, Any] | None:
        blob = self._blobs.get(namespace)
        return copy.deepcopy(blob) if blob is not None else None

    async def save(self, namespace: str, blob: dict[str, Any]) -> None:
        if self.fail_saves:
            msg = "disk full"
            raise OSError(msg)
        self._blobs[namespace] = copy.deepcopy(blob)
        self.save_count += 1

    async def clear(self, namespace: str) -> None:
        if self.fail_saves:
            msg = "disk full"
            raise OSError(msg)
        self._blobs.pop(namespace, None)
