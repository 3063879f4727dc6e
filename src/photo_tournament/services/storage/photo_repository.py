"""Database persistence for project photos."""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog
from sqlmodel import Session, col, select

from photo_tournament.models import Photo

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine

logger = structlog.get_logger()


class PhotoRepository(AsyncRepository):
    """Persist and query photos. Deletion is soft: rows keep a ``deleted_at`` stamp."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def add(self, filename: str, rating: int = 0, photo_id: str | None = None) -> Photo:
        """Register a photo and return the stored row."""

        def _add(session: Session) -> Photo:
            photo = Photo(filename=filename, rating=rating)
            if photo_id is not None:
                photo.id = photo_id
            session.add(photo)
            session.commit()
            session.refresh(photo)
            return photo

        photo = await self._run_session(_add)
        logger.debug("photo_added", photo_id=photo.id, filename=filename)
        return photo

    async def get(self, photo_id: str, include_deleted: bool = False) -> Photo | None:
        """Get a photo by ID."""

        def _get(session: Session) -> Photo | None:
            photo = session.get(Photo, photo_id)
            if photo is None or (photo.is_deleted and not include_deleted):
                return None
            return photo

        return await self._run_session(_get)

    async def list_items(self) -> list[Photo]:
        """Get all photos that are not deleted, oldest first."""

        def _list(session: Session) -> list[Photo]:
            statement = (
                select(Photo)
                .where(col(Photo.deleted_at).is_(None))
                .order_by(col(Photo.created_at), col(Photo.id))
            )
            return list(session.exec(statement).all())

        return await self._run_session(_list)

    async def list_eligible(self, predicate: Callable[[Photo], bool]) -> list[Photo]:
        """Get the non-deleted photos matching ``predicate``."""
        return [photo for photo in await self.list_items() if predicate(photo)]

    async def set_rating(self, photo_id: str, rating: int) -> Photo:
        """Change a photo's star rating.

        Raises:
            KeyError: If the photo does not exist or was deleted.
            ValueError: If ``rating`` is outside 0-5.
        """
        if not 0 <= rating <= 5:
            msg = f"Star rating must be between 0 and 5, got {rating}"
            raise ValueError(msg)

        def _update(session: Session) -> Photo:
            photo = session.get(Photo, photo_id)
            if photo is None or photo.is_deleted:
                raise KeyError(photo_id)
            photo.rating = rating
            session.add(photo)
            session.commit()
            session.refresh(photo)
            return photo

        return await self._run_session(_update)

    async def soft_delete(self, photo_id: str) -> bool:
        """Mark a photo as deleted. Returns False if it was unknown or already deleted."""
        return await self._set_deleted(photo_id, datetime.now(UTC))

    async def restore(self, photo_id: str) -> bool:
        """Undo a soft delete. Returns False if the photo was not deleted."""
        return await self._set_deleted(photo_id, None)

    async def _set_deleted(self, photo_id: str, deleted_at: datetime | None) -> bool:
        def _update(session: Session) -> bool:
            photo = session.get(Photo, photo_id)
            if photo is None or photo.is_deleted == (deleted_at is not None):
                return False
            photo.deleted_at = deleted_at
            session.add(photo)
            session.commit()
            return True

        changed = await self._run_session(_update)
        if changed:
            logger.info("photo_deleted" if deleted_at else "photo_restored", photo_id=photo_id)
        return changed
