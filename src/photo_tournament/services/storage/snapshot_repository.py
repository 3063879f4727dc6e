"""Database persistence for serialized contest state."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from sqlmodel import Session

from photo_tournament.models import ContestSnapshot

from .repository import AsyncRepository

if TYPE_CHECKING:
    from sqlalchemy import Engine


class SnapshotRepository(AsyncRepository):
    """Key-value store of contest state blobs, one row per namespace."""

    def __init__(self, engine: Engine) -> None:
        super().__init__(engine)

    async def load(self, namespace: str) -> dict[str, Any] | None:
        """Return the stored blob, or None."""

        def _load(session: Session) -> dict[str, Any] | None:
            snapshot = session.get(ContestSnapshot, namespace)
            return dict(snapshot.blob) if snapshot else None

        return await self._run_session(_load)

    async def save(self, namespace: str, blob: dict[str, Any]) -> None:
        """Insert or replace the blob for ``namespace``."""

        def _save(session: Session) -> None:
            snapshot = session.get(ContestSnapshot, namespace)
            if snapshot:
                snapshot.blob = blob
                snapshot.updated_at = datetime.now(UTC)
            else:
                snapshot = ContestSnapshot(namespace=namespace, blob=blob)
            session.add(snapshot)
            session.commit()

        await self._run_session(_save)

    async def clear(self, namespace: str) -> None:
        """Delete the blob for ``namespace`` if present."""

        def _clear(session: Session) -> None:
            snapshot = session.get(ContestSnapshot, namespace)
            if snapshot:
                session.delete(snapshot)
                session.commit()

        await self._run_session(_clear)
