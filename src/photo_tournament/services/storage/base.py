"""Storage protocols consumed by the contest service."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

from photo_tournament.models import Photo


@runtime_checkable
class ItemStore(Protocol):
    """Read access to the photos of a project.

    Soft-deleted photos are never returned.
    """

    async def list_items(self) -> list[Photo]:
        """Return every photo that has not been deleted."""
        ...

    async def list_eligible(self, predicate: Callable[[Photo], bool]) -> list[Photo]:
        """Return the photos for which ``predicate`` holds.

        Args:
            predicate: Eligibility test, e.g. ``lambda p: p.rating == 5``.
        """
        ...


@runtime_checkable
class StateStore(Protocol):
    """Key-value store for serialized contest state."""

    async def load(self, namespace: str) -> dict[str, Any] | None:
        """Return the blob stored under ``namespace``, or None."""
        ...

    async def save(self, namespace: str, blob: dict[str, Any]) -> None:
        """Store ``blob`` under ``namespace``, replacing any previous one."""
        ...

    async def clear(self, namespace: str) -> None:
        """Remove whatever is stored under ``namespace``."""
        ...
