"""Base class for the SQLite-backed photo and contest snapshot stores."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TYPE_CHECKING, TypeVar

from sqlmodel import Session

if TYPE_CHECKING:
    from sqlalchemy import Engine

T = TypeVar("T")


class AsyncRepository:
    """Async facade over the project database.

    The contest service awaits its stores, while SQLite access through
    SQLModel is blocking. Each call opens its own session on a worker thread
    so a photo lookup never shares a session with a snapshot save.
    """

    def __init__(self, engine: Engine) -> None:
        self._engine = engine

    async def _run_session(self, fn: Callable[[Session], T]) -> T:
        """Run ``fn`` in a fresh session off the event loop and return its result.

        ``fn`` commits its own writes; an exception leaves the session rolled back.
        """

        def _run() -> T:
            with Session(self._engine) as session:
                return fn(session)

        return await asyncio.to_thread(_run)
