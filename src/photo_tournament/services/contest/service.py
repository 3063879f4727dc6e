"""Contest service: the async engine API over the pure transitions."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import Any

import structlog

from photo_tournament.core.config import ContestConfig
from photo_tournament.core.errors import PersistenceError
from photo_tournament.models import PHASE_IDLE, ContestState, CurrentMatch, Side
from photo_tournament.ranking.standings import Standing, build_standings, validate_state
from photo_tournament.services.confirm import CANCEL_PROMPT, RESTART_PROMPT, Confirmation
from photo_tournament.services.contest import transitions
from photo_tournament.services.storage.base import ItemStore, StateStore
from photo_tournament.services.storage.codec import deserialize, serialize

logger = structlog.get_logger()


class ContestService:
    """Owns the state of one contest and persists every change.

    A new state only becomes current once the state store has accepted it. If
    the store fails, a PersistenceError is raised and the previous state stays
    in place, so the same action can simply be retried.

    Overlapping ``resolve`` calls are ignored; ``cancel`` and ``restart`` wait
    for an in-flight ``resolve`` to finish.
    """

    def __init__(
        self,
        config: ContestConfig,
        items: ItemStore,
        states: StateStore,
        is_eligible: Callable[[Any], bool] | None = None,
    ) -> None:
        """Initialize contest service.

        Args:
            config: Project configuration.
            items: Photo collection.
            states: Store for the serialized contest state.
            is_eligible: Eligibility predicate, defaults to the configured star rating.
        """
        self.config = config
        self.items = items
        self.states = states
        self.is_eligible = is_eligible or transitions.is_eligible_for(config.rating)
        self._state: ContestState | None = None
        self._lock = asyncio.Lock()

    @property
    def namespace(self) -> str:
        return self.config.state_namespace

    @property
    def state(self) -> ContestState | None:
        """Current state. Treat as read-only."""
        return self._state

    @property
    def phase(self) -> str:
        return self._state.phase if self._state is not None else PHASE_IDLE

    # ==================== Lifecycle ====================

    async def load(self) -> ContestState | None:
        """Load persisted state and reconcile it with the current photos.

        Nothing is written back; the next change persists the reconciled state.
        """
        async with self._lock:
            blob = await self.states.load(self.namespace)
            items = await self.items.list_items()
            self._state = deserialize(blob, items, self.config.rating)
            logger.info("contest_loaded", namespace=self.namespace, phase=self.phase)
            return self._state

    async def start(self) -> ContestState:
        """Start a new contest over the eligible photos, replacing any previous one.

        Raises:
            InsufficientParticipantsError: Too few eligible photos; nothing is stored.
            PersistenceError: The state store failed.
        """
        async with self._lock:
            items = await self.items.list_eligible(self.is_eligible)
            state = transitions.start_contest(items, self.config.rating, is_eligible=self.is_eligible)
            state = transitions.ensure_match(state, self.config.rating)
            await self._commit(state)
            return state

    async def ensure_match(self) -> CurrentMatch | None:
        """Line up a match if none is pending; persists when that changes the state."""
        async with self._lock:
            if self._state is None:
                return None
            state = transitions.ensure_match(self._state, self.config.rating)
            if state is not self._state:
                await self._commit(state)
            return state.current_match

    async def resolve(self, side: Side) -> ContestState | None:
        """Pick the winner of the current match.

        Returns the current state unchanged when another resolve is in flight
        or no contest is running.

        Raises:
            InvalidSideError: ``side`` is not "A" or "B".
            PersistenceError: The state store failed; the match stays pending.
        """
        if self._lock.locked():
            logger.warning("resolve_ignored", side=side, reason="resolve_in_flight")
            return self._state

        async with self._lock:
            if self._state is None:
                logger.info("no_active_match", phase=PHASE_IDLE)
                return None
            state = transitions.resolve(self._state, side, self.config.rating)
            if state is not self._state:
                await self._commit(state)
            return self._state

    async def cancel(self) -> bool:
        """Discard a running contest without finalizing it.

        A finished contest is kept; use ``restart`` to clear it.

        Returns:
            True if a contest was discarded.
        """
        async with self._lock:
            if self._state is None:
                return False
            if self._state.is_finished:
                logger.info("cancel_ignored", reason="contest_finished")
                return False
            await self._clear()
            logger.info("contest_cancelled", namespace=self.namespace)
            return True

    async def restart(self) -> None:
        """Discard the contest whatever its phase, back to idle."""
        async with self._lock:
            await self._clear()
            logger.info("contest_restarted", namespace=self.namespace)

    async def request_cancel(self, confirmation: Confirmation) -> bool:
        """Cancel after the user confirms. Returns True if the contest was discarded."""
        if self._state is None or self._state.is_finished:
            return False
        if not await confirmation.confirm(CANCEL_PROMPT):
            logger.info("cancel_declined")
            return False
        return await self.cancel()

    async def request_restart(self, confirmation: Confirmation) -> bool:
        """Restart after the user confirms."""
        if not await confirmation.confirm(RESTART_PROMPT):
            logger.info("restart_declined")
            return False
        await self.restart()
        return True

    # ==================== Queries ====================

    def current_match(self) -> CurrentMatch | None:
        return self._state.current_match if self._state is not None else None

    def ranking(self) -> list[Standing]:
        """Leaderboard rows in rank order; empty when idle."""
        if self._state is None:
            return []
        return build_standings(self._state)

    def champion(self) -> str | None:
        if self._state is None or not self._state.is_finished:
            return None
        return self._state.champion_id

    def progress(self) -> tuple[int, int]:
        """(completed, total) matches of the phase being played."""
        if self._state is None:
            return 0, 0
        if self._state.phase == "final" and self._state.final is not None:
            return self._state.final.completed_matches, self._state.final.total_matches
        return self._state.qualifying.completed_matches, self._state.qualifying.total_matches

    def serialize(self) -> dict[str, Any] | None:
        return serialize(self._state) if self._state is not None else None

    def validate(self) -> list[str]:
        """Invariant violations of the current state."""
        return validate_state(self._state) if self._state is not None else []

    # ==================== Persistence ====================

    async def _commit(self, state: ContestState) -> None:
        try:
            await self.states.save(self.namespace, serialize(state))
        except Exception as e:
            logger.error("persist_failed", namespace=self.namespace, operation="save", error=str(e))
            raise PersistenceError(self.namespace, "save") from e
        self._state = state

    async def _clear(self) -> None:
        try:
            await self.states.clear(self.namespace)
        except Exception as e:
            logger.error("persist_failed", namespace=self.namespace, operation="clear", error=str(e))
            raise PersistenceError(self.namespace, "clear") from e
        self._state = None
