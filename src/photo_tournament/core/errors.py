"""Custom exceptions for configuration and contest errors."""

from __future__ import annotations


class ConfigurationError(Exception):
    """Base exception for configuration errors with optional suggestions."""

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"[Configuration Error] {self.message}"
        if self.suggestion:
            msg += f"\n[Suggestion] {self.suggestion}"
        return msg


class ContestError(Exception):
    """Base exception for contest-scoped failures.

    None of these are fatal to the process; each one concerns a single contest.
    """

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        msg = f"[Contest Error] {self.message}"
        if self.suggestion:
            msg += f"\n[Suggestion] {self.suggestion}"
        return msg


class InsufficientParticipantsError(ContestError):
    """Error when too few items are eligible to start a contest."""

    def __init__(self, found: int, required: int = 2) -> None:
        self.found = found
        self.required = required
        super().__init__(
            f"At least {required} eligible photos are needed, found {found}",
            "Rate more photos with the eligible star rating before starting.",
        )


class PersistenceError(ContestError):
    """Error when the persistent store rejects a save or clear.

    The in-memory contest state is left untouched when this is raised.
    """

    def __init__(self, namespace: str, operation: str) -> None:
        self.namespace = namespace
        self.operation = operation
        super().__init__(
            f"Could not {operation} contest state for '{namespace}'",
            "Check that the project directory is writable, then retry the last action.",
        )


class InvalidSideError(ContestError):
    """Error when a match is resolved with an unknown side."""

    def __init__(self, side: str) -> None:
        self.side = side
        super().__init__(f"Unknown side '{side}'", "Pick 'A' or 'B'.")
