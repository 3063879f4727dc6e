"""Confirmation prompts for destructive contest actions."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.prompt import Confirm


@dataclass(frozen=True)
class ConfirmPrompt:
    """What to ask the user before acting."""

    title: str
    message: str
    confirm_text: str = "Confirm"


CANCEL_PROMPT = ConfirmPrompt(
    title="Cancel contest",
    message="Cancel the contest? All ratings and match history will be lost.",
    confirm_text="Cancel contest",
)
RESTART_PROMPT = ConfirmPrompt(
    title="Restart contest",
    message="Restart the contest? The current progress will be discarded.",
    confirm_text="Restart",
)


@runtime_checkable
class Confirmation(Protocol):
    """Asks the user to confirm an action."""

    async def confirm(self, prompt: ConfirmPrompt) -> bool: ...


class ConsoleConfirmation:
    """Ask on the terminal with a rich prompt."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    async def confirm(self, prompt: ConfirmPrompt) -> bool:
        def _ask() -> bool:
            self.console.print(f"[bold]{prompt.title}[/bold]")
            return Confirm.ask(
                f"{prompt.message} [dim]({prompt.confirm_text})[/dim]",
                console=self.console,
                default=False,
            )

        return await asyncio.to_thread(_ask)


class StaticConfirmation:
    """Always give the same answer. Used for ``--yes`` and in tests."""

    def __init__(self, answer: bool = True) -> None:
        self.answer = answer
        self.prompts: list[ConfirmPrompt] = []

    async def confirm(self, prompt: ConfirmPrompt) -> bool:
        self.prompts.append(prompt)
        return self.answer
