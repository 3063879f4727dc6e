"""CLI for Photo Tournament."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Annotated

import structlog
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Prompt
from tabulate import tabulate

from photo_tournament import __version__
from photo_tournament.core.config import ContestConfig, load_config, save_config
from photo_tournament.core.errors import ConfigurationError, ContestError
from photo_tournament.models import Photo
from photo_tournament.services.confirm import ConsoleConfirmation, StaticConfirmation
from photo_tournament.services.contest.service import ContestService
from photo_tournament.services.reporting import generate_history, generate_leaderboard
from photo_tournament.services.storage import ProjectStore

DEFAULT_CONFIG = Path("photo-tournament.yaml")

# Configure structlog
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

app = typer.Typer(
    name="photo-tournament",
    help="Photo Tournament - rank your best photos through pairwise duels",
    add_completion=False,
)
console = Console()

ConfigOption = Annotated[
    Path, typer.Option("--config", "-c", help="Path to project config YAML file")
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-V", help="Verbose output")]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"photo-tournament v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
) -> None:
    """Photo Tournament CLI."""


def _configure_logging(verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
        force=True,
    )


@asynccontextmanager
async def _open_project(config_path: Path) -> AsyncIterator[tuple[ProjectStore, ContestService]]:
    """Open the project store and load the contest state."""
    config = load_config(config_path)
    store = ProjectStore(config)
    service = ContestService(config, store.photos, store.snapshots)
    try:
        await service.load()
        yield store, service
    finally:
        await store.close()


def _run(fn: Callable[[], Awaitable[None]], verbose: bool = False) -> None:
    """Run an async command body and turn known errors into exit code 1."""
    _configure_logging(verbose)
    try:
        asyncio.run(fn())
    except FileNotFoundError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except (ConfigurationError, ContestError) as e:
        console.print(f"[red]{e}")
        raise typer.Exit(1) from e
    except (KeyError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e


async def _labels(store: ProjectStore) -> dict[str, str]:
    return {photo.id: photo.filename for photo in await store.photos.list_items()}


def _print_match(service: ContestService, labels: dict[str, str]) -> None:
    match = service.current_match()
    if match is None:
        return
    completed, total = service.progress()
    console.print(f"[bold]Match {completed + 1}/{total}[/bold]")
    console.print(f"  [cyan]A[/cyan]: {labels.get(match.a_id, match.a_id)}")
    console.print(f"  [magenta]B[/magenta]: {labels.get(match.b_id, match.b_id)}")


def _print_champion(service: ContestService, labels: dict[str, str]) -> None:
    champion_id = service.champion()
    if champion_id:
        console.print(f"\n[bold green]Champion:[/bold green] {labels.get(champion_id, champion_id)}")


# ==================== Project & photos ====================


@app.command()
def init(
    project: Annotated[str, typer.Argument(help="Project name")],
    output_dir: Annotated[
        Path, typer.Option("--output-dir", "-o", help="Directory holding project folders")
    ] = Path("./projects"),
    config_path: ConfigOption = DEFAULT_CONFIG,
    k_factor: Annotated[float | None, typer.Option("--k-factor", help="Elo K-factor")] = None,
    eligible_rating: Annotated[
        int | None, typer.Option("--eligible-rating", help="Star rating required to compete")
    ] = None,
    force: Annotated[bool, typer.Option("--force", help="Overwrite an existing config")] = False,
) -> None:
    """Create a project and write its configuration file."""
    if config_path.exists() and not force:
        console.print(f"[red]Error:[/red] {config_path} already exists (use --force)")
        raise typer.Exit(1)

    config = ContestConfig(project=project, output_dir=str(output_dir))
    if k_factor is not None:
        config.rating.k_factor = k_factor
    if eligible_rating is not None:
        config.rating.eligible_rating = eligible_rating

    save_config(config, config_path)
    store = ProjectStore(config)
    store.close_sync()
    console.print(f"[green]Created project[/green] {config.project} at {store.base_dir}")
    console.print(f"  Config: {config_path}")


@app.command()
def add(
    files: Annotated[list[Path], typer.Argument(help="Photo files to register")],
    rating: Annotated[int, typer.Option("--rating", "-r", help="Initial star rating (0-5)")] = 0,
    config_path: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Register photo files in the project."""

    async def _add() -> None:
        if not 0 <= rating <= 5:
            msg = f"Star rating must be between 0 and 5, got {rating}"
            raise ValueError(msg)
        async with _open_project(config_path) as (store, _service):
            for path in files:
                if not path.exists():
                    console.print(f"[yellow]Skipping missing file:[/yellow] {path}")
                    continue
                photo = await store.photos.add(path.name, rating=rating)
                console.print(f"  {photo.id}  {photo.filename}  {'★' * photo.rating}")

    _run(_add, verbose)


@app.command()
def rate(
    photo_id: Annotated[str, typer.Argument(help="Photo ID")],
    stars: Annotated[int, typer.Argument(help="Star rating (0-5)")],
    config_path: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Set a photo's star rating."""

    async def _rate() -> None:
        async with _open_project(config_path) as (store, _service):
            photo = await store.photos.set_rating(photo_id, stars)
            console.print(f"[green]Rated[/green] {photo.filename}: {'★' * photo.rating or '-'}")

    _run(_rate, verbose)


@app.command()
def remove(
    photo_id: Annotated[str, typer.Argument(help="Photo ID")],
    config_path: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Remove a photo from the project (soft delete)."""

    async def _remove() -> None:
        async with _open_project(config_path) as (store, _service):
            if not await store.photos.soft_delete(photo_id):
                console.print(f"[yellow]No such photo:[/yellow] {photo_id}")
                return
            console.print(f"[green]Removed[/green] {photo_id}")

    _run(_remove, verbose)


def _photo_rows(photos: list[Photo], eligible_rating: int) -> list[tuple]:
    return [
        (p.id, p.filename, "★" * p.rating or "-", "yes" if p.rating == eligible_rating else "")
        for p in photos
    ]


@app.command(name="list")
def list_photos(
    config_path: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """List the photos of the project."""

    async def _list() -> None:
        async with _open_project(config_path) as (store, service):
            photos = await store.photos.list_items()
            if not photos:
                console.print("No photos yet. Register some with 'photo-tournament add'.")
                return
            rows = _photo_rows(photos, service.config.rating.eligible_rating)
            console.print(tabulate(rows, headers=("ID", "File", "Stars", "Eligible"), tablefmt="github"))

    _run(_list, verbose)


# ==================== Contest ====================


@app.command()
def start(
    config_path: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Start a contest over the eligible photos."""

    async def _start() -> None:
        async with _open_project(config_path) as (store, service):
            if service.phase == "qualifying":
                console.print("[yellow]A contest is already running; it will be replaced.[/yellow]")
            state = await service.start()
            console.print(
                f"[bold green]Contest started[/bold green] with {len(state.eligible_item_ids)} photos, "
                f"{state.qualifying.total_matches} matches to play."
            )
            _print_match(service, await _labels(store))

    _run(_start, verbose)


@app.command()
def duel(
    config_path: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Play matches interactively: pick A or B, or q to stop."""

    async def _duel() -> None:
        async with _open_project(config_path) as (store, service):
            if service.phase == "idle":
                console.print("No contest running. Start one with 'photo-tournament start'.")
                return
            labels = await _labels(store)
            while not service.champion():
                if await service.ensure_match() is None:
                    break
                _print_match(service, labels)
                choice = await asyncio.to_thread(
                    Prompt.ask, "Winner", choices=["a", "b", "q"], console=console
                )
                if choice == "q":
                    console.print("Paused. Progress is saved.")
                    return
                await service.resolve(choice.upper())
            _print_champion(service, labels)

    _run(_duel, verbose)


@app.command()
def pick(
    side: Annotated[str, typer.Argument(help="Winning side: A or B")],
    config_path: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Resolve the current match without prompting."""

    async def _pick() -> None:
        async with _open_project(config_path) as (store, service):
            if service.phase == "idle":
                console.print("No contest running. Start one with 'photo-tournament start'.")
                return
            labels = await _labels(store)
            if await service.ensure_match() is None:
                _print_champion(service, labels)
                return
            await service.resolve(side.upper())
            last = service.state.match_history[-1]
            console.print(
                f"[green]{labels.get(last.winner_id, last.winner_id)}[/green] wins "
                f"({last.rating_delta.winner:+d} / {last.rating_delta.loser:+d})"
            )
            _print_match(service, labels)
            _print_champion(service, labels)

    _run(_pick, verbose)


@app.command()
def status(
    config_path: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Show the contest phase and progress."""

    async def _status() -> None:
        async with _open_project(config_path) as (store, service):
            console.print(f"[bold]Phase:[/bold] {service.phase}")
            if service.phase == "idle":
                return
            completed, total = service.progress()
            console.print(f"[bold]Progress:[/bold] {completed}/{total} matches")
            labels = await _labels(store)
            _print_match(service, labels)
            _print_champion(service, labels)

    _run(_status, verbose)


@app.command()
def ranking(
    config_path: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Show the leaderboard."""

    async def _ranking() -> None:
        async with _open_project(config_path) as (store, service):
            standings = service.ranking()
            if not standings:
                console.print("No contest running.")
                return
            console.print(
                generate_leaderboard(
                    standings,
                    f"Leaderboard: {service.config.project}",
                    labels=await _labels(store),
                    champion_id=service.champion(),
                )
            )

    _run(_ranking, verbose)


@app.command()
def history(
    limit: Annotated[int | None, typer.Option("--limit", "-n", help="Show the last N matches")] = None,
    config_path: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Show the match history."""

    async def _history() -> None:
        async with _open_project(config_path) as (store, service):
            if service.state is None or not service.state.match_history:
                console.print("No matches played yet.")
                return
            console.print(generate_history(service.state, await _labels(store), limit=limit))

    _run(_history, verbose)


@app.command()
def export(
    config_path: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Export the leaderboard as Markdown, CSV and JSON."""

    async def _export() -> None:
        async with _open_project(config_path) as (store, service):
            standings = service.ranking()
            if not standings:
                console.print("No contest running.")
                return
            paths = await store.save_ranking_output(
                standings, labels=await _labels(store), champion_id=service.champion()
            )
            for path in paths:
                console.print(f"  {path}")

    _run(_export, verbose)


@app.command()
def cancel(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation")] = False,
    config_path: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Discard a running contest."""

    async def _cancel() -> None:
        async with _open_project(config_path) as (_store, service):
            if service.phase == "finished":
                console.print("The contest is finished; use 'restart' to clear it.")
                return
            confirmation = StaticConfirmation(True) if yes else ConsoleConfirmation(console)
            if await service.request_cancel(confirmation):
                console.print("[green]Contest cancelled.[/green]")
            else:
                console.print("Nothing cancelled.")

    _run(_cancel, verbose)


@app.command()
def restart(
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation")] = False,
    config_path: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Discard the contest, whatever its phase."""

    async def _restart() -> None:
        async with _open_project(config_path) as (_store, service):
            confirmation = StaticConfirmation(True) if yes else ConsoleConfirmation(console)
            if await service.request_restart(confirmation):
                console.print("[green]Contest cleared.[/green] Start a new one with 'photo-tournament start'.")
            else:
                console.print("Nothing changed.")

    _run(_restart, verbose)


@app.command()
def validate(
    config_path: ConfigOption = DEFAULT_CONFIG,
    verbose: VerboseOption = False,
) -> None:
    """Validate the configuration and the stored contest state."""

    async def _validate() -> None:
        async with _open_project(config_path) as (_store, service):
            config = service.config
            console.print("[green]Configuration is valid![/green]")
            console.print(f"  Project: {config.project}")
            console.print(f"  K-factor: {config.rating.k_factor}")
            console.print(f"  Eligible rating: {config.rating.eligible_rating}")
            errors = service.validate()
            if errors:
                for error in errors:
                    console.print(f"[red]Invalid state:[/red] {error}")
                raise typer.Exit(1)
            console.print(f"  Contest state: {service.phase}, consistent")

    _run(_validate, verbose)


@app.command()
def info() -> None:
    """Show tool information and example commands."""
    console.print("[bold]Photo Tournament[/bold]")
    console.print(f"Version: {__version__}\n")

    console.print("[bold]Example Commands:[/bold]")
    console.print("  # Create a project")
    console.print("  photo-tournament init 'Summer 2024'\n")

    console.print("  # Register and rate photos")
    console.print("  photo-tournament add photos/*.jpg --rating 5\n")

    console.print("  # Run the contest")
    console.print("  photo-tournament start")
    console.print("  photo-tournament duel\n")

    console.print("  # Results")
    console.print("  photo-tournament ranking")
    console.print("  photo-tournament export")


if __name__ == "__main__":
    app()
