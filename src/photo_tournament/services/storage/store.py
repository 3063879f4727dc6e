"""Project storage: photo and contest-state repositories plus report exports."""

from __future__ import annotations

import asyncio
import csv
import gc
import json
from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

import structlog
from sqlalchemy.pool import NullPool
from sqlmodel import SQLModel, create_engine

from photo_tournament import __version__
from photo_tournament.core.config import ContestConfig
from photo_tournament.ranking.standings import Standing
from photo_tournament.services.reporting import generate_leaderboard, standings_to_records

from .photo_repository import PhotoRepository
from .snapshot_repository import SnapshotRepository

logger = structlog.get_logger()


class ProjectStore:
    """Unified persistence for one photo project.

    Handles:
    - SQLModel storage for photos and contest snapshots (SQLite by default)
    - Leaderboard export (Markdown, CSV, JSON) under ``<project>/ranking``
    """

    def __init__(self, config: ContestConfig) -> None:
        """Initialize project store.

        Args:
            config: Project configuration.
        """
        self.config = config
        self.base_dir = config.project_dir
        self._engine = None
        self._init_directories()
        self._init_db()
        self._save_metadata()
        self.photos = PhotoRepository(self._engine)
        self.snapshots = SnapshotRepository(self._engine)

    def _init_directories(self) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        logger.info("store_init", project=self.config.project_slug, path=str(self.base_dir))

    def _init_db(self) -> None:
        """Create the engine and tables."""
        # NullPool so file handles are released as soon as a session closes
        self._engine = create_engine(self.config.get_database_url(), poolclass=NullPool)
        SQLModel.metadata.create_all(self._engine)

    def _save_metadata(self) -> None:
        metadata_path = self.base_dir / "project_metadata.json"
        created_at = datetime.now(UTC).isoformat()
        if metadata_path.exists():
            with metadata_path.open(encoding="utf-8") as f:
                created_at = json.load(f).get("created_at", created_at)

        metadata = {
            "project": self.config.project,
            "slug": self.config.project_slug,
            "namespace": self.config.state_namespace,
            "created_at": created_at,
            "photo_tournament_version": __version__,
        }
        with metadata_path.open("w", encoding="utf-8") as f:
            json.dump(metadata, f, indent=2)

    def ranking_dir(self) -> Path:
        """Get or create the ranking export directory."""
        path = self.base_dir / "ranking"
        path.mkdir(parents=True, exist_ok=True)
        return path

    # ==================== Report operations ====================

    async def save_ranking_output(
        self,
        standings: Sequence[Standing],
        labels: dict[str, str] | None = None,
        champion_id: str | None = None,
    ) -> list[Path]:
        """Write the leaderboard as Markdown, CSV and JSON.

        Returns:
            Paths of the written files.
        """
        records = standings_to_records(standings)

        def _save() -> list[Path]:
            ranking_dir = self.ranking_dir()

            md_path = ranking_dir / "leaderboard.md"
            md_path.write_text(
                generate_leaderboard(
                    standings,
                    f"Leaderboard: {self.config.project}",
                    labels=labels,
                    champion_id=champion_id,
                )
                + "\n",
                encoding="utf-8",
            )

            csv_path = ranking_dir / "leaderboard.csv"
            with csv_path.open("w", encoding="utf-8", newline="") as f:
                writer = csv.DictWriter(f, fieldnames=list(records[0]) if records else ["rank"])
                writer.writeheader()
                writer.writerows(records)

            json_path = ranking_dir / "leaderboard.json"
            with json_path.open("w", encoding="utf-8") as f:
                json.dump(
                    {"champion_id": champion_id, "standings": records},
                    f,
                    indent=2,
                    default=str,
                )

            logger.debug("saved_ranking_output", path=str(ranking_dir))
            return [md_path, csv_path, json_path]

        return await asyncio.to_thread(_save)

    # ==================== Lifecycle ====================

    async def close(self) -> None:
        """Dispose of the database engine."""
        if self._engine:
            self._engine.dispose()

    def close_sync(self) -> None:
        """Synchronously dispose of the database engine."""
        if self._engine:
            self._engine.dispose()
            self._engine = None

        gc.collect()
