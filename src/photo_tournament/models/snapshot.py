from datetime import UTC, datetime
from typing import Any

from sqlalchemy import Column
from sqlmodel import JSON, Field, SQLModel


class ContestSnapshot(SQLModel, table=True):
    """Serialized contest state stored under a namespace."""

    __tablename__ = "contest_snapshot"

    namespace: str = Field(primary_key=True)
    blob: dict[str, Any] = Field(sa_column=Column(JSON, nullable=False))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
