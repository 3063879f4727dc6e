import uuid
from datetime import UTC, datetime

from sqlmodel import Field, SQLModel


class Photo(SQLModel, table=True):
    """A photo in a project. Contests only read its ``id`` and ``rating``."""

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    filename: str
    rating: int = Field(default=0, ge=0, le=5, index=True)  # star rating, 0 = unrated
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    deleted_at: datetime | None = Field(default=None, index=True)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None
