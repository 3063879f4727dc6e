from .base import ItemStore, StateStore
from .codec import deserialize, migrate_blob, serialize
from .memory import InMemoryItemStore, InMemoryStateStore
from .photo_repository import PhotoRepository
from .snapshot_repository import SnapshotRepository
from .store import ProjectStore

__all__ = [
    "InMemoryItemStore",
    "InMemoryStateStore",
    "ItemStore",
    "PhotoRepository",
    "ProjectStore",
    "SnapshotRepository",
    "StateStore",
    "deserialize",
    "migrate_blob",
    "serialize",
]
