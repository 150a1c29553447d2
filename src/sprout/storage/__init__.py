"""Activity log storage."""

from .log_store import ActivityLogStore, FetchedRecord, InMemoryLogStore, JsonlLogStore

__all__ = [
    "ActivityLogStore",
    "FetchedRecord",
    "InMemoryLogStore",
    "JsonlLogStore",
]
