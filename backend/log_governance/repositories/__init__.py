"""Repository layer for database operations"""

from .base import BaseRepository
from .event_store import EventStore, LogQuery

__all__ = [
    "BaseRepository",
    "EventStore",
    "LogQuery",
]
