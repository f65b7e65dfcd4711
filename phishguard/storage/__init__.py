"""Storage modules for PhishGuard."""

from .activity import ActivityLog, Stats
from .base import KeyValueStore
from .lists import ListStore
from .memory import MemoryStore
from .sqlite import SQLiteStore

__all__ = ["ActivityLog", "KeyValueStore", "ListStore", "MemoryStore", "SQLiteStore", "Stats"]
