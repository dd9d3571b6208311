"""
Storage module for MediScout.

Provides key-value stores and repository classes for data access.
"""

from mediscout.db.store import KeyValueStore, MemoryStore, JsonFileStore
from mediscout.db.repositories import (
  BaseRepository,
  UserRepository,
  CohortRepository,
)

__all__ = [
  "KeyValueStore",
  "MemoryStore",
  "JsonFileStore",
  "BaseRepository",
  "UserRepository",
  "CohortRepository",
]
