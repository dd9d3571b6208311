"""
Repository classes for store operations.

Each repository owns one or more keys in the key-value store and gives the
rest of the application a typed interface over them.
"""

import json
import logging
import threading
import time
from typing import Optional, Any

from pydantic import ValidationError

from mediscout.db.store import KeyValueStore
from mediscout.engines import CohortAssembler, DEFAULT_RECORDS_PER_CONDITION
from mediscout.models import (
  COHORT_STORAGE_KEY,
  CURRENT_USER_STORAGE_KEY,
  USERS_STORAGE_KEY,
  PatientRecord,
  SubmittedHealthRecord,
  UserAccount,
)

logger = logging.getLogger(__name__)


class BaseRepository:
  """Base class for all repositories."""

  def __init__(self, store: KeyValueStore):
    self._store = store
    self._lock = threading.Lock()

  @property
  def store(self) -> KeyValueStore:
    return self._store

  def _load_json(self, key: str) -> Any:
    """Parse the value under key. Raises ValueError on malformed JSON."""
    raw = self._store.get(key)
    if raw is None:
      return None
    return json.loads(raw)

  def _save_json(self, key: str, value: Any) -> None:
    self._store.set(key, json.dumps(value))


class UserRepository(BaseRepository):
  """Repository for user accounts and the mirrored current user."""

  def list_all(self) -> list[UserAccount]:
    try:
      data = self._load_json(USERS_STORAGE_KEY)
    except ValueError:
      logger.warning("Discarding malformed user list under %s", USERS_STORAGE_KEY)
      return []
    if not isinstance(data, list):
      return []
    users = []
    for entry in data:
      try:
        users.append(UserAccount.model_validate(entry))
      except ValidationError as e:
        logger.warning("Skipping invalid account entry (%d errors)", e.error_count())
    return users

  def _save_all(self, users: list[UserAccount]) -> None:
    self._save_json(USERS_STORAGE_KEY, [u.to_dict() for u in users])

  def get_by_username(self, username: str) -> Optional[UserAccount]:
    """Get user by username."""
    for user in self.list_all():
      if user.username == username:
        return user
    return None

  def get_by_id(self, user_id: str) -> Optional[UserAccount]:
    """Get user by ID."""
    for user in self.list_all():
      if user.id == user_id:
        return user
    return None

  def create(self, user: UserAccount) -> Optional[UserAccount]:
    """
    Add a new account under a fresh `user_<millis>` id.

    Returns None, leaving the store untouched, if the username is taken.
    """
    with self._lock:
      users = self.list_all()
      if any(u.username == user.username for u in users):
        return None
      user = user.model_copy(update={"id": self._next_id(users)})
      users.append(user)
      self._save_all(users)
    return user

  def append_health_record(
    self,
    user_id: str,
    record: SubmittedHealthRecord,
  ) -> Optional[UserAccount]:
    """Append a self-report to an account. Returns the updated account."""
    with self._lock:
      users = self.list_all()
      for index, user in enumerate(users):
        if user.id == user_id:
          updated = user.model_copy(
            update={"health_records": [*user.health_records, record]}
          )
          users[index] = updated
          self._save_all(users)
          return updated
    return None

  @staticmethod
  def _next_id(users: list[UserAccount]) -> str:
    taken = {u.id for u in users}
    millis = int(time.time() * 1000)
    while f"user_{millis}" in taken:
      millis += 1
    return f"user_{millis}"

  # -------------------------------------------------------------------------
  # Current user mirror
  # -------------------------------------------------------------------------

  def get_current(self) -> Optional[UserAccount]:
    try:
      data = self._load_json(CURRENT_USER_STORAGE_KEY)
      return UserAccount.model_validate(data) if data else None
    except (ValueError, ValidationError):
      self._store.delete(CURRENT_USER_STORAGE_KEY)
      return None

  def set_current(self, user: UserAccount) -> None:
    self._save_json(CURRENT_USER_STORAGE_KEY, user.to_dict())

  def clear_current(self) -> None:
    self._store.delete(CURRENT_USER_STORAGE_KEY)


class CohortRepository(BaseRepository):
  """
  Caches the assembled cohort under a versioned key.

  Repeated reads see a stable dataset until regenerate_cohort() is called.
  Malformed or stale-shaped data is treated as absent and regenerated.
  """

  def __init__(
    self,
    store: KeyValueStore,
    assembler: Optional[CohortAssembler] = None,
    per_condition_count: int = DEFAULT_RECORDS_PER_CONDITION,
  ):
    super().__init__(store)
    self.assembler = assembler or CohortAssembler()
    self.per_condition_count = per_condition_count

  def get_cohort(self) -> list[PatientRecord]:
    with self._lock:
      cached = self._read_cached()
      if cached is not None:
        return cached
      return self._generate_and_store()

  def regenerate_cohort(self) -> list[PatientRecord]:
    with self._lock:
      self._store.delete(COHORT_STORAGE_KEY)
      logger.info("Regenerating cohort")
      return self._generate_and_store()

  def _read_cached(self) -> Optional[list[PatientRecord]]:
    try:
      data = self._load_json(COHORT_STORAGE_KEY)
    except ValueError:
      logger.warning("Cached cohort is not valid JSON; regenerating")
      self._store.delete(COHORT_STORAGE_KEY)
      return None

    if data is None:
      return None

    if not self._is_valid_shape(data):
      logger.warning("Cached cohort has an unexpected shape; regenerating")
      self._store.delete(COHORT_STORAGE_KEY)
      return None

    try:
      return [PatientRecord.model_validate(item) for item in data]
    except ValidationError as e:
      logger.warning("Cached cohort failed validation (%d errors); regenerating", e.error_count())
      self._store.delete(COHORT_STORAGE_KEY)
      return None

  @staticmethod
  def _is_valid_shape(data: Any) -> bool:
    """Non-empty list where every element has an id and a vitals object."""
    if not isinstance(data, list) or not data:
      return False
    return all(
      isinstance(item, dict) and item.get("id") and isinstance(item.get("vitals"), dict)
      for item in data
    )

  def _generate_and_store(self) -> list[PatientRecord]:
    cohort = self.assembler.assemble(self.per_condition_count)
    self._save_json(COHORT_STORAGE_KEY, [r.to_dict() for r in cohort])
    return cohort
