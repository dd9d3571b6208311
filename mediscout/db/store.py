"""
Key-value stores for MediScout.

Values are JSON text. `get` hands back the raw string so callers decide how
to parse it and what to do when it is malformed.
"""

import json
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional


class KeyValueStore(ABC):
  """Minimal string-to-string store, modelled on browser local storage."""

  @abstractmethod
  def get(self, key: str) -> Optional[str]:
    """Return the stored text for key, or None if absent."""

  @abstractmethod
  def set(self, key: str, value: str) -> None:
    """Store text under key, replacing any previous value."""

  @abstractmethod
  def delete(self, key: str) -> None:
    """Remove key. Removing a missing key is not an error."""


class MemoryStore(KeyValueStore):
  """In-process store. Used by tests and the `memory` backend."""

  def __init__(self, initial: Optional[dict[str, str]] = None):
    self._data: dict[str, str] = dict(initial or {})

  def get(self, key: str) -> Optional[str]:
    return self._data.get(key)

  def set(self, key: str, value: str) -> None:
    self._data[key] = value

  def delete(self, key: str) -> None:
    self._data.pop(key, None)

  def keys(self) -> list[str]:
    return list(self._data)


class JsonFileStore(KeyValueStore):
  """
  All keys in one JSON document on disk.

  The file is re-read on every access so several processes (server and
  CLI) see each other's writes. Writes go to a temp file first and are
  moved into place.
  """

  def __init__(self, path: Path | str):
    self.path = Path(path).expanduser()
    self._lock = threading.Lock()

  def _read_all(self) -> dict[str, str]:
    if not self.path.exists():
      return {}
    try:
      data = json.loads(self.path.read_text(encoding="utf-8"))
    except (OSError, ValueError):
      return {}
    return data if isinstance(data, dict) else {}

  def _write_all(self, data: dict[str, str]) -> None:
    self.path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
    with os.fdopen(fd, "w", encoding="utf-8") as f:
      json.dump(data, f)
    os.replace(tmp_path, self.path)

  def get(self, key: str) -> Optional[str]:
    value = self._read_all().get(key)
    return value if isinstance(value, str) else None

  def set(self, key: str, value: str) -> None:
    with self._lock:
      data = self._read_all()
      data[key] = value
      self._write_all(data)

  def delete(self, key: str) -> None:
    with self._lock:
      data = self._read_all()
      if key in data:
        del data[key]
        self._write_all(data)
