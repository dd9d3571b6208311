"""
Explicit login sessions.

A Session is handed to every operation that acts on behalf of a user; there
is no ambient "current user".
"""

import secrets
import threading
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from mediscout.models import UserAccount


@dataclass(frozen=True)
class Session:
  """An authenticated user and the opaque token that identifies them."""
  token: str
  user: UserAccount
  started_at: datetime = field(default_factory=datetime.now)

  @property
  def user_id(self) -> str:
    return self.user.id


class SessionRegistry:
  """Token-keyed sessions for a server handling several users at once."""

  def __init__(self):
    self._sessions: dict[str, Session] = {}
    self._lock = threading.Lock()

  def open(self, user: UserAccount) -> Session:
    session = Session(token=secrets.token_urlsafe(24), user=user)
    with self._lock:
      self._sessions[session.token] = session
    return session

  def get(self, token: str) -> Optional[Session]:
    return self._sessions.get(token)

  def close(self, token: str) -> bool:
    with self._lock:
      return self._sessions.pop(token, None) is not None

  def refresh_user(self, user: UserAccount) -> None:
    """Point every session of this user at the latest account snapshot."""
    with self._lock:
      for token, session in self._sessions.items():
        if session.user_id == user.id:
          self._sessions[token] = replace(session, user=user)

  def __len__(self) -> int:
    return len(self._sessions)
