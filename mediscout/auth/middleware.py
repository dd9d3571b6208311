"""
Auth middleware for FastAPI.

Provides dependency injection for routes that act on behalf of a user.
Tokens are the opaque session tokens issued at login or registration.
"""

from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from mediscout.auth.session import Session, SessionRegistry


# HTTP Bearer scheme for Authorization header
security = HTTPBearer(auto_error=False)


def get_session_registry(request: Request) -> SessionRegistry:
  """The registry the running app was configured with."""
  return request.app.state.sessions


async def get_current_session(
  credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
  sessions: SessionRegistry = Depends(get_session_registry),
) -> Session:
  """
  Dependency to get the caller's session.

  Use this for routes that REQUIRE authentication.
  Raises 401 if the token is missing or unknown.
  """
  if not credentials:
    raise HTTPException(
      status_code=status.HTTP_401_UNAUTHORIZED,
      detail="Authentication required",
      headers={"WWW-Authenticate": "Bearer"},
    )

  session = sessions.get(credentials.credentials)
  if session is None:
    raise HTTPException(
      status_code=status.HTTP_401_UNAUTHORIZED,
      detail="Invalid or expired token",
      headers={"WWW-Authenticate": "Bearer"},
    )
  return session


async def get_current_session_optional(
  credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
  sessions: SessionRegistry = Depends(get_session_registry),
) -> Optional[Session]:
  """
  Dependency to get the caller's session if authenticated.

  Returns None instead of raising.
  """
  if not credentials:
    return None
  return sessions.get(credentials.credentials)
