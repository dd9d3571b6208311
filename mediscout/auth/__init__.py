"""
Authentication module for MediScout.

Provides explicit sessions, account workflows and FastAPI dependencies.
"""

from mediscout.auth.session import Session, SessionRegistry
from mediscout.auth.service import (
  AccountService,
  AuthResult,
  SubmissionResult,
  EMPTY_SYMPTOMS,
  INVALID_CREDENTIALS,
  USERNAME_TAKEN,
)

__all__ = [
  "Session",
  "SessionRegistry",
  "AccountService",
  "AuthResult",
  "SubmissionResult",
  "EMPTY_SYMPTOMS",
  "INVALID_CREDENTIALS",
  "USERNAME_TAKEN",
]
