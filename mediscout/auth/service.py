"""
Account operations: registration, login, logout and health-record submission.

Expected rejections (taken username, bad credentials, empty symptoms) come
back as results with a human-readable message; they are never raised.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from mediscout.auth.session import Session, SessionRegistry
from mediscout.db.repositories import UserRepository
from mediscout.models import (
  AiPrediction,
  ImageDescriptor,
  Prediction,
  RegistrationRequest,
  SelfReportedVitals,
  SubmittedHealthRecord,
  UserAccount,
)
from mediscout.predictor import SymptomMatcher

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password."
USERNAME_TAKEN = "Username already exists."
EMPTY_SYMPTOMS = "Please describe your symptoms."
UNKNOWN_USER = "User account not found."


@dataclass(frozen=True)
class AuthResult:
  success: bool
  message: str
  user: Optional[UserAccount] = None
  session: Optional[Session] = None


@dataclass(frozen=True)
class SubmissionResult:
  success: bool
  message: str
  record: Optional[SubmittedHealthRecord] = None
  prediction: Optional[Prediction] = None
  user: Optional[UserAccount] = None


class AccountService:
  """Account workflows over a UserRepository and a SessionRegistry."""

  def __init__(
    self,
    users: UserRepository,
    sessions: Optional[SessionRegistry] = None,
    matcher: Optional[SymptomMatcher] = None,
  ):
    self.users = users
    self.sessions = sessions if sessions is not None else SessionRegistry()
    self.matcher = matcher or SymptomMatcher()

  def register(self, request: RegistrationRequest) -> AuthResult:
    if self.users.get_by_username(request.username):
      logger.info("Registration rejected: username %r taken", request.username)
      return AuthResult(success=False, message=USERNAME_TAKEN)

    user = UserAccount(
      id="",
      health_records=[],
      **request.model_dump(),
    )
    created = self.users.create(user)
    if created is None:
      return AuthResult(success=False, message=USERNAME_TAKEN)

    self.users.set_current(created)
    session = self.sessions.open(created)
    logger.info("Registered user %s", created.id)
    return AuthResult(
      success=True,
      message=f"Welcome, {created.name}!",
      user=created,
      session=session,
    )

  def login(self, username: str, password: str) -> AuthResult:
    user = self.users.get_by_username(username)
    if user is None or user.password != password:
      logger.info("Login failed for %r", username)
      return AuthResult(success=False, message=INVALID_CREDENTIALS)

    self.users.set_current(user)
    session = self.sessions.open(user)
    logger.info("User %s logged in", user.id)
    return AuthResult(
      success=True,
      message=f"Welcome back, {user.name}!",
      user=user,
      session=session,
    )

  def logout(self, session: Session) -> None:
    self.sessions.close(session.token)
    current = self.users.get_current()
    if current and current.id == session.user_id:
      self.users.clear_current()
    logger.info("User %s logged out", session.user_id)

  def append_record(self, user_id: str, record: SubmittedHealthRecord) -> Optional[UserAccount]:
    """Append a record to an account; keeps sessions and the mirror in step."""
    updated = self.users.append_health_record(user_id, record)
    if updated is None:
      return None
    self.sessions.refresh_user(updated)
    current = self.users.get_current()
    if current and current.id == user_id:
      self.users.set_current(updated)
    return updated

  async def submit_health_record(
    self,
    session: Session,
    symptoms: str,
    temperature: Optional[str] = "",
    weight: Optional[str] = "",
    image: Optional[ImageDescriptor] = None,
  ) -> SubmissionResult:
    """Run the simulated AI on a self-report and append it to the account."""
    if not symptoms or not symptoms.strip():
      return SubmissionResult(success=False, message=EMPTY_SYMPTOMS)

    prediction = await self.matcher.predict(
      symptoms,
      has_image=image is not None,
      image_name=image.name if image else None,
    )

    record = SubmittedHealthRecord(
      date=datetime.now().isoformat(),
      symptoms=symptoms,
      vitals=SelfReportedVitals(temperature=temperature, weight=weight),
      image_file=image,
      ai_prediction=AiPrediction.from_prediction(prediction),
    )

    updated = self.append_record(session.user_id, record)
    if updated is None:
      return SubmissionResult(success=False, message=UNKNOWN_USER, prediction=prediction)

    logger.info("User %s submitted a health record (%s)", session.user_id, prediction.prediction)
    return SubmissionResult(
      success=True,
      message="Health data submitted and AI insights generated.",
      record=record,
      prediction=prediction,
      user=updated,
    )
