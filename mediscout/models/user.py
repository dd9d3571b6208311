"""
User account models for the patient self-reporting tool.

Accounts live in the key-value store under a single key and are looked up
by username (login) or id (record submission).
"""

from typing import Optional, Any

from pydantic import Field

from mediscout.models.record import CamelModel


USERS_STORAGE_KEY = "mediscout_users"
CURRENT_USER_STORAGE_KEY = "mediscout_currentUser"


class ImageDescriptor(CamelModel):
  """Metadata for an image attached to a self-report. The bytes are never kept."""

  name: str
  type: Optional[str] = None
  size: Optional[int] = None


class Prediction(CamelModel):
  """Result of the simulated AI symptom matcher."""

  prediction: str
  advice: str
  confidence: float = Field(ge=0, le=1)
  image_analysis: str


class AiPrediction(Prediction):
  """Prediction as stored on a submitted record, with a derived risk score."""

  risk_score: float

  @classmethod
  def from_prediction(cls, prediction: Prediction) -> "AiPrediction":
    return cls(
      **prediction.model_dump(),
      risk_score=round(prediction.confidence * 10, 2),
    )


class SelfReportedVitals(CamelModel):
  """Vitals a patient may type in. Free text, kept as entered."""

  temperature: Optional[str] = ""
  weight: Optional[str] = ""


class SubmittedHealthRecord(CamelModel):
  """A patient self-report. Appended to an account, never edited."""

  date: str
  symptoms: str
  vitals: SelfReportedVitals = Field(default_factory=SelfReportedVitals)
  image_file: Optional[ImageDescriptor] = None
  ai_prediction: AiPrediction

  def to_dict(self) -> dict[str, Any]:
    # imageFile stays as an explicit null when no image was attached
    return self.model_dump(mode="json", by_alias=True)


class UserAccount(CamelModel):
  """
  A registered patient.

  Passwords are stored in plaintext; this is a demonstration prototype.
  """

  id: str
  username: str
  password: str
  name: str = ""
  age: Optional[int | str] = None
  gender: Optional[str] = None
  location: Optional[str] = None
  health_records: list[SubmittedHealthRecord] = Field(default_factory=list)

  def to_dict(self) -> dict[str, Any]:
    data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
    data["healthRecords"] = [r.to_dict() for r in self.health_records]
    return data


class RegistrationRequest(CamelModel):
  """Fields collected by the registration form."""

  username: str
  password: str
  name: str = ""
  age: Optional[int | str] = None
  gender: Optional[str] = None
  location: Optional[str] = None

