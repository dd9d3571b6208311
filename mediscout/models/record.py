"""
Core data models for synthetic community health records.

Python attributes are snake_case; the serialized form (store, CSV, API) uses
the camelCase keys the dashboard has always persisted.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# Bump the suffix whenever the record shape changes so stale data reads as a miss.
COHORT_STORAGE_KEY = "syntheticHealthData_v2"

MAX_COHORT_SIZE = 200
HIGH_RISK_THRESHOLD = 7


class Gender(str, Enum):
    MALE = "Male"
    FEMALE = "Female"
    OTHER = "Other"


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        """Serialized form, as persisted and exported."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Vitals(CamelModel):
    """
    Vital signs for one observation.

    Fields left out by a condition override are None and are dropped from
    the serialized form.
    """

    model_config = ConfigDict(frozen=True)

    temperature: float | None = Field(default=None, description="Body temperature in °C")
    blood_pressure: str | None = Field(default=None, description="Systolic/diastolic, e.g. '120/80'")
    heart_rate: int | None = Field(default=None, description="Beats per minute")
    respiratory_rate: int | None = Field(default=None, description="Breaths per minute")

    @property
    def systolic(self) -> int | None:
        if not self.blood_pressure:
            return None
        return int(self.blood_pressure.split("/")[0])

    @property
    def diastolic(self) -> int | None:
        if not self.blood_pressure:
            return None
        return int(self.blood_pressure.split("/")[1])


class ImageAnalysis(CamelModel):
    model_config = ConfigDict(frozen=True)

    finding: str = "N/A"
    confidence: float = Field(default=0, ge=0, le=1)


class PatientRecord(CamelModel):
    """One synthetic patient observation. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    id: str
    date: dt.date
    age: int | float = Field(ge=0, le=120)
    gender: Gender
    location: str
    symptoms_text: str = ""
    vitals: Vitals
    image_placeholder: str
    condition_assigned: str
    simulated_risk_score: int = Field(ge=1, le=10)
    simulated_ai_triage_category: str
    simulated_ai_image_analysis: ImageAnalysis

    @property
    def is_high_risk(self) -> bool:
        return self.simulated_risk_score >= HIGH_RISK_THRESHOLD


class RecordOverrides(CamelModel):
    """
    Partial record supplied by a condition generator.

    Only the fields explicitly set replace the template defaults. Nested
    objects (vitals, image analysis) replace the default object wholesale;
    they are never merged field by field.
    """

    id: str | None = None
    date: dt.date | None = None
    age: int | float | None = Field(default=None, ge=0, le=120)
    gender: Gender | None = None
    location: str | None = None
    symptoms_text: str | None = None
    vitals: Vitals | None = None
    image_placeholder: str | None = None
    condition_assigned: str | None = None
    simulated_risk_score: int | None = Field(default=None, ge=1, le=10)
    simulated_ai_triage_category: str | None = None
    simulated_ai_image_analysis: ImageAnalysis | None = None

    def set_fields(self) -> dict[str, Any]:
        """The fields the caller actually supplied with a value."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }
