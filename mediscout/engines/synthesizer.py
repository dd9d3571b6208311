"""
Record synthesizer.

Builds a complete PatientRecord from a randomized default template and a
partial set of condition-specific overrides.
"""

from __future__ import annotations

import knowledge
from mediscout.engines.random_source import RandomSource
from mediscout.models import (
    Gender,
    ImageAnalysis,
    PatientRecord,
    RecordOverrides,
    Vitals,
)

# Condition labels containing any of these are maternal-health conditions
MATERNAL_MARKERS = ("Obstetric", "Antenatal", "Preeclampsia")

DEFAULT_CONDITION = "General Checkup"
DEFAULT_TRIAGE = "Non-urgent"
DEFAULT_IMAGE_PLACEHOLDER = "No specific image noted."


def is_maternal_condition(label: str | None) -> bool:
    return bool(label) and any(marker in label for marker in MATERNAL_MARKERS)


class RecordSynthesizer:
    """
    Produces one synthetic observation per call.

    Override semantics are replace-not-merge: a supplied `vitals` object
    becomes the record's vitals as-is, so any vital it leaves unset is
    absent on that record rather than filled from the template.
    """

    def __init__(self, rng: RandomSource | None = None):
        self.rng = rng or RandomSource()
        self.locations = knowledge.locations()
        self.genders = [Gender(g) for g in knowledge.genders()]

    def default_vitals(self) -> Vitals:
        return Vitals(
            temperature=self.rng.uniform(36.0, 37.5, 1),
            blood_pressure=self.rng.blood_pressure((90, 140), (60, 90)),
            heart_rate=self.rng.randint(60, 100),
            respiratory_rate=self.rng.randint(12, 20),
        )

    def template(self) -> dict:
        """A fully populated, randomized record with neutral values."""
        return {
            "id": self.rng.generate_id(),
            "date": self.rng.recent_date(60),
            "age": self.rng.randint(0, 80),
            "gender": self.rng.choice(self.genders),
            "location": self.rng.choice(self.locations),
            "symptoms_text": "",
            "vitals": self.default_vitals(),
            "image_placeholder": DEFAULT_IMAGE_PLACEHOLDER,
            "condition_assigned": DEFAULT_CONDITION,
            "simulated_risk_score": self.rng.randint(1, 3),
            "simulated_ai_triage_category": DEFAULT_TRIAGE,
            "simulated_ai_image_analysis": ImageAnalysis(),
        }

    def synthesize(self, overrides: RecordOverrides | None = None) -> PatientRecord:
        fields = self.template()
        if overrides is not None:
            fields.update(overrides.set_fields())

        if is_maternal_condition(fields["condition_assigned"]) and fields["gender"] != Gender.FEMALE:
            fields["gender"] = Gender.FEMALE

        return PatientRecord(**fields)
