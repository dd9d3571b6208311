"""
Cohort assembler.

Runs the ten condition-family generators, each of which produces a biased
sample of "affected" and "baseline" patients, then shuffles and caps the
combined records into a single cohort.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Callable

import knowledge
from mediscout.engines.random_source import RandomSource
from mediscout.engines.synthesizer import RecordSynthesizer
from mediscout.models import (
    MAX_COHORT_SIZE,
    Gender,
    ImageAnalysis,
    PatientRecord,
    RecordOverrides,
    Vitals,
)

logger = logging.getLogger(__name__)

DEFAULT_RECORDS_PER_CONDITION = 15

NO_FINDING = ImageAnalysis(finding="N/A", confidence=0)


@dataclass(frozen=True)
class ConditionFamily:
    """One scripted condition family and the generator that samples it."""
    key: str
    display_name: str
    generate: Callable[[int], list[PatientRecord]]


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


class CohortAssembler:
    """
    Assembles a synthetic community cohort.

    Each family generator takes a record count and returns that many
    records (tuberculosis excepted, see generate_tuberculosis).
    """

    def __init__(self, rng: RandomSource | None = None, max_size: int = MAX_COHORT_SIZE):
        self.rng = rng or RandomSource()
        self.synthesizer = RecordSynthesizer(self.rng)
        self.max_size = max_size
        self._assumptions = {
            key: knowledge.family_assumptions(key)
            for key in (
                "febrile_illness",
                "diarrheal_disease",
                "stunting",
                "wasting",
                "tuberculosis",
                "obstetric_complication",
                "hypertension",
                "diabetes",
                "immunization",
                "acute_respiratory_infection",
            )
        }
        # Running total used by the tuberculosis case-count formula
        self._generated_so_far = 0

    @property
    def families(self) -> list[ConditionFamily]:
        """Condition families in generation order."""
        generators = [
            ("febrile_illness", self.generate_febrile_illness),
            ("diarrheal_disease", self.generate_diarrheal_disease),
            ("stunting", self.generate_stunting),
            ("wasting", self.generate_wasting),
            ("tuberculosis", self.generate_tuberculosis),
            ("obstetric_complication", self.generate_obstetric_complication),
            ("hypertension", self.generate_hypertension),
            ("diabetes", self.generate_diabetes),
            ("immunization", self.generate_immunization),
            ("acute_respiratory_infection", self.generate_acute_respiratory_infection),
        ]
        return [
            ConditionFamily(key, self._assumptions[key]["display_name"], generate)
            for key, generate in generators
        ]

    def assemble(self, per_condition_count: int = DEFAULT_RECORDS_PER_CONDITION) -> list[PatientRecord]:
        """Generate every family, shuffle, and truncate to the cohort cap."""
        records: list[PatientRecord] = []
        self._generated_so_far = 0

        for family in self.families:
            family_records = family.generate(per_condition_count)
            logger.debug("Generated %d %s records", len(family_records), family.key)
            records.extend(family_records)
            self._generated_so_far = len(records)

        self.rng.shuffle(records)
        cohort = records[:self.max_size]
        logger.info(
            "Assembled cohort of %d records (%d generated, %d per condition)",
            len(cohort), len(records), per_condition_count,
        )
        return cohort

    def generate_family(self, key: str, count: int = DEFAULT_RECORDS_PER_CONDITION) -> list[PatientRecord]:
        """Run a single family generator by key, as if it were generated first."""
        self._generated_so_far = 0
        for family in self.families:
            if family.key == key:
                return family.generate(count)
        raise KeyError(f"Unknown condition family: {key}")

    def _rate(self, key: str) -> float:
        return self._assumptions[key]["rate"]

    def _age(self, key: str) -> int:
        low, high = self._assumptions[key]["age"]
        return self.rng.randint(low, high)

    def _finding(self, probability: float, finding: str, confidence: tuple[float, float]) -> ImageAnalysis:
        """An image-analysis finding with the given probability, else N/A."""
        if self.rng.chance(probability):
            return ImageAnalysis(finding=finding, confidence=self.rng.uniform(*confidence, 2))
        return NO_FINDING

    # -------------------------------------------------------------------------
    # Condition families
    # -------------------------------------------------------------------------

    def generate_febrile_illness(self, count: int) -> list[PatientRecord]:
        records = []
        for _ in range(count):
            febrile = self.rng.chance(self._rate("febrile_illness"))
            vitals = Vitals(
                temperature=self.rng.uniform(38.0, 40.5, 1) if febrile else self.rng.uniform(36.5, 37.5, 1),
                blood_pressure=self.rng.blood_pressure((90, 130), (60, 85)),
                heart_rate=self.rng.randint(90, 120) if febrile else self.rng.randint(60, 100),
            )
            if febrile:
                overrides = RecordOverrides(
                    vitals=vitals,
                    symptoms_text="High fever, headache, body aches, chills. Possible skin rash.",
                    image_placeholder="Photo of patient appearing flushed, possible faint rash on arm.",
                    condition_assigned="Febrile Illness (Suspected Vector-borne)",
                    simulated_risk_score=self.rng.randint(6, 9),
                    simulated_ai_triage_category="Vector-borne / Infectious Disease",
                    simulated_ai_image_analysis=self._finding(0.3, "Possible Dengue Rash", (0.6, 0.85)),
                )
            else:
                overrides = RecordOverrides(
                    vitals=vitals,
                    symptoms_text="General weakness, mild cough.",
                    image_placeholder="General observation photo.",
                    condition_assigned="Mild Viral Infection",
                    simulated_risk_score=self.rng.randint(2, 4),
                    simulated_ai_triage_category="General Acute",
                    simulated_ai_image_analysis=NO_FINDING,
                )
            records.append(self.synthesizer.synthesize(overrides))
        return records

    def generate_diarrheal_disease(self, count: int) -> list[PatientRecord]:
        records = []
        for _ in range(count):
            age = self._age("diarrheal_disease")
            diarrhea = self.rng.chance(self._rate("diarrheal_disease"))
            if diarrhea:
                overrides = RecordOverrides(
                    age=age,
                    symptoms_text="Multiple loose stools per day, abdominal cramps, dehydration signs.",
                    image_placeholder="Photo showing signs of dehydration (e.g., sunken eyes).",
                    condition_assigned="Acute Diarrheal Disease",
                    simulated_risk_score=self.rng.randint(5, 8),
                    simulated_ai_triage_category="Gastrointestinal / Pediatric",
                    vitals=Vitals(temperature=self.rng.uniform(37.0, 38.5, 1)),
                )
            else:
                overrides = RecordOverrides(
                    age=age,
                    symptoms_text="Normal bowel movements, playful.",
                    image_placeholder="Child playing.",
                    condition_assigned="Healthy Child Checkup",
                    simulated_risk_score=self.rng.randint(1, 3),
                    simulated_ai_triage_category="Pediatric Wellness",
                    vitals=Vitals(temperature=self.rng.uniform(36.5, 37.2, 1)),
                )
            records.append(self.synthesizer.synthesize(overrides))
        return records

    def generate_stunting(self, count: int) -> list[PatientRecord]:
        records = []
        for _ in range(count):
            age = self._age("stunting")
            stunted = self.rng.chance(self._rate("stunting"))
            if stunted:
                overrides = RecordOverrides(
                    age=age,
                    symptoms_text="Appears small for age, recurrent minor illnesses.",
                    condition_assigned="Nutritional Assessment (Possible Stunting)",
                    simulated_risk_score=self.rng.randint(3, 6),
                    simulated_ai_triage_category="Nutritional / Pediatric Chronic",
                    image_placeholder="Full body photo for growth assessment.",
                )
            else:
                overrides = RecordOverrides(
                    age=age,
                    symptoms_text="Normal growth observed, active.",
                    condition_assigned="Routine Child Checkup",
                    simulated_risk_score=self.rng.randint(1, 2),
                    simulated_ai_triage_category="Pediatric Wellness",
                    image_placeholder="Child smiling.",
                )
            records.append(self.synthesizer.synthesize(overrides))
        return records

    def generate_wasting(self, count: int) -> list[PatientRecord]:
        records = []
        for _ in range(count):
            age = self._age("wasting")
            wasted = self.rng.chance(self._rate("wasting"))
            if wasted:
                overrides = RecordOverrides(
                    age=age,
                    symptoms_text="Appears very thin, low energy, poor appetite.",
                    condition_assigned="Nutritional Assessment (Possible Wasting)",
                    simulated_risk_score=self.rng.randint(6, 9),
                    simulated_ai_triage_category="Nutritional Emergency / Pediatric Acute",
                    image_placeholder="Photo showing thin limbs and visible ribs.",
                )
            else:
                overrides = RecordOverrides(
                    age=age,
                    symptoms_text="Healthy weight, energetic.",
                    condition_assigned="Routine Child Checkup",
                    simulated_risk_score=self.rng.randint(1, 2),
                    simulated_ai_triage_category="Pediatric Wellness",
                    image_placeholder="Child engaged in activity.",
                )
            records.append(self.synthesizer.synthesize(overrides))
        return records

    def tuberculosis_case_count(self, count: int, total_records_target: int) -> int:
        """
        Number of TB cases for a family of `count` patients.

        cases = max(1, round(count * prevalence * (target / count * scaling)))
        where target is the running record total plus this family's count.
        """
        if count <= 0:
            return 0
        assumptions = self._assumptions["tuberculosis"]
        prevalence = assumptions["prevalence_per_100k"] / 100_000
        scaling = total_records_target / count * assumptions["scaling_factor"]
        return max(1, round_half_up(count * prevalence * scaling))

    def generate_tuberculosis(self, count: int) -> list[PatientRecord]:
        """
        Generate suspected TB cases.

        Unlike the other families every record is a case; the number of
        records comes from tuberculosis_case_count, not from `count`.
        """
        cases = self.tuberculosis_case_count(count, self._generated_so_far + count)
        records = []
        for _ in range(cases):
            overrides = RecordOverrides(
                age=self._age("tuberculosis"),
                symptoms_text="Persistent cough for >2 weeks, fever, night sweats, weight loss, chest pain.",
                image_placeholder="Chest X-ray placeholder or photo of patient looking unwell.",
                condition_assigned="Suspected Tuberculosis (TB)",
                simulated_risk_score=self.rng.randint(7, 10),
                simulated_ai_triage_category="Respiratory / Infectious Disease Chronic",
                simulated_ai_image_analysis=self._finding(
                    0.4, "Possible Lung Infiltrates (X-Ray simulation)", (0.65, 0.9)
                ),
                vitals=Vitals(
                    temperature=self.rng.uniform(37.5, 38.8, 1),
                    respiratory_rate=self.rng.randint(20, 28),
                ),
            )
            records.append(self.synthesizer.synthesize(overrides))
        return records

    def generate_obstetric_complication(self, count: int) -> list[PatientRecord]:
        records = []
        for _ in range(count):
            complicated = self.rng.chance(self._rate("obstetric_complication"))
            if complicated:
                overrides = RecordOverrides(
                    age=self._age("obstetric_complication"),
                    gender=Gender.FEMALE,
                    symptoms_text=(
                        "Pregnant. Experiencing severe headache, blurred vision, "
                        "abdominal pain, and swelling."
                    ),
                    image_placeholder="Photo of pregnant woman, focus on facial swelling or discomfort.",
                    condition_assigned="Obstetric Complication (e.g., Suspected Preeclampsia)",
                    simulated_risk_score=self.rng.randint(8, 10),
                    simulated_ai_triage_category="Maternal Health Emergency",
                    vitals=Vitals(
                        blood_pressure=self.rng.blood_pressure((140, 180), (90, 110)),
                        temperature=self.rng.uniform(36.5, 37.5, 1),
                    ),
                )
            else:
                # Text, label and triage are three independent draws
                overrides = RecordOverrides(
                    age=self._age("obstetric_complication"),
                    gender=Gender.FEMALE,
                    symptoms_text=(
                        "Routine pregnancy checkup, mild fatigue."
                        if self.rng.chance(0.3)
                        else "General checkup, no major complaints."
                    ),
                    condition_assigned=(
                        "Routine Antenatal Care" if self.rng.chance(0.3) else "General Adult Female Checkup"
                    ),
                    simulated_risk_score=self.rng.randint(1, 3),
                    simulated_ai_triage_category=(
                        "Maternal Health Wellness" if self.rng.chance(0.3) else "General Adult"
                    ),
                )
            records.append(self.synthesizer.synthesize(overrides))
        return records

    def generate_hypertension(self, count: int) -> list[PatientRecord]:
        records = []
        for _ in range(count):
            age = self._age("hypertension")
            hypertensive = self.rng.chance(self._rate("hypertension"))
            if hypertensive:
                blood_pressure = self.rng.blood_pressure((140, 180), (90, 110))
            else:
                blood_pressure = self.rng.blood_pressure((100, 125), (65, 85))
            overrides = RecordOverrides(
                age=age,
                symptoms_text=(
                    "Occasional headaches, dizziness, chest discomfort. Often asymptomatic."
                    if hypertensive
                    else "Feeling well, no specific complaints."
                ),
                vitals=Vitals(blood_pressure=blood_pressure, heart_rate=self.rng.randint(60, 90)),
                condition_assigned="Hypertension" if hypertensive else "Normotensive Adult",
                simulated_risk_score=self.rng.randint(5, 8) if hypertensive else self.rng.randint(1, 3),
                simulated_ai_triage_category=(
                    "Cardiovascular / Chronic Disease" if hypertensive else "General Adult Wellness"
                ),
            )
            records.append(self.synthesizer.synthesize(overrides))
        return records

    def generate_diabetes(self, count: int) -> list[PatientRecord]:
        records = []
        for _ in range(count):
            age = self._age("diabetes")
            diabetic = self.rng.chance(self._rate("diabetes"))
            if diabetic:
                # The foot photo and the ulcer finding are independent draws
                image_placeholder = (
                    "Photo of a foot ulcer or skin infection."
                    if self.rng.chance(0.2)
                    else "General observation."
                )
                overrides = RecordOverrides(
                    age=age,
                    symptoms_text=(
                        "Increased thirst, frequent urination, fatigue, blurred vision, "
                        "slow healing wounds."
                    ),
                    image_placeholder=image_placeholder,
                    condition_assigned="Diabetes Mellitus",
                    simulated_risk_score=self.rng.randint(6, 9),
                    simulated_ai_triage_category="Endocrine / Chronic Disease",
                    simulated_ai_image_analysis=self._finding(0.2, "Possible Diabetic Foot Ulcer", (0.7, 0.9)),
                )
            else:
                overrides = RecordOverrides(
                    age=age,
                    symptoms_text="No specific diabetic symptoms reported.",
                    image_placeholder="General observation.",
                    condition_assigned="Non-Diabetic Adult",
                    simulated_risk_score=self.rng.randint(1, 3),
                    simulated_ai_triage_category="General Adult Wellness",
                    simulated_ai_image_analysis=NO_FINDING,
                )
            records.append(self.synthesizer.synthesize(overrides))
        return records

    def generate_immunization(self, count: int) -> list[PatientRecord]:
        low, high = self._assumptions["immunization"]["age_months"]
        records = []
        for _ in range(count):
            age_in_months = self.rng.randint(low, high)
            immunized = self.rng.chance(self._rate("immunization"))
            status = "Fully Immunized" if immunized else "Partially or Not Immunized"
            overrides = RecordOverrides(
                age=round_half_up(age_in_months / 12 * 10) / 10,
                symptoms_text=f"Child aged {age_in_months} months. Immunization status: {status}.",
                condition_assigned="Immunization Status Check",
                simulated_risk_score=1 if immunized else self.rng.randint(3, 5),
                simulated_ai_triage_category="Pediatric Wellness / Preventive Health",
            )
            records.append(self.synthesizer.synthesize(overrides))
        return records

    def generate_acute_respiratory_infection(self, count: int) -> list[PatientRecord]:
        records = []
        for _ in range(count):
            age = self._age("acute_respiratory_infection")
            ari = self.rng.chance(self._rate("acute_respiratory_infection"))
            if ari:
                overrides = RecordOverrides(
                    age=age,
                    symptoms_text="Cough, difficulty breathing, fever, runny nose.",
                    image_placeholder="Video/audio placeholder of child coughing or showing labored breathing.",
                    condition_assigned="Acute Respiratory Infection (ARI)",
                    simulated_risk_score=self.rng.randint(4, 7),
                    simulated_ai_triage_category="Respiratory / Pediatric Acute",
                    vitals=Vitals(
                        temperature=self.rng.uniform(37.5, 39.5, 1),
                        respiratory_rate=self.rng.randint(30, 50),
                    ),
                )
            else:
                overrides = RecordOverrides(
                    age=age,
                    symptoms_text="No respiratory symptoms.",
                    image_placeholder="Child breathing normally.",
                    condition_assigned="Healthy Child",
                    simulated_risk_score=self.rng.randint(1, 2),
                    simulated_ai_triage_category="Pediatric Wellness",
                    vitals=Vitals(
                        temperature=self.rng.uniform(36.5, 37.2, 1),
                        respiratory_rate=self.rng.randint(20, 30),
                    ),
                )
            records.append(self.synthesizer.synthesize(overrides))
        return records


def generate_cohort(
    per_condition_count: int = DEFAULT_RECORDS_PER_CONDITION,
    seed: int | None = None,
) -> list[PatientRecord]:
    """Convenience wrapper: assemble one cohort with a fresh (optionally seeded) source."""
    return CohortAssembler(RandomSource(seed)).assemble(per_condition_count)
