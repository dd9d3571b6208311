"""
Cohort analytics for the health-worker dashboard.

Summary counts, distributions and the simulated impact metrics, computed
from a list of PatientRecords.
"""

from __future__ import annotations

from collections import Counter
from typing import Any

from pydantic import BaseModel

from mediscout.models import PatientRecord

# Simulated hours to identify a high-risk case without and with the AI
BASELINE_HOURS_TO_IDENTIFY = 72
AI_HOURS_TO_IDENTIFY = 6
AI_IDENTIFICATION_SHARE = 0.9

AGE_BUCKETS = [
    ("0-5 yrs", 5),
    ("6-17 yrs", 17),
    ("18-40 yrs", 40),
    ("41-65 yrs", 65),
    ("65+ yrs", None),
]

SORTABLE_FIELDS = (
    "id",
    "date",
    "age",
    "gender",
    "location",
    "conditionAssigned",
    "simulatedRiskScore",
    "simulatedAiTriageCategory",
)

RISK_BANDS = [
    ("Low Risk (1-3)", 1, 3),
    ("Medium Risk (4-6)", 4, 6),
    ("High Risk (7-10)", 7, 10),
]


class CohortSummary(BaseModel):
    total_patients: int
    high_risk_patients: int
    most_common_condition: str
    most_common_condition_count: int


class ImpactMetrics(BaseModel):
    total_high_risk: int
    ai_identified_high_risk: int
    identification_rate: float
    avg_time_to_identify_baseline: int = BASELINE_HOURS_TO_IDENTIFY
    avg_time_to_identify_ai: int = AI_HOURS_TO_IDENTIFY
    time_saved_per_case: int


def _sorted_counts(counter: Counter, label: str) -> list[dict[str, Any]]:
    # Counter.most_common keeps first-seen order among ties
    return [{label: key, "count": count} for key, count in counter.most_common()]


def summarize(records: list[PatientRecord]) -> CohortSummary:
    conditions = Counter(r.condition_assigned for r in records)
    most_common = conditions.most_common(1)
    name, count = most_common[0] if most_common else ("N/A", 0)
    return CohortSummary(
        total_patients=len(records),
        high_risk_patients=sum(1 for r in records if r.is_high_risk),
        most_common_condition=name,
        most_common_condition_count=count,
    )


def condition_distribution(records: list[PatientRecord], top: int = 10) -> list[dict[str, Any]]:
    counts = Counter(r.condition_assigned for r in records)
    return _sorted_counts(counts, "condition")[:top]


def risk_band(score: int) -> str:
    for name, low, high in RISK_BANDS:
        if low <= score <= high:
            return name
    raise ValueError(f"Risk score out of range: {score}")


def risk_distribution(records: list[PatientRecord]) -> list[dict[str, Any]]:
    """Counts per risk band, low to high, omitting empty bands."""
    counts = Counter(risk_band(r.simulated_risk_score) for r in records)
    return [
        {"riskCategory": name, "count": counts[name]}
        for name, _, _ in RISK_BANDS
        if counts[name]
    ]


def age_bucket(age: float) -> str:
    for name, upper in AGE_BUCKETS:
        if upper is None or age <= upper:
            return name
    return AGE_BUCKETS[-1][0]


def age_distribution(records: list[PatientRecord]) -> list[dict[str, Any]]:
    """Counts for every age bucket, including empty ones."""
    if not records:
        return []
    counts = Counter(age_bucket(r.age) for r in records)
    return [{"ageGroup": name, "count": counts[name]} for name, _ in AGE_BUCKETS]


def gender_distribution(records: list[PatientRecord]) -> list[dict[str, Any]]:
    counts = Counter(r.gender.value for r in records)
    return _sorted_counts(counts, "gender")


def location_distribution(records: list[PatientRecord]) -> list[dict[str, Any]]:
    """Case counts per city with the number of high-risk cases in each."""
    counts = Counter(r.location for r in records)
    high_risk = Counter(r.location for r in records if r.is_high_risk)
    return [
        {"location": location, "count": count, "highRisk": high_risk[location]}
        for location, count in counts.most_common()
    ]


def impact_metrics(records: list[PatientRecord]) -> ImpactMetrics:
    if not records:
        return ImpactMetrics(
            total_high_risk=0,
            ai_identified_high_risk=0,
            identification_rate=0,
            time_saved_per_case=0,
        )

    total_high_risk = sum(1 for r in records if r.is_high_risk)
    ai_identified = int(total_high_risk * AI_IDENTIFICATION_SHARE + 0.5)
    rate = (ai_identified / total_high_risk) * 100 if total_high_risk else 0
    return ImpactMetrics(
        total_high_risk=total_high_risk,
        ai_identified_high_risk=ai_identified,
        identification_rate=round(rate, 1),
        time_saved_per_case=BASELINE_HOURS_TO_IDENTIFY - AI_HOURS_TO_IDENTIFY,
    )


def _matches(record: PatientRecord, term: str) -> bool:
    for value in record.to_dict().values():
        if isinstance(value, bool):
            continue
        if isinstance(value, (str, int, float)) and term in str(value).lower():
            return True
    return False


def search_records(
    records: list[PatientRecord],
    term: str | None = None,
    condition: str | None = None,
    sort_key: str | None = None,
    descending: bool = False,
) -> list[PatientRecord]:
    """
    Filter and sort records the way the data explorer does.

    `term` matches case-insensitively against top-level text and number
    fields; `condition` is an exact label ("all" disables it); `sort_key`
    is one of SORTABLE_FIELDS. Raises ValueError for any other sort key.
    """
    if sort_key and sort_key not in SORTABLE_FIELDS:
        raise ValueError(f"Cannot sort by {sort_key!r}")

    results = list(records)
    if term:
        needle = term.lower()
        results = [r for r in results if _matches(r, needle)]
    if condition and condition != "all":
        results = [r for r in results if r.condition_assigned == condition]
    if sort_key:
        results.sort(key=lambda r: r.to_dict().get(sort_key, ""), reverse=descending)
    return results
