"""
Synthetic cohort generation engines.
"""

from .random_source import RandomSource
from .synthesizer import RecordSynthesizer, is_maternal_condition
from .cohort import (
    DEFAULT_RECORDS_PER_CONDITION,
    CohortAssembler,
    ConditionFamily,
    generate_cohort,
)

__all__ = [
    "RandomSource",
    "RecordSynthesizer",
    "is_maternal_condition",
    "DEFAULT_RECORDS_PER_CONDITION",
    "CohortAssembler",
    "ConditionFamily",
    "generate_cohort",
]
