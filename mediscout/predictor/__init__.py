"""
Simulated AI symptom prediction.
"""

from .matcher import (
    DEFAULT_DELAY_SECONDS,
    GENERAL_CHECKUP,
    NO_IMAGE_ANALYSIS,
    SymptomMatcher,
    condition_keywords,
)

__all__ = [
    "DEFAULT_DELAY_SECONDS",
    "GENERAL_CHECKUP",
    "NO_IMAGE_ANALYSIS",
    "SymptomMatcher",
    "condition_keywords",
]
