"""
Data models for MediScout.
"""

from .record import (
    COHORT_STORAGE_KEY,
    HIGH_RISK_THRESHOLD,
    MAX_COHORT_SIZE,
    CamelModel,
    Gender,
    ImageAnalysis,
    PatientRecord,
    RecordOverrides,
    Vitals,
)
from .user import (
    CURRENT_USER_STORAGE_KEY,
    USERS_STORAGE_KEY,
    AiPrediction,
    ImageDescriptor,
    Prediction,
    RegistrationRequest,
    SelfReportedVitals,
    SubmittedHealthRecord,
    UserAccount,
)

__all__ = [
    "COHORT_STORAGE_KEY",
    "HIGH_RISK_THRESHOLD",
    "MAX_COHORT_SIZE",
    "CamelModel",
    "Gender",
    "ImageAnalysis",
    "PatientRecord",
    "RecordOverrides",
    "Vitals",
    "CURRENT_USER_STORAGE_KEY",
    "USERS_STORAGE_KEY",
    "AiPrediction",
    "ImageDescriptor",
    "Prediction",
    "RegistrationRequest",
    "SelfReportedVitals",
    "SubmittedHealthRecord",
    "UserAccount",
]
