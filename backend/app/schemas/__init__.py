"""Pydantic schemas."""

from app.schemas.analysis import (
    FALLBACK_ANALYSIS,
    AnalyzeRequest,
    Condition,
    ErrorResponse,
    RiskAnalysis,
    RiskLevel,
)
from app.schemas.profile import ProfileResponse, ProfileRole, ProfileUpdate
from app.schemas.symptom import (
    DashboardResponse,
    RiskAssessmentListResponse,
    RiskAssessmentResponse,
    SubmissionResponse,
    SymptomEntryCreate,
    SymptomEntryListResponse,
    SymptomEntryResponse,
    SymptomEntryUpdate,
)

__all__ = [
    # Analysis schemas
    "AnalyzeRequest",
    "Condition",
    "ErrorResponse",
    "FALLBACK_ANALYSIS",
    "RiskAnalysis",
    "RiskLevel",
    # Profile schemas
    "ProfileResponse",
    "ProfileRole",
    "ProfileUpdate",
    # Symptom schemas
    "DashboardResponse",
    "RiskAssessmentListResponse",
    "RiskAssessmentResponse",
    "SubmissionResponse",
    "SymptomEntryCreate",
    "SymptomEntryListResponse",
    "SymptomEntryResponse",
    "SymptomEntryUpdate",
]
