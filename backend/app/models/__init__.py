"""SQLAlchemy models."""

from app.models.auth import AuthSession, AuthUser
from app.models.profile import Profile, ProfileRole
from app.models.symptom import RiskAssessment, RiskLevel, SymptomEntry

__all__ = [
    "AuthSession",
    "AuthUser",
    "Profile",
    "ProfileRole",
    "RiskAssessment",
    "RiskLevel",
    "SymptomEntry",
]
