"""Data access repositories."""

from app.repositories.access import AccessDeniedError, EntryNotFoundError, Viewer
from app.repositories.profile import ProfileRepository
from app.repositories.symptom import SymptomRepository

__all__ = [
    "AccessDeniedError",
    "EntryNotFoundError",
    "ProfileRepository",
    "SymptomRepository",
    "Viewer",
]
