"""Pydantic schemas for symptom entries, assessments, and the dashboard."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.constants import MAX_NOTES_LENGTH, MAX_SYMPTOMS_PER_ENTRY
from app.schemas.analysis import RiskAnalysis, RiskLevel, SymptomLabel


# === Symptom entries ===


class SymptomEntryCreate(BaseModel):
    """Schema for submitting a new symptom entry."""

    symptoms: list[SymptomLabel] = Field(
        min_length=1,
        max_length=MAX_SYMPTOMS_PER_ENTRY,
        description="Selected symptom labels, in selection order",
    )
    notes: str | None = Field(default=None, max_length=MAX_NOTES_LENGTH)


class SymptomEntryUpdate(BaseModel):
    """Schema for editing an entry. The owner cannot be changed."""

    symptoms: list[SymptomLabel] | None = Field(
        default=None,
        min_length=1,
        max_length=MAX_SYMPTOMS_PER_ENTRY,
    )
    notes: str | None = Field(default=None, max_length=MAX_NOTES_LENGTH)


class SymptomEntryResponse(BaseModel):
    """Schema for a symptom entry in API responses."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: str
    symptoms: list[str]
    notes: str | None
    created_at: datetime


class SymptomEntryListResponse(BaseModel):
    """Paginated list of symptom entries."""

    items: list[SymptomEntryResponse]
    total: int
    skip: int
    limit: int


# === Risk assessments ===


class RiskAssessmentResponse(BaseModel):
    """Schema for a stored risk assessment."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    symptom_entry_id: UUID
    user_id: str
    predictions: dict[str, Any] = Field(description="Analysis payload as returned by the analysis endpoint")
    risk_level: RiskLevel
    created_at: datetime


class RiskAssessmentListResponse(BaseModel):
    """Paginated list of risk assessments."""

    items: list[RiskAssessmentResponse]
    total: int
    skip: int
    limit: int


# === Submission ===


class SubmissionResponse(BaseModel):
    """Outcome of the intake flow.

    The entry is always present. ``analysis`` is null when the analysis call
    failed (see ``analysis_error``). ``assessment_id`` is null when the
    analysis could not be stored.
    """

    entry: SymptomEntryResponse
    analysis: RiskAnalysis | None = None
    assessment_id: UUID | None = None
    analysis_error: str | None = None
    used_fallback: bool = False


# === Dashboard ===


class DashboardResponse(BaseModel):
    """Recent entries and assessments with summary counts."""

    entries: list[SymptomEntryResponse]
    assessments: list[RiskAssessmentResponse]
    total_entries: int
    total_assessments: int
    latest_risk_level: RiskLevel | None = Field(
        default=None,
        description="Risk level of the most recent assessment",
    )
