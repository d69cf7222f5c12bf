"""Schemas for the symptom analysis contract.

RiskAnalysis is both the shape the language model is instructed to return
and the response body of the analysis endpoint. Keys are camelCase on the
wire (``riskLevel``) to match the prompt.
"""

from enum import Enum
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from app.constants import MAX_SYMPTOM_LENGTH, MAX_SYMPTOMS_PER_ENTRY

MAX_CONDITIONS = 3

SymptomLabel = Annotated[str, Field(min_length=1, max_length=MAX_SYMPTOM_LENGTH)]


class RiskLevel(str, Enum):
    """Overall risk level (matches the SQLAlchemy enum)."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Condition(BaseModel):
    """A candidate condition with its estimated likelihood."""

    name: str = Field(min_length=1, description="Condition name")
    probability: int = Field(ge=0, le=100, description="Estimated likelihood, 0-100")
    explanation: str = Field(description="Brief explanation of why it matches")


class RiskAnalysis(BaseModel):
    """Structured, educational risk assessment for a set of symptoms."""

    model_config = ConfigDict(populate_by_name=True)

    conditions: list[Condition] = Field(
        max_length=MAX_CONDITIONS,
        description="Up to three candidate conditions, most likely first",
    )
    risk_level: RiskLevel = Field(alias="riskLevel", description="Overall risk level")
    recommendations: list[str] = Field(description="Suggested next steps")
    disclaimer: str = Field(description="Non-diagnostic disclaimer")

    def to_payload(self) -> dict:
        """Serialize with wire (camelCase) keys, as stored in predictions."""
        return self.model_dump(mode="json", by_alias=True)


class AnalyzeRequest(BaseModel):
    """Request body for the analysis endpoint."""

    symptoms: list[SymptomLabel] = Field(
        min_length=1,
        max_length=MAX_SYMPTOMS_PER_ENTRY,
        description="Symptom labels to analyze",
    )


class ErrorResponse(BaseModel):
    """Error body returned by the analysis endpoint."""

    error: str


FALLBACK_ANALYSIS = RiskAnalysis(
    conditions=[
        Condition(
            name="Multiple Symptoms",
            probability=60,
            explanation=(
                "Based on the symptoms provided, we recommend consulting a "
                "healthcare professional for proper evaluation."
            ),
        )
    ],
    risk_level=RiskLevel.MEDIUM,
    recommendations=[
        "Consult a healthcare professional",
        "Monitor your symptoms",
        "Stay hydrated and rest",
    ],
    disclaimer=(
        "This is not a medical diagnosis. Please consult a healthcare "
        "professional for proper evaluation."
    ),
)
