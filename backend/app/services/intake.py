"""Symptom submission flow.

Submitting symptoms is a two-step write with an AI call in between:

1. Persist the SymptomEntry and commit. If this fails, nothing else runs.
2. Analyze the symptoms. On failure the entry is kept without an
   assessment; the caller gets the error message alongside the entry.
3. Persist the RiskAssessment and commit. On failure the write is rolled
   back and logged; the caller still gets the analysis.

"Entry without assessment" is therefore a normal, recoverable state: the
entry is listed everywhere and its export row reads "N/A".
"""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.symptom import RiskLevel
from app.repositories.access import Viewer
from app.repositories.symptom import SymptomRepository
from app.schemas.analysis import RiskAnalysis
from app.schemas.symptom import SymptomEntryCreate, SymptomEntryResponse
from app.services.analysis import AnalysisError, SymptomAnalysisService

logger = logging.getLogger(__name__)

ANALYSIS_FAILED_MESSAGE = "Failed to get AI analysis"


@dataclass
class SubmissionResult:
    """Everything the intake flow produced."""

    entry: SymptomEntryResponse
    analysis: RiskAnalysis | None = None
    assessment_id: uuid.UUID | None = None
    analysis_error: str | None = None
    used_fallback: bool = False


async def submit_symptoms(
    db: AsyncSession,
    viewer: Viewer,
    data: SymptomEntryCreate,
    analyzer: SymptomAnalysisService,
) -> SubmissionResult:
    """Record a symptom entry and attach an AI risk assessment.

    Args:
        db: Request database session. Committed after each step.
        viewer: Authenticated submitter; owns the created rows.
        data: Validated submission (non-empty symptom list).
        analyzer: Analysis service used for the AI call.

    Returns:
        SubmissionResult. Only the entry write can raise.
    """
    repo = SymptomRepository(db, viewer)

    entry = await repo.create_entry(data)
    await db.commit()
    logger.info("Stored symptom entry %s for user %s", entry.id, viewer.user_id)

    # Snapshot now: a later rollback expires the ORM instance
    result = SubmissionResult(entry=SymptomEntryResponse.model_validate(entry))

    try:
        outcome = await analyzer.analyze(list(result.entry.symptoms))
    except AnalysisError as e:
        logger.error("Analysis failed for entry %s: %s", result.entry.id, e.message)
        result.analysis_error = e.message
        return result
    except Exception:
        logger.exception("Unexpected analysis failure for entry %s", result.entry.id)
        result.analysis_error = ANALYSIS_FAILED_MESSAGE
        return result

    result.analysis = outcome.analysis
    result.used_fallback = outcome.used_fallback

    try:
        assessment = await repo.create_assessment(
            entry,
            predictions=outcome.analysis.to_payload(),
            risk_level=RiskLevel(outcome.analysis.risk_level.value),
        )
        await db.commit()
        result.assessment_id = assessment.id
    except Exception:
        await db.rollback()
        logger.exception("Failed to store risk assessment for entry %s", result.entry.id)

    return result
