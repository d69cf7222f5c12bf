"""Risk assessment API routes (read-only; assessments are written by intake)."""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import get_current_viewer
from app.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.database import get_db
from app.repositories.access import EntryNotFoundError, Viewer
from app.repositories.symptom import SymptomRepository
from app.schemas.symptom import RiskAssessmentListResponse, RiskAssessmentResponse

router = APIRouter(prefix="/assessments", tags=["assessments"])


@router.get("", response_model=RiskAssessmentListResponse)
async def list_assessments(
    db: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_current_viewer),
    skip: int = Query(0, ge=0),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    symptom_entry_id: uuid.UUID | None = None,
) -> RiskAssessmentListResponse:
    """List risk assessments visible to the caller, newest first.

    Args:
        skip: Number of records to skip (pagination offset).
        limit: Maximum number of records to return.
        symptom_entry_id: Only assessments for this entry.
    """
    assessments, total = await SymptomRepository(db, viewer).list_assessments(
        skip=skip,
        limit=limit,
        symptom_entry_id=symptom_entry_id,
    )
    return RiskAssessmentListResponse(
        items=[RiskAssessmentResponse.model_validate(a) for a in assessments],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/{assessment_id}", response_model=RiskAssessmentResponse)
async def get_assessment(
    assessment_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_current_viewer),
) -> RiskAssessmentResponse:
    """Get a single risk assessment.

    Raises:
        HTTPException: 404 if not found or not visible to the caller.
    """
    try:
        assessment = await SymptomRepository(db, viewer).get_assessment(assessment_id)
    except EntryNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return RiskAssessmentResponse.model_validate(assessment)
