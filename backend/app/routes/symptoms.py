"""Symptom entry API routes.

Submission (entry + AI assessment), listing, detail, edit, and delete.
"""

import uuid

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import get_current_viewer
from app.constants import COMMON_SYMPTOMS, DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.database import get_db
from app.repositories.access import AccessDeniedError, EntryNotFoundError, Viewer
from app.repositories.symptom import SymptomRepository
from app.routes.analysis import get_analysis_service
from app.schemas.symptom import (
    SubmissionResponse,
    SymptomEntryCreate,
    SymptomEntryListResponse,
    SymptomEntryResponse,
    SymptomEntryUpdate,
)
from app.services.analysis import SymptomAnalysisService
from app.services.intake import submit_symptoms

router = APIRouter(prefix="/symptoms", tags=["symptoms"])


def _not_found(e: EntryNotFoundError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _forbidden(e: AccessDeniedError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


@router.get("/catalog", response_model=list[str])
async def symptom_catalog() -> list[str]:
    """Symptom labels offered by the intake form."""
    return list(COMMON_SYMPTOMS)


@router.post("", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def create_symptom_entry(
    entry_data: SymptomEntryCreate,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_current_viewer),
    analyzer: SymptomAnalysisService = Depends(get_analysis_service),
) -> SubmissionResponse:
    """Log symptoms and request an AI risk assessment.

    The entry is stored first and kept even if the analysis fails; in that
    case ``analysis`` is null and ``analysis_error`` carries the message.

    Args:
        entry_data: Selected symptoms (at least one) and optional notes.

    Returns:
        The stored entry with the analysis outcome.
    """
    result = await submit_symptoms(db, viewer, entry_data, analyzer)
    return SubmissionResponse(
        entry=result.entry,
        analysis=result.analysis,
        assessment_id=result.assessment_id,
        analysis_error=result.analysis_error,
        used_fallback=result.used_fallback,
    )


@router.get("", response_model=SymptomEntryListResponse)
async def list_symptom_entries(
    db: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_current_viewer),
    skip: int = Query(0, ge=0),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> SymptomEntryListResponse:
    """List symptom entries visible to the caller, newest first.

    Patients see their own entries; admins see everyone's.
    """
    entries, total = await SymptomRepository(db, viewer).list_entries(skip=skip, limit=limit)
    return SymptomEntryListResponse(
        items=[SymptomEntryResponse.model_validate(e) for e in entries],
        total=total,
        skip=skip,
        limit=limit,
    )


@router.get("/{entry_id}", response_model=SymptomEntryResponse)
async def get_symptom_entry(
    entry_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_current_viewer),
) -> SymptomEntryResponse:
    """Get a single symptom entry.

    Raises:
        HTTPException: 404 if not found or not visible to the caller.
    """
    try:
        entry = await SymptomRepository(db, viewer).get_entry(entry_id)
    except EntryNotFoundError as e:
        raise _not_found(e)
    return SymptomEntryResponse.model_validate(entry)


@router.patch("/{entry_id}", response_model=SymptomEntryResponse)
async def update_symptom_entry(
    entry_id: uuid.UUID,
    entry_data: SymptomEntryUpdate,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_current_viewer),
) -> SymptomEntryResponse:
    """Edit symptoms or notes on one of the caller's entries.

    Raises:
        HTTPException: 404 if not visible, 403 if visible but not owned.
    """
    try:
        entry = await SymptomRepository(db, viewer).update_entry(entry_id, entry_data)
    except EntryNotFoundError as e:
        raise _not_found(e)
    except AccessDeniedError as e:
        raise _forbidden(e)
    return SymptomEntryResponse.model_validate(entry)


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_symptom_entry(
    entry_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_current_viewer),
) -> None:
    """Delete one of the caller's entries and its assessments.

    Raises:
        HTTPException: 404 if not visible, 403 if visible but not owned.
    """
    try:
        await SymptomRepository(db, viewer).delete_entry(entry_id)
    except EntryNotFoundError as e:
        raise _not_found(e)
    except AccessDeniedError as e:
        raise _forbidden(e)
