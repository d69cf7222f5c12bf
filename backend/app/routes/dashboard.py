"""Dashboard and export routes."""

from fastapi import APIRouter, Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.auth import get_current_viewer
from app.database import get_db, get_session_maker
from app.repositories.access import Viewer
from app.repositories.symptom import SymptomRepository
from app.schemas.symptom import DashboardResponse, RiskAssessmentResponse, SymptomEntryResponse
from app.services.dashboard import load_dashboard
from app.services.export import build_csv, export_filename

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardResponse)
async def get_dashboard(
    viewer: Viewer = Depends(get_current_viewer),
    session_maker: async_sessionmaker[AsyncSession] = Depends(get_session_maker),
) -> DashboardResponse:
    """Recent symptom entries and risk assessments with summary counts."""
    data = await load_dashboard(session_maker, viewer)
    return DashboardResponse(
        entries=[SymptomEntryResponse.model_validate(e) for e in data.entries],
        assessments=[RiskAssessmentResponse.model_validate(a) for a in data.assessments],
        total_entries=data.total_entries,
        total_assessments=data.total_assessments,
        latest_risk_level=data.latest_risk_level,
    )


@router.get("/export", response_class=Response)
async def export_history(
    db: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_current_viewer),
) -> Response:
    """Download the caller's full symptom history as CSV.

    Columns: Date, Symptoms, Risk Level, Notes. Entries without an
    assessment show "N/A" as risk level.
    """
    repo = SymptomRepository(db, viewer)
    entries, _ = await repo.list_entries(limit=None)
    assessments, _ = await repo.list_assessments(limit=None)

    return Response(
        content=build_csv(entries, assessments),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{export_filename()}"'},
    )
