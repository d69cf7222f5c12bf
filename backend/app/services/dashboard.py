"""Dashboard data loading.

The dashboard shows the most recent entries and assessments side by side.
The two reads are independent, so they run concurrently, each on its own
session (an AsyncSession must not be shared between concurrent tasks).
"""

import asyncio
import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.constants import DASHBOARD_RECENT_LIMIT
from app.database import CURRENT_USER_SETTING
from app.models.symptom import RiskAssessment, SymptomEntry
from app.repositories.access import Viewer
from app.repositories.symptom import SymptomRepository

logger = logging.getLogger(__name__)


@dataclass
class DashboardData:
    """Recent rows plus totals across everything the viewer can see."""

    entries: list[SymptomEntry]
    assessments: list[RiskAssessment]
    total_entries: int
    total_assessments: int

    @property
    def latest_risk_level(self) -> str | None:
        return self.assessments[0].risk_level.value if self.assessments else None


async def _load_entries(
    session_maker: async_sessionmaker[AsyncSession],
    viewer: Viewer,
    limit: int,
) -> tuple[list[SymptomEntry], int]:
    async with session_maker(info={CURRENT_USER_SETTING: viewer.user_id}) as db:
        return await SymptomRepository(db, viewer).list_entries(limit=limit)


async def _load_assessments(
    session_maker: async_sessionmaker[AsyncSession],
    viewer: Viewer,
    limit: int,
) -> tuple[list[RiskAssessment], int]:
    async with session_maker(info={CURRENT_USER_SETTING: viewer.user_id}) as db:
        return await SymptomRepository(db, viewer).list_assessments(limit=limit)


async def load_dashboard(
    session_maker: async_sessionmaker[AsyncSession],
    viewer: Viewer,
    limit: int = DASHBOARD_RECENT_LIMIT,
) -> DashboardData:
    """Load recent entries and assessments concurrently.

    Args:
        session_maker: Factory for independent sessions.
        viewer: Identity the reads are scoped to.
        limit: Maximum rows of each kind.

    Returns:
        DashboardData with newest-first rows. Either read failing fails the
        whole load.
    """
    (entries, total_entries), (assessments, total_assessments) = await asyncio.gather(
        _load_entries(session_maker, viewer, limit),
        _load_assessments(session_maker, viewer, limit),
    )
    logger.debug(
        "Dashboard for %s: %d/%d entries, %d/%d assessments",
        viewer.user_id, len(entries), total_entries, len(assessments), total_assessments,
    )
    return DashboardData(
        entries=entries,
        assessments=assessments,
        total_entries=total_entries,
        total_assessments=total_assessments,
    )
