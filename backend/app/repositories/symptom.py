"""Symptom entry and risk assessment repository.

All reads are scoped to the viewer (see app.repositories.access). Writes
only flush; committing is left to the caller so multi-step flows decide
their own transaction boundaries.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.symptom import RiskAssessment, RiskLevel, SymptomEntry
from app.repositories.access import EntryNotFoundError, Viewer, ensure_owner, scope_to_viewer

if TYPE_CHECKING:
    from app.schemas.symptom import SymptomEntryCreate, SymptomEntryUpdate


class SymptomRepository:
    """Repository for SymptomEntry and RiskAssessment rows."""

    def __init__(self, db: AsyncSession, viewer: Viewer):
        self.db = db
        self.viewer = viewer

    # --- Symptom entries ---

    async def create_entry(self, data: SymptomEntryCreate) -> SymptomEntry:
        """Create an entry owned by the viewer."""
        entry = SymptomEntry(
            user_id=self.viewer.user_id,
            symptoms=list(data.symptoms),
            notes=data.notes or None,
        )
        self.db.add(entry)
        await self.db.flush()
        await self.db.refresh(entry)
        return entry

    async def get_entry(self, entry_id: uuid.UUID) -> SymptomEntry:
        """Fetch an entry visible to the viewer.

        Raises:
            EntryNotFoundError: If missing or owned by someone else (non-admin).
        """
        query = scope_to_viewer(
            select(SymptomEntry).where(SymptomEntry.id == entry_id),
            SymptomEntry.user_id,
            self.viewer,
        )
        result = await self.db.execute(query)
        entry = result.scalar_one_or_none()
        if entry is None:
            raise EntryNotFoundError(f"Symptom entry {entry_id} not found")
        return entry

    async def list_entries(self, skip: int = 0, limit: int | None = 50) -> tuple[list[SymptomEntry], int]:
        """List visible entries, newest first, with the total count."""
        count_query = scope_to_viewer(
            select(func.count()).select_from(SymptomEntry),
            SymptomEntry.user_id,
            self.viewer,
        )
        total = (await self.db.execute(count_query)).scalar() or 0

        query = scope_to_viewer(select(SymptomEntry), SymptomEntry.user_id, self.viewer)
        query = query.order_by(SymptomEntry.created_at.desc()).offset(skip).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all()), total

    async def update_entry(self, entry_id: uuid.UUID, data: SymptomEntryUpdate) -> SymptomEntry:
        """Update symptoms/notes on an entry the viewer owns."""
        entry = await self.get_entry(entry_id)
        ensure_owner(entry.user_id, self.viewer)

        updates = data.model_dump(exclude_unset=True)
        if updates.get("symptoms") is not None:
            entry.symptoms = list(updates["symptoms"])
        if "notes" in updates:
            entry.notes = updates["notes"] or None

        await self.db.flush()
        await self.db.refresh(entry)
        return entry

    async def delete_entry(self, entry_id: uuid.UUID) -> None:
        """Delete an entry the viewer owns; its assessments cascade."""
        entry = await self.get_entry(entry_id)
        ensure_owner(entry.user_id, self.viewer)
        await self.db.delete(entry)
        await self.db.flush()

    # --- Risk assessments ---

    async def create_assessment(
        self,
        entry: SymptomEntry,
        predictions: dict[str, Any],
        risk_level: RiskLevel,
    ) -> RiskAssessment:
        """Store an assessment for an entry the viewer owns."""
        ensure_owner(entry.user_id, self.viewer)
        assessment = RiskAssessment(
            symptom_entry_id=entry.id,
            user_id=self.viewer.user_id,
            predictions=predictions,
            risk_level=risk_level,
        )
        self.db.add(assessment)
        await self.db.flush()
        await self.db.refresh(assessment)
        return assessment

    async def get_assessment(self, assessment_id: uuid.UUID) -> RiskAssessment:
        """Fetch an assessment visible to the viewer."""
        query = scope_to_viewer(
            select(RiskAssessment).where(RiskAssessment.id == assessment_id),
            RiskAssessment.user_id,
            self.viewer,
        )
        result = await self.db.execute(query)
        assessment = result.scalar_one_or_none()
        if assessment is None:
            raise EntryNotFoundError(f"Risk assessment {assessment_id} not found")
        return assessment

    async def list_assessments(
        self,
        skip: int = 0,
        limit: int | None = 50,
        symptom_entry_id: uuid.UUID | None = None,
    ) -> tuple[list[RiskAssessment], int]:
        """List visible assessments, newest first, with the total count."""
        query = scope_to_viewer(select(RiskAssessment), RiskAssessment.user_id, self.viewer)
        count_query = scope_to_viewer(
            select(func.count()).select_from(RiskAssessment),
            RiskAssessment.user_id,
            self.viewer,
        )

        if symptom_entry_id:
            query = query.where(RiskAssessment.symptom_entry_id == symptom_entry_id)
            count_query = count_query.where(RiskAssessment.symptom_entry_id == symptom_entry_id)

        total = (await self.db.execute(count_query)).scalar() or 0

        query = query.order_by(RiskAssessment.created_at.desc()).offset(skip).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all()), total
