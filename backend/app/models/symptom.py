"""Symptom entry and risk assessment models.

A SymptomEntry is one user submission (selected symptom labels plus notes).
A RiskAssessment stores the AI analysis produced for an entry. The schema
allows zero or many assessments per entry; the intake flow writes one.
"""

from __future__ import annotations

import enum
import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Enum, ForeignKey, Index, Text, Uuid, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.database import Base

# JSONB on PostgreSQL, plain JSON elsewhere
JsonDocument = JSON().with_variant(JSONB(), "postgresql")


class RiskLevel(str, enum.Enum):
    """Coarse urgency classification of an assessment."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class SymptomEntry(Base):
    """A user-submitted set of symptom labels with optional notes."""

    __tablename__ = "symptom_entries"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    user_id: Mapped[str] = mapped_column(
        Text,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    symptoms: Mapped[list[str]] = mapped_column(JsonDocument, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    assessments: Mapped[list[RiskAssessment]] = relationship(
        back_populates="symptom_entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("idx_symptom_entries_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<SymptomEntry(id={self.id}, user_id={self.user_id}, symptoms={len(self.symptoms)})>"


class RiskAssessment(Base):
    """AI-derived risk assessment linked to one symptom entry."""

    __tablename__ = "risk_assessments"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )
    symptom_entry_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("symptom_entries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user_id: Mapped[str] = mapped_column(
        Text,
        ForeignKey("user.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Full analysis payload as returned to the client (camelCase keys)
    predictions: Mapped[dict[str, Any]] = mapped_column(JsonDocument, nullable=False)
    risk_level: Mapped[RiskLevel] = mapped_column(
        Enum(
            RiskLevel,
            name="risk_level",
            create_constraint=True,
            values_callable=lambda levels: [lvl.value for lvl in levels],
        ),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    symptom_entry: Mapped[SymptomEntry] = relationship(back_populates="assessments")

    def __repr__(self) -> str:
        return f"<RiskAssessment(id={self.id}, entry={self.symptom_entry_id}, risk={self.risk_level})>"
