"""User profile model (one per identity)."""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class ProfileRole(str, enum.Enum):
    """Access role attached to a profile."""

    PATIENT = "patient"
    ADMIN = "admin"


class Profile(Base):
    """Profile keyed by the identity's user id.

    Created automatically for every identity (database trigger on signup,
    or on first authenticated request). The role decides whether the user
    may read other users' rows.
    """

    __tablename__ = "profiles"

    id: Mapped[str] = mapped_column(
        Text,
        ForeignKey("user.id", ondelete="CASCADE"),
        primary_key=True,
    )
    role: Mapped[ProfileRole] = mapped_column(
        Enum(
            ProfileRole,
            name="profile_role",
            create_constraint=True,
            values_callable=lambda roles: [r.value for r in roles],
        ),
        nullable=False,
        default=ProfileRole.PATIENT,
        server_default=ProfileRole.PATIENT.value,
    )
    full_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == ProfileRole.ADMIN

    def __repr__(self) -> str:
        return f"<Profile(id={self.id}, role={self.role})>"
