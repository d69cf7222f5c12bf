"""Profile repository."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.auth import AuthUser
from app.models.profile import Profile, ProfileRole
from app.repositories.access import Viewer

logger = logging.getLogger(__name__)


class ProfileRepository:
    """Repository for Profile rows."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, user_id: str) -> Profile | None:
        result = await self.db.execute(select(Profile).where(Profile.id == user_id))
        return result.scalar_one_or_none()

    async def get_or_create(self, user_id: str) -> Profile:
        """Return the user's profile, creating a patient profile if missing.

        In PostgreSQL the signup trigger normally creates the row; this
        covers identities created before the trigger and other databases.
        The display name is taken from the identity record when available.
        If another transaction inserts the row first, this session is rolled
        back and the winning row is returned, so call it before other writes.
        """
        profile = await self.get(user_id)
        if profile is not None:
            return profile

        user = await self.db.get(AuthUser, user_id)
        profile = Profile(
            id=user_id,
            role=ProfileRole.PATIENT,
            full_name=user.name if user is not None else "",
        )
        self.db.add(profile)
        try:
            await self.db.flush()
        except IntegrityError:
            await self.db.rollback()
            existing = await self.get(user_id)
            if existing is None:
                raise
            logger.info("Profile for user %s was created concurrently", user_id)
            return existing
        await self.db.refresh(profile)
        logger.info("Created profile for user %s", user_id)
        return profile

    async def update(self, profile: Profile, full_name: str | None) -> Profile:
        """Update the display name; updated_at is stamped on flush."""
        profile.full_name = full_name
        await self.db.flush()
        await self.db.refresh(profile)
        return profile

    async def list_all(self, viewer: Viewer, skip: int = 0, limit: int = 50) -> list[Profile]:
        """List profiles visible to the viewer (all for admins, own otherwise)."""
        query = select(Profile)
        if not viewer.is_admin:
            query = query.where(Profile.id == viewer.user_id)
        query = query.order_by(Profile.created_at.desc()).offset(skip).limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())
