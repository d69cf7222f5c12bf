"""Seed an admin identity with an admin profile.

Reads ADMIN_EMAIL and ADMIN_NAME from environment / .env and creates the
user, an admin profile, and a 7-day session whose token can be used as a
bearer token immediately.

Usage:
    python -m app.scripts.seed_admin

Idempotent: if the user already exists, its profile is promoted to admin.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy import select, text
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import async_session_maker, engine
from app.models.auth import AuthSession, AuthUser
from app.models.profile import Profile, ProfileRole

logger = logging.getLogger(__name__)

SESSION_LIFETIME = timedelta(days=7)


async def seed_admin_user(db: AsyncSession, email: str, name: str) -> tuple[str, str | None]:
    """Create or promote the admin user.

    Returns:
        (user_id, session_token). The token is None when the user existed.
    """
    result = await db.execute(select(AuthUser).where(AuthUser.email == email))
    existing = result.scalar_one_or_none()

    if existing is not None:
        profile = await db.get(Profile, existing.id)
        if profile is None:
            db.add(Profile(id=existing.id, role=ProfileRole.ADMIN, full_name=existing.name))
        else:
            profile.role = ProfileRole.ADMIN
        await db.flush()
        return existing.id, None

    now = datetime.now(timezone.utc)
    user_id = str(uuid.uuid4())
    session_token = str(uuid.uuid4())

    db.add(
        AuthUser(
            id=user_id,
            name=name,
            email=email,
            emailVerified=True,
            createdAt=now,
            updatedAt=now,
        )
    )
    await db.flush()

    # The signup trigger may already have created a patient profile
    profile = await db.get(Profile, user_id)
    if profile is None:
        db.add(Profile(id=user_id, role=ProfileRole.ADMIN, full_name=name))
    else:
        profile.role = ProfileRole.ADMIN

    db.add(
        AuthSession(
            id=str(uuid.uuid4()),
            token=session_token,
            userId=user_id,
            expiresAt=now + SESSION_LIFETIME,
            createdAt=now,
            updatedAt=now,
        )
    )
    await db.flush()
    return user_id, session_token


async def seed_admin() -> None:
    email = settings.admin_email
    name = settings.admin_name.strip() or "Admin"

    if not email:
        logger.error("ADMIN_EMAIL must be set in .env")
        return

    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("PostgreSQL: connected")

    async with async_session_maker() as session:
        user_id, token = await seed_admin_user(session, email, name)
        await session.commit()

    if token is None:
        logger.info("Admin user already exists, profile promoted: %s (id=%s)", email, user_id)
    else:
        logger.info("Admin user created: %s (id=%s)", email, user_id)
        print(f"Bearer token: {token}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="  %(message)s")
    asyncio.run(seed_admin())
