"""Bearer token authentication via the identity provider's session table."""

from datetime import datetime, timezone

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db, set_current_user
from app.models.auth import AuthSession
from app.repositories.access import Viewer
from app.repositories.profile import ProfileRepository

bearer_scheme = HTTPBearer(auto_error=False)


async def verify_bearer_token(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> str:
    """Validate a bearer token against the session table.

    Returns:
        The authenticated user_id.

    Raises:
        HTTPException: 401 if token is missing, invalid, or expired.
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authentication token",
        )

    token = credentials.credentials
    result = await db.execute(
        select(AuthSession).where(
            AuthSession.token == token,
            AuthSession.expiresAt > datetime.now(timezone.utc),
        )
    )
    session = result.scalar_one_or_none()

    if session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    return session.userId


async def get_current_viewer(
    user_id: str = Depends(verify_bearer_token),
    db: AsyncSession = Depends(get_db),
) -> Viewer:
    """Resolve the authenticated user's profile into a Viewer.

    Creates the profile on first use so every identity has one. The
    session runs as this user for PostgreSQL row-level security from here on.
    """
    await set_current_user(db, user_id)
    profile = await ProfileRepository(db).get_or_create(user_id)
    return Viewer(user_id=profile.id, role=profile.role)


async def require_admin(viewer: Viewer = Depends(get_current_viewer)) -> Viewer:
    """Allow only admin viewers.

    Raises:
        HTTPException: 403 for non-admin users.
    """
    if not viewer.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return viewer
