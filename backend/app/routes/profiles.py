"""Profile API routes."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import get_current_viewer, require_admin
from app.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.database import get_db
from app.repositories.access import Viewer
from app.repositories.profile import ProfileRepository
from app.schemas.profile import ProfileResponse, ProfileUpdate

router = APIRouter(tags=["profiles"])


@router.get("/profile", response_model=ProfileResponse)
async def get_my_profile(
    db: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_current_viewer),
) -> ProfileResponse:
    """Get the caller's own profile."""
    profile = await ProfileRepository(db).get_or_create(viewer.user_id)
    return ProfileResponse.model_validate(profile)


@router.patch("/profile", response_model=ProfileResponse)
async def update_my_profile(
    profile_data: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(get_current_viewer),
) -> ProfileResponse:
    """Update the caller's display name. The role cannot be changed here."""
    repo = ProfileRepository(db)
    profile = await repo.get_or_create(viewer.user_id)
    updates = profile_data.model_dump(exclude_unset=True)
    if "full_name" in updates:
        profile = await repo.update(profile, updates["full_name"])
    return ProfileResponse.model_validate(profile)


@router.get("/profiles", response_model=list[ProfileResponse])
async def list_profiles(
    db: AsyncSession = Depends(get_db),
    viewer: Viewer = Depends(require_admin),
    skip: int = Query(0, ge=0),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
) -> list[ProfileResponse]:
    """List all profiles (admin only)."""
    profiles = await ProfileRepository(db).list_all(viewer, skip=skip, limit=limit)
    return [ProfileResponse.model_validate(p) for p in profiles]
