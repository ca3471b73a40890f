from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from mindyamsanzi.core.auth import CurrentUser, get_current_user
from mindyamsanzi.core.database import get_db
from mindyamsanzi.core.exceptions import NotFoundError
from mindyamsanzi.schemas.profile import ProfileCreateRequest, ProfileResponse, ProfileUpdateRequest
from mindyamsanzi.services.profile_service import ProfileService

router = APIRouter()


@router.post("/", response_model=ProfileResponse, status_code=status.HTTP_201_CREATED)
async def create_profile(
    request: ProfileCreateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create the caller's profile on first sign-in (returns the existing one if present)"""
    return await ProfileService(db).get_or_create_profile(current_user.id, request)


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    profile = await ProfileService(db).get_profile(current_user.id)
    if not profile:
        raise NotFoundError("Profile not found")
    return profile


@router.patch("/me", response_model=ProfileResponse)
async def update_my_profile(
    request: ProfileUpdateRequest,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ProfileService(db).update_profile(current_user.id, request)
