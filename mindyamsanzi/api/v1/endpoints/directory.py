from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from mindyamsanzi.core.auth import CurrentUser, get_optional_user
from mindyamsanzi.core.database import get_db
from mindyamsanzi.schemas.directory import MentorDirectoryResponse, SupportDirectoryResponse
from mindyamsanzi.services.directory_service import DirectoryService, split_by_location
from mindyamsanzi.services.profile_service import ProfileService

router = APIRouter()


async def _location_key(
    db: AsyncSession,
    current_user: Optional[CurrentUser],
    location: Optional[str]
) -> Optional[str]:
    if location:
        return location
    if current_user is None:
        return None
    profile = await ProfileService(db).get_profile(current_user.id)
    return profile.location_key if profile else None


@router.get("/mentors", response_model=MentorDirectoryResponse)
async def list_mentors(
    location: Optional[str] = Query(None, description="Overrides the caller's profile location"),
    current_user: Optional[CurrentUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Available mentors, split into those near the student and the rest"""
    location_key = await _location_key(db, current_user, location)
    mentors = await DirectoryService(db).list_mentors()
    near_you, other = split_by_location(mentors, location_key)
    return MentorDirectoryResponse(location=location_key, near_you=near_you, other=other)


@router.get("/support-resources", response_model=SupportDirectoryResponse)
async def list_support_resources(
    resource_type: Optional[str] = Query(None, description="tutoring, psychosocial, mentorship or career"),
    location: Optional[str] = Query(None, description="Overrides the caller's profile location"),
    current_user: Optional[CurrentUser] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Available support resources, split into those near the student and the rest"""
    location_key = await _location_key(db, current_user, location)
    resources = await DirectoryService(db).list_resources(resource_type=resource_type)
    near_you, other = split_by_location(resources, location_key)
    return SupportDirectoryResponse(location=location_key, near_you=near_you, other=other)
