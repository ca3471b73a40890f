from typing import Optional
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mindyamsanzi.core.database import as_uuid
from mindyamsanzi.core.exceptions import NotFoundError
from mindyamsanzi.models.student_profile import StudentProfile
from mindyamsanzi.schemas.profile import ProfileCreateRequest, ProfileUpdateRequest

logger = logging.getLogger(__name__)


class ProfileService:
    """Student profiles, one per identity, changed only by their owner"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_profile(self, student_id) -> Optional[StudentProfile]:
        result = await self.db.execute(
            select(StudentProfile).where(StudentProfile.id == as_uuid(student_id))
        )
        return result.scalar_one_or_none()

    async def get_or_create_profile(self, student_id, data: ProfileCreateRequest) -> StudentProfile:
        """Create the profile for a new identity; an existing profile is returned untouched"""
        profile = await self.get_profile(student_id)
        if profile:
            return profile

        profile = StudentProfile(
            id=as_uuid(student_id),
            full_name=data.full_name or "Student",
            location=data.location or "",
            municipality=data.municipality,
            grade=data.grade,
            school_name=data.school_name,
        )
        self.db.add(profile)
        await self.db.commit()
        await self.db.refresh(profile)

        logger.info(f"Created profile for student {profile.id}")
        return profile

    async def update_profile(self, student_id, data: ProfileUpdateRequest) -> StudentProfile:
        profile = await self.get_profile(student_id)
        if not profile:
            raise NotFoundError("Profile not found")

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(profile, field, value)

        await self.db.commit()
        await self.db.refresh(profile)
        return profile
