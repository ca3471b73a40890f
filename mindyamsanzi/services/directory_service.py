from typing import List, Optional, Sequence, Tuple, TypeVar, Union
import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from mindyamsanzi.models.directory import Mentor, SupportResource, ResourceType

logger = logging.getLogger(__name__)

Entry = TypeVar("Entry", Mentor, SupportResource)


SAMPLE_MENTORS = [
    {
        "name": "Thabo Mthembu",
        "expertise": "Mathematics & Engineering",
        "location": "eMalahleni",
        "municipality": "Nkangala",
        "contact_info": "thabo.m@email.com",
        "bio": "Former township student, now civil engineer. Passionate about helping youth see possibilities in STEM.",
    },
    {
        "name": "Nomsa Khumalo",
        "expertise": "Career Guidance & Life Skills",
        "location": "Middelburg",
        "municipality": "Nkangala",
        "contact_info": "nomsa.k@email.com",
        "bio": "Community leader and youth counselor with 10 years experience in township education.",
    },
    {
        "name": "Sipho Ndlovu",
        "expertise": "Science & Technology",
        "location": "KwaMhlanga",
        "municipality": "Nkangala",
        "contact_info": "sipho.n@email.com",
        "bio": "IT professional giving back to the community. Specializes in science tutoring and tech mentorship.",
    },
]

SAMPLE_RESOURCES = [
    {
        "resource_type": ResourceType.TUTORING.value,
        "name": "Nkangala Youth Education Hub",
        "description": "Free after-school tutoring in Math, Science, and English",
        "location": "eMalahleni",
        "municipality": "Nkangala",
        "contact_info": "013-123-4567",
    },
    {
        "resource_type": ResourceType.PSYCHOSOCIAL.value,
        "name": "Ubuntu Wellness Centre",
        "description": "Counseling and mental health support for students",
        "location": "Middelburg",
        "municipality": "Nkangala",
        "contact_info": "013-234-5678",
    },
    {
        "resource_type": ResourceType.MENTORSHIP.value,
        "name": "Future Leaders Program",
        "description": "Mentorship program connecting students with professionals",
        "location": "KwaMhlanga",
        "municipality": "Nkangala",
        "contact_info": "013-345-6789",
    },
    {
        "resource_type": ResourceType.CAREER.value,
        "name": "Skills Development Workshop",
        "description": "Career guidance and skills training workshops",
        "location": "eMalahleni",
        "municipality": "Nkangala",
        "contact_info": "013-456-7890",
    },
]


def matches_location(entry: Union[Mentor, SupportResource], location_key: Optional[str]) -> bool:
    """An entry is local when its municipality equals the key or its location contains it

    Entries without a location are never local, whatever their municipality.
    """
    if not location_key or not entry.location:
        return False
    return entry.municipality == location_key or location_key in entry.location


def split_by_location(entries: Sequence[Entry], location_key: Optional[str]) -> Tuple[List[Entry], List[Entry]]:
    near = [entry for entry in entries if matches_location(entry, location_key)]
    other = [entry for entry in entries if not matches_location(entry, location_key)]
    return near, other


class DirectoryService:
    """Read access to mentors and support resources; only available entries are listed"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_mentors(self, limit: Optional[int] = None) -> List[Mentor]:
        query = select(Mentor).where(Mentor.available.is_(True)).order_by(Mentor.name)
        if limit:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def list_resources(
        self,
        resource_type: Optional[str] = None,
        limit: Optional[int] = None
    ) -> List[SupportResource]:
        query = select(SupportResource).where(SupportResource.available.is_(True))
        if resource_type:
            query = query.where(SupportResource.resource_type == resource_type)
        query = query.order_by(SupportResource.name)
        if limit:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def local_mentors(self, municipality: str, limit: Optional[int] = None) -> List[Mentor]:
        query = (
            select(Mentor)
            .where(Mentor.available.is_(True), Mentor.municipality == municipality)
            .order_by(Mentor.name)
        )
        if limit:
            query = query.limit(limit)
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def local_resources(self, municipality: str) -> List[SupportResource]:
        result = await self.db.execute(
            select(SupportResource)
            .where(SupportResource.available.is_(True), SupportResource.municipality == municipality)
            .order_by(SupportResource.name)
        )
        return list(result.scalars().all())

    async def seed_directory(self) -> bool:
        """Insert the sample Nkangala directory when it is empty"""
        existing = await self.db.scalar(select(func.count()).select_from(Mentor))
        if existing:
            return False

        self.db.add_all([Mentor(**mentor) for mentor in SAMPLE_MENTORS])
        self.db.add_all([SupportResource(**resource) for resource in SAMPLE_RESOURCES])
        await self.db.commit()

        logger.info(f"Seeded {len(SAMPLE_MENTORS)} mentors and {len(SAMPLE_RESOURCES)} support resources")
        return True
