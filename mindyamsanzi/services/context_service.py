from typing import List, Optional, Sequence
from dataclasses import dataclass, field
import logging

from mindyamsanzi.core.config import Settings
from mindyamsanzi.core.database import Database
from mindyamsanzi.models.directory import Mentor, SupportResource
from mindyamsanzi.models.performance_record import PerformanceRecord
from mindyamsanzi.models.student_profile import StudentProfile
from mindyamsanzi.services.directory_service import DirectoryService
from mindyamsanzi.services.performance_service import PerformanceService
from mindyamsanzi.services.profile_service import ProfileService

logger = logging.getLogger(__name__)

UNKNOWN = "Unknown"
NO_RECORDS = "No recent records"
NO_MENTORS = "No mentors available"
NO_RESOURCES = "No resources available"


def format_number(value) -> str:
    """Render 45.0 as "45" and 45.5 as "45.5" """
    if value is None:
        return ""
    number = float(value)
    if number.is_integer():
        return str(int(number))
    return f"{number:g}"


def _or_unknown(value) -> str:
    if value is None or value == "":
        return UNKNOWN
    return str(value)


@dataclass
class StudentSnapshot:
    profile: Optional[StudentProfile] = None
    records: List[PerformanceRecord] = field(default_factory=list)
    mentors: List[Mentor] = field(default_factory=list)
    resources: List[SupportResource] = field(default_factory=list)
    region: str = ""


def render_performance_line(record: PerformanceRecord) -> str:
    attendance = format_number(record.attendance_percentage) or "N/A"
    return f"{record.subject}: {format_number(record.score)}% (Attendance: {attendance}%)"


def render_mentor_line(mentor: Mentor) -> str:
    return f"{mentor.name} ({mentor.expertise}): {mentor.contact_info or 'No contact info'}"


def render_resource_line(resource: SupportResource) -> str:
    line = f"{resource.name} ({resource.resource_type})"
    if resource.description:
        line += f": {resource.description}"
    if resource.contact_info:
        line += f" - {resource.contact_info}"
    return line


def _section(title: str, lines: Sequence[str], placeholder: str) -> str:
    if not lines:
        return f"{title}:\n{placeholder}"
    return f"{title}:\n" + "\n".join(f"- {line}" for line in lines)


def render_student_context(snapshot: StudentSnapshot) -> str:
    """Render the fixed student summary injected into counselor prompts"""
    profile = snapshot.profile

    profile_block = "\n".join([
        "STUDENT PROFILE:",
        f"- Name: {_or_unknown(profile.full_name if profile else None)}",
        f"- Grade: {_or_unknown(profile.grade if profile else None)}",
        f"- School: {_or_unknown(profile.school_name if profile else None)}",
        f"- Location: {_or_unknown(profile.location if profile else None)}",
        f"- Municipality: {_or_unknown(profile.municipality if profile else None)}",
    ])

    return "\n\n".join([
        profile_block,
        _section("Recent Performance", [render_performance_line(r) for r in snapshot.records], NO_RECORDS),
        _section("Available Local Mentors", [render_mentor_line(m) for m in snapshot.mentors], NO_MENTORS),
        _section("Support Resources", [render_resource_line(r) for r in snapshot.resources], NO_RESOURCES),
    ])


class ContextAssembler:
    """Builds a fresh student summary for every request"""

    def __init__(self, database: Database, settings: Settings):
        self.database = database
        self.default_region = settings.DEFAULT_REGION
        self.record_limit = settings.CONTEXT_RECORD_LIMIT
        self.mentor_limit = settings.CONTEXT_MENTOR_LIMIT

    async def load_snapshot(self, student_id) -> StudentSnapshot:
        async with self.database.session() as session:
            profile = await ProfileService(session).get_profile(student_id)
            if profile is None:
                logger.warning(f"No profile found for student {student_id}; rendering placeholders")

            records = await PerformanceService(session).list_records(student_id, limit=self.record_limit)

            region = (profile.municipality if profile else None) or self.default_region
            directory = DirectoryService(session)
            mentors = await directory.local_mentors(region, limit=self.mentor_limit)
            resources = await directory.local_resources(region)

        return StudentSnapshot(
            profile=profile,
            records=records,
            mentors=mentors,
            resources=resources,
            region=region,
        )

    async def build_context(self, student_id) -> str:
        snapshot = await self.load_snapshot(student_id)
        return render_student_context(snapshot)
