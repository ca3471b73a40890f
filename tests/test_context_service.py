from datetime import datetime, timedelta, timezone
import uuid

from mindyamsanzi.models import Mentor, PerformanceRecord, StudentProfile, SupportResource
from mindyamsanzi.services.context_service import (
    ContextAssembler,
    StudentSnapshot,
    format_number,
    render_performance_line,
    render_student_context,
)
from mindyamsanzi.services.directory_service import DirectoryService

from conftest import make_settings


def test_format_number():
    assert format_number(45.0) == "45"
    assert format_number(45.5) == "45.5"
    assert format_number(None) == ""


def test_performance_line_without_attendance():
    record = PerformanceRecord(subject="Mathematics", score=45.0, attendance_percentage=None)
    assert render_performance_line(record) == "Mathematics: 45% (Attendance: N/A%)"


def test_performance_line_with_attendance():
    record = PerformanceRecord(subject="Physical Science", score=72.5, attendance_percentage=90)
    assert render_performance_line(record) == "Physical Science: 72.5% (Attendance: 90%)"


def test_empty_snapshot_renders_placeholders():
    context = render_student_context(StudentSnapshot())

    assert "Recent Performance:\nNo recent records" in context
    assert "Available Local Mentors:\nNo mentors available" in context
    assert "Support Resources:\nNo resources available" in context
    assert "- Name: Unknown" in context


def test_render_full_snapshot():
    snapshot = StudentSnapshot(
        profile=StudentProfile(full_name="Lerato", location="eMalahleni", municipality="Nkangala", grade=11),
        records=[PerformanceRecord(subject="English", score=64, attendance_percentage=88)],
        mentors=[Mentor(name="Thabo Mthembu", expertise="Mathematics", contact_info="thabo.m@email.com")],
        resources=[SupportResource(name="Ubuntu Wellness Centre", resource_type="psychosocial",
                                   description="Counseling", contact_info="013-234-5678")],
    )

    context = render_student_context(snapshot)

    assert context.startswith("STUDENT PROFILE:")
    assert "- Name: Lerato" in context
    assert "- Grade: 11" in context
    assert "- School: Unknown" in context
    assert "- English: 64% (Attendance: 88%)" in context
    assert "- Thabo Mthembu (Mathematics): thabo.m@email.com" in context
    assert "- Ubuntu Wellness Centre (psychosocial): Counseling - 013-234-5678" in context


async def test_build_context_for_unknown_student_does_not_raise(database):
    assembler = ContextAssembler(database, make_settings())

    context = await assembler.build_context(str(uuid.uuid4()))

    assert "No recent records" in context
    assert "No mentors available" in context


async def test_build_context_uses_recent_records_and_local_directory(database):
    student_id = uuid.uuid4()
    now = datetime.now(timezone.utc)

    async with database.session() as session:
        session.add(StudentProfile(id=student_id, full_name="Sibusiso", location="Soweto", municipality="Johannesburg"))
        for i in range(7):
            session.add(PerformanceRecord(
                student_id=student_id,
                subject=f"Subject {i}",
                score=50 + i,
                recorded_at=now - timedelta(days=7 - i),
            ))
        session.add(Mentor(name="Local Mentor", expertise="Maths", location="Soweto", municipality="Johannesburg"))
        session.add(Mentor(name="Far Mentor", expertise="Maths", location="eMalahleni", municipality="Nkangala"))
        session.add(Mentor(name="Busy Mentor", expertise="Maths", location="Soweto",
                           municipality="Johannesburg", available=False))
        await session.commit()

    context = await ContextAssembler(database, make_settings()).build_context(str(student_id))

    # only the five newest records, newest first
    assert "Subject 6: 56%" in context
    assert "Subject 2: 52%" in context
    assert "Subject 1" not in context
    assert context.index("Subject 6") < context.index("Subject 2")

    assert "Local Mentor" in context
    assert "Far Mentor" not in context
    assert "Busy Mentor" not in context
    assert "No resources available" in context


async def test_missing_municipality_falls_back_to_default_region(database):
    student_id = uuid.uuid4()
    async with database.session() as session:
        session.add(StudentProfile(id=student_id, full_name="Ayanda", location="Witbank", municipality=None))
        await session.commit()
        await DirectoryService(session).seed_directory()

    assembler = ContextAssembler(database, make_settings(DEFAULT_REGION="Nkangala"))
    snapshot = await assembler.load_snapshot(str(student_id))

    assert snapshot.region == "Nkangala"
    assert len(snapshot.mentors) == 3
    assert len(snapshot.resources) == 4
