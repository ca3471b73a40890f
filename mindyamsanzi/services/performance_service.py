from typing import List, Optional, Tuple
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mindyamsanzi.core.database import as_uuid
from mindyamsanzi.models.performance_record import PerformanceRecord
from mindyamsanzi.models.student_profile import StudentProfile
from mindyamsanzi.schemas.performance import PerformanceRecordCreate

logger = logging.getLogger(__name__)


class PerformanceService:
    """Append-only ledger of assessment results"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_records(self, student_id, limit: Optional[int] = None) -> List[PerformanceRecord]:
        """Records for one student, newest first"""
        query = (
            select(PerformanceRecord)
            .where(PerformanceRecord.student_id == as_uuid(student_id))
            .order_by(PerformanceRecord.recorded_at.desc())
        )
        if limit:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def subject_trend(self, student_id, subject: str) -> List[PerformanceRecord]:
        """Records for one subject, oldest first"""
        result = await self.db.execute(
            select(PerformanceRecord)
            .where(
                PerformanceRecord.student_id == as_uuid(student_id),
                PerformanceRecord.subject == subject
            )
            .order_by(PerformanceRecord.recorded_at.asc())
        )
        return list(result.scalars().all())

    async def previous_score(self, student_id, subject: str) -> Optional[float]:
        """Latest recorded score for the subject, or None before the first assessment"""
        result = await self.db.execute(
            select(PerformanceRecord.score)
            .where(
                PerformanceRecord.student_id == as_uuid(student_id),
                PerformanceRecord.subject == subject
            )
            .order_by(PerformanceRecord.recorded_at.desc())
            .limit(1)
        )
        score = result.scalar_one_or_none()
        return float(score) if score is not None else None

    async def add_record(self, student_id, data: PerformanceRecordCreate) -> PerformanceRecord:
        record = PerformanceRecord(
            student_id=as_uuid(student_id),
            subject=data.subject.strip(),
            score=data.score,
            attendance_percentage=data.attendance_percentage,
            notes=data.notes or None,
        )
        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)

        logger.info(f"Recorded {record.subject} score {record.score} for student {record.student_id}")
        return record

    async def list_with_students(self, limit: int = 1000) -> List[Tuple[PerformanceRecord, Optional[StudentProfile]]]:
        """Newest records across all students, paired with their profile if one exists"""
        result = await self.db.execute(
            select(PerformanceRecord, StudentProfile)
            .outerjoin(StudentProfile, StudentProfile.id == PerformanceRecord.student_id)
            .order_by(PerformanceRecord.recorded_at.desc())
            .limit(limit)
        )
        return [(record, profile) for record, profile in result.all()]
