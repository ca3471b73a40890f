from typing import List, Optional, Sequence, Tuple
import csv
import io

from mindyamsanzi.models.performance_record import PerformanceRecord
from mindyamsanzi.models.student_profile import StudentProfile
from mindyamsanzi.schemas.performance import AdminPerformanceRow
from mindyamsanzi.services.context_service import format_number

CSV_HEADER = ["student_id", "student_name", "grade", "subject", "score", "attendance", "recorded_at", "notes"]


def build_admin_rows(pairs: Sequence[Tuple[PerformanceRecord, Optional[StudentProfile]]]) -> List[AdminPerformanceRow]:
    return [
        AdminPerformanceRow(
            id=str(record.id),
            student_id=str(record.student_id),
            student_name=profile.full_name if profile else None,
            student_grade=profile.grade if profile else None,
            subject=record.subject,
            score=record.score,
            attendance_percentage=record.attendance_percentage,
            notes=record.notes,
            recorded_at=record.recorded_at,
        )
        for record, profile in pairs
    ]


def filter_rows(rows: Sequence[AdminPerformanceRow], query: Optional[str]) -> List[AdminPerformanceRow]:
    """Case-insensitive match on student name (or id), subject and notes"""
    q = (query or "").strip().lower()
    if not q:
        return list(rows)
    return [
        row for row in rows
        if q in (row.student_name or row.student_id or "").lower()
        or q in (row.subject or "").lower()
        or q in (row.notes or "").lower()
    ]


def export_csv(rows: Sequence[AdminPerformanceRow]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for row in rows:
        writer.writerow([
            row.student_id,
            row.student_name or "",
            row.student_grade if row.student_grade is not None else "",
            row.subject,
            format_number(row.score),
            format_number(row.attendance_percentage),
            row.recorded_at.isoformat(),
            row.notes or "",
        ])
    return buffer.getvalue()
