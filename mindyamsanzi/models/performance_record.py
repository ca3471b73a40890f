from sqlalchemy import Column, String, Text, Numeric, DateTime, Uuid

from mindyamsanzi.core.database import Base, utcnow


class PerformanceRecord(Base):
    __tablename__ = "performance_records"

    # Owner
    student_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    # Assessment details
    subject = Column(String, nullable=False)  # free text, no canonical subject list
    score = Column(Numeric(5, 2, asdecimal=False), nullable=False)  # 0-100 expected, not clamped
    attendance_percentage = Column(Numeric(5, 2, asdecimal=False), nullable=True)
    notes = Column(Text, nullable=True)
    recorded_at = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)

    def __repr__(self):
        return f"<PerformanceRecord(student_id={self.student_id}, subject={self.subject}, score={self.score})>"
