from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List
from datetime import datetime
import uuid


class PerformanceRecordCreate(BaseModel):
    subject: str = Field(..., min_length=1, description="Subject label")
    score: float = Field(..., description="Score, 0-100 expected")
    attendance_percentage: Optional[float] = Field(None, description="Attendance percentage")
    notes: Optional[str] = Field(None, description="Free-text note")


class PerformanceRecordResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    student_id: uuid.UUID
    subject: str
    score: float
    attendance_percentage: Optional[float] = None
    notes: Optional[str] = None
    recorded_at: datetime


class InterventionOutcome(BaseModel):
    intervention_triggered: bool
    reason: Optional[str] = None
    message: Optional[str] = None
    chat_id: Optional[str] = None
    error: Optional[str] = None


class PerformanceRecordCreated(BaseModel):
    record: PerformanceRecordResponse
    previous_score: Optional[float] = None
    intervention: InterventionOutcome


class AdminPerformanceRow(BaseModel):
    id: str
    student_id: str
    student_name: Optional[str] = None
    student_grade: Optional[int] = None
    subject: str
    score: float
    attendance_percentage: Optional[float] = None
    notes: Optional[str] = None
    recorded_at: datetime


class AdminPerformanceResponse(BaseModel):
    rows: List[AdminPerformanceRow]
    total: int


class PerformanceAnalysisResponse(BaseModel):
    message: str
    chat_id: str
    record_count: int
