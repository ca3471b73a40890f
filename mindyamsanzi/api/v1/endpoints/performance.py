from typing import List
import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from mindyamsanzi.api.v1.deps import get_counselor_service
from mindyamsanzi.core.auth import CurrentUser, get_current_user
from mindyamsanzi.core.database import get_db
from mindyamsanzi.schemas.performance import (
    InterventionOutcome,
    PerformanceAnalysisResponse,
    PerformanceRecordCreate,
    PerformanceRecordCreated,
    PerformanceRecordResponse,
)
from mindyamsanzi.services.counselor_service import CounselorService
from mindyamsanzi.services.performance_service import PerformanceService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/", response_model=List[PerformanceRecordResponse])
async def list_my_records(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get the caller's performance records, newest first"""
    return await PerformanceService(db).list_records(current_user.id)


@router.get("/trend", response_model=List[PerformanceRecordResponse])
async def subject_trend(
    subject: str = Query(..., min_length=1),
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get the caller's records for one subject, oldest first"""
    return await PerformanceService(db).subject_trend(current_user.id, subject)


@router.post("/analysis", response_model=PerformanceAnalysisResponse)
async def analyze_my_marks(
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    counselor: CounselorService = Depends(get_counselor_service)
):
    """Ask the counselor for an encouraging analysis of all the caller's marks"""
    records = await PerformanceService(db).list_records(current_user.id)
    reply = await counselor.analyze_marks(current_user.id, records)
    return PerformanceAnalysisResponse(message=reply.message, chat_id=reply.chat_id, record_count=len(records))


@router.post("/", response_model=PerformanceRecordCreated, status_code=status.HTTP_201_CREATED)
async def add_record(
    request: PerformanceRecordCreate,
    current_user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
    counselor: CounselorService = Depends(get_counselor_service)
):
    """Append a record, then run the intervention rule against the previous score"""
    performance_service = PerformanceService(db)
    previous_score = await performance_service.previous_score(current_user.id, request.subject.strip())
    record = await performance_service.add_record(current_user.id, request)

    # the record is already stored; an outreach failure is reported, not raised
    try:
        result = await counselor.intervene(current_user.id, record.subject, record.score, previous_score)
        outcome = InterventionOutcome(
            intervention_triggered=result.triggered,
            reason=result.reason,
            message=result.message,
            chat_id=result.chat_id,
        )
    except Exception as e:
        logger.error(f"Intervention failed for record {record.id}: {e}")
        outcome = InterventionOutcome(intervention_triggered=False, error=str(e) or type(e).__name__)

    return PerformanceRecordCreated(
        record=PerformanceRecordResponse.model_validate(record),
        previous_score=previous_score,
        intervention=outcome,
    )
