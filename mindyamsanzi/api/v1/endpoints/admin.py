from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from mindyamsanzi.core.auth import CurrentUser, require_admin
from mindyamsanzi.core.database import get_db
from mindyamsanzi.core.exceptions import NotFoundError
from mindyamsanzi.schemas.performance import AdminPerformanceResponse
from mindyamsanzi.services.export_service import build_admin_rows, export_csv, filter_rows
from mindyamsanzi.services.performance_service import PerformanceService

router = APIRouter()


async def _load_rows(request: Request, db: AsyncSession):
    limit = request.app.state.settings.ADMIN_RECORD_LIMIT
    pairs = await PerformanceService(db).list_with_students(limit=limit)
    return build_admin_rows(pairs)


@router.get("/performance", response_model=AdminPerformanceResponse)
async def list_performance(
    request: Request,
    q: Optional[str] = Query(None, description="Search student name, subject or notes"),
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """All students' records, newest first (admin only)"""
    rows = filter_rows(await _load_rows(request, db), q)
    return AdminPerformanceResponse(rows=rows, total=len(rows))


@router.get("/performance/export")
async def export_performance(
    request: Request,
    admin: CurrentUser = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """Download all students' records as CSV (admin only)"""
    rows = await _load_rows(request, db)
    if not rows:
        raise NotFoundError("Nothing to export")

    return Response(
        content=export_csv(rows),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="performance_records.csv"'}
    )
