from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.schemas import ApiResponse, success_response
from app.db.session import get_db

from .schemas import DashboardSummary
from . import service

router = APIRouter(prefix="/api/v1/dashboard", tags=["dashboard"])


@router.get("/admin", response_model=ApiResponse[DashboardSummary])
async def admin_dashboard(
    month: Optional[int] = Query(None, ge=1, le=12, description="Defaults to the current month"),
    year: Optional[int] = Query(None, gt=0, description="Defaults to the current year"),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[DashboardSummary]:
    return success_response(await service.get_dashboard_summary(db, month=month, year=year))
