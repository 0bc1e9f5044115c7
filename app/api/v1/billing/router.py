"""Billing router: monthly batches, fan-out retry, per-student bills."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.core.schemas import ApiResponse, success_response
from app.db.session import get_db

from .schemas import (
    BatchCreateResult,
    BillingBatchCreate,
    BillingBatchResponse,
    FanOutResult,
    ObligationWithBatch,
)
from . import service

router = APIRouter(prefix="/api/v1/billing", tags=["billing"])


@router.get("", response_model=ApiResponse[List[BillingBatchResponse]])
async def list_batches(
    year: Optional[str] = Query(None, description="Filter by year; 'all' or empty for every year"),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[List[BillingBatchResponse]]:
    year_filter = None
    if year and year != "all":
        if not year.isdecimal():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="year must be a number")
        year_filter = int(year)
    return success_response(await service.list_batches(db, year=year_filter))


@router.post(
    "/batch",
    response_model=ApiResponse[BatchCreateResult],
    status_code=status.HTTP_201_CREATED,
)
async def create_batch(
    payload: BillingBatchCreate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[BatchCreateResult]:
    try:
        result = await service.create_batch(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return success_response(result, f"Billing created for {result.student_count} students")


@router.post("/{batch_id}/fan-out", response_model=ApiResponse[FanOutResult])
async def retry_fan_out(
    batch_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[FanOutResult]:
    try:
        result = await service.retry_fan_out(db, batch_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return success_response(result, f"{result.created} missing obligations created")


@router.get("/student/{student_id}", response_model=ApiResponse[List[ObligationWithBatch]])
async def get_student_bills(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[List[ObligationWithBatch]]:
    try:
        return success_response(await service.get_student_bills(db, student_id))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
