"""Payments router: list obligations, record installments, per-student statement."""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.core.schemas import ApiResponse, success_response
from app.db.session import get_db

from .schemas import PaymentCreate, PaymentResponse, StudentStatement
from . import service

router = APIRouter(prefix="/api/v1/payments", tags=["payments"])


@router.get("", response_model=ApiResponse[List[PaymentResponse]])
async def list_payments(
    student_id: Optional[UUID] = Query(None),
    year: Optional[str] = Query(None, description="Filter by batch year; 'all' or empty for every year"),
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[List[PaymentResponse]]:
    year_filter = None
    if year and year != "all":
        if not year.isdecimal():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="year must be a number")
        year_filter = int(year)
    return success_response(
        await service.list_payments(db, student_id=student_id, year=year_filter)
    )


@router.post("", response_model=ApiResponse[PaymentResponse])
async def record_payment(
    payload: PaymentCreate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[PaymentResponse]:
    try:
        payment = await service.record_payment(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return success_response(payment, f"Payment recorded. Total paid: {payment.paid_amount}")


@router.get("/student/{student_id}", response_model=ApiResponse[StudentStatement])
async def get_student_statement(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[StudentStatement]:
    try:
        return success_response(await service.get_student_statement(db, student_id))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
