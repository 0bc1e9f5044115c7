from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ServiceError
from app.core.schemas import ApiResponse, success_response
from app.db.session import get_db

from .schemas import StudentCreate, StudentDeleted, StudentResponse, StudentUpdate
from . import service

router = APIRouter(prefix="/api/v1/students", tags=["students"])


@router.get("", response_model=ApiResponse[List[StudentResponse]])
async def list_students(
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[List[StudentResponse]]:
    return success_response(await service.list_students(db))


@router.post(
    "",
    response_model=ApiResponse[StudentResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_student(
    payload: StudentCreate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[StudentResponse]:
    try:
        student = await service.create_student(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return success_response(student, "Student created")


@router.get("/{student_id}", response_model=ApiResponse[StudentResponse])
async def get_student(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[StudentResponse]:
    try:
        return success_response(await service.get_student(db, student_id))
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.put("/{student_id}", response_model=ApiResponse[StudentResponse])
async def update_student(
    student_id: UUID,
    payload: StudentUpdate,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[StudentResponse]:
    try:
        student = await service.update_student(db, student_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return success_response(student, "Student updated")


@router.delete("/{student_id}", response_model=ApiResponse[StudentDeleted])
async def delete_student(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> ApiResponse[StudentDeleted]:
    try:
        deleted = await service.delete_student(db, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return success_response(deleted, "Student deleted")
