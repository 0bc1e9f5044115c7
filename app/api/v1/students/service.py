"""Student roster: CRUD plus billing of new students for the batches already issued this year."""

import logging
from datetime import date
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.billing.fan_out import fan_out_for_student
from app.auth.security import hash_password
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.core.models import PaymentObligation, PaymentReceipt, Student

from .enrollment import default_password, enrollment_prefix, next_enrollment_number
from .schemas import StudentCreate, StudentDeleted, StudentResponse, StudentUpdate

logger = logging.getLogger(__name__)

# Optional fields that may be cleared explicitly on update (sent as null)
NULLABLE_UPDATE_FIELDS = ("gender", "birth_date", "address", "guardian_name")


def _to_response(student: Student) -> StudentResponse:
    return StudentResponse.model_validate(student)


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return value.strip() or None


async def _get_student(db: AsyncSession, student_id: UUID) -> Student:
    student = await db.get(Student, student_id)
    if not student:
        raise NotFoundError("Student not found")
    return student


async def _enrollment_number_taken(
    db: AsyncSession, enrollment_number: str, exclude_id: Optional[UUID] = None
) -> bool:
    stmt = select(Student.id).where(Student.enrollment_number == enrollment_number)
    if exclude_id is not None:
        stmt = stmt.where(Student.id != exclude_id)
    return (await db.execute(stmt)).first() is not None


async def _generate_enrollment_number(db: AsyncSession, payload: StudentCreate, year: int) -> str:
    if payload.gender is None:
        raise ValidationError("Gender is required to generate an enrollment number")
    prefix = enrollment_prefix(year, payload.gender)
    existing = (
        await db.execute(
            select(Student.enrollment_number).where(Student.enrollment_number.like(f"{prefix}%"))
        )
    ).scalars().all()
    return next_enrollment_number(prefix, existing)


async def list_students(db: AsyncSession) -> List[StudentResponse]:
    result = await db.execute(select(Student).order_by(Student.full_name))
    return [_to_response(s) for s in result.scalars().all()]


async def get_student(db: AsyncSession, student_id: UUID) -> StudentResponse:
    return _to_response(await _get_student(db, student_id))


async def create_student(
    db: AsyncSession,
    payload: StudentCreate,
    enrollment_year: Optional[int] = None,
) -> StudentResponse:
    """
    Create a student and bill them for every batch already issued in the enrollment year.

    Student and obligations are committed together.
    """
    year = enrollment_year or date.today().year
    enrollment_number = _clean(payload.enrollment_number)
    generated = not enrollment_number
    if generated:
        enrollment_number = await _generate_enrollment_number(db, payload, year)
    elif await _enrollment_number_taken(db, enrollment_number):
        raise ConflictError("Enrollment number is already registered")

    password = payload.password
    if not password:
        password = default_password(payload.birth_date) if payload.birth_date else enrollment_number

    student = Student(
        enrollment_number=enrollment_number,
        full_name=payload.full_name.strip(),
        gender=payload.gender.value if payload.gender else None,
        birth_date=payload.birth_date,
        class_name=payload.class_name.strip(),
        address=_clean(payload.address),
        guardian_name=_clean(payload.guardian_name),
        password_hash=hash_password(password),
    )
    db.add(student)
    try:
        await db.flush()
        billed = await fan_out_for_student(db, student, year)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        if generated:
            # Another student took the same generated number first
            raise ConflictError("Could not assign an enrollment number, please retry")
        raise ConflictError("Enrollment number is already registered")
    await db.refresh(student)
    logger.info("Created student %s (billed for %d batches)", student.enrollment_number, billed)
    return _to_response(student)


async def update_student(db: AsyncSession, student_id: UUID, payload: StudentUpdate) -> StudentResponse:
    student = await _get_student(db, student_id)
    enrollment_number = _clean(payload.enrollment_number)
    if enrollment_number and await _enrollment_number_taken(db, enrollment_number, exclude_id=student_id):
        raise ConflictError("Enrollment number is already used by another student")

    password_hash = hash_password(payload.password) if payload.password else None
    student.full_name = payload.full_name.strip()
    student.class_name = payload.class_name.strip()
    if enrollment_number:
        student.enrollment_number = enrollment_number
    for field in NULLABLE_UPDATE_FIELDS:
        if field not in payload.model_fields_set:
            continue
        value = getattr(payload, field)
        if field == "gender":
            value = value.value if value else None
        elif isinstance(value, str):
            value = _clean(value)
        setattr(student, field, value)
    if password_hash:
        student.password_hash = password_hash
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Enrollment number is already used by another student")
    await db.refresh(student)
    logger.info("Updated student %s", student.enrollment_number)
    return _to_response(student)


async def delete_student(db: AsyncSession, student_id: UUID) -> StudentDeleted:
    """Delete a student together with their obligations and payment receipts."""
    student = await _get_student(db, student_id)
    obligation_ids = select(PaymentObligation.id).where(PaymentObligation.student_id == student_id)
    await db.execute(delete(PaymentReceipt).where(PaymentReceipt.obligation_id.in_(obligation_ids)))
    await db.execute(delete(PaymentObligation).where(PaymentObligation.student_id == student_id))
    enrollment_number = student.enrollment_number
    await db.delete(student)
    await db.commit()
    logger.info("Deleted student %s", enrollment_number)
    return StudentDeleted(id=student_id)
