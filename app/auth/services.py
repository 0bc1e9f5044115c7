"""Login: credential-pair match across admins, students and guardians, first match wins."""

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.schemas import LoginRequest, LoginResponse, LoginUser
from app.auth.security import verify_password
from app.core.enums import LoginRole
from app.core.exceptions import UnauthorizedError
from app.core.models import Admin, Student

logger = logging.getLogger(__name__)

REDIRECTS = {
    LoginRole.ADMIN: "/admin/dashboard",
    LoginRole.STUDENT: "/user",
    LoginRole.GUARDIAN: "/wali",
}


async def _match_admin(db: AsyncSession, username: str, password: str) -> Optional[LoginResponse]:
    admin = (
        await db.execute(select(Admin).where(Admin.username == username))
    ).scalar_one_or_none()
    if not admin or not verify_password(password, admin.password_hash):
        return None
    return LoginResponse(
        role=LoginRole.ADMIN,
        user_id=admin.id,
        redirect_to=REDIRECTS[LoginRole.ADMIN],
        user=LoginUser(id=admin.id, username=admin.username),
    )


async def _match_student(db: AsyncSession, username: str, password: str) -> Optional[LoginResponse]:
    student = (
        await db.execute(select(Student).where(Student.enrollment_number == username))
    ).scalar_one_or_none()
    if not student or not verify_password(password, student.password_hash):
        return None
    return LoginResponse(
        role=LoginRole.STUDENT,
        user_id=student.id,
        redirect_to=REDIRECTS[LoginRole.STUDENT],
        user=LoginUser(
            id=student.id,
            enrollment_number=student.enrollment_number,
            full_name=student.full_name,
            class_name=student.class_name,
        ),
    )


async def _match_guardian(db: AsyncSession, username: str, password: str) -> Optional[LoginResponse]:
    # Guardian names are not unique: try every student with that guardian, oldest first.
    candidates = (
        await db.execute(
            select(Student)
            .where(func.lower(Student.guardian_name) == username.lower())
            .order_by(Student.created_at, Student.enrollment_number)
        )
    ).scalars().all()
    if len(candidates) > 1:
        logger.warning("Guardian name %r is shared by %d students", username, len(candidates))
    for student in candidates:
        if verify_password(password, student.password_hash):
            return LoginResponse(
                role=LoginRole.GUARDIAN,
                user_id=student.id,
                redirect_to=REDIRECTS[LoginRole.GUARDIAN],
                user=LoginUser(
                    id=student.id,
                    guardian_name=student.guardian_name,
                    full_name=student.full_name,
                    enrollment_number=student.enrollment_number,
                ),
            )
    return None


async def login_user(db: AsyncSession, payload: LoginRequest) -> LoginResponse:
    username = payload.username.strip()
    for matcher in (_match_admin, _match_student, _match_guardian):
        result = await matcher(db, username, payload.password)
        if result is not None:
            logger.info("Login as %s for user %s", result.role.value, result.user_id)
            return result
    logger.warning("Failed login for %r", username)
    raise UnauthorizedError("Invalid username or password")
