from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.enums import LoginRole


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class LoginUser(BaseModel):
    """Identity shown to the client after login. Fields depend on the role."""

    id: UUID
    username: Optional[str] = None
    enrollment_number: Optional[str] = None
    full_name: Optional[str] = None
    class_name: Optional[str] = None
    guardian_name: Optional[str] = None


class LoginResponse(BaseModel):
    role: LoginRole
    user_id: UUID
    redirect_to: str
    user: LoginUser
