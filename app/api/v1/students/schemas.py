from datetime import date, datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.enums import Gender


class StudentCreate(BaseModel):
    """enrollment_number is generated from gender when omitted; password defaults to the birth date (DDMMYY)."""

    enrollment_number: Optional[str] = Field(None, max_length=20)
    full_name: str = Field(..., min_length=1, max_length=255)
    class_name: str = Field(..., min_length=1, max_length=50)
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    address: Optional[str] = None
    guardian_name: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = None


class StudentUpdate(BaseModel):
    full_name: str = Field(..., min_length=1, max_length=255)
    class_name: str = Field(..., min_length=1, max_length=50)
    enrollment_number: Optional[str] = Field(None, max_length=20)
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    address: Optional[str] = None
    guardian_name: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = None


class StudentResponse(BaseModel):
    id: UUID
    enrollment_number: str
    full_name: str
    gender: Optional[Gender] = None
    birth_date: Optional[date] = None
    class_name: str
    address: Optional[str] = None
    guardian_name: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class StudentDeleted(BaseModel):
    id: UUID
