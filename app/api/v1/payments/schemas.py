"""Payment schemas."""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.api.v1.billing.schemas import MONEY_DECIMAL_PLACES, MONEY_MAX_DIGITS, ObligationWithBatch
from app.api.v1.students.schemas import StudentResponse
from app.core.enums import PaymentStatus


class PaymentCreate(BaseModel):
    obligation_id: UUID
    amount: Decimal = Field(..., max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES)
    # Client-generated token; a retried request with the same key is applied once
    idempotency_key: Optional[str] = Field(None, min_length=1, max_length=100)


class StudentSummary(BaseModel):
    id: UUID
    enrollment_number: str
    full_name: str
    class_name: str

    class Config:
        from_attributes = True


class BatchSummary(BaseModel):
    id: UUID
    month: int
    year: int
    total: Decimal

    class Config:
        from_attributes = True


class PaymentResponse(BaseModel):
    """Obligation joined with its student and batch."""

    id: UUID
    student_id: UUID
    total_amount: Decimal
    paid_amount: Decimal
    remaining: Decimal
    status: PaymentStatus
    created_at: datetime
    updated_at: datetime
    student: StudentSummary
    batch: BatchSummary


class ReceiptResponse(BaseModel):
    id: UUID
    amount: Decimal
    idempotency_key: Optional[str] = None
    paid_at: datetime

    class Config:
        from_attributes = True


class StatementEntry(ObligationWithBatch):
    receipts: List[ReceiptResponse] = Field(default_factory=list)


class StudentStatement(BaseModel):
    student: StudentResponse
    payments: List[StatementEntry]
