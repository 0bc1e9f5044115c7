"""Billing schemas."""

from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from app.core.enums import PaymentStatus
from app.core.models import FEE_COMPONENTS


def _amount_or_zero(value: Any) -> Decimal:
    """Absent, empty or non-numeric component amounts count as 0."""
    if value is None or isinstance(value, bool):
        return Decimal("0")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return Decimal("0")
    return amount if amount.is_finite() else Decimal("0")


# Bounds of the Numeric(12, 2) money columns
MONEY_MAX_DIGITS = 12
MONEY_DECIMAL_PLACES = 2
MONEY_LIMIT = Decimal(10) ** (MONEY_MAX_DIGITS - MONEY_DECIMAL_PLACES)


# --- Billing Batch ---
class BillingBatchCreate(BaseModel):
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., gt=0)
    tuition: Decimal = Field(Decimal("0"), ge=0, max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES)
    upkeep: Decimal = Field(Decimal("0"), ge=0, max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES)
    meals: Decimal = Field(Decimal("0"), ge=0, max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES)
    facilities: Decimal = Field(Decimal("0"), ge=0, max_digits=MONEY_MAX_DIGITS, decimal_places=MONEY_DECIMAL_PLACES)

    @field_validator("tuition", "upkeep", "meals", "facilities", mode="before")
    @classmethod
    def _coerce_amount(cls, value: Any) -> Decimal:
        return _amount_or_zero(value)

    @model_validator(mode="after")
    def _total_fits(self) -> "BillingBatchCreate":
        total = sum((getattr(self, name) for name in FEE_COMPONENTS), Decimal("0"))
        if total >= MONEY_LIMIT:
            raise ValueError(f"Total of the fee components must be below {MONEY_LIMIT}")
        return self


class BillingBatchResponse(BaseModel):
    id: UUID
    month: int
    year: int
    tuition: Decimal
    upkeep: Decimal
    meals: Decimal
    facilities: Decimal
    total: Decimal
    created_at: datetime

    class Config:
        from_attributes = True


class BatchCreateResult(BaseModel):
    batch: BillingBatchResponse
    student_count: int


class FanOutResult(BaseModel):
    batch: BillingBatchResponse
    student_count: int
    created: int


# --- Obligation with batch breakdown ---
class ObligationWithBatch(BaseModel):
    id: UUID
    total_amount: Decimal
    paid_amount: Decimal
    remaining: Decimal
    status: PaymentStatus
    created_at: datetime
    batch: BillingBatchResponse
