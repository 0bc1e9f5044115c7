from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class PeriodSummary(BaseModel):
    """Figures for one billing period; all zero when no batch exists for it."""

    month: int
    year: int
    batch_id: Optional[UUID] = None
    total_billed: Decimal = Decimal("0")
    total_paid: Decimal = Decimal("0")
    outstanding: Decimal = Decimal("0")
    paid_count: int = 0
    installment_count: int = 0
    unpaid_count: int = 0


class DashboardSummary(BaseModel):
    total_students: int
    period: PeriodSummary
    # Unpaid balance of batches before the requested period
    total_overdue: Decimal
    total_outstanding_all_time: Decimal
