"""Admin dashboard figures, computed from obligations joined with their batches."""

from datetime import date
from typing import Optional

from sqlalchemy import and_, case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.billing.service import to_decimal
from app.core.models import BillingBatch, PaymentObligation, Student

from .schemas import DashboardSummary, PeriodSummary


def _count(condition):
    return func.coalesce(func.sum(case((condition, 1), else_=0)), 0)


async def _period_summary(db: AsyncSession, month: int, year: int) -> PeriodSummary:
    batch_id = (
        await db.execute(
            select(BillingBatch.id).where(BillingBatch.month == month, BillingBatch.year == year)
        )
    ).scalar_one_or_none()
    if batch_id is None:
        return PeriodSummary(month=month, year=year)

    paid = PaymentObligation.paid_amount
    total = PaymentObligation.total_amount
    row = (
        await db.execute(
            select(
                func.coalesce(func.sum(total), 0).label("billed"),
                func.coalesce(func.sum(paid), 0).label("paid"),
                _count(paid >= total).label("paid_count"),
                _count(and_(paid > 0, paid < total)).label("installment_count"),
                _count(and_(paid <= 0, paid < total)).label("unpaid_count"),
            ).where(PaymentObligation.batch_id == batch_id)
        )
    ).one()
    billed = to_decimal(row.billed)
    collected = to_decimal(row.paid)
    return PeriodSummary(
        month=month,
        year=year,
        batch_id=batch_id,
        total_billed=billed,
        total_paid=collected,
        outstanding=billed - collected,
        paid_count=int(row.paid_count),
        installment_count=int(row.installment_count),
        unpaid_count=int(row.unpaid_count),
    )


async def get_dashboard_summary(
    db: AsyncSession,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> DashboardSummary:
    """Totals for the given period (default: current month) plus all-time and overdue balances."""
    today = date.today()
    month = month or today.month
    year = year or today.year

    total_students = (await db.execute(select(func.count(Student.id)))).scalar() or 0
    balance = PaymentObligation.total_amount - PaymentObligation.paid_amount

    outstanding_all_time = (
        await db.execute(select(func.coalesce(func.sum(balance), 0)))
    ).scalar()
    overdue = (
        await db.execute(
            select(func.coalesce(func.sum(balance), 0))
            .join(BillingBatch, PaymentObligation.batch_id == BillingBatch.id)
            .where(
                or_(
                    BillingBatch.year < year,
                    and_(BillingBatch.year == year, BillingBatch.month < month),
                )
            )
        )
    ).scalar()

    return DashboardSummary(
        total_students=int(total_students),
        period=await _period_summary(db, month, year),
        total_overdue=to_decimal(overdue),
        total_outstanding_all_time=to_decimal(outstanding_all_time),
    )
