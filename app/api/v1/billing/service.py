"""Billing service: monthly batches, their fan-out to students, and per-student bills."""

import logging
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager

from app.core.enums import derive_payment_status
from app.core.exceptions import DuplicateBatchError, FanOutError, NotFoundError
from app.core.models import FEE_COMPONENTS, BillingBatch, PaymentObligation, Student

from .fan_out import current_roster, fan_out
from .schemas import (
    BatchCreateResult,
    BillingBatchCreate,
    BillingBatchResponse,
    FanOutResult,
    ObligationWithBatch,
)

logger = logging.getLogger(__name__)


def to_decimal(val) -> Decimal:
    if val is None:
        return Decimal("0")
    return val if isinstance(val, Decimal) else Decimal(str(val))


def batch_to_response(batch: BillingBatch) -> BillingBatchResponse:
    return BillingBatchResponse(
        id=batch.id,
        month=batch.month,
        year=batch.year,
        tuition=to_decimal(batch.tuition),
        upkeep=to_decimal(batch.upkeep),
        meals=to_decimal(batch.meals),
        facilities=to_decimal(batch.facilities),
        total=to_decimal(batch.total),
        created_at=batch.created_at,
    )


def obligation_with_batch(ob: PaymentObligation) -> ObligationWithBatch:
    total = to_decimal(ob.total_amount)
    paid = to_decimal(ob.paid_amount)
    return ObligationWithBatch(
        id=ob.id,
        total_amount=total,
        paid_amount=paid,
        remaining=total - paid,
        status=derive_payment_status(paid, total),
        created_at=ob.created_at,
        batch=batch_to_response(ob.batch),
    )


async def _find_batch(db: AsyncSession, month: int, year: int) -> Optional[BillingBatch]:
    return (
        await db.execute(
            select(BillingBatch).where(BillingBatch.month == month, BillingBatch.year == year)
        )
    ).scalar_one_or_none()


async def create_batch(db: AsyncSession, payload: BillingBatchCreate) -> BatchCreateResult:
    """
    Store a monthly batch, then bill every current student for it.

    The batch is committed before fan-out. If fan-out fails the batch stays and FanOutError
    tells the caller to retry fan-out for it instead of re-creating it.
    """
    if await _find_batch(db, payload.month, payload.year):
        logger.warning("Rejected duplicate billing batch %02d/%d", payload.month, payload.year)
        raise DuplicateBatchError(payload.month, payload.year)

    amounts = {name: getattr(payload, name) for name in FEE_COMPONENTS}
    total = sum(amounts.values(), Decimal("0"))
    batch = BillingBatch(month=payload.month, year=payload.year, total=total, **amounts)
    db.add(batch)
    try:
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise DuplicateBatchError(payload.month, payload.year)
    await db.refresh(batch)
    batch_id = batch.id
    logger.info("Created billing batch %02d/%d total=%s", batch.month, batch.year, total)

    try:
        student_ids = await current_roster(db)
        await fan_out(db, batch, student_ids)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Fan-out failed for billing batch %s", batch_id)
        raise FanOutError(batch_id) from e

    return BatchCreateResult(batch=batch_to_response(batch), student_count=len(student_ids))


async def retry_fan_out(db: AsyncSession, batch_id: UUID) -> FanOutResult:
    """Bill every current student who has no obligation for this batch yet."""
    batch = await db.get(BillingBatch, batch_id)
    if not batch:
        raise NotFoundError("Billing batch not found")
    try:
        student_ids = await current_roster(db)
        created = await fan_out(db, batch, student_ids)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.exception("Fan-out retry failed for billing batch %s", batch_id)
        raise FanOutError(batch_id) from e
    return FanOutResult(
        batch=batch_to_response(batch),
        student_count=len(student_ids),
        created=created,
    )


async def list_batches(db: AsyncSession, year: Optional[int] = None) -> List[BillingBatchResponse]:
    stmt = select(BillingBatch)
    if year is not None:
        stmt = stmt.where(BillingBatch.year == year)
    stmt = stmt.order_by(BillingBatch.year.desc(), BillingBatch.month.desc())
    result = await db.execute(stmt)
    return [batch_to_response(b) for b in result.scalars().all()]


async def get_student_bills(db: AsyncSession, student_id: UUID) -> List[ObligationWithBatch]:
    if not await db.get(Student, student_id):
        raise NotFoundError("Student not found")
    stmt = (
        select(PaymentObligation)
        .join(BillingBatch, PaymentObligation.batch_id == BillingBatch.id)
        .options(contains_eager(PaymentObligation.batch))
        .where(PaymentObligation.student_id == student_id)
        .order_by(BillingBatch.year.desc(), BillingBatch.month.desc())
    )
    result = await db.execute(stmt)
    return [obligation_with_batch(ob) for ob in result.scalars().all()]
