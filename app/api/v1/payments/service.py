"""
Payment ledger: installments accumulate on one obligation, never past its total.

The paid amount is written with a compare-and-swap update keyed on the value read, so two
concurrent payments cannot both pass the overpayment check on the same stale read.
"""

import logging
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import contains_eager, selectinload

from app.api.v1.billing.service import obligation_with_batch, to_decimal
from app.api.v1.students.schemas import StudentResponse
from app.core.config import settings
from app.core.enums import derive_payment_status
from app.core.exceptions import ConflictError, InvalidAmountError, NotFoundError, OverpaymentError
from app.core.models import BillingBatch, PaymentObligation, PaymentReceipt, Student

from .schemas import (
    BatchSummary,
    PaymentCreate,
    PaymentResponse,
    ReceiptResponse,
    StatementEntry,
    StudentStatement,
    StudentSummary,
)

logger = logging.getLogger(__name__)

# Smallest amount the Numeric(12, 2) columns can hold
CENT = Decimal("0.01")


def _to_response(ob: PaymentObligation) -> PaymentResponse:
    total = to_decimal(ob.total_amount)
    paid = to_decimal(ob.paid_amount)
    return PaymentResponse(
        id=ob.id,
        student_id=ob.student_id,
        total_amount=total,
        paid_amount=paid,
        remaining=total - paid,
        status=derive_payment_status(paid, total),
        created_at=ob.created_at,
        updated_at=ob.updated_at,
        student=StudentSummary.model_validate(ob.student),
        batch=BatchSummary(
            id=ob.batch.id,
            month=ob.batch.month,
            year=ob.batch.year,
            total=to_decimal(ob.batch.total),
        ),
    )


def _joined_obligations():
    return (
        select(PaymentObligation)
        .join(Student, PaymentObligation.student_id == Student.id)
        .join(BillingBatch, PaymentObligation.batch_id == BillingBatch.id)
        .options(
            contains_eager(PaymentObligation.student),
            contains_eager(PaymentObligation.batch),
        )
    )


async def _get_payment(db: AsyncSession, obligation_id: UUID) -> PaymentResponse:
    stmt = (
        _joined_obligations()
        .where(PaymentObligation.id == obligation_id)
        .execution_options(populate_existing=True)
    )
    ob = (await db.execute(stmt)).scalar_one_or_none()
    if not ob:
        raise NotFoundError("Payment obligation not found")
    return _to_response(ob)


async def _compare_and_swap_paid(
    db: AsyncSession,
    obligation_id: UUID,
    expected_paid: Decimal,
    new_paid: Decimal,
) -> bool:
    """Write new_paid only if paid_amount is still expected_paid. True when the row was updated."""
    result = await db.execute(
        update(PaymentObligation)
        .where(
            PaymentObligation.id == obligation_id,
            PaymentObligation.paid_amount == expected_paid,
        )
        .values(paid_amount=new_paid, updated_at=datetime.utcnow())
        .execution_options(synchronize_session=False)
    )
    return result.rowcount == 1


async def _replayed_payment(
    db: AsyncSession, obligation_id: UUID, idempotency_key: Optional[str]
) -> Optional[PaymentResponse]:
    if not idempotency_key:
        return None
    receipt = (
        await db.execute(select(PaymentReceipt).where(PaymentReceipt.idempotency_key == idempotency_key))
    ).scalar_one_or_none()
    if receipt is None:
        return None
    if receipt.obligation_id != obligation_id:
        raise ConflictError("Idempotency key was already used for a different bill")
    logger.info("Payment %s already applied to obligation %s; not applying again", idempotency_key, obligation_id)
    return await _get_payment(db, obligation_id)


async def record_payment(db: AsyncSession, payload: PaymentCreate) -> PaymentResponse:
    amount = payload.amount
    if not amount.is_finite() or amount <= 0:
        raise InvalidAmountError()
    if amount != amount.quantize(CENT):
        raise InvalidAmountError("Payment amount cannot have more than 2 decimal places")

    replayed = await _replayed_payment(db, payload.obligation_id, payload.idempotency_key)
    if replayed is not None:
        return replayed

    for attempt in range(1, settings.payment_max_retries + 1):
        ob = (
            await db.execute(
                select(PaymentObligation)
                .where(PaymentObligation.id == payload.obligation_id)
                .execution_options(populate_existing=True)
            )
        ).scalar_one_or_none()
        if not ob:
            raise NotFoundError("Payment obligation not found")
        total = to_decimal(ob.total_amount)
        paid = to_decimal(ob.paid_amount)
        new_paid = paid + amount
        if new_paid > total:
            logger.warning(
                "Rejected overpayment of %s on obligation %s (remaining %s)", amount, ob.id, total - paid
            )
            raise OverpaymentError(total - paid)

        if await _compare_and_swap_paid(db, ob.id, paid, new_paid):
            db.add(
                PaymentReceipt(
                    obligation_id=ob.id,
                    amount=amount,
                    idempotency_key=payload.idempotency_key,
                )
            )
            try:
                await db.commit()
            except IntegrityError:
                # Same idempotency key committed by a concurrent request
                await db.rollback()
                raise ConflictError("Payment with this idempotency key is already being processed")
            logger.info("Recorded payment of %s on obligation %s; paid %s/%s", amount, ob.id, new_paid, total)
            return await _get_payment(db, payload.obligation_id)

        await db.rollback()
        logger.warning(
            "Obligation %s changed while paying (attempt %d/%d)", payload.obligation_id, attempt, settings.payment_max_retries
        )

    raise ConflictError("The bill was updated by another payment at the same time; please retry")


async def list_payments(
    db: AsyncSession,
    student_id: Optional[UUID] = None,
    year: Optional[int] = None,
) -> List[PaymentResponse]:
    stmt = _joined_obligations()
    if student_id is not None:
        stmt = stmt.where(PaymentObligation.student_id == student_id)
    if year is not None:
        stmt = stmt.where(BillingBatch.year == year)
    stmt = stmt.order_by(PaymentObligation.created_at.desc(), BillingBatch.year.desc(), BillingBatch.month.desc())
    result = await db.execute(stmt)
    return [_to_response(ob) for ob in result.scalars().all()]


async def get_student_statement(db: AsyncSession, student_id: UUID) -> StudentStatement:
    student = await db.get(Student, student_id)
    if not student:
        raise NotFoundError("Student not found")
    stmt = (
        select(PaymentObligation)
        .join(BillingBatch, PaymentObligation.batch_id == BillingBatch.id)
        .options(
            contains_eager(PaymentObligation.batch),
            selectinload(PaymentObligation.receipts),
        )
        .where(PaymentObligation.student_id == student_id)
        .order_by(BillingBatch.year, BillingBatch.month)
    )
    obligations = (await db.execute(stmt)).scalars().all()
    logger.debug("Loaded %d bills for student %s", len(obligations), student.enrollment_number)
    entries = [
        StatementEntry(
            **obligation_with_batch(ob).model_dump(),
            receipts=[
                ReceiptResponse.model_validate(r)
                for r in sorted(ob.receipts, key=lambda r: r.paid_at)
            ],
        )
        for ob in obligations
    ]
    return StudentStatement(student=StudentResponse.model_validate(student), payments=entries)
