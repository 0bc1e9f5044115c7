"""
Obligation fan-out: make sure every (student, batch) pair in scope has exactly one payment obligation.

Both triggers use reconcile_obligations:
- a batch was created        -> the batch x every current student
- a student was created      -> the student x every batch of the current enrollment year
Pairs that already have an obligation are skipped, so running it again is harmless.
"""

import logging
from decimal import Decimal
from typing import Iterable, List, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.models import BillingBatch, PaymentObligation, Student

logger = logging.getLogger(__name__)


async def reconcile_obligations(
    db: AsyncSession,
    batches: Sequence[BillingBatch],
    student_ids: Sequence[UUID],
) -> int:
    """Add the missing obligations for batches x student_ids. Returns how many were created. Does not commit."""
    if not batches or not student_ids:
        return 0
    batch_ids = [b.id for b in batches]
    rows = (
        await db.execute(
            select(PaymentObligation.student_id, PaymentObligation.batch_id).where(
                PaymentObligation.batch_id.in_(batch_ids),
                PaymentObligation.student_id.in_(student_ids),
            )
        )
    ).all()
    covered = {(row.student_id, row.batch_id) for row in rows}
    created = 0
    for batch in batches:
        for student_id in student_ids:
            if (student_id, batch.id) in covered:
                continue
            db.add(
                PaymentObligation(
                    student_id=student_id,
                    batch_id=batch.id,
                    total_amount=batch.total,
                    paid_amount=Decimal("0"),
                )
            )
            created += 1
    await db.flush()
    return created


async def current_roster(db: AsyncSession) -> List[UUID]:
    """Ids of every enrolled student, snapshot at call time."""
    return list((await db.execute(select(Student.id))).scalars().all())


async def fan_out(db: AsyncSession, batch: BillingBatch, student_ids: Iterable[UUID]) -> int:
    created = await reconcile_obligations(db, [batch], list(student_ids))
    logger.info("Fan-out for batch %02d/%d created %d obligations", batch.month, batch.year, created)
    return created


async def fan_out_for_student(db: AsyncSession, student: Student, enrollment_year: int) -> int:
    batches = (
        await db.execute(
            select(BillingBatch)
            .where(BillingBatch.year == enrollment_year)
            .order_by(BillingBatch.month)
        )
    ).scalars().all()
    created = await reconcile_obligations(db, batches, [student.id])
    if created:
        logger.info(
            "Billed new student %s for %d existing batches of %d",
            student.enrollment_number, created, enrollment_year,
        )
    return created
