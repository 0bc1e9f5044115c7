"""Payment obligation: one per (student, batch). paid_amount only grows, never past total_amount."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.session import Base


class PaymentObligation(Base):
    __tablename__ = "payment_obligations"
    __table_args__ = (
        UniqueConstraint("student_id", "batch_id", name="uq_payment_obligation_student_batch"),
        CheckConstraint(
            "paid_amount >= 0 AND paid_amount <= total_amount",
            name="chk_payment_obligation_paid_range",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(
        UUID(as_uuid=True),
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    batch_id = Column(
        UUID(as_uuid=True),
        ForeignKey("billing_batches.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    # Copy of the batch total at fan-out time
    total_amount = Column(Numeric(12, 2), nullable=False)
    paid_amount = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    student = relationship("Student", back_populates="obligations")
    batch = relationship("BillingBatch", back_populates="obligations")
    receipts = relationship("PaymentReceipt", back_populates="obligation", passive_deletes=True)
