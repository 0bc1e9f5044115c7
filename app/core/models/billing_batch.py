"""Monthly billing batch. Total is stored at creation and never recomputed from components."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, Integer, Numeric, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.session import Base

# Fee component columns, in display order
FEE_COMPONENTS = ("tuition", "upkeep", "meals", "facilities")


class BillingBatch(Base):
    __tablename__ = "billing_batches"
    __table_args__ = (
        UniqueConstraint("month", "year", name="uq_billing_batch_period"),
        CheckConstraint("month BETWEEN 1 AND 12", name="chk_billing_batch_month"),
        CheckConstraint("year > 0", name="chk_billing_batch_year"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False, index=True)

    tuition = Column(Numeric(12, 2), nullable=False, default=0)
    upkeep = Column(Numeric(12, 2), nullable=False, default=0)
    meals = Column(Numeric(12, 2), nullable=False, default=0)
    facilities = Column(Numeric(12, 2), nullable=False, default=0)
    total = Column(Numeric(12, 2), nullable=False)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    obligations = relationship("PaymentObligation", back_populates="batch")
