"""Payment receipt: one row per accepted installment; idempotency_key deduplicates client retries."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.session import Base


class PaymentReceipt(Base):
    __tablename__ = "payment_receipts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    obligation_id = Column(
        UUID(as_uuid=True),
        ForeignKey("payment_obligations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount = Column(Numeric(12, 2), nullable=False)
    idempotency_key = Column(String(100), nullable=True, unique=True)
    paid_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    obligation = relationship("PaymentObligation", back_populates="receipts")
