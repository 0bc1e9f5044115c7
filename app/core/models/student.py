"""Student (santri) record. The guardian is an attribute of the student, not a separate entity."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, Date, DateTime, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from app.db.session import Base


class Student(Base):
    __tablename__ = "students"
    __table_args__ = (
        CheckConstraint("gender IS NULL OR gender IN ('L','P')", name="chk_student_gender"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # YY + gender code (01 male, 02 female) + 3-digit sequence, e.g. 2601003
    enrollment_number = Column(String(20), nullable=False, unique=True, index=True)
    full_name = Column(String(255), nullable=False)
    gender = Column(String(1), nullable=True)
    birth_date = Column(Date, nullable=True)
    class_name = Column(String(50), nullable=False)
    address = Column(Text, nullable=True)
    guardian_name = Column(String(255), nullable=True, index=True)
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    obligations = relationship("PaymentObligation", back_populates="student", passive_deletes=True)
