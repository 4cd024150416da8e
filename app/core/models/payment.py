"""Payment: append-only record of an amount applied to one debt line."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.core.enums import PaymentStatus
from app.db.session import Base


class Payment(Base):
    """One row per debt touched by a settlement. Cancelled, never deleted. debt_id NULL = unallocated."""

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint("status IN ('active','cancelled')", name="chk_payment_status"),
        CheckConstraint("amount > 0", name="chk_payment_amount"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    debt_id = Column(UUID(as_uuid=True), ForeignKey("student_debts.id", ondelete="RESTRICT"), nullable=True, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    payment_date = Column(Date, nullable=False)
    payment_method = Column(String(30), nullable=True)  # Efectivo, Transferencia, Tarjeta...
    receipt_number = Column(String(100), nullable=True)
    notes = Column(Text, nullable=True)
    registered_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    status = Column(String(20), nullable=False, default=PaymentStatus.active.value)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_by = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
