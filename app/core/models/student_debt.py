"""Student debt: one ledger line. amount is the outstanding balance, not the original charge."""

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.core.enums import DebtStatus
from app.db.session import Base


class StudentDebt(Base):
    """
    Outstanding or settled charge owed by a student.
    Installment lines carry both installment_number and payment_plan_id; concept lines carry neither.
    """

    __tablename__ = "student_debts"
    __table_args__ = (
        CheckConstraint(
            "status IN ('pending','partial','paid')",
            name="chk_student_debt_status",
        ),
        CheckConstraint(
            "("
            "(installment_number IS NULL AND payment_plan_id IS NULL)"
            " OR "
            "(installment_number IS NOT NULL AND payment_plan_id IS NOT NULL)"
            ")",
            name="chk_student_debt_installment_fields",
        ),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    concept_id = Column(UUID(as_uuid=True), ForeignKey("debt_concepts.id", ondelete="RESTRICT"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    due_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=DebtStatus.pending.value)
    installment_number = Column(Integer, nullable=True)
    payment_plan_id = Column(
        UUID(as_uuid=True),
        ForeignKey("payment_plans.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
