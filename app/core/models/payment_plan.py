import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.core.enums import PaymentPlanStatus
from app.db.session import Base


class PaymentPlan(Base):
    """
    Installment plan for a student. total_amount, monthly_payment, number_of_installments
    and start_date are frozen at creation; only name/description change afterwards.
    """

    __tablename__ = "payment_plans"
    __table_args__ = (
        CheckConstraint("total_amount > 0", name="chk_payment_plan_total"),
        CheckConstraint("number_of_installments >= 1", name="chk_payment_plan_installments"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(150), nullable=False)
    description = Column(Text, nullable=True)
    total_amount = Column(Numeric(12, 2), nullable=False)
    monthly_payment = Column(Numeric(12, 2), nullable=False)
    number_of_installments = Column(Integer, nullable=False)
    start_date = Column(Date, nullable=False)
    status = Column(String(20), nullable=False, default=PaymentPlanStatus.active.value)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
