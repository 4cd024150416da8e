import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base


class Grade(Base):
    """School grade/level with its monthly fee. Cannot be deleted while students reference it."""

    __tablename__ = "grades"
    __table_args__ = (
        CheckConstraint("level >= 1", name="chk_grade_level"),
        CheckConstraint("monthly_fee >= 0", name="chk_grade_monthly_fee"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False, unique=True)
    level = Column(Integer, nullable=False)
    monthly_fee = Column(Numeric(12, 2), nullable=False, default=0)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
