import uuid
from datetime import date, datetime

from sqlalchemy import Boolean, Column, Date, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID

from app.db.session import Base


class Student(Base):
    """
    Student record. guardian_* columns are legacy free text; real guardian access
    goes through student_guardians.
    """

    __tablename__ = "students"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    identification = Column(String(50), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    # Free-text grade kept alongside grade_id for records created before the catalog
    grade = Column(String(100), nullable=True)
    grade_id = Column(UUID(as_uuid=True), ForeignKey("grades.id", ondelete="RESTRICT"), nullable=True, index=True)
    enrollment_date = Column(Date, nullable=False, default=date.today)
    guardian_name = Column(String(200), nullable=True)
    guardian_phone = Column(String(50), nullable=True)
    guardian_email = Column(String(255), nullable=True)
    address = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"
