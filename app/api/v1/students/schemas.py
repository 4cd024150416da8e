"""Student schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class StudentBase(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    identification: Optional[str] = Field(None, max_length=50)
    date_of_birth: Optional[date] = None
    grade: Optional[str] = Field(None, max_length=100)
    grade_id: Optional[UUID] = None
    enrollment_date: Optional[date] = None
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None
    guardian_email: Optional[EmailStr] = None
    address: Optional[str] = None
    is_active: bool = True


class StudentCreate(StudentBase):
    # Active debt concepts to charge right away (one pending debt each)
    concept_ids: List[UUID] = Field(default_factory=list)


class StudentUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    identification: Optional[str] = Field(None, max_length=50)
    date_of_birth: Optional[date] = None
    grade: Optional[str] = Field(None, max_length=100)
    grade_id: Optional[UUID] = None
    enrollment_date: Optional[date] = None
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None
    guardian_email: Optional[EmailStr] = None
    address: Optional[str] = None
    is_active: Optional[bool] = None


class StudentResponse(BaseModel):
    id: UUID
    first_name: str
    last_name: str
    identification: Optional[str] = None
    date_of_birth: Optional[date] = None
    grade: Optional[str] = None
    grade_id: Optional[UUID] = None
    enrollment_date: date
    guardian_name: Optional[str] = None
    guardian_phone: Optional[str] = None
    guardian_email: Optional[str] = None
    address: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StudentWithBalance(StudentResponse):
    """List row with the open balance shown in the debt management table."""

    open_debt_total: Decimal = Decimal("0")
    open_debt_count: int = 0
