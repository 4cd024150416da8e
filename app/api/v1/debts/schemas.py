"""Debt ledger schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.enums import DebtStatus


class DebtResponse(BaseModel):
    id: UUID
    student_id: UUID
    concept_id: UUID
    concept_name: Optional[str] = None
    display_name: str
    amount: Decimal
    due_date: date
    status: DebtStatus
    installment_number: Optional[int] = None
    payment_plan_id: Optional[UUID] = None
    plan_name: Optional[str] = None
    notes: Optional[str] = None
    is_overdue: bool
    created_at: datetime
    updated_at: datetime


class AssignConceptsRequest(BaseModel):
    concept_ids: List[UUID] = Field(..., min_length=1)
    due_date: Optional[date] = Field(None, description="Defaults to one month from today")


class LateFeeRequest(BaseModel):
    fee_amount: Decimal


class StudentDebtSummary(BaseModel):
    student_id: UUID
    open_total: Decimal
    open_count: int
    overdue_count: int
    paid_count: int


class LedgerEventResponse(BaseModel):
    id: UUID
    student_id: UUID
    entity_type: str
    entity_id: UUID
    action: str
    old_value: Optional[dict] = None
    new_value: Optional[dict] = None
    changed_by: Optional[UUID] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
