"""Payment engine schemas: settlement request, receipt projection and payment rows."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from app.core.enums import PaymentStatus


class PaymentCreate(BaseModel):
    student_id: UUID
    debt_ids: List[UUID] = Field(..., description="Debts to settle, in the order the amount is applied")
    amount: Decimal
    payment_date: Optional[date] = None
    payment_method: Optional[str] = Field(None, max_length=30)
    receipt_number: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None


class PaidConcept(BaseModel):
    name: str
    amount: Decimal


class ReceiptResponse(BaseModel):
    receipt_number: str
    payment_date: date
    student_name: str
    student_identification: Optional[str] = None
    payment_method: Optional[str] = None
    amount: Decimal
    paid_concepts: List[PaidConcept]
    notes: Optional[str] = None
    payment_ids: List[UUID]


class PaymentResponse(BaseModel):
    id: UUID
    student_id: UUID
    debt_id: Optional[UUID] = None
    concept_name: Optional[str] = None
    amount: Decimal
    payment_date: date
    payment_method: Optional[str] = None
    receipt_number: Optional[str] = None
    notes: Optional[str] = None
    registered_by: Optional[UUID] = None
    status: PaymentStatus
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[UUID] = None
    created_at: datetime
