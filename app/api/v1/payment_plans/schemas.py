"""Payment plan schemas."""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.api.v1.debts.schemas import DebtResponse
from app.core.enums import PaymentPlanStatus


class PaymentPlanCreate(BaseModel):
    student_id: UUID
    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = None
    total_amount: Decimal
    number_of_installments: int
    start_date: date


class PaymentPlanUpdate(BaseModel):
    """Amounts and schedule are fixed once the installments exist."""

    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None


class PaymentPlanResponse(BaseModel):
    id: UUID
    student_id: UUID
    name: str
    description: Optional[str] = None
    total_amount: Decimal
    monthly_payment: Decimal
    number_of_installments: int
    start_date: date
    status: PaymentPlanStatus
    rounding_difference: Decimal = Field(
        Decimal("0"), description="total_amount - monthly_payment * number_of_installments"
    )
    paid_installments: int = 0
    paid_amount: Decimal = Decimal("0")
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PaymentPlanDetail(PaymentPlanResponse):
    installments: List[DebtResponse] = []
