"""Debt concept schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class DebtConceptCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=150)
    description: Optional[str] = None
    amount: Decimal = Field(..., gt=0)
    is_recurring: bool = False
    is_active: bool = True


class DebtConceptUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    description: Optional[str] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    is_recurring: Optional[bool] = None
    is_active: Optional[bool] = None


class DebtConceptResponse(BaseModel):
    id: UUID
    name: str
    description: Optional[str] = None
    amount: Decimal
    is_recurring: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class DebtConceptDeleteResult(BaseModel):
    """archived=True when debts still reference the concept and it was deactivated instead."""

    id: UUID
    deleted: bool
    archived: bool
