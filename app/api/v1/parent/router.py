from datetime import datetime
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.debts.schemas import DebtResponse, LedgerEventResponse
from app.api.v1.payments.schemas import PaymentResponse
from app.auth.rbac import require_parent
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import ParentStudentResponse
from . import service

router = APIRouter(prefix="/api/v1/parent", tags=["parent"])


@router.get("/students", response_model=List[ParentStudentResponse])
async def my_students(
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_parent),
) -> List[ParentStudentResponse]:
    return await service.my_students(db, current_user.id)


@router.get("/students/{student_id}/debts", response_model=List[DebtResponse])
async def student_debts(
    student_id: UUID,
    open_only: bool = Query(True),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_parent),
) -> List[DebtResponse]:
    try:
        return await service.student_debts(db, current_user.id, student_id, open_only=open_only)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/students/{student_id}/payments", response_model=List[PaymentResponse])
async def student_payments(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_parent),
) -> List[PaymentResponse]:
    try:
        return await service.student_payments(db, current_user.id, student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get("/events", response_model=List[LedgerEventResponse])
async def event_feed(
    since: Optional[datetime] = Query(None, description="Only events created after this instant"),
    student_id: Optional[UUID] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(require_parent),
) -> List[LedgerEventResponse]:
    try:
        return await service.event_feed(db, current_user.id, since=since, student_id=student_id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
