from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import require_staff
from app.auth.schemas import CurrentUser
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import (
    AssignConceptsRequest,
    DebtResponse,
    LateFeeRequest,
    LedgerEventResponse,
    StudentDebtSummary,
)
from . import service

router = APIRouter(prefix="/api/v1/debts", tags=["debts"])


@router.get(
    "/student/{student_id}",
    response_model=List[DebtResponse],
    dependencies=[Depends(require_staff)],
)
async def list_student_debts(
    student_id: UUID,
    open_only: bool = Query(True, description="Only pending and partial debts"),
    db: AsyncSession = Depends(get_db),
) -> List[DebtResponse]:
    return await service.list_student_debts(db, student_id, open_only=open_only)


@router.post(
    "/student/{student_id}/concepts",
    response_model=List[DebtResponse],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_staff)],
)
async def assign_concepts(
    student_id: UUID,
    payload: AssignConceptsRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> List[DebtResponse]:
    try:
        return await service.assign_concepts(db, student_id, payload, changed_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/student/{student_id}/summary",
    response_model=StudentDebtSummary,
    dependencies=[Depends(require_staff)],
)
async def student_debt_summary(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> StudentDebtSummary:
    return await service.get_student_debt_summary(db, student_id)


@router.get(
    "/{debt_id}",
    response_model=DebtResponse,
    dependencies=[Depends(require_staff)],
)
async def get_debt(
    debt_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> DebtResponse:
    debt = await service.get_debt(db, debt_id)
    if not debt:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Debt not found")
    return debt


@router.post(
    "/{debt_id}/late-fee",
    response_model=DebtResponse,
    dependencies=[Depends(require_staff)],
)
async def apply_late_fee(
    debt_id: UUID,
    payload: LateFeeRequest,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> DebtResponse:
    try:
        return await service.apply_late_fee(db, debt_id, payload.fee_amount, changed_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "/{debt_id}/history",
    response_model=List[LedgerEventResponse],
    dependencies=[Depends(require_staff)],
)
async def debt_history(
    debt_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[LedgerEventResponse]:
    return await service.get_debt_history(db, debt_id)


@router.delete(
    "/{debt_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_staff)],
)
async def delete_debt(
    debt_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> None:
    try:
        deleted = await service.delete_debt(db, debt_id, changed_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Debt not found")
