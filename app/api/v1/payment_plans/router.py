from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user
from app.auth.rbac import require_staff
from app.auth.schemas import CurrentUser
from app.core.enums import PaymentPlanStatus
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import PaymentPlanCreate, PaymentPlanDetail, PaymentPlanResponse, PaymentPlanUpdate
from . import service

router = APIRouter(prefix="/api/v1/payment-plans", tags=["payment-plans"])


@router.post(
    "",
    response_model=PaymentPlanDetail,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_staff)],
)
async def create_payment_plan(
    payload: PaymentPlanCreate,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> PaymentPlanDetail:
    try:
        return await service.create_plan(db, payload, changed_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=List[PaymentPlanResponse],
    dependencies=[Depends(require_staff)],
)
async def list_payment_plans(
    student_id: Optional[UUID] = Query(None),
    plan_status: Optional[PaymentPlanStatus] = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
) -> List[PaymentPlanResponse]:
    return await service.list_plans(db, student_id=student_id, status=plan_status)


@router.get(
    "/{plan_id}",
    response_model=PaymentPlanDetail,
    dependencies=[Depends(require_staff)],
)
async def get_payment_plan(
    plan_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> PaymentPlanDetail:
    plan = await service.get_plan(db, plan_id)
    if not plan:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment plan not found")
    return plan


@router.patch(
    "/{plan_id}",
    response_model=PaymentPlanDetail,
    dependencies=[Depends(require_staff)],
)
async def update_payment_plan(
    plan_id: UUID,
    payload: PaymentPlanUpdate,
    db: AsyncSession = Depends(get_db),
) -> PaymentPlanDetail:
    plan = await service.update_plan(db, plan_id, payload)
    if not plan:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment plan not found")
    return plan


@router.delete(
    "/{plan_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_staff)],
)
async def delete_payment_plan(
    plan_id: UUID,
    db: AsyncSession = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
) -> None:
    try:
        deleted = await service.delete_plan(db, plan_id, changed_by=current_user.id)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Payment plan not found")
