from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import require_staff
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import GradeCreate, GradeResponse, GradeUpdate
from . import service

router = APIRouter(prefix="/api/v1/grades", tags=["grades"])


@router.post(
    "",
    response_model=GradeResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_staff)],
)
async def create_grade(
    payload: GradeCreate,
    db: AsyncSession = Depends(get_db),
) -> GradeResponse:
    try:
        return await service.create_grade(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=List[GradeResponse],
    dependencies=[Depends(require_staff)],
)
async def list_grades(
    active_only: bool = Query(False, description="Return only is_active=true"),
    db: AsyncSession = Depends(get_db),
) -> List[GradeResponse]:
    return await service.list_grades(db, active_only=active_only)


@router.get(
    "/{grade_id}",
    response_model=GradeResponse,
    dependencies=[Depends(require_staff)],
)
async def get_grade(
    grade_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> GradeResponse:
    grade = await service.get_grade(db, grade_id)
    if not grade:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Grade not found")
    return grade


@router.put(
    "/{grade_id}",
    response_model=GradeResponse,
    dependencies=[Depends(require_staff)],
)
async def update_grade(
    grade_id: UUID,
    payload: GradeUpdate,
    db: AsyncSession = Depends(get_db),
) -> GradeResponse:
    try:
        grade = await service.update_grade(db, grade_id, payload)
        if not grade:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Grade not found")
        return grade
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{grade_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_staff)],
)
async def delete_grade(
    grade_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        deleted = await service.delete_grade(db, grade_id)
        if not deleted:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Grade not found")
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
