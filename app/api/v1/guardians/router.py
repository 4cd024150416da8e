from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import require_admin, require_staff
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import GuardianLinkCreate, GuardianResponse
from . import service

router = APIRouter(prefix="/api/v1/students/{student_id}/guardians", tags=["guardians"])


@router.get(
    "",
    response_model=List[GuardianResponse],
    dependencies=[Depends(require_staff)],
)
async def list_guardians(
    student_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> List[GuardianResponse]:
    return await service.list_guardians(db, student_id)


@router.post(
    "",
    response_model=GuardianResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
async def link_guardian(
    student_id: UUID,
    payload: GuardianLinkCreate,
    db: AsyncSession = Depends(get_db),
) -> GuardianResponse:
    try:
        return await service.link_guardian(db, student_id, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{link_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_admin)],
)
async def unlink_guardian(
    student_id: UUID,
    link_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> None:
    removed = await service.unlink_guardian(db, student_id, link_id)
    if not removed:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Guardian link not found")
