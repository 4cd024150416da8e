"""Debt concepts router."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.rbac import require_staff
from app.core.exceptions import ServiceError
from app.db.session import get_db

from .schemas import DebtConceptCreate, DebtConceptDeleteResult, DebtConceptResponse, DebtConceptUpdate
from . import service

router = APIRouter(prefix="/api/v1/debt-concepts", tags=["debt-concepts"])


@router.post(
    "",
    response_model=DebtConceptResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_staff)],
)
async def create_debt_concept(
    payload: DebtConceptCreate,
    db: AsyncSession = Depends(get_db),
) -> DebtConceptResponse:
    try:
        return await service.create_debt_concept(db, payload)
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.get(
    "",
    response_model=List[DebtConceptResponse],
    dependencies=[Depends(require_staff)],
)
async def list_debt_concepts(
    active_only: bool = Query(False, description="Return only is_active=true"),
    db: AsyncSession = Depends(get_db),
) -> List[DebtConceptResponse]:
    return await service.list_debt_concepts(db, active_only=active_only)


@router.get(
    "/{concept_id}",
    response_model=DebtConceptResponse,
    dependencies=[Depends(require_staff)],
)
async def get_debt_concept(
    concept_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> DebtConceptResponse:
    concept = await service.get_debt_concept(db, concept_id)
    if not concept:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Debt concept not found")
    return concept


@router.patch(
    "/{concept_id}",
    response_model=DebtConceptResponse,
    dependencies=[Depends(require_staff)],
)
async def update_debt_concept(
    concept_id: UUID,
    payload: DebtConceptUpdate,
    db: AsyncSession = Depends(get_db),
) -> DebtConceptResponse:
    try:
        concept = await service.update_debt_concept(db, concept_id, payload)
        if not concept:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Debt concept not found")
        return concept
    except ServiceError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)


@router.delete(
    "/{concept_id}",
    response_model=DebtConceptDeleteResult,
    dependencies=[Depends(require_staff)],
)
async def delete_debt_concept(
    concept_id: UUID,
    db: AsyncSession = Depends(get_db),
) -> DebtConceptDeleteResult:
    result = await service.delete_debt_concept(db, concept_id)
    if not result:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Debt concept not found")
    return result
