"""Debt concept catalog service."""

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConstraintError
from app.core.logger import log
from app.core.models import DebtConcept, StudentDebt

from .schemas import DebtConceptCreate, DebtConceptDeleteResult, DebtConceptResponse, DebtConceptUpdate


async def create_debt_concept(
    db: AsyncSession,
    payload: DebtConceptCreate,
) -> DebtConceptResponse:
    try:
        concept = DebtConcept(
            name=payload.name.strip(),
            description=(payload.description or "").strip() or None,
            amount=payload.amount,
            is_recurring=payload.is_recurring,
            is_active=payload.is_active,
        )
        db.add(concept)
        await db.commit()
        await db.refresh(concept)
        return DebtConceptResponse.model_validate(concept)
    except IntegrityError:
        await db.rollback()
        raise ConstraintError("A debt concept with this name already exists")


async def list_debt_concepts(
    db: AsyncSession,
    active_only: bool = False,
) -> List[DebtConceptResponse]:
    stmt = select(DebtConcept)
    if active_only:
        stmt = stmt.where(DebtConcept.is_active.is_(True))
    stmt = stmt.order_by(DebtConcept.name)
    result = await db.execute(stmt)
    return [DebtConceptResponse.model_validate(c) for c in result.scalars().all()]


async def get_debt_concept(
    db: AsyncSession,
    concept_id: UUID,
) -> Optional[DebtConceptResponse]:
    concept = await db.get(DebtConcept, concept_id)
    return DebtConceptResponse.model_validate(concept) if concept else None


async def update_debt_concept(
    db: AsyncSession,
    concept_id: UUID,
    payload: DebtConceptUpdate,
) -> Optional[DebtConceptResponse]:
    concept = await db.get(DebtConcept, concept_id)
    if not concept:
        return None
    if payload.name is not None:
        concept.name = payload.name.strip()
    if payload.description is not None:
        concept.description = payload.description.strip() or None
    if payload.amount is not None:
        concept.amount = payload.amount
    if payload.is_recurring is not None:
        concept.is_recurring = payload.is_recurring
    if payload.is_active is not None:
        concept.is_active = payload.is_active
    try:
        await db.commit()
        await db.refresh(concept)
        return DebtConceptResponse.model_validate(concept)
    except IntegrityError:
        await db.rollback()
        raise ConstraintError("A debt concept with this name already exists")


async def delete_debt_concept(
    db: AsyncSession,
    concept_id: UUID,
) -> Optional[DebtConceptDeleteResult]:
    """Hard delete when unused; archive (is_active=False) when debts reference it."""
    concept = await db.get(DebtConcept, concept_id)
    if not concept:
        return None
    used = await db.execute(
        select(StudentDebt.id).where(StudentDebt.concept_id == concept_id).limit(1)
    )
    if used.scalar_one_or_none() is not None:
        concept.is_active = False
        await db.commit()
        log.info(f"Debt concept {concept_id} archived; still referenced by debts")
        return DebtConceptDeleteResult(id=concept_id, deleted=False, archived=True)
    await db.delete(concept)
    await db.commit()
    return DebtConceptDeleteResult(id=concept_id, deleted=True, archived=False)
