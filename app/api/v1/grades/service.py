from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConstraintError
from app.core.models import Grade, Student

from .schemas import GradeCreate, GradeResponse, GradeUpdate


async def create_grade(db: AsyncSession, payload: GradeCreate) -> GradeResponse:
    try:
        grade = Grade(
            name=payload.name.strip(),
            level=payload.level,
            monthly_fee=payload.monthly_fee,
            description=(payload.description or "").strip() or None,
            is_active=payload.is_active,
        )
        db.add(grade)
        await db.commit()
        await db.refresh(grade)
        return GradeResponse.model_validate(grade)
    except IntegrityError:
        await db.rollback()
        raise ConstraintError("A grade with this name already exists")


async def list_grades(db: AsyncSession, active_only: bool = False) -> List[GradeResponse]:
    stmt = select(Grade)
    if active_only:
        stmt = stmt.where(Grade.is_active.is_(True))
    stmt = stmt.order_by(Grade.level, Grade.name)
    result = await db.execute(stmt)
    return [GradeResponse.model_validate(g) for g in result.scalars().all()]


async def get_grade(db: AsyncSession, grade_id: UUID) -> Optional[GradeResponse]:
    grade = await db.get(Grade, grade_id)
    return GradeResponse.model_validate(grade) if grade else None


async def update_grade(db: AsyncSession, grade_id: UUID, payload: GradeUpdate) -> Optional[GradeResponse]:
    grade = await db.get(Grade, grade_id)
    if not grade:
        return None
    if payload.name is not None:
        grade.name = payload.name.strip()
    if payload.level is not None:
        grade.level = payload.level
    if payload.monthly_fee is not None:
        grade.monthly_fee = payload.monthly_fee
    if payload.description is not None:
        grade.description = payload.description.strip() or None
    if payload.is_active is not None:
        grade.is_active = payload.is_active
    try:
        await db.commit()
        await db.refresh(grade)
        return GradeResponse.model_validate(grade)
    except IntegrityError:
        await db.rollback()
        raise ConstraintError("A grade with this name already exists")


async def delete_grade(db: AsyncSession, grade_id: UUID) -> bool:
    grade = await db.get(Grade, grade_id)
    if not grade:
        return False
    used = await db.execute(select(Student.id).where(Student.grade_id == grade_id).limit(1))
    if used.scalar_one_or_none() is not None:
        raise ConstraintError("Cannot delete grade: there are students associated with it")
    await db.delete(grade)
    await db.commit()
    return True
