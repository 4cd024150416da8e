"""
Parent portal reads. Every query is restricted to students linked to the caller.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.v1.debts.schemas import DebtResponse, LedgerEventResponse
from app.api.v1.debts.service import get_student_debt_summary, list_student_debts
from app.api.v1.payments.schemas import PaymentResponse
from app.api.v1.payments.service import list_payments
from app.core.enums import PaymentStatus
from app.core.exceptions import AuthorizationError
from app.core.models import LedgerEvent, Student, StudentGuardian

from .schemas import ParentStudentResponse

EVENT_FEED_LIMIT = 200


async def linked_student_ids(db: AsyncSession, guardian_user_id: UUID) -> List[UUID]:
    result = await db.execute(
        select(StudentGuardian.student_id).where(StudentGuardian.guardian_user_id == guardian_user_id)
    )
    return list(result.scalars().all())


async def _ensure_linked(db: AsyncSession, guardian_user_id: UUID, student_id: UUID) -> None:
    if student_id not in await linked_student_ids(db, guardian_user_id):
        raise AuthorizationError("You are not a guardian of this student")


async def my_students(db: AsyncSession, guardian_user_id: UUID) -> List[ParentStudentResponse]:
    result = await db.execute(
        select(Student, StudentGuardian.relationship)
        .join(StudentGuardian, StudentGuardian.student_id == Student.id)
        .where(StudentGuardian.guardian_user_id == guardian_user_id)
        .order_by(Student.last_name, Student.first_name)
    )
    out = []
    for student, relationship in result.all():
        out.append(
            ParentStudentResponse(
                id=student.id,
                full_name=student.full_name,
                identification=student.identification,
                grade=student.grade,
                relationship=relationship,
                summary=await get_student_debt_summary(db, student.id),
            )
        )
    return out


async def student_debts(
    db: AsyncSession,
    guardian_user_id: UUID,
    student_id: UUID,
    open_only: bool = True,
) -> List[DebtResponse]:
    await _ensure_linked(db, guardian_user_id, student_id)
    return await list_student_debts(db, student_id, open_only=open_only)


async def student_payments(
    db: AsyncSession,
    guardian_user_id: UUID,
    student_id: UUID,
) -> List[PaymentResponse]:
    """Active payments only; cancelled ones are staff-side history."""
    await _ensure_linked(db, guardian_user_id, student_id)
    return await list_payments(db, student_id=student_id, status=PaymentStatus.active)


async def event_feed(
    db: AsyncSession,
    guardian_user_id: UUID,
    since: Optional[datetime] = None,
    student_id: Optional[UUID] = None,
) -> List[LedgerEventResponse]:
    """Ledger changes for the caller's students, oldest first; poll with the last seen ``created_at``."""
    student_ids = await linked_student_ids(db, guardian_user_id)
    if student_id is not None:
        if student_id not in student_ids:
            raise AuthorizationError("You are not a guardian of this student")
        student_ids = [student_id]
    if not student_ids:
        return []
    stmt = select(LedgerEvent).where(LedgerEvent.student_id.in_(student_ids))
    if since is not None:
        stmt = stmt.where(LedgerEvent.created_at > since)
    stmt = stmt.order_by(LedgerEvent.created_at).limit(EVENT_FEED_LIMIT)
    result = await db.execute(stmt)
    return [LedgerEventResponse.model_validate(e) for e in result.scalars().all()]
